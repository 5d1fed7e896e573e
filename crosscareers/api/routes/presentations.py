"""
Presentation generator endpoints.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile, status
from sqlalchemy.orm import Session

from crosscareers.core.auth_dependency import get_current_user, get_db, require_full_access
from crosscareers.db.models.presentation import Presentation
from crosscareers.db.models.user import User
from crosscareers.llm.runner import LLMRunner, get_llm_runner
from crosscareers.services import presentation_service
from crosscareers.services.text_extraction import resolve_source

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ppt", tags=["Presentations"])


def _summary(p: Presentation) -> dict:
    return {
        "id": p.id,
        "title": p.title,
        "topic": p.topic,
        "contentPreview": (p.content_preview or "")[:200],
        "sourceType": p.source_type,
        "fileName": p.file_name,
        "slideCount": p.slide_count,
        "design": p.design,
        "animation": p.animation,
        "includeGraphics": p.include_graphics,
        "fileSize": {"pptx": p.pptx_size, "pdf": p.pdf_size},
        "processingTimeMs": p.processing_time_ms,
        "createdAt": p.created_at.isoformat(),
    }


def _downloads(p: Presentation) -> dict:
    return {"pptx": f"/ppt/download/pptx/{p.id}", "pdf": f"/ppt/download/pdf/{p.id}"}


@router.post("/generate", status_code=status.HTTP_201_CREATED)
async def generate(
    content: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
    slide_count: int = Form(10, alias="slideCount"),
    design: str = Form("professional"),
    animation: bool = Form(True),
    include_graphics: bool = Form(True, alias="includeGraphics"),
    user: User = Depends(require_full_access),
    db: Session = Depends(get_db),
    runner: LLMRunner = Depends(get_llm_runner),
):
    presentation_service.validate_options(slide_count, design)
    text, source_type, file_name = await resolve_source(content, file)
    presentation = presentation_service.generate_presentation(
        db,
        runner,
        user,
        text,
        slide_count,
        design,
        animation,
        include_graphics,
        source_type=source_type,
        file_name=file_name,
    )
    return {
        "success": True,
        "message": "Presentation generated",
        "presentation": {**_summary(presentation), "downloads": _downloads(presentation)},
    }


@router.get("/presentations")
def list_presentations(
    page: int = 1,
    limit: int = 10,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    result = presentation_service.list_presentations(db, user, page, limit)
    return {
        "success": True,
        "presentations": [_summary(p) for p in result["items"]],
        "pagination": result["pagination"],
    }


@router.get("/presentations/{presentation_id}")
def presentation_details(presentation_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    p = presentation_service.get_presentation(db, user, presentation_id)
    return {
        "success": True,
        "presentation": {**_summary(p), "slides": p.slides, "downloads": _downloads(p)},
    }


@router.get("/download/{file_type}/{presentation_id}")
def download(
    file_type: str,
    presentation_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    data, media_type, filename = presentation_service.get_download(db, user, file_type, presentation_id)
    return Response(
        content=data,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/stats")
def stats(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return {"success": True, "stats": presentation_service.get_stats(db, user)}
