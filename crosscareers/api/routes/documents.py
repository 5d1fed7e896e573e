import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile
from sqlalchemy.orm import Session

from crosscareers.core.auth_dependency import get_current_user, get_db, require_full_access
from crosscareers.db.models.user import User
from crosscareers.llm.runner import LLMRunner, get_llm_runner
from crosscareers.services import document_service
from crosscareers.services.docx_export import DOCX_MEDIA_TYPE, render_structured_docx, render_text_docx
from crosscareers.services.text_extraction import resolve_source

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/doc", tags=["Documents"])


@router.post("/generate-content")
async def generate_content(
    source_text: Optional[str] = Form(None, alias="sourceText"),
    file: Optional[UploadFile] = File(None),
    document_type: str = Form("report", alias="documentType"),
    style: str = Form("professional"),
    word_count: Optional[int] = Form(None, alias="wordCount"),
    page_count: Optional[int] = Form(None, alias="pageCount"),
    include_charts: bool = Form(False, alias="includeCharts"),
    include_images: bool = Form(False, alias="includeImages"),
    user: User = Depends(require_full_access),
    db: Session = Depends(get_db),
    runner: LLMRunner = Depends(get_llm_runner),
):
    document_service.validate_document_type(document_type)
    text, source_type, file_name = await resolve_source(source_text, file)
    record = document_service.generate_content(
        db,
        runner,
        user,
        text,
        document_type=document_type,
        style=style,
        word_count=word_count,
        page_count=page_count,
        include_charts=include_charts,
        include_images=include_images,
    )
    return {
        "success": True,
        "id": record.id,
        "sourceType": source_type,
        "fileName": file_name,
        "documentType": record.document_type,
        "style": record.style,
        "content": record.content,
        "htmlPreview": document_service.render_html_preview(record.content),
    }


@router.post("/generate-docx")
async def generate_docx(
    content: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
    user: User = Depends(get_current_user),
):
    structure = document_service.parse_client_structure(content)
    if structure is not None:
        data = render_structured_docx(structure)
    else:
        text, _, _ = await resolve_source(content, file)
        data = render_text_docx(text)
    return Response(
        content=data,
        media_type=DOCX_MEDIA_TYPE,
        headers={"Content-Disposition": 'attachment; filename="document.docx"'},
    )


@router.get("/history")
def history(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    records = document_service.list_history(db, user)
    return {
        "success": True,
        "count": len(records),
        "documents": [
            {
                "id": r.id,
                "title": r.title,
                "documentType": r.document_type,
                "style": r.style,
                "wordCount": r.word_count,
                "sourcePreview": r.source_preview,
                "content": r.content,
                "createdAt": r.created_at.isoformat(),
            }
            for r in records
        ],
    }
