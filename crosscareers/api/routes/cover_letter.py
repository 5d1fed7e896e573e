from fastapi import APIRouter, Depends, Response

from crosscareers.core.auth_dependency import get_current_user, require_full_access
from crosscareers.db.models.user import User
from crosscareers.llm.runner import LLMRunner, get_llm_runner
from crosscareers.schemas.cover_letter import CoverLetterDocxRequest, CoverLetterRequest
from crosscareers.services.cover_letter_service import generate_cover_letter, resolve_style
from crosscareers.services.docx_export import DOCX_MEDIA_TYPE, render_text_docx

router = APIRouter(prefix="/cover", tags=["Cover Letter"])


@router.post("/generate-cover-letter")
def generate(
    data: CoverLetterRequest,
    user: User = Depends(require_full_access),
    runner: LLMRunner = Depends(get_llm_runner),
):
    letter = generate_cover_letter(runner, data.job_description, data.resume_text, data.style)
    return {"success": True, "style": resolve_style(data.style), "coverLetter": letter}


@router.post("/generate-docx")
def generate_docx(data: CoverLetterDocxRequest, user: User = Depends(get_current_user)):
    return Response(
        content=render_text_docx(data.content),
        media_type=DOCX_MEDIA_TYPE,
        headers={"Content-Disposition": 'attachment; filename="cover_letter.docx"'},
    )
