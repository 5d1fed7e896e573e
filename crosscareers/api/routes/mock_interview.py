"""
Quick mock interview endpoints.
"""
from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile

from crosscareers.core.auth_dependency import require_full_access
from crosscareers.core.errors import BadRequest
from crosscareers.db.models.user import User
from crosscareers.llm.runner import LLMRunner, get_llm_runner
from crosscareers.schemas.interview import MockAnalysisRequest, MockQuestionsRequest
from crosscareers.services import mock_interview_service
from crosscareers.services.text_extraction import extract_text, read_upload

router = APIRouter(prefix="/interview", tags=["Mock Interview"])


@router.post("/extract-text")
async def extract_job_text(
    file: Optional[UploadFile] = File(None),
    user: User = Depends(require_full_access),
):
    if file is None or not file.filename:
        raise BadRequest("No file uploaded")
    data, content_type = await read_upload(file)
    return {"success": True, "text": extract_text(data, content_type)}


@router.post("/generate-questions")
def generate_questions(
    data: MockQuestionsRequest,
    user: User = Depends(require_full_access),
    runner: LLMRunner = Depends(get_llm_runner),
):
    return {"success": True, "questions": mock_interview_service.generate_questions(runner, data.text)}


@router.post("/analyze-answers")
def analyze_answers(
    data: MockAnalysisRequest,
    user: User = Depends(require_full_access),
    runner: LLMRunner = Depends(get_llm_runner),
):
    return {"success": True, **mock_interview_service.analyze_answers(runner, data.answers)}
