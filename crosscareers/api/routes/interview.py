"""
Interview coach endpoints.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile
from sqlalchemy.orm import Session

from crosscareers.core.auth_dependency import get_current_user, get_db, require_full_access
from crosscareers.db.models.user import User
from crosscareers.llm.runner import LLMRunner, get_llm_runner
from crosscareers.schemas.interview import (
    DownloadResultsRequest,
    InterviewAnswerRequest,
    InterviewCompleteRequest,
    SaveHistoryRequest,
)
from crosscareers.services import interview_service
from crosscareers.services.text_extraction import resolve_source

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/insm", tags=["Interview Coach"])


@router.post("/generate-questions")
async def generate_questions(
    job_description: Optional[str] = Form(None, alias="jobDescription"),
    document: Optional[UploadFile] = File(None),
    practice_mode: str = Form("full", alias="practiceMode"),
    user: User = Depends(require_full_access),
    db: Session = Depends(get_db),
    runner: LLMRunner = Depends(get_llm_runner),
):
    text, _, _ = await resolve_source(job_description, document)
    session = interview_service.generate_questions(db, runner, user, text, practice_mode)
    return {
        "success": True,
        "sessionId": session.id,
        "practiceMode": session.practice_mode,
        "questions": session.questions,
        "commonQuestions": interview_service.pick_common_questions(),
    }


@router.post("/submit-answer")
def submit_answer(data: InterviewAnswerRequest, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    session = interview_service.record_answer(db, user, data)
    return {
        "success": True,
        "sessionId": session.id,
        "answered": len(session.answers),
        "transcript": data.transcript,
    }


@router.post("/complete")
def complete(
    data: InterviewCompleteRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    runner: LLMRunner = Depends(get_llm_runner),
):
    return {"success": True, **interview_service.complete_interview(db, runner, user, data)}


@router.post("/download-results")
def download_results(data: DownloadResultsRequest, user: User = Depends(get_current_user)):
    report = interview_service.render_markdown_report(data.analysis, data.questions)
    return Response(
        content=report,
        media_type="text/markdown",
        headers={"Content-Disposition": 'attachment; filename="interview-results.md"'},
    )


@router.post("/save-history")
def save_history(data: SaveHistoryRequest, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Sessions are persisted as they progress; this confirms the session is on record."""
    session = interview_service.get_session(db, user, data.session_id)
    return {
        "success": True,
        "sessionId": session.id,
        "status": session.status,
        "answered": len(session.answers or []),
        "overallScore": session.overall_score,
    }


@router.get("/history")
def history(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    sessions = interview_service.list_sessions(db, user)
    return {
        "success": True,
        "count": len(sessions),
        "sessions": [
            {
                "id": s.id,
                "practiceMode": s.practice_mode,
                "status": s.status,
                "questions": s.questions,
                "answers": s.answers,
                "analysis": s.analysis,
                "overallScore": s.overall_score,
                "createdAt": s.created_at.isoformat(),
                "completedAt": s.completed_at.isoformat() if s.completed_at else None,
            }
            for s in sessions
        ],
    }
