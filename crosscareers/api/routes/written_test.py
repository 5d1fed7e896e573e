"""
Timed written test endpoints.
"""
import logging

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from crosscareers.core.auth_dependency import get_current_user, get_db, require_full_access
from crosscareers.db.models.user import User
from crosscareers.llm.runner import LLMRunner, get_llm_runner
from crosscareers.schemas.written_test import (
    WrittenTestAnswerRequest,
    WrittenTestInitRequest,
    WrittenTestSessionResponse,
)
from crosscareers.services import written_test_service
from crosscareers.services.pdf_reports import render_exam_report

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/writtenTest", tags=["Written Test"])


def _out(session) -> dict:
    return WrittenTestSessionResponse.model_validate(session).model_dump(mode="json", by_alias=True)


@router.post("/init", status_code=status.HTTP_201_CREATED)
def init_session(
    data: WrittenTestInitRequest,
    user: User = Depends(require_full_access),
    db: Session = Depends(get_db),
    runner: LLMRunner = Depends(get_llm_runner),
):
    session = written_test_service.init_session(db, runner, user, data)
    return {
        "success": True,
        "sessionId": session.id,
        "status": session.status,
        "total": len(session.questions),
    }


@router.post("/start/{session_id}")
def start_session(session_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    session = written_test_service.start_session(db, user, session_id)
    return {
        "success": True,
        "sessionId": session.id,
        "status": session.status,
        "startedAt": session.started_at.isoformat(),
        "expiresAt": session.expires_at.isoformat(),
        "remainingSeconds": written_test_service.remaining_seconds(session),
    }


@router.get("/current/{session_id}")
def current_question(session_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return {"success": True, **written_test_service.current_question(db, user, session_id)}


@router.post("/answer")
def submit_answer(
    data: WrittenTestAnswerRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    runner: LLMRunner = Depends(get_llm_runner),
):
    result = written_test_service.submit_answer(db, runner, user, data.session_id, data.answer)
    return {"success": True, **result}


@router.get("/result/{session_id}")
def get_result(session_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return {"success": True, "session": _out(written_test_service.get_result(db, user, session_id))}


@router.get("/result/{session_id}/pdf")
def download_pdf(session_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    session = written_test_service.get_result(db, user, session_id)
    pdf = render_exam_report(session)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="exam_{session.id}.pdf"'},
    )


@router.get("/time/{session_id}")
def time_left(session_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return {"success": True, **written_test_service.get_remaining_time(db, user, session_id)}


@router.get("/history")
def history(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    sessions = written_test_service.list_sessions(db, user)
    return {"success": True, "count": len(sessions), "sessions": [_out(s) for s in sessions]}
