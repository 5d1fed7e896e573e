"""
Timed written test sessions.

Lifecycle: pending -> active -> completed | expired. Transitions only move forward.
Time is enforced on the server: any read or write on an active session past its
``expires_at`` persists the session as expired first.
"""
import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from crosscareers.core.errors import BadRequest, NotFound
from crosscareers.db.models.test_session import (
    STATUS_ACTIVE,
    STATUS_COMPLETED,
    STATUS_EXPIRED,
    STATUS_PENDING,
    TestSession,
)
from crosscareers.db.models.user import User
from crosscareers.llm.runner import LLMRunner

logger = logging.getLogger(__name__)

QUESTION_COUNT = 5
DIFFICULTIES = ("easy", "medium", "hard")

QUESTION_SYSTEM_PROMPT = (
    "You are a senior technical interviewer who writes short written-exam questions "
    "that can be answered in a few sentences."
)

GRADING_SYSTEM_PROMPT = (
    "You are a strict but fair examiner grading a single written answer against an ideal answer."
)


def question_prompt(job_title: str, experience_years: int, skills: list[str], job_description: Optional[str]) -> str:
    return (
        f"Create exactly {QUESTION_COUNT} written test questions for a {job_title} candidate "
        f"with {experience_years} years of experience.\n"
        f"Skills to cover: {', '.join(skills) if skills else 'general role knowledge'}\n"
        f"Job description: {job_description or 'not provided'}\n\n"
        "Mix difficulties (easy, medium, hard). Return JSON exactly in this shape:\n"
        '{"questions": [{"index": 0, "question": "...", "idealAnswer": "...", '
        '"topicTags": ["..."], "difficulty": "easy|medium|hard"}]}'
    )


def grading_prompt(question: str, ideal_answer: Optional[str], user_answer: str) -> str:
    return (
        f"Question: {question}\n"
        f"Ideal answer: {ideal_answer or 'not provided'}\n"
        f"Candidate answer: {user_answer or '(no answer)'}\n\n"
        "Decide whether the candidate answer is substantially correct. Return JSON with fields:\n"
        '{"is_correct": true|false, "score": 1 or 0, "feedback": "...", "corrected_answer": "..."}'
    )


def normalize_questions(data) -> list[dict]:
    """Validate the generated payload. Raises ValueError unless there are exactly five questions."""
    questions = data.get("questions") if isinstance(data, dict) else None
    if not isinstance(questions, list) or len(questions) != QUESTION_COUNT:
        raise ValueError(f"Expected {QUESTION_COUNT} questions")

    normalized = []
    for position, item in enumerate(questions):
        if not isinstance(item, dict) or not str(item.get("question") or "").strip():
            raise ValueError(f"Question {position} is missing text")
        normalized.append({
            "index": position,
            "question": str(item["question"]).strip(),
            "idealAnswer": item.get("idealAnswer") or item.get("ideal_answer"),
            "topicTags": item.get("topicTags") if isinstance(item.get("topicTags"), list) else [],
            "difficulty": item.get("difficulty") if item.get("difficulty") in DIFFICULTIES else "medium",
        })
    return normalized


def validate_grade(data) -> dict:
    """A grade needs a numeric score."""
    if not isinstance(data, dict):
        raise ValueError("Expected an object")
    score = data.get("score")
    if isinstance(score, bool) or not isinstance(score, (int, float)):
        raise ValueError("Grade is missing a numeric score")
    return data


def remaining_seconds(session: TestSession, now: Optional[datetime] = None) -> int:
    if not session.expires_at:
        return 0
    now = now or datetime.utcnow()
    return max(0, int((session.expires_at - now).total_seconds()))


def get_session(db: Session, user: User, session_id: int) -> TestSession:
    session = db.query(TestSession).filter(
        TestSession.id == session_id,
        TestSession.user_id == user.id,
    ).first()
    if not session:
        raise NotFound("Session not found")
    return session


def _expire_if_overdue(db: Session, session: TestSession, now: datetime) -> bool:
    if session.status == STATUS_ACTIVE and session.expires_at and now > session.expires_at:
        session.status = STATUS_EXPIRED
        db.commit()
        logger.info(f"Written test expired: session_id={session.id}")
        return True
    return False


def ensure_active_not_expired(db: Session, session: TestSession, now: Optional[datetime] = None) -> None:
    now = now or datetime.utcnow()
    if session.status == STATUS_COMPLETED:
        raise BadRequest("Session already completed")
    if session.status == STATUS_EXPIRED:
        raise BadRequest("Session expired")
    if session.status != STATUS_ACTIVE:
        raise BadRequest("Session not active")
    if _expire_if_overdue(db, session, now):
        raise BadRequest("Time is over. Session expired")


def init_session(db: Session, runner: LLMRunner, user: User, data) -> TestSession:
    prompt = question_prompt(data.job_title, data.experience_years, data.skills, data.job_description)
    questions = runner.generate_json(
        "written_test_questions",
        prompt,
        system=QUESTION_SYSTEM_PROMPT,
        validate=normalize_questions,
    )

    session = TestSession(
        user_id=user.id,
        job_title=data.job_title,
        experience_years=data.experience_years,
        skills=data.skills,
        job_description=data.job_description,
        duration_minutes=data.duration_minutes,
        status=STATUS_PENDING,
        questions=questions,
        current_index=0,
        total_score=0,
    )
    db.add(session)
    db.commit()
    db.refresh(session)
    logger.info(f"Written test created: session_id={session.id}, user_id={user.id}")
    return session


def start_session(db: Session, user: User, session_id: int, now: Optional[datetime] = None) -> TestSession:
    session = get_session(db, user, session_id)
    if session.status != STATUS_PENDING:
        raise BadRequest("Session not pending")

    now = now or datetime.utcnow()
    session.started_at = now
    session.expires_at = now + timedelta(minutes=session.duration_minutes)
    session.status = STATUS_ACTIVE
    db.commit()
    db.refresh(session)
    logger.info(f"Written test started: session_id={session.id}, expires_at={session.expires_at}")
    return session


def current_question(db: Session, user: User, session_id: int, now: Optional[datetime] = None) -> dict:
    now = now or datetime.utcnow()
    session = get_session(db, user, session_id)
    ensure_active_not_expired(db, session, now)

    if session.current_index >= len(session.questions):
        raise BadRequest("All questions answered")
    question = session.questions[session.current_index]
    return {
        "sessionId": session.id,
        "index": question["index"],
        "question": question["question"],
        "difficulty": question.get("difficulty", "medium"),
        "total": len(session.questions),
        "remainingSeconds": remaining_seconds(session, now),
    }


def submit_answer(
    db: Session,
    runner: LLMRunner,
    user: User,
    session_id: int,
    answer: str,
    now: Optional[datetime] = None,
) -> dict:
    now = now or datetime.utcnow()
    session = get_session(db, user, session_id)
    ensure_active_not_expired(db, session, now)

    position = session.current_index
    if position >= len(session.questions):
        raise BadRequest("No more questions")

    questions = [dict(q) for q in session.questions]
    question = questions[position]
    graded = runner.generate_json(
        "written_test_grading",
        grading_prompt(question["question"], question.get("idealAnswer"), answer or ""),
        system=GRADING_SYSTEM_PROMPT,
        validate=validate_grade,
    )

    question["userAnswer"] = answer or ""
    question["feedback"] = graded.get("feedback") or ""
    question["correctedAnswer"] = graded.get("corrected_answer") or graded.get("correctedAnswer")
    question["isCorrect"] = bool(graded.get("is_correct"))
    question["score"] = 1 if graded.get("score") == 1 else 0

    session.questions = questions
    session.total_score = sum(q.get("score") or 0 for q in questions)
    session.current_index = position + 1
    if session.current_index >= len(questions):
        session.status = STATUS_COMPLETED
        session.completed_at = now
    db.commit()
    db.refresh(session)
    logger.info(
        f"Written test answer graded: session_id={session.id}, index={position}, "
        f"score={question['score']}, status={session.status}"
    )

    return {
        "status": session.status,
        "nextIndex": session.current_index,
        "total": len(questions),
        "thisQuestion": {
            "index": question["index"],
            "question": question["question"],
            "userAnswer": question["userAnswer"],
            "isCorrect": question["isCorrect"],
            "score": question["score"],
            "feedback": question["feedback"],
            "correctedAnswer": question["correctedAnswer"],
            "idealAnswer": question.get("idealAnswer"),
        },
        "totalScore": session.total_score,
        "remainingSeconds": remaining_seconds(session, now),
    }


def get_result(db: Session, user: User, session_id: int, now: Optional[datetime] = None) -> TestSession:
    session = get_session(db, user, session_id)
    _expire_if_overdue(db, session, now or datetime.utcnow())
    return session


def get_remaining_time(db: Session, user: User, session_id: int, now: Optional[datetime] = None) -> dict:
    session = get_session(db, user, session_id)
    return {"status": session.status, "remainingSeconds": remaining_seconds(session, now)}


def list_sessions(db: Session, user: User) -> list[TestSession]:
    return (
        db.query(TestSession)
        .filter(TestSession.user_id == user.id)
        .order_by(TestSession.created_at.desc(), TestSession.id.desc())
        .all()
    )
