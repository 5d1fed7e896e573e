"""
Interview coach: question generation, answer capture and graded feedback.
"""
import logging
import random
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from crosscareers.core.errors import ApiError, BadRequest, NotFound
from crosscareers.db.models.interview_session import InterviewSession
from crosscareers.db.models.user import User
from crosscareers.llm.runner import LLMRunner

logger = logging.getLogger(__name__)

STATUS_IN_PROGRESS = "in_progress"
STATUS_COMPLETED = "completed"

# mode -> (technical, scenario)
PRACTICE_MODES = {
    "full": (3, 2),
    "technical": (5, 0),
    "scenario": (0, 5),
}

COMMON_QUESTIONS = [
    {"question": "Explain a core technology from this role and how you have used it in past projects.",
     "type": "technical", "category": "Technology Fundamentals"},
    {"question": "How would you optimize a slow-performing system or application?",
     "type": "technical", "category": "Performance Optimization"},
    {"question": "Describe your experience with the main frameworks or tools listed for this job.",
     "type": "technical", "category": "Tools & Frameworks"},
    {"question": "Describe a time when you had to work under pressure to meet a tight deadline.",
     "type": "scenario", "category": "Time Management"},
    {"question": "Tell me about a time you had a conflict with a team member and how you resolved it.",
     "type": "scenario", "category": "Teamwork"},
    {"question": "Give an example of how you handled a difficult client or stakeholder.",
     "type": "scenario", "category": "Communication"},
]
COMMON_QUESTION_COUNT = 5

DEFAULT_SUGGESTIONS = [
    "Practice answering with more specific examples from your experience",
    "Use the STAR method (Situation, Task, Action, Result) for scenario questions",
    "Research the company's products and services to give more relevant answers",
    "Work on concise communication while keeping answers complete",
    "Practice time management so answers are thorough within a reasonable time",
]

FALLBACK_FEEDBACK = "This answer could not be evaluated automatically. Review it against the question and try again."

GRADER_SYSTEM_PROMPT = "You are an experienced interviewer giving candid, constructive feedback on interview answers."


def pick_common_questions(count: int = COMMON_QUESTION_COUNT) -> list[dict]:
    return random.sample(COMMON_QUESTIONS, count)


def make_question_validator(mode: str):
    technical, scenario = PRACTICE_MODES[mode]
    expected = technical + scenario
    default_type = "scenario" if technical == 0 else "technical"

    def validate(data) -> list[dict]:
        items = data.get("questions") if isinstance(data, dict) else data
        if not isinstance(items, list) or not items:
            raise ValueError("Expected a non-empty 'questions' list")
        if len(items) < expected:
            raise ValueError(f"Expected {expected} questions, got {len(items)}")
        questions = []
        for item in items[:expected]:
            if not isinstance(item, dict) or not str(item.get("question") or "").strip():
                raise ValueError("Every question needs text")
            kind = item.get("type") if item.get("type") in ("technical", "scenario") else default_type
            questions.append({
                "question": str(item["question"]).strip(),
                "type": kind,
                "category": str(item.get("category") or "General"),
            })
        return questions
    return validate


def generate_questions(
    db: Session,
    runner: LLMRunner,
    user: User,
    job_description: str,
    practice_mode: str = "full",
) -> InterviewSession:
    if practice_mode not in PRACTICE_MODES:
        raise BadRequest("Invalid practice mode", details={"validOptions": list(PRACTICE_MODES)})
    technical, scenario = PRACTICE_MODES[practice_mode]
    asks = []
    if technical:
        asks.append(f"{technical} technical questions")
    if scenario:
        asks.append(f"{scenario} scenario-based questions")
    prompt = (
        f"Generate {' and '.join(asks)} based on this job description:\n{job_description}\n\n"
        'Return JSON: {"questions": [{"question": "...", "type": "technical|scenario", "category": "..."}]}'
    )
    questions = runner.generate_json(
        "interview_questions",
        prompt,
        system=GRADER_SYSTEM_PROMPT,
        validate=make_question_validator(practice_mode),
    )

    session = InterviewSession(
        user_id=user.id,
        practice_mode=practice_mode,
        job_description=job_description,
        questions=questions,
        answers=[],
        status=STATUS_IN_PROGRESS,
    )
    db.add(session)
    db.commit()
    db.refresh(session)
    logger.info(f"Interview session created: id={session.id}, user_id={user.id}, mode={practice_mode}")
    return session


def get_session(db: Session, user: User, session_id: int) -> InterviewSession:
    session = db.query(InterviewSession).filter(
        InterviewSession.id == session_id,
        InterviewSession.user_id == user.id,
    ).first()
    if not session:
        raise NotFound("Interview session not found")
    return session


def record_answer(db: Session, user: User, data) -> InterviewSession:
    session = get_session(db, user, data.session_id)
    if session.status == STATUS_COMPLETED:
        raise BadRequest("Interview already completed")
    session.answers = list(session.answers or []) + [{
        "question": data.question,
        "type": data.question_type,
        "transcript": data.transcript,
        "timeSpent": data.time_spent,
    }]
    db.commit()
    db.refresh(session)
    return session


def _validate_grade(data) -> dict:
    if not isinstance(data, dict):
        raise ValueError("Expected an object")
    score = data.get("score")
    if isinstance(score, bool) or not isinstance(score, (int, float)):
        raise ValueError("Missing numeric score")
    return data


def grade_answer(runner: LLMRunner, item) -> dict:
    prompt = (
        "Analyze this interview response:\n"
        f"Question: {item.question}\n"
        f"Type: {item.type}\n"
        f"Answer: {item.transcript or '(no answer)'}\n"
        f"Time spent: {item.time_spent} seconds\n\n"
        "Score it from 0 to 100 on accuracy and completeness, give feedback on strengths and areas to improve, "
        "and include a suggested answer when the score is below 95.\n"
        'Return JSON: {"score": 0, "feedback": "...", "suggestedAnswer": "..."}'
    )
    try:
        graded = runner.generate_json("interview_grading", prompt, system=GRADER_SYSTEM_PROMPT, validate=_validate_grade)
    except ApiError as e:
        logger.warning(f"Interview grading failed, scoring 0: {e}")
        return {
            "question": item.question,
            "score": 0,
            "feedback": FALLBACK_FEEDBACK,
            "suggestedAnswer": None,
            "userAnswer": item.transcript,
        }
    return {
        "question": item.question,
        "score": max(0, min(100, int(round(graded["score"])))),
        "feedback": str(graded.get("feedback") or ""),
        "suggestedAnswer": graded.get("suggestedAnswer") or None,
        "userAnswer": item.transcript,
    }


def _validate_suggestions(data) -> list[str]:
    items = data.get("improvementSuggestions") if isinstance(data, dict) else data
    if not isinstance(items, list):
        raise ValueError("Expected 'improvementSuggestions' list")
    suggestions = [str(s).strip() for s in items if str(s).strip()]
    if not suggestions:
        raise ValueError("No suggestions returned")
    return suggestions


def improvement_suggestions(runner: LLMRunner, analysis: list[dict]) -> list[str]:
    summary = "\n".join(f"- ({a['score']}/100) {a['question']}: {a['feedback']}" for a in analysis)
    prompt = (
        f"Based on these interview results, give 5 specific improvement suggestions:\n{summary}\n\n"
        'Return JSON: {"improvementSuggestions": ["..."]}'
    )
    try:
        return runner.generate_json("interview_suggestions", prompt, validate=_validate_suggestions)[:5]
    except ApiError as e:
        logger.warning(f"Improvement suggestions unavailable, using defaults: {e}")
        return list(DEFAULT_SUGGESTIONS)


def complete_interview(db: Session, runner: LLMRunner, user: User, data) -> dict:
    session = get_session(db, user, data.session_id) if data.session_id is not None else None

    question_analysis = [grade_answer(runner, item) for item in data.progress]
    overall_score = round(sum(a["score"] for a in question_analysis) / len(question_analysis))
    suggestions = improvement_suggestions(runner, question_analysis)

    analysis = {
        "questionAnalysis": question_analysis,
        "overallScore": overall_score,
        "improvementSuggestions": suggestions,
    }

    if session is not None:
        session.answers = [
            {"question": p.question, "type": p.type, "transcript": p.transcript, "timeSpent": p.time_spent}
            for p in data.progress
        ]
        session.analysis = analysis
        session.overall_score = overall_score
        session.status = STATUS_COMPLETED
        session.completed_at = datetime.utcnow()
        db.commit()
        logger.info(f"Interview completed: id={session.id}, overall_score={overall_score}")

    return {**analysis, "sessionId": session.id if session else None, "commonQuestions": pick_common_questions()}


def render_markdown_report(analysis, questions: Optional[list] = None, generated_on: Optional[datetime] = None) -> str:
    generated_on = generated_on or datetime.utcnow()
    total = len(questions) if questions else len(analysis.question_analysis)
    lines = [
        "# Interview Performance Report",
        "",
        f"- **Date:** {generated_on.strftime('%Y-%m-%d')}",
        f"- **Total Questions:** {total}",
        f"- **Overall Score:** {analysis.overall_score}%",
        "",
        "## Questions and Answers",
    ]
    for item in analysis.question_analysis:
        lines += [
            "",
            f"### {item.question}",
            f"**Score:** {item.score}%",
            "",
            f"**Answer:** {item.user_answer or '(no answer)'}",
            "",
            f"**Feedback:** {item.feedback}",
        ]
        if item.suggested_answer:
            lines += ["", f"**Suggested Answer:** {item.suggested_answer}"]
    if analysis.improvement_suggestions:
        lines += ["", "## Improvement Suggestions", ""]
        lines += [f"- {s}" for s in analysis.improvement_suggestions]
    return "\n".join(lines) + "\n"


def list_sessions(db: Session, user: User) -> list[InterviewSession]:
    return (
        db.query(InterviewSession)
        .filter(InterviewSession.user_id == user.id)
        .order_by(InterviewSession.created_at.desc(), InterviewSession.id.desc())
        .all()
    )
