"""
Quick mock interview: five questions from a job description, then one overall
score for the candidate's answers. Nothing is stored.
"""
import json
import logging
from typing import Optional

from crosscareers.core.errors import BadGateway, BadRequest
from crosscareers.llm.runner import LLMRunner
from crosscareers.services.resume_ai_service import clean_lines

logger = logging.getLogger(__name__)

QUESTION_COUNT = 5
FEEDBACK_THRESHOLD = 95

ANALYST_SYSTEM_PROMPT = "You are an experienced interviewer scoring mock interview answers."


def generate_questions(runner: LLMRunner, text: Optional[str]) -> list[str]:
    if not text or not text.strip():
        raise BadRequest("Text content is required")
    prompt = (
        f"Generate {QUESTION_COUNT} interview questions (3 technical, 2 scenario-based) "
        f"for this job description:\n\n{text.strip()}\n\n"
        "Return only the questions, one per line."
    )
    questions = clean_lines(runner.generate_text("mock_interview_questions", prompt), max_lines=QUESTION_COUNT)
    if not questions:
        raise BadGateway("AI returned no questions")
    return questions


def validate_analysis(data) -> dict:
    if not isinstance(data, dict):
        raise ValueError("Expected an object")
    score = data.get("score")
    if isinstance(score, bool) or not isinstance(score, (int, float)):
        raise ValueError("Analysis is missing a numeric score")
    return {"score": max(0, min(100, round(score))), "feedback": str(data.get("feedback") or "").strip()}


def analyze_answers(runner: LLMRunner, answers: Optional[list]) -> dict:
    """Feedback is only returned when the score is at or below the threshold."""
    if not answers:
        raise BadRequest("Answers are required")
    payload = [{"question": a.question, "answer": a.answer} for a in answers]
    prompt = (
        "Analyze these interview answers, score them out of 100 and give expert feedback "
        "on how to improve.\n\n"
        f"{json.dumps(payload, ensure_ascii=False)}\n\n"
        'Return JSON: {"score": 0-100, "feedback": "..."}'
    )
    result = runner.generate_json(
        "mock_interview_analysis",
        prompt,
        system=ANALYST_SYSTEM_PROMPT,
        validate=validate_analysis,
    )
    logger.info(f"Mock interview analyzed: answers={len(payload)}, score={result['score']}")
    return {
        "score": result["score"],
        "feedback": result["feedback"] if result["score"] <= FEEDBACK_THRESHOLD else None,
    }
