"""
Interview question and answer bank generation.
"""
import logging
from typing import Optional

from crosscareers.core.errors import Unprocessable
from crosscareers.llm.runner import LLMOutputError, LLMRunner

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You are an expert interview question generator."


def _pairs(items) -> list[dict]:
    pairs = []
    for item in items:
        if isinstance(item, dict) and str(item.get("question") or "").strip():
            pairs.append({
                "question": str(item["question"]).strip(),
                "answer": str(item.get("answer") or "").strip(),
            })
    return pairs


def validate_questions(data) -> dict:
    if not isinstance(data, dict):
        raise ValueError("Expected an object")
    if not isinstance(data.get("technical"), list):
        raise ValueError("Invalid technical questions format")
    if not isinstance(data.get("situational"), list):
        raise ValueError("Invalid situational questions format")
    return {"technical": _pairs(data["technical"]), "situational": _pairs(data["situational"])}


def generate_questions(
    runner: LLMRunner,
    job_description: str,
    job_title: Optional[str],
    experience_level: Optional[str],
    technical_count: int = 7,
    situational_count: int = 3,
) -> dict:
    prompt = (
        f"Generate exactly {technical_count} technical questions with answers and exactly "
        f"{situational_count} situational questions with answers.\n"
        "Technical answers should be 3-5 sentences and show depth; situational answers describe a strong approach.\n"
        'Return JSON: {"technical": [{"question": "...", "answer": "..."}], '
        '"situational": [{"question": "...", "answer": "..."}]}\n\n'
        f"Job title: {job_title or 'Not specified'}\n"
        f"Level: {experience_level or 'Not specified'}\n"
        f"Description: {job_description}"
    )
    try:
        questions = runner.generate_json("qa_generation", prompt, system=SYSTEM_PROMPT, validate=validate_questions)
    except LLMOutputError as e:
        raise Unprocessable("Invalid response structure from question generator", details=e.details)

    if not questions["technical"] or not questions["situational"]:
        raise Unprocessable("Invalid response structure from question generator")
    logger.info(
        f"Q&A generated: technical={len(questions['technical'])}, situational={len(questions['situational'])}"
    )
    return questions
