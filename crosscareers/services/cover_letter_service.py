"""
Cover letter generation in one of five regional or professional styles.
"""
import logging

from crosscareers.llm.runner import LLMRunner

logger = logging.getLogger(__name__)

MAX_INPUT_CHARS = 3000
DEFAULT_STYLE = "European"

STYLE_GUIDES = {
    "European": "Formal business format, 3 paragraphs max",
    "USA": "Bullet points for achievements, direct tone",
    "Worldwide": "Culturally neutral, highlight languages",
    "Academic": "Focus on research, publications, awards",
    "Creative": "Personal voice, creative formatting",
}


def resolve_style(style: str) -> str:
    return style if style in STYLE_GUIDES else DEFAULT_STYLE


def generate_cover_letter(runner: LLMRunner, job_description: str, resume_text: str, style: str) -> str:
    style = resolve_style(style)
    prompt = (
        f"Generate a {style}-style cover letter using:\n"
        f"JOB: {job_description[:MAX_INPUT_CHARS]}\n"
        f"RESUME: {resume_text[:MAX_INPUT_CHARS]}\n"
        f"STYLE GUIDE: {STYLE_GUIDES[style]}\n"
        "Include: contact info, salutation, 3 paragraphs, sign-off."
    )
    letter = runner.generate_text("cover_letter", prompt)
    logger.info(f"Cover letter generated: style={style}, chars={len(letter)}")
    return letter
