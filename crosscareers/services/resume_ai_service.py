"""
AI suggestions for the resume builder and the ATS-style resume review.
"""
import logging
import re

from crosscareers.llm.runner import LLMRunner

logger = logging.getLogger(__name__)

BULLET_PREFIX = re.compile(r"^\s*(?:[-•*]+|\d+[.)])\s+")

SENTENCE_RULES = """Ensure the sentences are:
- Professional, using strong action verbs and avoiding generic or vague phrases.
- Focused on measurable outcomes or significant contributions where applicable.
- Written as plain text sentences, each starting with a strong action verb.
- Free of special characters (e.g. **, *, -, •), numbering or formatting markers.
Return only the sentences, one per line, with no additional text."""

REVIEW_SYSTEM_PROMPT = """You are a professional career advisor and resume expert. Analyze the job
advertisement and the candidate's resume and respond with these sections:
1. Matching Percentage: a percentage match and why.
2. Strengths: skills, experience or qualifications that align well.
3. Weaknesses: missing skills, experience or qualifications.
4. Improvement Suggestions: actionable advice including keywords to add.
5. Keywords for Resume and Cover Letter: the most important terms from the advertisement.
Be professional and concise. Use bullet points."""


def clean_lines(text: str, max_lines: int = 10) -> list[str]:
    """Split model output into lines with list markers stripped."""
    lines = []
    for raw in (text or "").splitlines():
        line = BULLET_PREFIX.sub("", raw.strip()).strip().strip("*").strip()
        if line:
            lines.append(line)
    return lines[:max_lines]


def _describe_work(work_experiences: list[dict]) -> str:
    return ", ".join(
        f"{exp.get('position', 'Role')} at {exp.get('companyName', 'a company')}"
        for exp in work_experiences
    ) or "none provided"


def _describe_education(education: list[dict]) -> str:
    return ", ".join(
        f"{edu.get('degree', '')} in {edu.get('fieldOfStudy', '')} from {edu.get('institutionName', '')}".strip()
        for edu in education
    ) or "none provided"


def _describe_named(items: list[dict], key: str = "name") -> str:
    names = []
    for item in items:
        if isinstance(item, dict):
            if "skills" in item:
                names.extend(s.get("name", "") for s in item.get("skills", []) if isinstance(s, dict))
            elif item.get(key):
                names.append(item[key])
        elif item:
            names.append(str(item))
    return ", ".join(n for n in names if n) or "none provided"


def suggest_job_description(runner: LLMRunner, work_exp: dict) -> list[str]:
    existing = work_exp.get("description") or []
    if isinstance(existing, list):
        existing = " ".join(existing)
    prompt = (
        "You are an expert resume writer. Write 5 to 10 concise, results-oriented sentences describing "
        "the key responsibilities and achievements for this role.\n"
        f"Job title: {work_exp.get('position', '')}\n"
        f"Company: {work_exp.get('companyName', '')}\n"
        f"Existing description: {existing or 'none'}\n\n"
        f"{SENTENCE_RULES}"
    )
    return clean_lines(runner.generate_text("resume_suggestion", prompt))


def _validate_skills(data) -> dict:
    if not isinstance(data, dict):
        raise ValueError("Expected an object")
    technical = data.get("technical")
    soft = data.get("soft")
    if not isinstance(technical, list) or not isinstance(soft, list):
        raise ValueError("Expected 'technical' and 'soft' lists")
    return {
        "technical": [str(s).strip() for s in technical if str(s).strip()],
        "soft": [str(s).strip() for s in soft if str(s).strip()],
    }


def suggest_skills(runner: LLMRunner, work_experiences: list[dict]) -> dict:
    prompt = (
        f"Based on the following work experiences: {_describe_work(work_experiences)}, "
        "suggest 10 relevant skills for a resume. Categorize them into technical skills and soft skills.\n"
        'Return JSON with this format: {"technical": [], "soft": []}'
    )
    return runner.generate_json("resume_suggestion", prompt, validate=_validate_skills)


def _career_prompt(kind: str, data) -> str:
    return (
        f"You are an expert resume writer. Write a professional {kind} for a resume based on:\n"
        f"- Work experiences: {_describe_work(data.work_experiences)}\n"
        f"- Education: {_describe_education(data.education)}\n"
        f"- Skills: {_describe_named(data.skills)}\n"
        f"- Certifications: {_describe_named(data.certifications)}\n"
        f"- Trainings: {_describe_named(data.trainings)}\n\n"
    )


def suggest_career_objective(runner: LLMRunner, data) -> str:
    prompt = _career_prompt("career objective", data) + (
        "Write 3 to 4 sentences stating the role the candidate is targeting and the value they bring. "
        "Plain text only."
    )
    return runner.generate_text("resume_suggestion", prompt)


def suggest_career_summary(runner: LLMRunner, data) -> str:
    prompt = _career_prompt("career summary", data) + (
        "Highlight key achievements and relevant skills in 5 to 7 sentences. Plain text only."
    )
    return runner.generate_text("resume_suggestion", prompt)


def review_resume(runner: LLMRunner, resume_text: str, job_description: str) -> str:
    prompt = f"JOB ADVERTISEMENT:\n{job_description}\n\nRESUME:\n{resume_text}"
    return runner.generate_text("resume_review", prompt, system=REVIEW_SYSTEM_PROMPT)
