"""
Model router: picks a model and sampling settings per feature.
"""
from crosscareers.core.config import OPENAI_MODEL

# Feature -> (model, temperature, max_tokens)
MODEL_ROUTING = {
    "written_test_questions": (OPENAI_MODEL, 0.4, 1500),
    "written_test_grading": (OPENAI_MODEL, 0.0, 800),
    "interview_questions": (OPENAI_MODEL, 0.7, 1500),
    "interview_grading": (OPENAI_MODEL, 0.2, 800),
    "interview_suggestions": (OPENAI_MODEL, 0.5, 800),
    "qa_generation": (OPENAI_MODEL, 0.5, 3500),
    "resume_suggestion": (OPENAI_MODEL, 0.7, 800),
    "resume_review": (OPENAI_MODEL, 0.4, 1500),
    "cover_letter": (OPENAI_MODEL, 0.7, 1200),
    "presentation": (OPENAI_MODEL, 0.6, 3500),
    "document": (OPENAI_MODEL, 0.6, 3500),
    "spreadsheet": (OPENAI_MODEL, 0.3, 4000),
    "mock_interview_questions": (OPENAI_MODEL, 0.7, 800),
    "mock_interview_analysis": (OPENAI_MODEL, 0.3, 1200),
}

DEFAULT_ROUTE = (OPENAI_MODEL, 0.7, 2000)


def get_route_for_feature(feature: str) -> tuple[str, float, int]:
    """Return (model, temperature, max_tokens) for a feature."""
    return MODEL_ROUTING.get(feature, DEFAULT_ROUTE)
