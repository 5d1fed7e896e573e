from fastapi import APIRouter, Depends

from crosscareers.core.auth_dependency import require_full_access
from crosscareers.db.models.user import User
from crosscareers.llm.runner import LLMRunner, get_llm_runner
from crosscareers.schemas.qa import QAGenerateRequest
from crosscareers.services.qa_service import generate_questions

router = APIRouter(prefix="/qa", tags=["Interview Q&A"])


@router.post("/generate")
def generate(
    data: QAGenerateRequest,
    user: User = Depends(require_full_access),
    runner: LLMRunner = Depends(get_llm_runner),
):
    questions = generate_questions(
        runner,
        data.job_description,
        data.job_title,
        data.experience_level,
        technical_count=data.requirements.technical_count,
        situational_count=data.requirements.situational_count,
    )
    return {
        "success": True,
        "count": {
            "technical": len(questions["technical"]),
            "situational": len(questions["situational"]),
        },
        "questions": questions,
    }
