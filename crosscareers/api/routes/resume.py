"""
Resume builder endpoints and AI writing suggestions.
"""
import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from crosscareers.core.auth_dependency import get_db, require_roles
from crosscareers.db.models.user import User
from crosscareers.llm.runner import LLMRunner, get_llm_runner
from crosscareers.schemas.resume import (
    CareerTextSuggestionRequest,
    Education,
    JobDescriptionSuggestionRequest,
    Reference,
    ResumeCreate,
    ResumeResponse,
    ResumeReviewRequest,
    ResumeUpdate,
    SkillsSuggestionRequest,
    WorkExperience,
)
from crosscareers.services import resume_ai_service, resume_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/resume", tags=["Resume"])

require_user = require_roles("user")


def _out(resume) -> dict:
    return ResumeResponse.model_validate(resume).model_dump(mode="json", by_alias=True)


# ✅ AI SUGGESTIONS
@router.post("/suggest/job-description")
def suggest_job_description(
    data: JobDescriptionSuggestionRequest,
    user: User = Depends(require_user),
    runner: LLMRunner = Depends(get_llm_runner),
):
    return {"success": True, "suggestions": resume_ai_service.suggest_job_description(runner, data.work_exp)}


@router.post("/suggest/skills")
def suggest_skills(
    data: SkillsSuggestionRequest,
    user: User = Depends(require_user),
    runner: LLMRunner = Depends(get_llm_runner),
):
    return {"success": True, "skills": resume_ai_service.suggest_skills(runner, data.work_experiences)}


@router.post("/suggest/career-objective")
def suggest_career_objective(
    data: CareerTextSuggestionRequest,
    user: User = Depends(require_user),
    runner: LLMRunner = Depends(get_llm_runner),
):
    return {"success": True, "careerObjective": resume_ai_service.suggest_career_objective(runner, data)}


@router.post("/suggest/career-summary")
def suggest_career_summary(
    data: CareerTextSuggestionRequest,
    user: User = Depends(require_user),
    runner: LLMRunner = Depends(get_llm_runner),
):
    return {"success": True, "careerSummary": resume_ai_service.suggest_career_summary(runner, data)}


@router.post("/review")
def review_resume(
    data: ResumeReviewRequest,
    user: User = Depends(require_user),
    runner: LLMRunner = Depends(get_llm_runner),
):
    analysis = resume_ai_service.review_resume(runner, data.resume_text, data.job_description)
    return {"success": True, "analysis": analysis}


# ✅ CRUD
@router.post("", status_code=status.HTTP_201_CREATED)
def create_resume(data: ResumeCreate, user: User = Depends(require_user), db: Session = Depends(get_db)):
    resume = resume_service.create_resume(db, user, data)
    return {"success": True, "message": "Resume created", "resume": _out(resume)}


@router.get("")
def list_resumes(user: User = Depends(require_user), db: Session = Depends(get_db)):
    resumes = resume_service.list_resumes(db, user)
    return {"success": True, "count": len(resumes), "resumes": [_out(r) for r in resumes]}


@router.get("/{resume_id}")
def get_resume(resume_id: int, user: User = Depends(require_user), db: Session = Depends(get_db)):
    return {"success": True, "resume": _out(resume_service.get_resume(db, user, resume_id))}


@router.put("/{resume_id}")
def update_resume(
    resume_id: int,
    data: ResumeUpdate,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    resume = resume_service.update_resume(db, user, resume_id, data)
    return {"success": True, "message": "Resume updated", "resume": _out(resume)}


@router.delete("/{resume_id}")
def delete_resume(resume_id: int, user: User = Depends(require_user), db: Session = Depends(get_db)):
    resume_service.delete_resume(db, user, resume_id)
    return {"success": True, "message": "Resume deleted"}


# ✅ SECTION ENTRIES
@router.post("/{resume_id}/work-experience", status_code=status.HTTP_201_CREATED)
def add_work_experience(
    resume_id: int,
    entry: WorkExperience,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    resume = resume_service.add_entry(db, user, resume_id, "work_experience", entry)
    return {"success": True, "resume": _out(resume)}


@router.delete("/{resume_id}/work-experience/{index}")
def delete_work_experience(
    resume_id: int,
    index: int,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    resume = resume_service.remove_entry(db, user, resume_id, "work_experience", index)
    return {"success": True, "resume": _out(resume)}


@router.post("/{resume_id}/education", status_code=status.HTTP_201_CREATED)
def add_education(
    resume_id: int,
    entry: Education,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    resume = resume_service.add_entry(db, user, resume_id, "education", entry)
    return {"success": True, "resume": _out(resume)}


@router.delete("/{resume_id}/education/{index}")
def delete_education(
    resume_id: int,
    index: int,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    resume = resume_service.remove_entry(db, user, resume_id, "education", index)
    return {"success": True, "resume": _out(resume)}


@router.post("/{resume_id}/reference", status_code=status.HTTP_201_CREATED)
def add_reference(
    resume_id: int,
    entry: Reference,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    resume = resume_service.add_entry(db, user, resume_id, "references", entry)
    return {"success": True, "resume": _out(resume)}


@router.delete("/{resume_id}/reference/{index}")
def delete_reference(
    resume_id: int,
    index: int,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    resume = resume_service.remove_entry(db, user, resume_id, "references", index)
    return {"success": True, "resume": _out(resume)}
