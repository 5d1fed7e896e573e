"""
Pydantic schemas for timed written tests.
"""
from datetime import datetime
from typing import List, Optional
from pydantic import Field, field_validator

from crosscareers.schemas.common import CamelModel


class WrittenTestInitRequest(CamelModel):
    job_title: str = Field(..., min_length=2, max_length=120)
    experience_years: int = Field(0, ge=0, le=50)
    skills: List[str] = Field(default_factory=list)
    job_description: Optional[str] = Field(None, max_length=10000)
    duration_minutes: int = Field(20, ge=1, le=240)

    @field_validator("skills")
    @classmethod
    def validate_skills(cls, v: List[str]) -> List[str]:
        cleaned = [s.strip() for s in v]
        for skill in cleaned:
            if not 1 <= len(skill) <= 64:
                raise ValueError("Each skill must be 1-64 characters")
        return cleaned


class WrittenTestAnswerRequest(CamelModel):
    session_id: int
    answer: str = Field("", max_length=20000)


class WrittenTestQuestion(CamelModel):
    index: int
    question: str
    ideal_answer: Optional[str] = None
    topic_tags: List[str] = Field(default_factory=list)
    difficulty: str = "medium"
    user_answer: Optional[str] = None
    feedback: Optional[str] = None
    corrected_answer: Optional[str] = None
    is_correct: Optional[bool] = None
    score: Optional[int] = None


class WrittenTestSessionResponse(CamelModel):
    id: int
    job_title: str
    experience_years: int
    skills: List[str]
    job_description: Optional[str] = None
    duration_minutes: int
    status: str
    current_index: int
    total_score: int
    questions: List[WrittenTestQuestion]
    started_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_at: datetime
