from typing import Optional
from pydantic import Field

from crosscareers.schemas.common import CamelModel


class QARequirements(CamelModel):
    technical_count: int = Field(7, ge=1, le=20)
    situational_count: int = Field(3, ge=1, le=20)


class QAGenerateRequest(CamelModel):
    job_description: str = Field(..., min_length=20, max_length=15000)
    job_title: Optional[str] = Field(None, max_length=200)
    experience_level: Optional[str] = Field(None, max_length=100)
    requirements: QARequirements = Field(default_factory=QARequirements)
