"""
Pydantic schemas for the resume builder.

Stored JSON uses the same camelCase keys the API accepts.
"""
from datetime import date, datetime
from typing import List, Literal, Optional
from pydantic import EmailStr, Field

from crosscareers.schemas.common import CamelModel


class Address(CamelModel):
    street: Optional[str] = None
    city: Optional[str] = None
    postal: Optional[str] = None
    country: Optional[str] = None


class PersonalInfo(CamelModel):
    title_before: Optional[str] = None
    title_after: Optional[str] = None
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    professional_title: Optional[str] = None
    phone_number: str = Field(..., min_length=1)
    email_address: EmailStr
    address: Optional[Address] = None
    permanent_address: Optional[Address] = None
    skype: Optional[str] = None
    linked_in: Optional[str] = None
    portfolio: Optional[str] = None
    profile_picture: Optional[str] = None
    father_name: Optional[str] = None
    mother_name: Optional[str] = None
    spouse_name: Optional[str] = None
    nid: Optional[str] = None
    passport: Optional[str] = None


class WorkExperience(CamelModel):
    company_name: str = Field(..., min_length=1)
    position: str = Field(..., min_length=1)
    city: Optional[str] = None
    country: Optional[str] = None
    from_: date = Field(..., alias="from")
    to: Optional[date] = None
    currently_working: bool = False
    description: List[str] = Field(default_factory=list)


class Education(CamelModel):
    institution_name: str = Field(..., min_length=1)
    field_of_study: str = Field(..., min_length=1)
    degree: str = Field(..., min_length=1)
    city: Optional[str] = None
    country: Optional[str] = None
    from_: date = Field(..., alias="from")
    to: Optional[date] = None
    currently_studying: bool = False
    gpa: Optional[float] = Field(None, ge=0, le=4)
    honors: Optional[str] = None
    description: List[str] = Field(default_factory=list)


class Training(CamelModel):
    name: str = Field(..., min_length=1)
    institution: str = Field(..., min_length=1)
    duration: Optional[str] = None
    from_: Optional[date] = Field(None, alias="from")
    to: Optional[date] = None
    description: List[str] = Field(default_factory=list)


class Certification(CamelModel):
    name: str = Field(..., min_length=1)
    authority: str = Field(..., min_length=1)
    url_code: Optional[str] = None
    issued_on: date = Field(..., alias="date")
    description: List[str] = Field(default_factory=list)


class Skill(CamelModel):
    name: str = Field(..., min_length=1)
    level: Literal["Beginner", "Intermediate", "Advanced", "Expert"] = "Advanced"


class SkillCategory(CamelModel):
    category: str = Field(..., min_length=1)
    skills: List[Skill] = Field(default_factory=list)


class Reference(CamelModel):
    name: str = Field(..., min_length=1)
    position: Optional[str] = None
    company: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    relationship: Optional[str] = None


class ResumeCreate(CamelModel):
    personal_info: PersonalInfo
    work_experience: List[WorkExperience] = Field(default_factory=list)
    education: List[Education] = Field(default_factory=list)
    trainings: List[Training] = Field(default_factory=list)
    certifications: List[Certification] = Field(default_factory=list)
    skills: List[SkillCategory] = Field(default_factory=list)
    references: List[Reference] = Field(default_factory=list)
    career_objective: Optional[str] = None
    career_summary: Optional[str] = None


class ResumeUpdate(CamelModel):
    """Partial update; omitted sections are left untouched."""
    personal_info: Optional[PersonalInfo] = None
    work_experience: Optional[List[WorkExperience]] = None
    education: Optional[List[Education]] = None
    trainings: Optional[List[Training]] = None
    certifications: Optional[List[Certification]] = None
    skills: Optional[List[SkillCategory]] = None
    references: Optional[List[Reference]] = None
    career_objective: Optional[str] = None
    career_summary: Optional[str] = None


class ResumeResponse(CamelModel):
    id: int
    user_id: int
    personal_info: dict
    work_experience: list
    education: list
    trainings: list
    certifications: list
    skills: list
    references: list
    career_objective: Optional[str] = None
    career_summary: Optional[str] = None
    created_at: datetime
    updated_at: datetime


# ✅ AI suggestion payloads

class JobDescriptionSuggestionRequest(CamelModel):
    work_exp: dict = Field(..., description="Single work experience entry")


class SkillsSuggestionRequest(CamelModel):
    work_experiences: List[dict] = Field(default_factory=list)


class CareerTextSuggestionRequest(CamelModel):
    work_experiences: List[dict] = Field(default_factory=list)
    education: List[dict] = Field(default_factory=list)
    skills: List[dict] = Field(default_factory=list)
    certifications: List[dict] = Field(default_factory=list)
    trainings: List[dict] = Field(default_factory=list)


class ResumeReviewRequest(CamelModel):
    resume_text: str = Field(..., min_length=20, max_length=20000)
    job_description: str = Field(..., min_length=20, max_length=10000)
