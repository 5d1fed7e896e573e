from pydantic import Field

from crosscareers.schemas.common import CamelModel


class CoverLetterRequest(CamelModel):
    job_description: str = Field(..., min_length=1)
    resume_text: str = Field(..., min_length=1)
    style: str = "European"


class CoverLetterDocxRequest(CamelModel):
    content: str = Field(..., min_length=1)
