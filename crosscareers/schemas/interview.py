from typing import Any, List, Literal, Optional
from pydantic import Field

from crosscareers.schemas.common import CamelModel

QuestionType = Literal["technical", "scenario"]


class InterviewAnswerRequest(CamelModel):
    session_id: int
    question: str = Field(..., min_length=1)
    question_type: QuestionType = "technical"
    transcript: str = Field("", max_length=20000)
    time_spent: int = Field(0, ge=0)


class ProgressItem(CamelModel):
    question: str = Field(..., min_length=1)
    type: QuestionType = "technical"
    transcript: str = Field("", max_length=20000)
    time_spent: int = Field(0, ge=0)


class InterviewCompleteRequest(CamelModel):
    session_id: Optional[int] = None
    progress: List[ProgressItem] = Field(..., min_length=1)


class QuestionAnalysis(CamelModel):
    question: str
    score: int = 0
    feedback: str = ""
    suggested_answer: Optional[str] = None
    user_answer: str = ""


class InterviewAnalysis(CamelModel):
    question_analysis: List[QuestionAnalysis] = Field(default_factory=list)
    overall_score: int = 0
    improvement_suggestions: List[str] = Field(default_factory=list)


class DownloadResultsRequest(CamelModel):
    analysis: InterviewAnalysis
    questions: List[Any] = Field(default_factory=list)


class MockQuestionsRequest(CamelModel):
    text: Optional[str] = Field(None, max_length=20000)


class MockAnswer(CamelModel):
    question: str = Field("", max_length=2000)
    answer: str = Field("", max_length=20000)


class MockAnalysisRequest(CamelModel):
    answers: Optional[List[MockAnswer]] = Field(None, max_length=20)


class SaveHistoryRequest(CamelModel):
    session_id: int
