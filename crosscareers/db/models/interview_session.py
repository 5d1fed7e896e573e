"""
Interview coach practice session.
"""
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, JSON, String, Text
from crosscareers.db.base import Base


class InterviewSession(Base):
    __tablename__ = "interview_sessions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    practice_mode = Column(String, nullable=False, default="full")  # "full" | "technical" | "scenario"
    job_description = Column(Text, nullable=True)
    questions = Column(JSON, nullable=False, default=list)  # [{question, type}]
    answers = Column(JSON, nullable=False, default=list)  # [{question, type, transcript, timeSpent}]
    analysis = Column(JSON, nullable=True)
    overall_score = Column(Integer, nullable=True)
    status = Column(String, nullable=False, default="in_progress")  # "in_progress" | "completed"

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    completed_at = Column(DateTime, nullable=True)

    def __repr__(self):
        return f"<InterviewSession(id={self.id}, mode='{self.practice_mode}', status='{self.status}')>"
