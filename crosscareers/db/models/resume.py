"""
Resume model. Sections are stored as JSON lists mirroring the builder's form.
"""
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, JSON, Text
from sqlalchemy.orm import relationship
from crosscareers.db.base import Base


class Resume(Base):
    __tablename__ = "resumes"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    personal_info = Column(JSON, nullable=False)
    career_objective = Column(Text, nullable=True)
    career_summary = Column(Text, nullable=True)
    work_experience = Column(JSON, nullable=False, default=list)
    education = Column(JSON, nullable=False, default=list)
    trainings = Column(JSON, nullable=False, default=list)
    certifications = Column(JSON, nullable=False, default=list)
    skills = Column(JSON, nullable=False, default=list)  # [{category, items: [{name, level}]}]
    references = Column(JSON, nullable=False, default=list)

    is_deleted = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", backref="resumes")

    __table_args__ = (
        Index("idx_resume_user_deleted", "user_id", "is_deleted"),
    )

    def __repr__(self):
        return f"<Resume(id={self.id}, user_id={self.user_id})>"
