from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, JSON, String, Text
from crosscareers.db.base import Base


class GeneratedContent(Base):
    """AI-structured document generated from text or an uploaded file."""
    __tablename__ = "generated_contents"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    document_type = Column(String, nullable=False, default="general")
    style = Column(String, nullable=True)
    title = Column(String, nullable=False)
    source_preview = Column(Text, nullable=True)
    content = Column(JSON, nullable=False)  # {title, subtitle, sections, metadata}
    word_count = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)

    def __repr__(self):
        return f"<GeneratedContent(id={self.id}, type='{self.document_type}')>"
