"""
Generated presentation with its pptx and pdf renderings.
"""
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, JSON, LargeBinary, String, Text
from sqlalchemy.orm import deferred
from crosscareers.db.base import Base


class Presentation(Base):
    __tablename__ = "presentations"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    title = Column(String, nullable=False)
    topic = Column(String, nullable=True)
    content_preview = Column(Text, nullable=True)  # first 1000 chars of the source
    source_type = Column(String, nullable=False, default="text")  # "text" | "pdf" | "docx" | "txt"
    file_name = Column(String, nullable=True)

    slide_count = Column(Integer, nullable=False)
    design = Column(String, nullable=False, default="modern")
    animation = Column(Boolean, nullable=False, default=False)
    include_graphics = Column(Boolean, nullable=False, default=False)
    slides = Column(JSON, nullable=False, default=list)

    # Blobs are deferred so listings never load them
    pptx_data = deferred(Column(LargeBinary, nullable=False))
    pdf_data = deferred(Column(LargeBinary, nullable=False))
    pptx_size = Column(Integer, nullable=False, default=0)
    pdf_size = Column(Integer, nullable=False, default=0)
    processing_time_ms = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        Index("idx_presentation_user_created", "user_id", "created_at"),
    )

    def __repr__(self):
        return f"<Presentation(id={self.id}, title='{self.title}', slides={self.slide_count})>"
