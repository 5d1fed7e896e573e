"""
AI-designed Excel workbook and the audit trail of its generation.
"""
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, JSON, LargeBinary, String, Text
from sqlalchemy.orm import deferred
from crosscareers.db.base import Base

STATUS_PROCESSING = "processing"
STATUS_COMPLETED = "completed"
STATUS_FAILED = "failed"


class SpreadsheetGeneration(Base):
    __tablename__ = "spreadsheet_generations"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    input_preview = Column(Text, nullable=True)  # first 1000 chars of the pasted input
    format_instructions = Column(Text, nullable=False)
    file_name = Column(String, nullable=True)
    file_type = Column(String, nullable=True)
    file_size = Column(Integer, nullable=True)

    status = Column(String, nullable=False, default=STATUS_PROCESSING, index=True)
    description = Column(Text, nullable=True)
    workbook = Column(JSON, nullable=True)  # {sheets: [...], description}
    xlsx_data = deferred(Column(LargeBinary, nullable=True))
    xlsx_size = Column(Integer, nullable=False, default=0)
    error = Column(Text, nullable=True)
    processing_time_ms = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        Index("idx_spreadsheet_user_created", "user_id", "created_at"),
    )

    def __repr__(self):
        return f"<SpreadsheetGeneration(id={self.id}, status='{self.status}')>"
