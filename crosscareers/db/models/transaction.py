"""
bKash payment transaction.
"""
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, JSON, String
from crosscareers.db.base import Base

STATUS_CREATED = "created"
STATUS_SUCCESS = "success"
STATUS_FAILED = "failed"


class Transaction(Base):
    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    payment_id = Column(String, unique=True, index=True, nullable=False)
    trx_id = Column(String, nullable=True)
    invoice_number = Column(String, nullable=False)
    plan = Column(String, nullable=False)
    amount = Column(Integer, nullable=False)
    currency = Column(String, nullable=False, default="BDT")

    status = Column(String, nullable=False, default=STATUS_CREATED, index=True)
    executed_at = Column(DateTime, nullable=True)
    raw_response = Column(JSON, nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<Transaction(id={self.id}, payment_id='{self.payment_id}', status='{self.status}')>"
