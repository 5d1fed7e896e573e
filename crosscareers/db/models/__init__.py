"""
Database models module.

Imports every model so it is registered on Base.metadata before table creation
and Alembic autogenerate.
"""
from crosscareers.db.models.user import User
from crosscareers.db.models.resume import Resume
from crosscareers.db.models.test_session import TestSession
from crosscareers.db.models.transaction import Transaction
from crosscareers.db.models.withdrawal import Withdrawal
from crosscareers.db.models.presentation import Presentation
from crosscareers.db.models.generated_content import GeneratedContent
from crosscareers.db.models.interview_session import InterviewSession
from crosscareers.db.models.spreadsheet import SpreadsheetGeneration

__all__ = [
    "User",
    "Resume",
    "TestSession",
    "Transaction",
    "Withdrawal",
    "Presentation",
    "GeneratedContent",
    "InterviewSession",
    "SpreadsheetGeneration",
]
