"""
Health check endpoints for deployment monitoring.
"""
import logging
from datetime import datetime

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from crosscareers.core.auth_dependency import get_db

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

VERSION = "0.1.0"


@router.get("/")
def root():
    return {"status": "CrossCareers API running", "version": VERSION}


@router.get("/health")
def health_check(db: Session = Depends(get_db)):
    """
    Returns 200 with ``status`` "healthy" when the database answers, "degraded" otherwise.
    """
    status = "healthy"
    try:
        db.execute(text("SELECT 1"))
        db_status = "connected"
    except Exception as e:
        logger.error(f"Health check database query failed: {e}")
        db_status = "error"
        status = "degraded"

    return {
        "status": status,
        "timestamp": datetime.utcnow().isoformat(),
        "database": db_status,
        "version": VERSION,
    }
