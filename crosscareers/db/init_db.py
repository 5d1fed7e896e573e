import logging

from crosscareers.db.session import engine
from crosscareers.db.base import Base
import crosscareers.db.models  # noqa: F401  registers every table on Base.metadata

logger = logging.getLogger(__name__)


def init_db(bind=None):
    """Create any missing tables. Used when migrations are disabled."""
    Base.metadata.create_all(bind=bind or engine)
    logger.info("Database tables ensured")
