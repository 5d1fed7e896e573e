import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# ✅ Import All API Routes
from crosscareers.api.routes import (
    admin,
    auth,
    cover_letter,
    documents,
    health,
    interview,
    mock_interview,
    payments,
    presentations,
    qa,
    resume,
    spreadsheets,
    written_test,
)
from crosscareers.core import config
from crosscareers.core.errors import register_exception_handlers
from crosscareers.core.logging_config import setup_logging

setup_logging(config.LOG_LEVEL)
logger = logging.getLogger(__name__)


# ============================================
# ✅ FASTAPI APP INIT
# ============================================

app = FastAPI(title="CrossCareers API", version=health.VERSION)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    allow_headers=["Authorization", "Content-Type"],
)

register_exception_handlers(app)


# ============================================
# ✅ REGISTER ALL ROUTERS
# ============================================

app.include_router(health.router)
app.include_router(auth.router)
app.include_router(admin.router)
app.include_router(payments.router)
app.include_router(resume.router)
app.include_router(cover_letter.router)
app.include_router(presentations.router)
app.include_router(documents.router)
app.include_router(spreadsheets.router)
app.include_router(qa.router)
app.include_router(interview.router)
app.include_router(mock_interview.router)
app.include_router(written_test.router)


# ============================================
# ✅ STARTUP
# ============================================

@app.on_event("startup")
def on_startup():
    if config.RUN_MIGRATIONS:
        from crosscareers.db.migrate import run_migrations
        run_migrations()
    else:
        from crosscareers.db.init_db import init_db
        init_db()
    logger.info(f"CrossCareers API started: environment={config.ENVIRONMENT}")
