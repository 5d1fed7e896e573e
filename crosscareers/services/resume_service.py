"""
Resume CRUD scoped to the owning user.

Soft-deleted resumes are invisible to every read.
"""
import logging
from datetime import date, datetime
from typing import Optional

from sqlalchemy.orm import Session

from crosscareers.core.errors import BadRequest, NotFound
from crosscareers.db.models.resume import Resume
from crosscareers.db.models.user import User

logger = logging.getLogger(__name__)

DATED_SECTIONS = {
    "work_experience": "work experience",
    "education": "education",
    "trainings": "training",
}

# Sections whose "add" endpoint inserts at the front rather than appending
PREPEND_SECTIONS = {"work_experience", "education"}


def dump(model) -> dict:
    return model.model_dump(mode="json", by_alias=True, exclude_none=True)


def _parse_date(value) -> Optional[date]:
    if not value:
        return None
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def validate_date_ranges(section: str, entries: list) -> None:
    """Every dated entry must start on or before it ends."""
    label = DATED_SECTIONS[section]
    for entry in entries or []:
        start = _parse_date(entry.get("from"))
        end = _parse_date(entry.get("to"))
        if start and end and start > end:
            raise BadRequest(f"From date must be before To date in {label}")


def _validate_all(resume: Resume) -> None:
    for section in DATED_SECTIONS:
        validate_date_ranges(section, getattr(resume, section))


def owned_resumes(db: Session, user: User):
    return db.query(Resume).filter(Resume.user_id == user.id, Resume.is_deleted.is_(False))


def get_resume(db: Session, user: User, resume_id: int) -> Resume:
    resume = owned_resumes(db, user).filter(Resume.id == resume_id).first()
    if not resume:
        raise NotFound("Resume not found")
    return resume


def list_resumes(db: Session, user: User) -> list[Resume]:
    return owned_resumes(db, user).order_by(Resume.created_at.desc(), Resume.id.desc()).all()


def create_resume(db: Session, user: User, data) -> Resume:
    resume = Resume(
        user_id=user.id,
        personal_info=dump(data.personal_info),
        work_experience=[dump(e) for e in data.work_experience],
        education=[dump(e) for e in data.education],
        trainings=[dump(e) for e in data.trainings],
        certifications=[dump(e) for e in data.certifications],
        skills=[dump(e) for e in data.skills],
        references=[dump(e) for e in data.references],
        career_objective=data.career_objective,
        career_summary=data.career_summary,
    )
    _validate_all(resume)
    db.add(resume)
    db.commit()
    db.refresh(resume)
    logger.info(f"Resume created: resume_id={resume.id}, user_id={user.id}")
    return resume


def update_resume(db: Session, user: User, resume_id: int, data) -> Resume:
    resume = get_resume(db, user, resume_id)
    for field in data.model_fields_set:
        value = getattr(data, field)
        if value is None:
            continue
        if isinstance(value, list):
            value = [dump(item) for item in value]
        elif hasattr(value, "model_dump"):
            value = dump(value)
        setattr(resume, field, value)
    _validate_all(resume)
    resume.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(resume)
    return resume


def delete_resume(db: Session, user: User, resume_id: int) -> None:
    resume = get_resume(db, user, resume_id)
    resume.is_deleted = True
    db.commit()
    logger.info(f"Resume soft-deleted: resume_id={resume.id}, user_id={user.id}")


def add_entry(db: Session, user: User, resume_id: int, section: str, entry) -> Resume:
    resume = get_resume(db, user, resume_id)
    item = dump(entry)
    if section in DATED_SECTIONS:
        validate_date_ranges(section, [item])
    current = list(getattr(resume, section) or [])
    if section in PREPEND_SECTIONS:
        current.insert(0, item)
    else:
        current.append(item)
    setattr(resume, section, current)
    db.commit()
    db.refresh(resume)
    return resume


def remove_entry(db: Session, user: User, resume_id: int, section: str, index: int) -> Resume:
    resume = get_resume(db, user, resume_id)
    current = list(getattr(resume, section) or [])
    if index < 0 or index >= len(current):
        raise BadRequest("Invalid index")
    current.pop(index)
    setattr(resume, section, current)
    db.commit()
    db.refresh(resume)
    return resume
