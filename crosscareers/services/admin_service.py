"""
Admin console queries and actions.
"""
import logging
from datetime import datetime, timedelta

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from crosscareers.core import config
from crosscareers.core.errors import NotFound, Unauthorized
from crosscareers.core.gating import (
    STATUS_ACTIVE,
    STATUS_PENDING,
    SUBSCRIPTION_FREE_TRIAL,
    SUBSCRIPTION_PREMIUM,
)
from crosscareers.core.security import create_access_token, verify_password
from crosscareers.db.models.user import User

logger = logging.getLogger(__name__)


def admin_login(db: Session, email: str, password: str) -> tuple[User, str]:
    """All failure modes collapse into the same 401 to avoid account probing."""
    if not email or not password:
        raise Unauthorized("Invalid email or password")
    admin = db.query(User).filter(User.email == email.lower()).first()
    if (
        not admin
        or admin.role != "admin"
        or admin.is_deleted
        or not verify_password(password, admin.password_hash)
    ):
        raise Unauthorized("Invalid email or password")

    token = create_access_token(
        {"id": admin.id, "role": admin.role},
        expires_delta=timedelta(days=config.ADMIN_TOKEN_EXPIRE_DAYS),
    )
    logger.info(f"Admin logged in: admin_id={admin.id}")
    return admin, token


def dashboard_stats(db: Session) -> dict:
    now = datetime.utcnow()
    users = db.query(User).filter(User.role == "user", User.is_deleted.is_(False))

    total_users = users.count()
    free_trial_users = users.filter(User.subscription_type == SUBSCRIPTION_FREE_TRIAL).count()
    premium_users = users.filter(User.subscription_type == SUBSCRIPTION_PREMIUM).count()
    active_users = users.filter(
        or_(
            and_(
                User.subscription_type == SUBSCRIPTION_FREE_TRIAL,
                User.free_trial_expires_at > now,
            ),
            and_(
                User.subscription_type == SUBSCRIPTION_PREMIUM,
                User.subscription_status == STATUS_ACTIVE,
                User.subscription_expires_at > now,
            ),
        )
    ).count()

    return {
        "totalUsers": total_users,
        "freeTrialUsers": free_trial_users,
        "premiumUsers": premium_users,
        "activeUsers": active_users,
        "users": users.order_by(User.created_at.desc()).all(),
    }


def users_by_subscription_status(db: Session, status: str) -> list[User]:
    return (
        db.query(User)
        .filter(User.subscription_status == status, User.is_deleted.is_(False))
        .order_by(User.updated_at.desc())
        .all()
    )


def pending_payments(db: Session) -> list[User]:
    return users_by_subscription_status(db, STATUS_PENDING)


def approved_payments(db: Session) -> list[User]:
    return users_by_subscription_status(db, STATUS_ACTIVE)


def get_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id, User.is_deleted.is_(False)).first()
    if not user:
        raise NotFound("User not found")
    return user


def soft_delete_user(db: Session, user_id: int) -> User:
    user = get_user(db, user_id)
    user.is_deleted = True
    user.refresh_tokens = []
    db.commit()
    logger.info(f"User soft-deleted: user_id={user.id}")
    return user
