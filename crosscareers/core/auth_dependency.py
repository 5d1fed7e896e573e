from typing import Optional

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session
from crosscareers.core.errors import Forbidden, Unauthorized
from crosscareers.core.gating import FULL, get_access_level
from crosscareers.core.security import decode_token
from crosscareers.db.session import SessionLocal
from crosscareers.db.models.user import User

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)


def get_db():
    """Database session dependency."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> User:
    """
    Resolve the bearer token to a live User.

    The user's current access level (FULL/LIMITED) is attached as ``access_level``.
    """
    if not token:
        raise Unauthorized("Not authorized, no token")

    payload = decode_token(token)
    if payload.get("type") == "refresh":
        raise Unauthorized("Invalid token")
    user_id = payload.get("id")
    if user_id is None:
        raise Unauthorized("Invalid token")

    user = db.query(User).filter(User.id == user_id).first()
    if not user or user.is_deleted:
        raise Unauthorized("User not found")

    user.access_level = get_access_level(user)
    return user


def require_roles(*roles: str):
    """Dependency factory: 403 unless the caller holds one of ``roles``."""
    def checker(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            raise Forbidden(f"Role '{user.role}' is not allowed to access this resource")
        return user
    return checker


def require_full_access(user: User = Depends(require_roles("user", "admin"))) -> User:
    if user.access_level != FULL:
        raise Forbidden("Premium subscription required")
    return user
