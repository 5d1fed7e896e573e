"""
User account flows: signup with email OTP, login, tokens, password recovery and profile.
"""
import logging
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from crosscareers.core import config
from crosscareers.core.errors import BadRequest, Conflict, Forbidden, NotFound, TooManyRequests, Unauthorized
from crosscareers.core.gating import STATUS_INACTIVE, SUBSCRIPTION_FREE_TRIAL, get_access_level
from crosscareers.core.security import (
    create_access_token,
    create_refresh_token,
    decode_token,
    generate_otp,
    generate_referral_code,
    generate_reset_token,
    hash_password,
    hash_token,
    verify_password,
)
from crosscareers.db.models.user import User
from crosscareers.services import email_service

logger = logging.getLogger(__name__)


def serialize_user(user: User) -> dict:
    """Public view of a user. Never includes secrets."""
    return {
        "id": user.id,
        "firstName": user.first_name,
        "lastName": user.last_name,
        "email": user.email,
        "role": user.role,
        "isVerified": user.is_verified,
        "mobileNumber": user.mobile_number,
        "address": user.address,
        "photo": user.photo,
        "referralCode": user.referral_code,
        "referredBy": user.referred_by,
        "referralEnabled": user.referral_enabled,
        "points": user.points,
        "subscriptionType": user.subscription_type,
        "subscriptionPlan": user.subscription_plan,
        "subscriptionStatus": user.subscription_status,
        "subscriptionExpiresAt": user.subscription_expires_at,
        "freeTrialExpiresAt": user.free_trial_expires_at,
        "accessLevel": get_access_level(user),
        "createdAt": user.created_at,
    }


def issue_access_token(user: User, expires_days: int = config.ACCESS_TOKEN_EXPIRE_DAYS) -> str:
    return create_access_token(
        {"id": user.id, "role": user.role, "accessLevel": get_access_level(user)},
        expires_delta=timedelta(days=expires_days),
    )


def get_user_by_email(db: Session, email: str) -> User:
    return db.query(User).filter(User.email == email.lower(), User.is_deleted.is_(False)).first()


def unique_referral_code(db: Session) -> str:
    code = generate_referral_code()
    while db.query(User.id).filter(User.referral_code == code).first():
        code = generate_referral_code()
    return code


def _issue_otp(user: User, now: datetime) -> str:
    otp = generate_otp()
    user.email_otp_hash = hash_token(otp)
    user.email_otp_expires_at = now + timedelta(minutes=config.OTP_EXPIRE_MINUTES)
    user.email_otp_attempts = 0
    user.email_otp_last_sent_at = now
    return otp


def signup(db: Session, data) -> User:
    """Create an unverified user on a free trial and email them a verification code."""
    if db.query(User.id).filter(User.email == data.email).first():
        raise Conflict("Email already in use")

    referrer = None
    if data.referral_code:
        referrer = db.query(User).filter(
            User.referral_code == data.referral_code,
            User.is_deleted.is_(False),
        ).first()
        if not referrer:
            raise BadRequest("Invalid referral code")

    now = datetime.utcnow()
    user = User(
        first_name=data.first_name,
        last_name=data.last_name,
        email=data.email,
        password_hash=hash_password(data.password),
        role="user",
        referral_code=unique_referral_code(db),
        referred_by=referrer.id if referrer else None,
        subscription_type=SUBSCRIPTION_FREE_TRIAL,
        subscription_plan="trial",
        subscription_status=STATUS_INACTIVE,
        free_trial_expires_at=now + timedelta(days=config.FREE_TRIAL_DAYS),
        refresh_tokens=[],
    )
    otp = _issue_otp(user, now)
    db.add(user)
    db.commit()
    db.refresh(user)

    email_service.send_otp_email(user.email, user.first_name, otp)
    logger.info(f"User signed up: user_id={user.id}, referred_by={user.referred_by}")
    return user


def verify_email_otp(db: Session, email: str, otp: str) -> User:
    user = get_user_by_email(db, email)
    if not user:
        raise NotFound("User not found")
    if user.is_verified:
        raise BadRequest("Email already verified")
    if (user.email_otp_attempts or 0) >= config.OTP_MAX_ATTEMPTS:
        raise TooManyRequests("Too many attempts. Please request a new code.")
    if not user.email_otp_hash or not user.email_otp_expires_at or user.email_otp_expires_at < datetime.utcnow():
        raise BadRequest("OTP expired. Please request a new code.")

    if hash_token(otp) != user.email_otp_hash:
        user.email_otp_attempts = (user.email_otp_attempts or 0) + 1
        db.commit()
        raise BadRequest("Invalid OTP")

    user.is_verified = True
    user.email_otp_hash = None
    user.email_otp_expires_at = None
    user.email_otp_attempts = 0
    db.commit()
    logger.info(f"Email verified: user_id={user.id}")
    return user


def resend_email_otp(db: Session, email: str) -> None:
    user = get_user_by_email(db, email)
    if not user:
        raise NotFound("User not found")
    if user.is_verified:
        raise BadRequest("Email already verified")

    now = datetime.utcnow()
    if user.email_otp_last_sent_at:
        elapsed = (now - user.email_otp_last_sent_at).total_seconds()
        if elapsed < config.OTP_RESEND_COOLDOWN_SECONDS:
            wait = int(config.OTP_RESEND_COOLDOWN_SECONDS - elapsed) + 1
            raise TooManyRequests(f"Please wait {wait} seconds before requesting a new code")

    otp = _issue_otp(user, now)
    db.commit()
    email_service.send_otp_email(user.email, user.first_name, otp)


def login(db: Session, email: str, password: str) -> tuple[User, str, str]:
    """
    Authenticate a user.

    Expired subscriptions still log in; they only lose FULL access.
    Returns (user, access_token, refresh_token).
    """
    if not email or not password:
        raise BadRequest("Email and password are required")
    user = get_user_by_email(db, email)
    if not user or not verify_password(password, user.password_hash):
        raise Unauthorized("Invalid email or password")
    if not user.is_verified:
        raise Forbidden("Please verify your email before logging in")

    access_token = issue_access_token(user)
    refresh_token = create_refresh_token(user.id)
    user.refresh_tokens = list(user.refresh_tokens or []) + [hash_token(refresh_token)]
    db.commit()
    logger.info(f"User logged in: user_id={user.id}")
    return user, access_token, refresh_token


def refresh_access_token(db: Session, refresh_token: str) -> str:
    payload = decode_token(refresh_token)
    if payload.get("type") != "refresh":
        raise Unauthorized("Invalid refresh token")
    user = db.query(User).filter(User.id == payload.get("id")).first()
    if not user or user.is_deleted or hash_token(refresh_token) not in (user.refresh_tokens or []):
        raise Unauthorized("Invalid refresh token")
    return create_access_token(
        {"id": user.id, "role": user.role, "accessLevel": get_access_level(user)},
        expires_delta=timedelta(hours=1),
    )


def logout(db: Session, user: User, refresh_token: str) -> None:
    hashed = hash_token(refresh_token)
    user.refresh_tokens = [t for t in (user.refresh_tokens or []) if t != hashed]
    db.commit()


def forgot_password(db: Session, email: str) -> None:
    user = get_user_by_email(db, email)
    if not user:
        raise NotFound("Email not found")

    reset_token = generate_reset_token()
    user.password_reset_token = hash_token(reset_token)
    user.password_reset_expires = datetime.utcnow() + timedelta(minutes=config.RESET_TOKEN_EXPIRE_MINUTES)
    db.commit()

    reset_url = f"{config.CLIENT_URL}/reset-password/{reset_token}"
    email_service.send_password_reset_email(user.email, user.first_name, reset_url)
    logger.info(f"Password reset requested: user_id={user.id}")


def reset_password(db: Session, token: str, new_password: str) -> None:
    user = db.query(User).filter(
        User.password_reset_token == hash_token(token),
        User.password_reset_expires > datetime.utcnow(),
    ).first()
    if not user:
        raise BadRequest("Token is invalid or has expired")

    user.password_hash = hash_password(new_password)
    user.password_reset_token = None
    user.password_reset_expires = None
    user.refresh_tokens = []
    db.commit()

    email_service.send_password_changed_email(user.email, user.first_name)
    logger.info(f"Password reset: user_id={user.id}")


def change_password(db: Session, user: User, old_password: str, new_password: str) -> str:
    if not verify_password(old_password, user.password_hash):
        raise BadRequest("Old password is incorrect")
    user.password_hash = hash_password(new_password)
    db.commit()
    return issue_access_token(user)


def get_profile(db: Session, user: User) -> dict:
    profile = serialize_user(user)
    profile["totalReferrals"] = db.query(User).filter(User.referred_by == user.id).count()
    return profile


def update_profile(db: Session, user: User, data) -> User:
    if data.email != user.email:
        taken = db.query(User.id).filter(User.email == data.email, User.id != user.id).first()
        if taken:
            raise Conflict("Email already in use")

    user.first_name = data.first_name
    user.last_name = data.last_name
    user.email = data.email
    user.mobile_number = data.mobile_number
    user.address = data.address
    user.photo = data.photo
    db.commit()
    db.refresh(user)
    return user
