"""
User model: credentials, profile, subscription state and referral points.
"""
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, JSON, String
from crosscareers.db.base import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    role = Column(String, nullable=False, default="user")  # "user" | "admin"
    is_deleted = Column(Boolean, nullable=False, default=False)

    # Profile
    mobile_number = Column(String, nullable=True)
    address = Column(String, nullable=True)
    photo = Column(String, nullable=True)

    # Email verification (OTP stored as sha256)
    is_verified = Column(Boolean, nullable=False, default=False)
    email_otp_hash = Column(String, nullable=True)
    email_otp_expires_at = Column(DateTime, nullable=True)
    email_otp_attempts = Column(Integer, nullable=False, default=0)
    email_otp_last_sent_at = Column(DateTime, nullable=True)

    # Password reset (token stored as sha256)
    password_reset_token = Column(String, nullable=True, index=True)
    password_reset_expires = Column(DateTime, nullable=True)

    # Hashed refresh tokens currently issued
    refresh_tokens = Column(JSON, nullable=False, default=list)

    # Referral
    referral_code = Column(String(5), unique=True, index=True, nullable=False)
    referred_by = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    referral_enabled = Column(Boolean, nullable=False, default=False)
    points = Column(Integer, nullable=False, default=0)

    # Subscription
    subscription_type = Column(String, nullable=False, default="freeTrial")  # "freeTrial" | "premium"
    subscription_plan = Column(String, nullable=True)  # "trial" | "monthly" | "quarterly" | "semiannual" | "yearly"
    subscription_status = Column(String, nullable=False, default="inactive")  # "inactive" | "pending" | "active"
    subscription_expires_at = Column(DateTime, nullable=True)
    free_trial_expires_at = Column(DateTime, nullable=True)

    # Last manual payment claim
    payment_id = Column(String, nullable=True)
    transaction_id = Column(String, nullable=True)
    payment_provider = Column(String, nullable=True)
    payment_number = Column(String, nullable=True)
    amount = Column(Integer, nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"
