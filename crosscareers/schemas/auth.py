"""
Pydantic schemas for user authentication, profile and subscription endpoints.
"""
from typing import Literal, Optional
from pydantic import EmailStr, Field, field_validator

from crosscareers.schemas.common import CamelModel


def _check_password(v: str) -> str:
    if len(v.encode("utf-8")) > 72:
        raise ValueError("Password too long (bcrypt limit 72 bytes)")
    return v


class SignupRequest(CamelModel):
    """Request schema for user signup."""
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6, description="User's password (min 6 characters)")
    referral_code: Optional[str] = Field(None, max_length=5)

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: str) -> str:
        return v.lower()

    @field_validator("password")
    @classmethod
    def validate_password_length(cls, v: str) -> str:
        return _check_password(v)

    @field_validator("referral_code")
    @classmethod
    def normalize_referral_code(cls, v: Optional[str]) -> Optional[str]:
        return v.upper() if v else None

    class Config:
        json_schema_extra = {
            "example": {
                "firstName": "Rahim",
                "lastName": "Uddin",
                "email": "rahim@example.com",
                "password": "SecurePass123",
                "referralCode": "AB12C",
            }
        }


class EmailRequest(CamelModel):
    email: EmailStr

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: str) -> str:
        return v.lower()


class VerifyOtpRequest(EmailRequest):
    otp: str = Field(..., pattern=r"^\d{6}$")


class LoginRequest(CamelModel):
    """Request schema for user and admin login. Presence is checked by the login services."""
    email: Optional[str] = None
    password: Optional[str] = None

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: Optional[str]) -> Optional[str]:
        return v.lower() if v else v


class RefreshTokenRequest(CamelModel):
    refresh_token: str = Field(..., min_length=1)


class ResetPasswordRequest(CamelModel):
    token: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6)

    @field_validator("new_password")
    @classmethod
    def validate_password_length(cls, v: str) -> str:
        return _check_password(v)


class ChangePasswordRequest(CamelModel):
    old_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6)

    @field_validator("new_password")
    @classmethod
    def validate_password_length(cls, v: str) -> str:
        return _check_password(v)


class ProfileUpdateRequest(CamelModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    mobile_number: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = Field(None, max_length=300)
    photo: Optional[str] = Field(None, description="Photo URL")

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: str) -> str:
        return v.lower()


class SubscribeRequest(CamelModel):
    """Manual payment claim reviewed by an admin."""
    subscription_plan: Literal["monthly", "quarterly", "semiannual", "yearly"]
    payment_id: str = Field(..., min_length=1)
    transaction_id: str = Field(..., min_length=1)
    payment_provider: str = Field(..., min_length=1)
    payment_number: str = Field(..., min_length=1)
    amount: int = Field(..., gt=0)


class WithdrawRequest(CamelModel):
    points: int = Field(..., gt=0)
    payment_provider: Literal["bkash", "nagad"]
    payment_number: str = Field(..., min_length=1, max_length=20)
