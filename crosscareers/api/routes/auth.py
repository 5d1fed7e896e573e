"""
User authentication, profile, manual subscription and withdrawal endpoints.
"""
import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from crosscareers.core.auth_dependency import get_db, require_full_access, require_roles
from crosscareers.core.rate_limit import rate_limiter
from crosscareers.db.models.user import User
from crosscareers.schemas.auth import (
    ChangePasswordRequest,
    EmailRequest,
    LoginRequest,
    ProfileUpdateRequest,
    RefreshTokenRequest,
    ResetPasswordRequest,
    SignupRequest,
    SubscribeRequest,
    VerifyOtpRequest,
    WithdrawRequest,
)
from crosscareers.services import auth_service, subscription_service, withdrawal_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])

require_user = require_roles("user")


# ✅ SIGNUP + EMAIL VERIFICATION
@router.post(
    "/signup",
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(rate_limiter("signup", max_requests=20, window_seconds=60))],
)
def signup(data: SignupRequest, db: Session = Depends(get_db)):
    user = auth_service.signup(db, data)
    return {
        "success": True,
        "message": "Account created. Check your email for the verification code.",
        "user": auth_service.serialize_user(user),
    }


@router.post("/verify-email-otp")
def verify_email_otp(data: VerifyOtpRequest, db: Session = Depends(get_db)):
    auth_service.verify_email_otp(db, data.email, data.otp)
    return {"success": True, "message": "Email verified successfully"}


@router.post("/resend-email-otp")
def resend_email_otp(data: EmailRequest, db: Session = Depends(get_db)):
    auth_service.resend_email_otp(db, data.email)
    return {"success": True, "message": "A new verification code has been sent"}


# ✅ LOGIN + TOKENS
@router.post(
    "/login",
    dependencies=[Depends(rate_limiter("login", max_requests=20, window_seconds=60))],
)
def login(data: LoginRequest, db: Session = Depends(get_db)):
    user, access_token, refresh_token = auth_service.login(db, data.email, data.password)
    return {
        "success": True,
        "message": "Login successful",
        "token": access_token,
        "refreshToken": refresh_token,
        "user": auth_service.serialize_user(user),
    }


@router.post("/refresh-token")
def refresh_token(data: RefreshTokenRequest, db: Session = Depends(get_db)):
    token = auth_service.refresh_access_token(db, data.refresh_token)
    return {"success": True, "token": token}


@router.post("/logout")
def logout(
    data: RefreshTokenRequest,
    user: User = Depends(require_roles("user", "admin")),
    db: Session = Depends(get_db),
):
    auth_service.logout(db, user, data.refresh_token)
    return {"success": True, "message": "Logged out"}


# ✅ PASSWORD RECOVERY
@router.post(
    "/forgot-password",
    dependencies=[Depends(rate_limiter("forgot-password", max_requests=5, window_seconds=300))],
)
def forgot_password(data: EmailRequest, db: Session = Depends(get_db)):
    auth_service.forgot_password(db, data.email)
    return {"success": True, "message": "Password reset link sent to your email"}


@router.post("/reset-password")
def reset_password(data: ResetPasswordRequest, db: Session = Depends(get_db)):
    auth_service.reset_password(db, data.token, data.new_password)
    return {"success": True, "message": "Password has been reset"}


@router.patch("/change-password")
def change_password(
    data: ChangePasswordRequest,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    token = auth_service.change_password(db, user, data.old_password, data.new_password)
    return {"success": True, "message": "Password changed successfully", "token": token}


# ✅ PROFILE
@router.get("/get-profile")
def get_profile(user: User = Depends(require_user), db: Session = Depends(get_db)):
    return {"success": True, "user": auth_service.get_profile(db, user)}


@router.patch("/profile")
def update_profile(
    data: ProfileUpdateRequest,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    user = auth_service.update_profile(db, user, data)
    return {"success": True, "message": "Profile updated", "user": auth_service.serialize_user(user)}


# ✅ MANUAL SUBSCRIPTION CLAIM
@router.post("/subscribe")
def subscribe(
    data: SubscribeRequest,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    user = subscription_service.submit_manual_subscription(db, user, data)
    return {
        "success": True,
        "message": "Subscription request submitted successfully",
        "user": {
            "id": user.id,
            "subscriptionPlan": user.subscription_plan,
            "subscriptionStatus": user.subscription_status,
            "subscriptionExpiresAt": user.subscription_expires_at,
        },
    }


# ✅ REFERRAL POINT WITHDRAWALS
@router.post("/withdraw", status_code=status.HTTP_201_CREATED, dependencies=[Depends(require_user)])
def request_withdrawal(
    data: WithdrawRequest,
    user: User = Depends(require_full_access),
    db: Session = Depends(get_db),
):
    withdrawal = withdrawal_service.request_withdrawal(
        db, user, data.points, data.payment_provider, data.payment_number
    )
    return {
        "success": True,
        "message": "Withdrawal request submitted",
        "withdrawal": withdrawal_service.serialize_withdrawal(withdrawal),
    }


@router.get("/withdraw", dependencies=[Depends(require_user)])
def my_withdrawals(user: User = Depends(require_full_access), db: Session = Depends(get_db)):
    withdrawals = withdrawal_service.list_user_withdrawals(db, user)
    return {
        "success": True,
        "withdrawals": [withdrawal_service.serialize_withdrawal(w) for w in withdrawals],
    }
