"""
Admin console: login, dashboard, payment review and withdrawal processing.
"""
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from crosscareers.core.auth_dependency import get_db, require_roles
from crosscareers.db.models.user import User
from crosscareers.schemas.auth import LoginRequest
from crosscareers.services import admin_service, subscription_service, withdrawal_service
from crosscareers.services.auth_service import serialize_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])

require_admin = require_roles("admin")


@router.post("/login")
def admin_login(data: LoginRequest, db: Session = Depends(get_db)):
    admin, token = admin_service.admin_login(db, data.email, data.password)
    return {
        "success": True,
        "message": "Admin login successful",
        "token": token,
        "admin": {
            "id": admin.id,
            "firstName": admin.first_name,
            "lastName": admin.last_name,
            "email": admin.email,
            "role": admin.role,
        },
    }


@router.get("/dashboard")
def dashboard(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    stats = admin_service.dashboard_stats(db)
    stats["users"] = [serialize_user(u) for u in stats["users"]]
    return {"success": True, **stats}


@router.get("/pendingpay")
def pending_payments(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    users = admin_service.pending_payments(db)
    return {"success": True, "count": len(users), "users": [serialize_user(u) for u in users]}


@router.get("/allapprovedpay")
def approved_payments(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    users = admin_service.approved_payments(db)
    return {"success": True, "count": len(users), "users": [serialize_user(u) for u in users]}


@router.patch("/{user_id}/approve-subscription")
def approve_subscription(user_id: int, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    user = admin_service.get_user(db, user_id)
    user = subscription_service.approve_subscription(db, user)
    return {
        "success": True,
        "message": "Subscription approved successfully",
        "user": serialize_user(user),
    }


@router.delete("/users/{user_id}")
def delete_user(user_id: int, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    admin_service.soft_delete_user(db, user_id)
    return {"success": True, "message": "User deleted"}


# ✅ WITHDRAWALS
@router.get("/withdrawals")
def list_withdrawals(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    withdrawals = withdrawal_service.list_all_withdrawals(db)
    return {
        "success": True,
        "withdrawals": [withdrawal_service.serialize_withdrawal(w, include_user=True) for w in withdrawals],
    }


@router.patch("/withdrawals/{withdrawal_id}/approve")
def approve_withdrawal(withdrawal_id: int, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    withdrawal = withdrawal_service.approve_withdrawal(db, withdrawal_id, admin)
    return {
        "success": True,
        "message": "Withdrawal approved",
        "withdrawal": withdrawal_service.serialize_withdrawal(withdrawal),
    }


@router.patch("/withdrawals/{withdrawal_id}/reject")
def reject_withdrawal(withdrawal_id: int, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    withdrawal = withdrawal_service.reject_withdrawal(db, withdrawal_id, admin)
    return {
        "success": True,
        "message": "Withdrawal rejected",
        "withdrawal": withdrawal_service.serialize_withdrawal(withdrawal),
    }
