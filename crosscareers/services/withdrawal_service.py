"""
Referral point withdrawals: user requests and admin processing.
"""
import logging
from datetime import datetime

from sqlalchemy.orm import Session

from crosscareers.core.errors import BadRequest, Conflict, NotFound
from crosscareers.db.models.user import User
from crosscareers.db.models.withdrawal import (
    STATUS_APPROVED,
    STATUS_PENDING,
    STATUS_REJECTED,
    Withdrawal,
)

logger = logging.getLogger(__name__)


def serialize_withdrawal(withdrawal: Withdrawal, include_user: bool = False) -> dict:
    data = {
        "id": withdrawal.id,
        "userId": withdrawal.user_id,
        "points": withdrawal.points,
        "paymentProvider": withdrawal.payment_provider,
        "paymentNumber": withdrawal.payment_number,
        "status": withdrawal.status,
        "requestedAt": withdrawal.requested_at,
        "processedAt": withdrawal.processed_at,
        "processedBy": withdrawal.processed_by,
    }
    if include_user and withdrawal.user is not None:
        data["user"] = {
            "id": withdrawal.user.id,
            "firstName": withdrawal.user.first_name,
            "lastName": withdrawal.user.last_name,
            "email": withdrawal.user.email,
            "points": withdrawal.user.points,
        }
    return data


def request_withdrawal(db: Session, user: User, points: int, payment_provider: str, payment_number: str) -> Withdrawal:
    if points <= 0:
        raise BadRequest("Points must be greater than zero")
    if points > (user.points or 0):
        raise BadRequest("Insufficient points")

    withdrawal = Withdrawal(
        user_id=user.id,
        points=points,
        payment_provider=payment_provider,
        payment_number=payment_number,
        status=STATUS_PENDING,
    )
    db.add(withdrawal)
    db.commit()
    db.refresh(withdrawal)
    logger.info(f"Withdrawal requested: withdrawal_id={withdrawal.id}, user_id={user.id}, points={points}")
    return withdrawal


def list_user_withdrawals(db: Session, user: User) -> list[Withdrawal]:
    return (
        db.query(Withdrawal)
        .filter(Withdrawal.user_id == user.id)
        .order_by(Withdrawal.requested_at.desc(), Withdrawal.id.desc())
        .all()
    )


def list_all_withdrawals(db: Session) -> list[Withdrawal]:
    return db.query(Withdrawal).order_by(Withdrawal.requested_at.desc(), Withdrawal.id.desc()).all()


def _get_pending(db: Session, withdrawal_id: int) -> Withdrawal:
    withdrawal = db.query(Withdrawal).filter(Withdrawal.id == withdrawal_id).first()
    if not withdrawal:
        raise NotFound("Withdrawal not found")
    if withdrawal.status != STATUS_PENDING:
        raise Conflict("Already processed")
    return withdrawal


def approve_withdrawal(db: Session, withdrawal_id: int, admin: User) -> Withdrawal:
    """Deduct the points from the user and mark the request approved."""
    withdrawal = _get_pending(db, withdrawal_id)
    user = db.query(User).filter(User.id == withdrawal.user_id).first()
    if not user:
        raise NotFound("User not found")
    if (user.points or 0) < withdrawal.points:
        raise BadRequest("User has insufficient points")

    user.points -= withdrawal.points
    withdrawal.status = STATUS_APPROVED
    withdrawal.processed_at = datetime.utcnow()
    withdrawal.processed_by = admin.id
    db.commit()
    db.refresh(withdrawal)
    logger.info(f"Withdrawal approved: withdrawal_id={withdrawal.id}, admin_id={admin.id}")
    return withdrawal


def reject_withdrawal(db: Session, withdrawal_id: int, admin: User) -> Withdrawal:
    withdrawal = _get_pending(db, withdrawal_id)
    withdrawal.status = STATUS_REJECTED
    withdrawal.processed_at = datetime.utcnow()
    withdrawal.processed_by = admin.id
    db.commit()
    db.refresh(withdrawal)
    logger.info(f"Withdrawal rejected: withdrawal_id={withdrawal.id}, admin_id={admin.id}")
    return withdrawal
