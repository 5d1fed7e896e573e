"""
Subscription state changes: manual claims, admin approval, gateway activation and
referral commission.
"""
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from crosscareers.core.errors import BadRequest, Conflict
from crosscareers.core.gating import (
    STATUS_ACTIVE,
    STATUS_PENDING,
    SUBSCRIPTION_PREMIUM,
)
from crosscareers.core.plans import (
    PLAN_DAYS,
    approval_expiry,
    get_manual_plan_amount,
    get_plan_amount,
    plan_expiry,
    referral_commission,
)
from crosscareers.db.models.user import User

logger = logging.getLogger(__name__)


def reward_referrer(db: Session, user: User, plan: str) -> int:
    """
    Credit the referrer of ``user`` with the commission for ``plan``.

    Only referrers who have themselves been approved (referral_enabled) earn points.
    Returns the points credited.
    """
    if not user.referred_by:
        return 0
    referrer = db.query(User).filter(User.id == user.referred_by).first()
    if not referrer or referrer.is_deleted or not referrer.referral_enabled:
        return 0
    points = referral_commission(plan)
    referrer.points = (referrer.points or 0) + points
    logger.info(f"Referral reward: referrer_id={referrer.id}, user_id={user.id}, plan={plan}, points={points}")
    return points


def submit_manual_subscription(db: Session, user: User, data) -> User:
    """Record a hand-entered payment claim. An admin approves it later."""
    if user.subscription_status == STATUS_PENDING:
        raise Conflict("A subscription claim is already pending review")
    if user.transaction_id and user.transaction_id == data.transaction_id:
        raise Conflict("This transaction has already been submitted")
    expected = get_manual_plan_amount(data.subscription_plan)
    if expected is None:
        raise BadRequest("Invalid subscription plan")
    if data.amount != expected:
        raise BadRequest(f"Incorrect amount. Expected {expected} for {data.subscription_plan} plan.")

    now = datetime.utcnow()
    user.subscription_plan = data.subscription_plan
    user.subscription_expires_at = plan_expiry(data.subscription_plan, now)
    user.subscription_status = STATUS_PENDING
    user.payment_id = data.payment_id
    user.transaction_id = data.transaction_id
    user.payment_provider = data.payment_provider
    user.payment_number = data.payment_number
    user.amount = data.amount

    reward_referrer(db, user, data.subscription_plan)
    db.commit()
    db.refresh(user)
    logger.info(f"Manual subscription submitted: user_id={user.id}, plan={user.subscription_plan}")
    return user


def approve_subscription(db: Session, user: User) -> User:
    """Admin approval of a pending manual claim."""
    if user.subscription_status != STATUS_PENDING:
        raise BadRequest("Subscription is not pending")
    if user.subscription_plan not in PLAN_DAYS:
        raise BadRequest("Invalid or unsupported subscription plan")

    user.subscription_status = STATUS_ACTIVE
    user.subscription_type = SUBSCRIPTION_PREMIUM
    user.referral_enabled = True
    user.subscription_expires_at = approval_expiry(user.subscription_plan, datetime.utcnow())
    db.commit()
    db.refresh(user)
    logger.info(f"Subscription approved: user_id={user.id}, plan={user.subscription_plan}")
    return user


def activate_subscription(
    db: Session,
    user: User,
    plan: str,
    amount: int,
    trx_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> User:
    """
    Activate premium after a gateway-confirmed payment.

    The paid amount must equal the plan price exactly. Caller commits.
    """
    expected = get_plan_amount(plan)
    if expected is None:
        raise BadRequest("Invalid subscription plan")
    if int(amount) != expected:
        raise BadRequest(f"Payment amount mismatch. Expected {expected} for {plan} plan.")

    now = now or datetime.utcnow()
    user.subscription_type = SUBSCRIPTION_PREMIUM
    user.subscription_status = STATUS_ACTIVE
    user.subscription_plan = plan
    user.subscription_expires_at = plan_expiry(plan, now)
    user.free_trial_expires_at = None
    user.referral_enabled = True
    if trx_id:
        user.transaction_id = trx_id
    user.payment_provider = "bkash"
    user.amount = expected

    reward_referrer(db, user, plan)
    logger.info(f"Subscription activated: user_id={user.id}, plan={plan}, expires_at={user.subscription_expires_at}")
    return user
