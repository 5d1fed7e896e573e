"""
Subscription tier gating.

A user is either FULL (active premium or running free trial) or LIMITED. Lapsed
subscriptions never lock a user out of their account, they only downgrade access.
"""
import logging
from datetime import datetime
from typing import Optional

logger = logging.getLogger(__name__)

FULL = "FULL"
LIMITED = "LIMITED"

SUBSCRIPTION_FREE_TRIAL = "freeTrial"
SUBSCRIPTION_PREMIUM = "premium"

STATUS_ACTIVE = "active"
STATUS_PENDING = "pending"
STATUS_INACTIVE = "inactive"


def is_premium(user, now: Optional[datetime] = None) -> bool:
    """Active premium subscription that has not expired."""
    now = now or datetime.utcnow()
    return (
        user.subscription_type == SUBSCRIPTION_PREMIUM
        and user.subscription_status == STATUS_ACTIVE
        and user.subscription_expires_at is not None
        and user.subscription_expires_at > now
    )


def is_on_trial(user, now: Optional[datetime] = None) -> bool:
    now = now or datetime.utcnow()
    return (
        user.subscription_type == SUBSCRIPTION_FREE_TRIAL
        and user.free_trial_expires_at is not None
        and user.free_trial_expires_at > now
    )


def get_access_level(user, now: Optional[datetime] = None) -> str:
    now = now or datetime.utcnow()
    if is_premium(user, now) or is_on_trial(user, now):
        return FULL
    return LIMITED
