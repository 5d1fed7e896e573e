"""
Subscription plan tables.

Two price lists exist: the bKash checkout price charged through the gateway and the
manual price a user claims to have paid when submitting a transaction id by hand.
Referral commission is computed from the manual base points.
"""
import calendar
from datetime import datetime, timedelta
from typing import Optional

# BDT charged through bKash checkout
PLAN_AMOUNTS = {
    "monthly": 89,
    "quarterly": 199,
    "semiannual": 399,
    "yearly": 599,
}

# Calendar months added on a gateway-confirmed payment
PLAN_MONTHS = {
    "monthly": 1,
    "quarterly": 3,
    "semiannual": 6,
    "yearly": 12,
}

# Manual subscription claims, also used as referral base points
MANUAL_PLAN_AMOUNTS = {
    "monthly": 150,
    "quarterly": 260,
    "semiannual": 450,
    "yearly": 520,
}

# Days granted when an admin approves a manual claim
PLAN_DAYS = {
    "trial": 3,
    "monthly": 30,
    "quarterly": 90,
    "semiannual": 180,
    "yearly": 365,
}

REFERRAL_COMMISSION_PERCENT = 15


def get_plan_amount(plan: str) -> Optional[int]:
    return PLAN_AMOUNTS.get(plan)


def get_manual_plan_amount(plan: str) -> Optional[int]:
    return MANUAL_PLAN_AMOUNTS.get(plan)


def referral_commission(plan: str) -> int:
    """Points credited to a referrer when a referred user pays for ``plan``."""
    base = MANUAL_PLAN_AMOUNTS.get(plan, 0)
    return base * REFERRAL_COMMISSION_PERCENT // 100


def add_months(moment: datetime, months: int) -> datetime:
    """Add calendar months, clamping the day to the end of the target month."""
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def plan_expiry(plan: str, start: datetime) -> datetime:
    """Expiry for a gateway-confirmed payment starting at ``start``."""
    months = PLAN_MONTHS.get(plan)
    if months is None:
        raise ValueError(f"Unknown plan: {plan}")
    return add_months(start, months)


def approval_expiry(plan: str, start: datetime) -> datetime:
    """Expiry for an admin-approved manual claim."""
    return start + timedelta(days=PLAN_DAYS.get(plan, 0))
