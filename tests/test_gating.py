"""
Tests for subscription gating and plan tables.
"""
from datetime import datetime, timedelta
from types import SimpleNamespace

from crosscareers.core.gating import FULL, LIMITED, get_access_level, is_premium
from crosscareers.core.plans import (
    add_months,
    approval_expiry,
    get_plan_amount,
    plan_expiry,
    referral_commission,
)
from conftest import auth_headers

NOW = datetime(2024, 1, 31, 12, 0, 0)


def _user(**fields):
    values = dict(
        subscription_type="freeTrial",
        subscription_status="inactive",
        subscription_expires_at=None,
        free_trial_expires_at=None,
    )
    values.update(fields)
    return SimpleNamespace(**values)


def test_running_trial_has_full_access():
    user = _user(free_trial_expires_at=NOW + timedelta(days=1))
    assert get_access_level(user, NOW) == FULL


def test_lapsed_trial_is_limited():
    user = _user(free_trial_expires_at=NOW - timedelta(seconds=1))
    assert get_access_level(user, NOW) == LIMITED


def test_active_premium_has_full_access():
    user = _user(
        subscription_type="premium",
        subscription_status="active",
        subscription_expires_at=NOW + timedelta(days=30),
    )
    assert is_premium(user, NOW)
    assert get_access_level(user, NOW) == FULL


def test_pending_or_expired_premium_is_limited():
    pending = _user(
        subscription_type="premium",
        subscription_status="pending",
        subscription_expires_at=NOW + timedelta(days=30),
    )
    expired = _user(
        subscription_type="premium",
        subscription_status="active",
        subscription_expires_at=NOW - timedelta(days=1),
    )
    assert get_access_level(pending, NOW) == LIMITED
    assert get_access_level(expired, NOW) == LIMITED


def test_plan_amounts_and_commission():
    assert get_plan_amount("monthly") == 89
    assert get_plan_amount("yearly") == 599
    assert get_plan_amount("weekly") is None
    # 15% of the manual base points, floored
    assert referral_commission("monthly") == 22
    assert referral_commission("quarterly") == 39
    assert referral_commission("semiannual") == 67
    assert referral_commission("yearly") == 78


def test_calendar_month_expiry_clamps_day():
    assert add_months(NOW, 1) == datetime(2024, 2, 29, 12, 0, 0)
    assert plan_expiry("quarterly", NOW) == datetime(2024, 4, 30, 12, 0, 0)
    assert plan_expiry("yearly", NOW) == datetime(2025, 1, 31, 12, 0, 0)


def test_approval_expiry_uses_days():
    assert approval_expiry("monthly", NOW) == NOW + timedelta(days=30)


def test_limited_user_blocked_from_premium_features(client, expired_user):
    """A lapsed trial still authenticates but premium routes answer 403."""
    response = client.post(
        "/qa/generate",
        json={"jobDescription": "Backend engineer building payment APIs in Python."},
        headers=auth_headers(expired_user),
    )
    assert response.status_code == 403
    assert response.json()["message"] == "Premium subscription required"


def test_admin_role_cannot_use_user_routes(client, admin):
    response = client.get("/resume", headers=auth_headers(admin))
    assert response.status_code == 403
