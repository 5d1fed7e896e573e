"""
Tests for the admin console: login, dashboard, payment approval and user removal.
"""
from datetime import datetime, timedelta

from crosscareers.core.security import decode_token
from conftest import TEST_PASSWORD, auth_headers, make_user


def test_admin_login(client, admin):
    response = client.post("/admin/login", json={"email": admin.email, "password": TEST_PASSWORD})
    assert response.status_code == 200
    body = response.json()
    payload = decode_token(body["token"])
    assert payload["id"] == admin.id
    assert payload["role"] == "admin"
    # Long-lived admin session
    assert datetime.utcfromtimestamp(payload["exp"]) > datetime.utcnow() + timedelta(days=59)


def test_admin_login_failures_look_identical(client, admin, user):
    wrong_password = client.post("/admin/login", json={"email": admin.email, "password": "nope"})
    not_admin = client.post("/admin/login", json={"email": user.email, "password": TEST_PASSWORD})
    unknown = client.post("/admin/login", json={"email": "ghost@example.com", "password": TEST_PASSWORD})
    missing = client.post("/admin/login", json={"email": admin.email})
    for response in (wrong_password, not_admin, unknown, missing):
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid email or password"


def test_dashboard_counts(client, db, admin, user, expired_user):
    make_user(
        db,
        email="premium@example.com",
        referral_code="PREM1",
        subscription_type="premium",
        subscription_status="active",
        subscription_expires_at=datetime.utcnow() + timedelta(days=30),
    )
    response = client.get("/admin/dashboard", headers=auth_headers(admin))
    assert response.status_code == 200
    body = response.json()
    assert body["totalUsers"] == 3
    assert body["freeTrialUsers"] == 2
    assert body["premiumUsers"] == 1
    assert body["activeUsers"] == 2
    assert len(body["users"]) == 3


def test_dashboard_requires_admin(client, headers):
    response = client.get("/admin/dashboard", headers=headers)
    assert response.status_code == 403


def test_approve_pending_subscription(client, db, admin, user):
    user.subscription_plan = "monthly"
    user.subscription_status = "pending"
    db.commit()

    response = client.get("/admin/pendingpay", headers=auth_headers(admin))
    assert response.json()["count"] == 1

    response = client.patch(f"/admin/{user.id}/approve-subscription", headers=auth_headers(admin))
    assert response.status_code == 200
    approved = response.json()["user"]
    assert approved["subscriptionStatus"] == "active"
    assert approved["subscriptionType"] == "premium"
    assert approved["referralEnabled"] is True

    db.refresh(user)
    assert timedelta(days=29) < user.subscription_expires_at - datetime.utcnow() <= timedelta(days=30)

    response = client.get("/admin/allapprovedpay", headers=auth_headers(admin))
    assert [u["id"] for u in response.json()["users"]] == [user.id]

    # Approving twice is rejected
    response = client.patch(f"/admin/{user.id}/approve-subscription", headers=auth_headers(admin))
    assert response.status_code == 400


def test_approve_unknown_user(client, admin):
    response = client.patch("/admin/9999/approve-subscription", headers=auth_headers(admin))
    assert response.status_code == 404


def test_soft_delete_user(client, db, admin, user, headers):
    response = client.delete(f"/admin/users/{user.id}", headers=auth_headers(admin))
    assert response.status_code == 200

    db.refresh(user)
    assert user.is_deleted is True
    assert client.get("/auth/get-profile", headers=headers).status_code == 401
    assert client.post("/auth/login", json={"email": user.email, "password": TEST_PASSWORD}).status_code == 401
