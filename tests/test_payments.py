"""
Tests for the bKash checkout flow against a scripted gateway.
"""
import json
from datetime import datetime, timedelta

import httpx
import pytest

from crosscareers.core.errors import BadGateway
from crosscareers.db.models.transaction import Transaction
from crosscareers.main import app
from crosscareers.services.bkash_client import BkashClient, get_bkash_client
from conftest import auth_headers, make_user


class FakeGateway:
    """Minimal tokenized-checkout server for httpx.MockTransport."""

    def __init__(self):
        self.requests = []
        self.execute_status = "Completed"
        self.execute_amount = "89"
        self.execute_fails = False
        self.grants = 0

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content or b"{}")
        path = request.url.path
        self.requests.append((path, body))

        if path.endswith("/token/grant"):
            self.grants += 1
            return httpx.Response(200, json={
                "id_token": f"token-{self.grants}",
                "refresh_token": "refresh-1",
                "expires_in": 3600,
            })
        if path.endswith("/token/refresh"):
            return httpx.Response(200, json={"statusMessage": "Invalid refresh token"})
        if path.endswith("/checkout/create"):
            return httpx.Response(200, json={
                "paymentID": "PAY123",
                "bkashURL": "https://sandbox.bka.sh/pay/PAY123",
                "amount": body["amount"],
            })
        if path.endswith("/checkout/execute"):
            if self.execute_fails:
                return httpx.Response(500, content=b"gateway down")
            return httpx.Response(200, json={
                "paymentID": body["paymentID"],
                "trxID": "TRX999",
                "transactionStatus": self.execute_status,
                "amount": self.execute_amount,
            })
        if path.endswith("/payment/status"):
            return httpx.Response(200, json={
                "paymentID": body["paymentID"],
                "trxID": "TRX999",
                "transactionStatus": "Completed",
                "amount": self.execute_amount,
            })
        return httpx.Response(404, json={"statusMessage": "unknown"})


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def bkash(gateway):
    return BkashClient(
        base_url="https://bkash.test/v1",
        username="merchant",
        password="secret",
        app_key="key",
        app_secret="appsecret",
        transport=httpx.MockTransport(gateway),
    )


@pytest.fixture
def pay_client(client, bkash):
    app.dependency_overrides[get_bkash_client] = lambda: bkash
    return client


def test_token_is_cached_until_near_expiry(gateway):
    now = [1000.0]
    client = BkashClient(
        base_url="https://bkash.test/v1",
        app_key="key",
        app_secret="appsecret",
        transport=httpx.MockTransport(gateway),
        clock=lambda: now[0],
    )
    assert client.ensure_id_token() == "token-1"
    assert client.ensure_id_token() == "token-1"
    assert gateway.grants == 1

    # Past the renewal margin: refresh is refused, so a new grant is made
    now[0] += 3600 - 30
    assert client.ensure_id_token() == "token-2"
    paths = [path for path, _ in gateway.requests]
    assert paths[-2].endswith("/token/refresh")


def test_unreachable_gateway_is_bad_gateway():
    def broken(request):
        raise httpx.ConnectError("refused")

    client = BkashClient(base_url="https://bkash.test/v1", transport=httpx.MockTransport(broken))
    with pytest.raises(BadGateway):
        client.grant_token()


def test_create_payment(pay_client, db, user, headers, gateway):
    response = pay_client.post("/bkash/create", json={"plan": "monthly"}, headers=headers)
    assert response.status_code == 200
    assert response.json() == {"bkashURL": "https://sandbox.bka.sh/pay/PAY123", "paymentID": "PAY123"}

    create_body = [body for path, body in gateway.requests if path.endswith("/checkout/create")][0]
    assert create_body["amount"] == "89"
    assert create_body["currency"] == "BDT"
    assert create_body["payerReference"] == user.email

    transaction = db.query(Transaction).filter(Transaction.payment_id == "PAY123").first()
    assert transaction.status == "created"
    assert transaction.amount == 89


def test_create_payment_rejects_unknown_plan(pay_client, headers):
    response = pay_client.post("/bkash/create", json={"plan": "weekly"}, headers=headers)
    assert response.status_code == 422


def test_confirm_activates_subscription(pay_client, db, user, headers):
    referrer = make_user(db, email="referrer@example.com", referral_code="RFRR1", referral_enabled=True)
    user.referred_by = referrer.id
    db.commit()
    pay_client.post("/bkash/create", json={"plan": "monthly"}, headers=headers)

    response = pay_client.post("/bkash/confirm", json={"paymentID": "PAY123"}, headers=headers)
    assert response.status_code == 200
    body = response.json()
    assert body["alreadyConfirmed"] is False
    assert body["subscription"]["status"] == "active"

    db.refresh(user)
    assert user.subscription_type == "premium"
    assert user.referral_enabled is True
    assert user.transaction_id == "TRX999"
    assert user.subscription_expires_at > datetime.utcnow() + timedelta(days=27)
    db.refresh(referrer)
    assert referrer.points == 22

    # Second confirmation does not hit the gateway again
    response = pay_client.post("/bkash/confirm", json={"paymentID": "PAY123"}, headers=headers)
    assert response.json()["alreadyConfirmed"] is True
    db.refresh(referrer)
    assert referrer.points == 22


def test_confirm_falls_back_to_status_query(pay_client, db, user, headers, gateway):
    gateway.execute_fails = True
    pay_client.post("/bkash/create", json={"plan": "monthly"}, headers=headers)

    response = pay_client.post("/bkash/confirm", json={"paymentID": "PAY123"}, headers=headers)
    assert response.status_code == 200
    assert any(path.endswith("/payment/status") for path, _ in gateway.requests)


def test_confirm_failed_payment(pay_client, db, user, headers, gateway):
    gateway.execute_status = "Failed"
    pay_client.post("/bkash/create", json={"plan": "monthly"}, headers=headers)

    response = pay_client.post("/bkash/confirm", json={"paymentID": "PAY123"}, headers=headers)
    assert response.status_code == 400
    assert response.json()["message"] == "Payment failed"

    transaction = db.query(Transaction).filter(Transaction.payment_id == "PAY123").first()
    assert transaction.status == "failed"
    db.refresh(user)
    assert user.subscription_type == "freeTrial"


def test_confirm_amount_mismatch(pay_client, db, user, headers, gateway):
    gateway.execute_amount = "10"
    pay_client.post("/bkash/create", json={"plan": "monthly"}, headers=headers)

    response = pay_client.post("/bkash/confirm", json={"paymentID": "PAY123"}, headers=headers)
    assert response.status_code == 400
    assert "Expected 89" in response.json()["message"]

    transaction = db.query(Transaction).filter(Transaction.payment_id == "PAY123").first()
    assert transaction.status == "failed"


def test_confirm_other_users_transaction(pay_client, db, headers):
    pay_client.post("/bkash/create", json={"plan": "monthly"}, headers=headers)
    other = make_user(db, email="other@example.com", referral_code="OTHER")

    response = pay_client.post("/bkash/confirm", json={"paymentID": "PAY123"}, headers=auth_headers(other))
    assert response.status_code == 403


def test_confirm_unknown_transaction(pay_client, headers):
    response = pay_client.post("/bkash/confirm", json={"paymentID": "NOPE"}, headers=headers)
    assert response.status_code == 404


def test_callback_success_redirects(pay_client, db, user, headers):
    pay_client.post("/bkash/create", json={"plan": "monthly"}, headers=headers)

    response = pay_client.get(
        "/bkash/callback",
        params={"paymentID": "PAY123", "status": "success"},
        follow_redirects=False,
    )
    assert response.status_code == 302
    assert "status=success" in response.headers["location"]
    db.refresh(user)
    assert user.subscription_status == "active"


def test_callback_cancel_marks_failed(pay_client, db, headers):
    pay_client.post("/bkash/create", json={"plan": "monthly"}, headers=headers)

    response = pay_client.get(
        "/bkash/callback",
        params={"paymentID": "PAY123", "status": "cancel"},
        follow_redirects=False,
    )
    assert response.status_code == 302
    assert "status=failed" in response.headers["location"]
    transaction = db.query(Transaction).filter(Transaction.payment_id == "PAY123").first()
    assert transaction.status == "failed"


def test_callback_unknown_transaction(pay_client):
    response = pay_client.get("/bkash/callback", params={"paymentID": "NOPE", "status": "success"})
    assert response.status_code == 404
