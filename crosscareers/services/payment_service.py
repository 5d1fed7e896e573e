"""
bKash checkout orchestration: create -> execute (or query) -> activate subscription.

Confirmation is idempotent on the transaction status: a transaction already in
``success`` is never executed against the gateway again.
"""
import logging
import time
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from crosscareers.core import config
from crosscareers.core.errors import ApiError, BadRequest, Forbidden, NotFound
from crosscareers.core.plans import get_plan_amount
from crosscareers.db.models.transaction import (
    STATUS_CREATED,
    STATUS_FAILED,
    STATUS_SUCCESS,
    Transaction,
)
from crosscareers.db.models.user import User
from crosscareers.services.bkash_client import BkashClient
from crosscareers.services.subscription_service import activate_subscription

logger = logging.getLogger(__name__)

COMPLETED = "Completed"


def start_payment(db: Session, client: BkashClient, user: User, plan: str) -> dict:
    amount = get_plan_amount(plan)
    if amount is None:
        raise BadRequest("Invalid subscription plan")

    invoice_number = f"INV-{int(time.time() * 1000)}-{user.id}"
    payload = {
        "mode": "0011",
        "payerReference": user.email,
        "callbackURL": f"{config.CLIENT_URL}/bkash-success?source=bkash",
        "amount": str(amount),
        "currency": "BDT",
        "intent": "sale",
        "merchantInvoiceNumber": invoice_number,
    }
    response = client.create_payment(payload)

    transaction = Transaction(
        user_id=user.id,
        payment_id=response["paymentID"],
        invoice_number=invoice_number,
        plan=plan,
        amount=amount,
        currency="BDT",
        status=STATUS_CREATED,
    )
    db.add(transaction)
    db.commit()
    logger.info(f"bKash payment created: payment_id={transaction.payment_id}, user_id={user.id}, plan={plan}")
    return {"bkashURL": response["bkashURL"], "paymentID": response["paymentID"]}


def get_transaction(db: Session, payment_id: str) -> Optional[Transaction]:
    return db.query(Transaction).filter(Transaction.payment_id == payment_id).first()


def _execute_or_query(client: BkashClient, payment_id: str) -> dict:
    """Execute the payment; if that fails or is inconclusive, ask bKash for its status."""
    try:
        data = client.execute_payment(payment_id)
        if data.get("transactionStatus"):
            return data
        logger.warning(f"bKash execute inconclusive for {payment_id}: {data.get('statusMessage')}")
    except ApiError as e:
        logger.warning(f"bKash execute failed for {payment_id}: {e.message}, querying status")
    return client.query_payment(payment_id)


def _subscription_view(user: User) -> dict:
    return {
        "plan": user.subscription_plan,
        "status": user.subscription_status,
        "expiresAt": user.subscription_expires_at,
    }


def confirm_transaction(db: Session, client: BkashClient, transaction: Transaction) -> dict:
    """Run the gateway confirmation for a transaction that is not yet successful."""
    if transaction.status == STATUS_SUCCESS:
        return {
            "success": True,
            "alreadyConfirmed": True,
            "message": "Payment already confirmed",
            "subscription": {"plan": transaction.plan},
        }

    data = _execute_or_query(client, transaction.payment_id)
    transaction.raw_response = data

    if data.get("transactionStatus") != COMPLETED:
        transaction.status = STATUS_FAILED
        db.commit()
        logger.info(f"bKash payment failed: payment_id={transaction.payment_id}, status={data.get('transactionStatus')}")
        raise BadRequest("Payment failed", details={"transactionStatus": data.get("transactionStatus")})

    user = db.query(User).filter(User.id == transaction.user_id).first()
    if not user:
        raise NotFound("User not found")

    paid_amount = int(float(data.get("amount") or transaction.amount))
    try:
        activate_subscription(db, user, transaction.plan, paid_amount, trx_id=data.get("trxID"))
    except BadRequest:
        db.rollback()
        transaction.status = STATUS_FAILED
        transaction.raw_response = data
        db.commit()
        raise

    transaction.status = STATUS_SUCCESS
    transaction.trx_id = data.get("trxID")
    transaction.executed_at = datetime.utcnow()
    db.commit()
    db.refresh(user)
    logger.info(f"bKash payment confirmed: payment_id={transaction.payment_id}, trx_id={transaction.trx_id}")

    return {
        "success": True,
        "alreadyConfirmed": False,
        "message": "Payment successful. Subscription activated.",
        "subscription": _subscription_view(user),
    }


def confirm_payment(db: Session, client: BkashClient, user: User, payment_id: str) -> dict:
    transaction = get_transaction(db, payment_id)
    if not transaction:
        raise NotFound("Transaction not found")
    if transaction.user_id != user.id:
        raise Forbidden("This transaction belongs to another user")
    return confirm_transaction(db, client, transaction)


def handle_callback(db: Session, client: BkashClient, payment_id: str, status: str) -> dict:
    """Gateway redirect. Never raises for business failures: returns a result for the redirect."""
    transaction = get_transaction(db, payment_id) if payment_id else None
    if not transaction:
        return {"success": False, "found": False, "message": "Transaction not found"}

    if status != "success":
        if transaction.status != STATUS_SUCCESS:
            transaction.status = STATUS_FAILED
            db.commit()
        return {"success": False, "message": f"Payment {status or 'failed'}"}

    try:
        return confirm_transaction(db, client, transaction)
    except ApiError as e:
        return {"success": False, "message": e.message}
