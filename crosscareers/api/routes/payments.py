"""
bKash checkout endpoints.
"""
import logging
from typing import Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.orm import Session

from crosscareers.core import config
from crosscareers.core.auth_dependency import get_db, require_roles
from crosscareers.db.models.user import User
from crosscareers.schemas.payment import ConfirmPaymentRequest, StartPaymentRequest
from crosscareers.services import payment_service
from crosscareers.services.bkash_client import BkashClient, get_bkash_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bkash", tags=["Payments"])

require_user = require_roles("user")


@router.post("/create")
def create_payment(
    data: StartPaymentRequest,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
    client: BkashClient = Depends(get_bkash_client),
):
    return payment_service.start_payment(db, client, user, data.plan)


@router.post("/confirm")
def confirm_payment(
    data: ConfirmPaymentRequest,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
    client: BkashClient = Depends(get_bkash_client),
):
    return payment_service.confirm_payment(db, client, user, data.payment_id)


@router.get("/callback")
def payment_callback(
    payment_id: Optional[str] = Query(None, alias="paymentID"),
    status: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    client: BkashClient = Depends(get_bkash_client),
):
    result = payment_service.handle_callback(db, client, payment_id, status)
    if not result.get("found", True):
        return JSONResponse(status_code=404, content=result)

    params = {"status": "success" if result["success"] else "failed", "paymentID": payment_id}
    if not result["success"]:
        params["message"] = result["message"]
    return RedirectResponse(f"{config.CLIENT_URL}/bkash-success?{urlencode(params)}", status_code=302)
