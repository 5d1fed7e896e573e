from typing import Literal
from pydantic import Field

from crosscareers.schemas.common import CamelModel


class StartPaymentRequest(CamelModel):
    plan: Literal["monthly", "quarterly", "semiannual", "yearly"]


class ConfirmPaymentRequest(CamelModel):
    payment_id: str = Field(..., min_length=1, alias="paymentID")
