"""
app/schemas/payment.py

Purpose: Checkout request/response schemas
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from utils.constants import PAYMENT_STATUS_PAID


class CreateCheckoutRequest(BaseModel):
    userId: Optional[str] = None


class GuestCheckoutRequest(BaseModel):
    email: Optional[str] = None


class PaymentVerification(BaseModel):
    """
    Gateway state of a checkout session, as reported to callers.
    Whether the status counts as paid is left to the caller.
    """
    model_config = ConfigDict(populate_by_name=True)

    payment_status: Optional[str] = Field(alias="paymentStatus")
    customer_email: Optional[str] = Field(default=None, alias="customerEmail")
    amount_total: Optional[int] = Field(default=None, alias="amountTotal")
    user_id: Optional[str] = Field(default=None, alias="userId")

    @property
    def is_paid(self) -> bool:
        return self.payment_status == PAYMENT_STATUS_PAID
