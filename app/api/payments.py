"""
app/api/payments.py

Purpose: Checkout endpoints

- Authenticated and guest checkout session creation
- Payment verification by checkout session id
"""

from typing import Optional

from fastapi import APIRouter, Body, Depends

from app.api.deps import get_checkout_service, get_current_account_id
from app.schemas.payment import CreateCheckoutRequest, GuestCheckoutRequest, PaymentVerification
from app.schemas.response import CheckoutUrlResponse, DataResponse
from app.services.checkout_service import CheckoutService

router = APIRouter(prefix="/payments")


@router.post("/create-checkout-session", response_model=CheckoutUrlResponse)
async def create_checkout_session(
    payload: Optional[CreateCheckoutRequest] = Body(default=None),
    account_id: str = Depends(get_current_account_id),
    checkout: CheckoutService = Depends(get_checkout_service),
):
    """
    Create a checkout session for the given userId (guest if omitted).
    """
    requester_id = payload.userId if payload else None
    url = await checkout.create_checkout_session(requester_id)
    return CheckoutUrlResponse(url=url)


@router.post("/guest-checkout", response_model=CheckoutUrlResponse)
async def guest_checkout(
    payload: Optional[GuestCheckoutRequest] = Body(default=None),
    checkout: CheckoutService = Depends(get_checkout_service),
):
    """
    Create a checkout session without an account.
    """
    email = payload.email if payload else None
    url = await checkout.create_guest_checkout_session(email)
    return CheckoutUrlResponse(url=url)


@router.get("/verify-payment/{session_id}", response_model=DataResponse[PaymentVerification])
async def verify_payment(
    session_id: str,
    account_id: str = Depends(get_current_account_id),
    checkout: CheckoutService = Depends(get_checkout_service),
):
    verification = await checkout.verify_payment(session_id)
    return DataResponse[PaymentVerification](data=verification)
