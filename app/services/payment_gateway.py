"""
app/services/payment_gateway.py

Purpose: Stripe Checkout integration

- Creates hosted Checkout Sessions for the single product
- Retrieves a session's settlement status by id
- Normalizes Stripe objects into CheckoutSession
- Owns its API key (no module-level stripe.api_key)
"""

import asyncio
from typing import Optional, Dict, Any

import stripe
from pydantic import BaseModel, Field

from app.core.config import settings
from app.core.logging import get_logger
from utils.constants import PAYMENT_STATUS_PAID

logger = get_logger(__name__)


class PaymentGatewayError(Exception):
    """Raised when Stripe cannot be reached or rejects a request."""
    pass


class CheckoutSessionNotFoundError(PaymentGatewayError):
    """Raised when Stripe has no record of a checkout session id."""
    pass


class LineItem(BaseModel):
    name: str
    description: str
    unit_amount: int
    currency: str = "usd"
    image_url: Optional[str] = None
    quantity: int = 1

    def to_stripe(self) -> Dict[str, Any]:
        product_data: Dict[str, Any] = {
            "name": self.name,
            "description": self.description,
        }
        if self.image_url:
            product_data["images"] = [self.image_url]

        return {
            "price_data": {
                "currency": self.currency,
                "product_data": product_data,
                "unit_amount": self.unit_amount,
            },
            "quantity": self.quantity,
        }


class CheckoutSession(BaseModel):
    """
    The fields of a Stripe Checkout Session this service reads.
    """
    id: str
    url: Optional[str] = None
    payment_status: Optional[str] = None
    customer_email: Optional[str] = None
    amount_total: Optional[int] = None
    currency: Optional[str] = None
    metadata: Dict[str, str] = Field(default_factory=dict)

    @property
    def is_paid(self) -> bool:
        return self.payment_status == PAYMENT_STATUS_PAID

    @classmethod
    def from_stripe(cls, session: Any) -> "CheckoutSession":
        if isinstance(session, stripe.StripeObject):
            session = session.to_dict()
        customer_details = session.get("customer_details") or {}
        return cls(
            id=session["id"],
            url=session.get("url"),
            payment_status=session.get("payment_status"),
            customer_email=customer_details.get("email") or session.get("customer_email"),
            amount_total=session.get("amount_total"),
            currency=session.get("currency"),
            metadata={k: str(v) for k, v in (session.get("metadata") or {}).items()},
        )


class StripePaymentGateway:
    """
    Thin async wrapper over the Stripe Checkout Sessions API.

    The Stripe SDK is synchronous, so calls run in a worker thread.
    """

    def __init__(self, api_key: str, success_url: str, cancel_url: str):
        self.api_key = api_key
        self.success_url = success_url
        self.cancel_url = cancel_url

    async def create_checkout_session(
        self,
        line_item: LineItem,
        metadata: Dict[str, str],
        customer_email: Optional[str] = None,
    ) -> CheckoutSession:
        """
        Creates a hosted checkout session.

        Raises:
            PaymentGatewayError: If Stripe rejects the request or is unreachable
        """
        params: Dict[str, Any] = {
            "payment_method_types": ["card"],
            "line_items": [line_item.to_stripe()],
            "mode": "payment",
            "success_url": self.success_url,
            "cancel_url": self.cancel_url,
            "metadata": metadata,
        }
        if customer_email:
            params["customer_email"] = customer_email

        try:
            session = await asyncio.to_thread(
                stripe.checkout.Session.create,
                api_key=self.api_key,
                **params
            )
        except stripe.StripeError as e:
            logger.error(f"Stripe checkout creation failed: {type(e).__name__}: {e}")
            raise PaymentGatewayError("Could not create checkout session") from e

        checkout = CheckoutSession.from_stripe(session)
        logger.info(f"Checkout session created: {checkout.id}", extra={"session_id": checkout.id})
        return checkout

    async def retrieve_checkout_session(self, session_id: str) -> CheckoutSession:
        """
        Retrieves a checkout session by id.

        Raises:
            CheckoutSessionNotFoundError: If Stripe has no such session
            PaymentGatewayError: For any other Stripe failure
        """
        try:
            session = await asyncio.to_thread(
                stripe.checkout.Session.retrieve,
                session_id,
                api_key=self.api_key
            )
        except stripe.InvalidRequestError as e:
            logger.info(f"Checkout session not found: {session_id}", extra={"session_id": session_id})
            raise CheckoutSessionNotFoundError(f"No checkout session {session_id}") from e
        except stripe.StripeError as e:
            logger.error(f"Stripe session lookup failed: {type(e).__name__}: {e}", extra={"session_id": session_id})
            raise PaymentGatewayError("Could not retrieve checkout session") from e

        return CheckoutSession.from_stripe(session)


def build_payment_gateway() -> StripePaymentGateway:
    frontend = settings.FRONTEND_URL.rstrip("/")
    return StripePaymentGateway(
        api_key=settings.STRIPE_SECRET_KEY or "",
        success_url=f"{frontend}/payment-success?session_id={{CHECKOUT_SESSION_ID}}",
        cancel_url=f"{frontend}/payment-cancel",
    )


def build_line_item() -> LineItem:
    return LineItem(
        name=settings.PRODUCT_NAME,
        description=settings.PRODUCT_DESCRIPTION,
        unit_amount=settings.PRODUCT_PRICE_CENTS,
        currency=settings.PRODUCT_CURRENCY,
        image_url=settings.PRODUCT_IMAGE_URL,
    )
