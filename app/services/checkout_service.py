"""
app/services/checkout_service.py

Purpose: Checkout orchestration

- Creates Stripe checkout sessions for known users or guests
- Translates a session's gateway state into a PaymentVerification
- No local persistence; all state lives in Stripe
"""

from typing import Optional

from app.core.exceptions import ResourceNotFoundError, ExternalServiceError
from app.core.logging import get_logger
from app.schemas.payment import PaymentVerification
from app.services.payment_gateway import (
    CheckoutSessionNotFoundError,
    LineItem,
    PaymentGatewayError,
)
from utils.constants import (
    GUEST_USER_MARKER,
    PAYMENT_SESSION_NOT_FOUND_MESSAGE,
    USER_NOT_FOUND_MESSAGE,
)
from utils.validation_utils import is_blank

logger = get_logger(__name__)


class CheckoutService:
    """
    Orchestrates checkout sessions against the payment gateway.
    """

    def __init__(self, gateway, user_store, line_item: LineItem):
        self.gateway = gateway
        self.user_store = user_store
        self.line_item = line_item

    async def create_checkout_session(self, requester_id: Optional[str] = None) -> str:
        """
        Creates a checkout session tagged with the requester.

        Args:
            requester_id: Account id to tag the session with; guest if omitted

        Returns:
            Hosted checkout URL

        Raises:
            ResourceNotFoundError: If requester_id does not match an account
        """
        if is_blank(requester_id):
            requester = GUEST_USER_MARKER
        else:
            account = await self.user_store.find_by_id(requester_id)
            if account is None:
                logger.warning(
                    "Checkout requested for unknown account",
                    extra={"account_id": requester_id}
                )
                raise ResourceNotFoundError(USER_NOT_FOUND_MESSAGE)
            requester = account.id

        return await self._create(metadata={"userId": requester})

    async def create_guest_checkout_session(self, email: Optional[str] = None) -> str:
        """
        Creates a guest checkout session, optionally pre-filling the email.
        """
        customer_email = None if is_blank(email) else email.strip()
        return await self._create(
            metadata={"userId": GUEST_USER_MARKER},
            customer_email=customer_email,
        )

    async def verify_payment(self, session_id: str) -> PaymentVerification:
        """
        Looks up a checkout session and reports its payment state.

        Raises:
            ResourceNotFoundError: If the gateway has no such session
            ExternalServiceError: If the gateway cannot be reached
        """
        if is_blank(session_id):
            raise ResourceNotFoundError(PAYMENT_SESSION_NOT_FOUND_MESSAGE)

        try:
            session = await self.gateway.retrieve_checkout_session(session_id)
        except CheckoutSessionNotFoundError:
            raise ResourceNotFoundError(PAYMENT_SESSION_NOT_FOUND_MESSAGE)
        except PaymentGatewayError as e:
            raise ExternalServiceError(str(e))

        logger.info(
            f"Payment status for session: {session.payment_status}",
            extra={"session_id": session_id}
        )

        return PaymentVerification(
            payment_status=session.payment_status,
            customer_email=session.customer_email,
            amount_total=session.amount_total,
            user_id=session.metadata.get("userId"),
        )

    async def _create(self, metadata: dict, customer_email: Optional[str] = None) -> str:
        try:
            session = await self.gateway.create_checkout_session(
                line_item=self.line_item,
                metadata=metadata,
                customer_email=customer_email,
            )
        except PaymentGatewayError as e:
            raise ExternalServiceError(str(e))

        if not session.url:
            raise ExternalServiceError("Checkout session has no redirect URL")

        logger.info(
            f"Checkout session ready for {metadata.get('userId')}",
            extra={"session_id": session.id}
        )
        return session.url
