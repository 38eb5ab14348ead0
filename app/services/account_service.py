"""
app/services/account_service.py

Purpose: Account provisioning

- Free and paid registration, login, profile read/update
- Paid registration order: payment verified -> email unused ->
  account created -> receipt email scheduled -> token issued
- The receipt email is a background task; its failure is logged and dropped
"""

import asyncio
from typing import Optional, Set

from app.core.exceptions import (
    AuthenticationError,
    ConflictError,
    ExternalServiceError,
    ResourceNotFoundError,
    ValidationError,
)
from app.core.logging import get_logger, LogContext
from app.core.security import CredentialService
from app.schemas.payment import PaymentVerification
from app.schemas.user import AccountToken, PlanAccountToken, Profile
from app.services.checkout_service import CheckoutService
from utils.constants import (
    INVALID_CREDENTIALS_MESSAGE,
    INVALID_PAYMENT_SESSION_MESSAGE,
    MISSING_FIELDS_MESSAGE,
    UNPAID_SESSION_MESSAGE,
    USER_EXISTS_MESSAGE,
    USER_NOT_FOUND_MESSAGE,
)
from utils.validation_utils import is_blank, missing_fields, sanitize_input

logger = get_logger(__name__)


class AccountService:
    """
    Provisions and maintains user accounts.

    Collaborators are injected so tests can swap in doubles:
        user_store: find_by_email / find_by_id / create / update
        credentials: CredentialService
        checkout: CheckoutService (payment verification)
        notifier: send_payment_confirmation(...)
    """

    def __init__(
        self,
        user_store,
        credentials: CredentialService,
        checkout: CheckoutService,
        notifier,
        currency: str = "usd",
    ):
        self.user_store = user_store
        self.credentials = credentials
        self.checkout = checkout
        self.notifier = notifier
        self.currency = currency
        self._pending_notifications: Set[asyncio.Task] = set()

    async def register_free_user(
        self,
        name: Optional[str],
        email: Optional[str],
        password: Optional[str],
    ) -> AccountToken:
        """
        Registers an account without a paid plan.

        Raises:
            ValidationError: If name, email or password is blank, or the password is too long
            ConflictError: If the email is already registered
        """
        self._require(name=name, email=email, password=password)
        self.credentials.check_password_length(password)

        if await self.user_store.find_by_email(email):
            logger.info("Registration rejected, email taken", extra={"email": email})
            raise ConflictError(USER_EXISTS_MESSAGE)

        password_hash = await self.credentials.hash_password(password)
        account = await self.user_store.create(
            name=sanitize_input(name),
            email=email,
            password_hash=password_hash,
            has_paid_plan=False,
        )
        logger.info("Free account created", extra={"account_id": account.id, "email": email})

        return AccountToken(
            id=account.id,
            name=account.name,
            email=account.email,
            token=self.credentials.create_token(account.id),
        )

    async def register_paid_user(
        self,
        name: Optional[str],
        email: Optional[str],
        password: Optional[str],
        session_id: Optional[str],
    ) -> PlanAccountToken:
        """
        Registers an account unlocked by a completed checkout session.

        The payment is verified before anything else is touched, so an
        unknown or unpaid session never creates an account. A paid session
        whose email is already registered is rejected after the gateway
        call and left as is.

        Raises:
            ValidationError: Missing fields, over-long password, unknown or unpaid session
            ConflictError: If the email is already registered
        """
        self._require(name=name, email=email, password=password, sessionId=session_id)
        self.credentials.check_password_length(password)

        payment = await self._verify_paid_session(session_id)

        if await self.user_store.find_by_email(email):
            logger.info(
                "Paid registration rejected, email taken",
                extra={"email": email, "session_id": session_id}
            )
            raise ConflictError(USER_EXISTS_MESSAGE)

        password_hash = await self.credentials.hash_password(password)
        account = await self.user_store.create(
            name=sanitize_input(name),
            email=email,
            password_hash=password_hash,
            has_paid_plan=True,
            payment_session_id=session_id,
        )
        logger.info(
            "Paid account created",
            extra={"account_id": account.id, "email": email, "session_id": session_id}
        )

        self._schedule_confirmation(
            email=account.email,
            name=account.name,
            session_id=session_id,
            amount_cents=payment.amount_total,
        )

        return PlanAccountToken.from_account(account, self.credentials.create_token(account.id))

    async def login_user(self, email: Optional[str], password: Optional[str]) -> PlanAccountToken:
        """
        Authenticates by email and password.

        Raises:
            AuthenticationError: Same message whether the email or the password is wrong
        """
        if is_blank(email) or is_blank(password):
            raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE)

        account = await self.user_store.find_by_email(email)
        if account is None or not await self.credentials.verify_password(password, account.password_hash):
            logger.info("Login failed")
            raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE)

        logger.info("Login succeeded", extra={"account_id": account.id})
        return PlanAccountToken.from_account(account, self.credentials.create_token(account.id))

    async def get_profile(self, account_id: str) -> Profile:
        account = await self.user_store.find_by_id(account_id)
        if account is None:
            raise ResourceNotFoundError(USER_NOT_FOUND_MESSAGE)
        return Profile.from_account(account)

    async def update_profile(
        self,
        account_id: str,
        name: Optional[str] = None,
        email: Optional[str] = None,
        password: Optional[str] = None,
    ) -> PlanAccountToken:
        """
        Overwrites the supplied fields; blank fields keep their value.

        Raises:
            ResourceNotFoundError: If the account no longer exists
            ConflictError: If the new email belongs to another account
            ValidationError: If the new password is too long
        """
        account = await self.user_store.find_by_id(account_id)
        if account is None:
            raise ResourceNotFoundError(USER_NOT_FOUND_MESSAGE)

        changes = {}
        if not is_blank(name):
            changes["name"] = sanitize_input(name)
        if not is_blank(email) and email != account.email:
            existing = await self.user_store.find_by_email(email)
            if existing is not None and existing.id != account.id:
                raise ConflictError(USER_EXISTS_MESSAGE)
            changes["email"] = email
        if not is_blank(password):
            changes["password"] = await self.credentials.hash_password(password)

        if changes:
            updated = await self.user_store.update(account.id, changes)
            if updated is None:
                raise ResourceNotFoundError(USER_NOT_FOUND_MESSAGE)
            account = updated
            logger.info(
                f"Profile updated: {', '.join(sorted(changes))}",
                extra={"account_id": account.id}
            )

        return PlanAccountToken.from_account(account, self.credentials.create_token(account.id))

    async def wait_for_notifications(self) -> None:
        """
        Waits for scheduled receipt emails to finish. Used on shutdown.
        """
        if self._pending_notifications:
            await asyncio.gather(*list(self._pending_notifications), return_exceptions=True)

    @staticmethod
    def _require(**fields) -> None:
        missing = missing_fields(fields)
        if missing:
            raise ValidationError(MISSING_FIELDS_MESSAGE, details={"missing": missing})

    async def _verify_paid_session(self, session_id: str) -> PaymentVerification:
        try:
            payment = await self.checkout.verify_payment(session_id)
        except (ResourceNotFoundError, ExternalServiceError) as e:
            logger.info(
                f"Payment session rejected: {e.message}",
                extra={"session_id": session_id}
            )
            raise ValidationError(INVALID_PAYMENT_SESSION_MESSAGE)

        if not payment.is_paid:
            logger.info(
                f"Payment session not paid: {payment.payment_status}",
                extra={"session_id": session_id}
            )
            raise ValidationError(UNPAID_SESSION_MESSAGE)

        return payment

    def _schedule_confirmation(
        self,
        email: str,
        name: str,
        session_id: str,
        amount_cents: Optional[int],
    ) -> None:
        task = asyncio.create_task(
            self.notifier.send_payment_confirmation(
                email=email,
                name=name,
                session_id=session_id,
                amount_cents=amount_cents,
                currency=self.currency,
            )
        )
        self._pending_notifications.add(task)
        task.add_done_callback(lambda t: self._on_confirmation_done(t, email, session_id))

    def _on_confirmation_done(self, task: asyncio.Task, email: str, session_id: str) -> None:
        self._pending_notifications.discard(task)
        with LogContext(email=email, session_id=session_id):
            if task.cancelled():
                logger.warning("Confirmation email cancelled")
                return

            exc = task.exception()
            if exc is not None:
                logger.error(
                    f"Error sending confirmation email: {exc}",
                    exc_info=(type(exc), exc, exc.__traceback__)
                )
