"""
Shared fixtures: in-memory doubles for the store, Stripe and SMTP.
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from app.core.exceptions import ConflictError
from app.core.security import CredentialService
from app.main import app
from app.models.user import UserAccount
from app.services.account_service import AccountService
from app.services.checkout_service import CheckoutService
from app.services.notification_service import NotificationError
from app.services.payment_gateway import (
    CheckoutSession,
    CheckoutSessionNotFoundError,
    LineItem,
    PaymentGatewayError,
)


class InMemoryUserStore:
    """
    Mirrors MongoUserStore, including the unique email constraint.
    `blind_lookups` makes find_by_email miss, as in a check-then-create race.
    """

    def __init__(self):
        self.docs: Dict[str, dict] = {}
        self.blind_lookups = False

    def _account(self, doc: dict) -> UserAccount:
        return UserAccount.from_document(dict(doc))

    def _email_taken(self, email: str, exclude_id: Optional[str] = None) -> bool:
        return any(
            doc["email"] == email and key != exclude_id
            for key, doc in self.docs.items()
        )

    async def find_by_email(self, email: str) -> Optional[UserAccount]:
        if self.blind_lookups:
            return None
        for doc in self.docs.values():
            if doc["email"] == email:
                return self._account(doc)
        return None

    async def find_by_id(self, account_id: str) -> Optional[UserAccount]:
        doc = self.docs.get(account_id)
        return self._account(doc) if doc else None

    async def create(self, name, email, password_hash, has_paid_plan=False, payment_session_id=None):
        if self._email_taken(email):
            raise ConflictError("User already exists")
        now = datetime.now(timezone.utc)
        oid = ObjectId()
        doc = {
            "_id": oid,
            "name": name,
            "email": email,
            "password": password_hash,
            "has_paid_plan": has_paid_plan,
            "payment_session_id": payment_session_id,
            "created_at": now,
            "updated_at": now,
        }
        self.docs[str(oid)] = doc
        return self._account(doc)

    async def update(self, account_id: str, fields: dict) -> Optional[UserAccount]:
        doc = self.docs.get(account_id)
        if doc is None:
            return None
        if "email" in fields and self._email_taken(fields["email"], exclude_id=account_id):
            raise ConflictError("User already exists")
        doc.update(fields)
        doc["updated_at"] = datetime.now(timezone.utc)
        return self._account(doc)

    def by_email(self, email: str) -> List[dict]:
        return [doc for doc in self.docs.values() if doc["email"] == email]


class FakePaymentGateway:
    def __init__(self):
        self.sessions: Dict[str, CheckoutSession] = {}
        self.created: List[dict] = []
        self.retrieved: List[str] = []
        self.unavailable = False

    def add_session(
        self,
        session_id: str,
        payment_status: str = "paid",
        customer_email: Optional[str] = None,
        amount_total: int = 5000,
        user_id: str = "guest",
    ) -> CheckoutSession:
        session = CheckoutSession(
            id=session_id,
            url=f"https://checkout.stripe.test/{session_id}",
            payment_status=payment_status,
            customer_email=customer_email,
            amount_total=amount_total,
            currency="usd",
            metadata={"userId": user_id},
        )
        self.sessions[session_id] = session
        return session

    async def create_checkout_session(self, line_item: LineItem, metadata: dict, customer_email=None):
        if self.unavailable:
            raise PaymentGatewayError("Could not create checkout session")
        session_id = f"cs_test_{len(self.created) + 1}"
        self.created.append({
            "line_item": line_item,
            "metadata": metadata,
            "customer_email": customer_email,
        })
        session = self.add_session(session_id, payment_status="unpaid", user_id=metadata.get("userId"))
        return session

    async def retrieve_checkout_session(self, session_id: str) -> CheckoutSession:
        self.retrieved.append(session_id)
        if self.unavailable:
            raise PaymentGatewayError("Could not retrieve checkout session")
        if session_id not in self.sessions:
            raise CheckoutSessionNotFoundError(f"No checkout session {session_id}")
        return self.sessions[session_id]


class FakeNotifier:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent: List[dict] = []

    async def send_payment_confirmation(self, email, name, session_id, amount_cents, currency="usd"):
        if self.fail:
            raise NotificationError(f"Failed to send email to {email}: SMTP down")
        self.sent.append({
            "email": email,
            "name": name,
            "session_id": session_id,
            "amount_cents": amount_cents,
            "currency": currency,
        })


@pytest.fixture
def user_store():
    return InMemoryUserStore()


@pytest.fixture
def gateway():
    return FakePaymentGateway()


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def credentials():
    # Low bcrypt cost keeps the suite fast
    return CredentialService(secret="test-secret", expires_days=30, bcrypt_rounds=4)


@pytest.fixture
def line_item():
    return LineItem(
        name="Sleep Haven Personalized Plan",
        description="Personalized sleep plan with lifetime access and 24/7 support",
        unit_amount=5000,
        currency="usd",
        image_url="https://cdn.sleephaven.test/plan.png",
    )


@pytest.fixture
def checkout_service(gateway, user_store, line_item):
    return CheckoutService(gateway=gateway, user_store=user_store, line_item=line_item)


@pytest.fixture
def account_service(user_store, credentials, checkout_service, notifier):
    return AccountService(
        user_store=user_store,
        credentials=credentials,
        checkout=checkout_service,
        notifier=notifier,
    )


@pytest.fixture
def client(account_service, checkout_service, credentials):
    app.state.credentials = credentials
    app.state.checkout_service = checkout_service
    app.state.account_service = account_service
    yield TestClient(app, raise_server_exceptions=False)
    for name in ("credentials", "checkout_service", "account_service"):
        delattr(app.state, name)


@pytest.fixture
def auth_header(credentials):
    def _header(account_id: str) -> dict:
        return {"Authorization": f"Bearer {credentials.create_token(account_id)}"}
    return _header
