import pytest
import stripe

from app.services.payment_gateway import (
    CheckoutSession,
    CheckoutSessionNotFoundError,
    LineItem,
    PaymentGatewayError,
    StripePaymentGateway,
)


def stripe_session(values):
    return stripe.checkout.Session.construct_from(values, "sk_test_fake")


@pytest.fixture
def stripe_gateway():
    return StripePaymentGateway(
        api_key="sk_test_fake",
        success_url="https://app.test/payment-success?session_id={CHECKOUT_SESSION_ID}",
        cancel_url="https://app.test/payment-cancel",
    )


def test_from_stripe_prefers_customer_details_email():
    session = CheckoutSession.from_stripe(stripe_session({
        "id": "cs_1",
        "url": "https://checkout.stripe.com/c/cs_1",
        "payment_status": "paid",
        "customer_details": {"email": "details@example.com"},
        "customer_email": "prefill@example.com",
        "amount_total": 5000,
        "currency": "usd",
        "metadata": {"userId": "guest"},
    }))

    assert session.customer_email == "details@example.com"
    assert session.metadata == {"userId": "guest"}
    assert session.is_paid


def test_from_stripe_handles_missing_optional_fields():
    session = CheckoutSession.from_stripe(stripe_session({"id": "cs_2", "customer_details": None, "metadata": None}))

    assert session.customer_email is None
    assert session.metadata == {}
    assert not session.is_paid


@pytest.mark.asyncio
async def test_create_checkout_session_params(stripe_gateway, line_item, monkeypatch):
    captured = {}

    def fake_create(**kwargs):
        captured.update(kwargs)
        return stripe_session({
            "id": "cs_new",
            "url": "https://checkout.stripe.com/c/cs_new",
            "payment_status": "unpaid",
            "metadata": kwargs["metadata"],
        })

    monkeypatch.setattr(stripe.checkout.Session, "create", fake_create)

    session = await stripe_gateway.create_checkout_session(
        line_item=line_item,
        metadata={"userId": "guest"},
        customer_email="buyer@example.com",
    )

    assert session.url == "https://checkout.stripe.com/c/cs_new"
    assert captured["api_key"] == "sk_test_fake"
    assert captured["mode"] == "payment"
    assert captured["payment_method_types"] == ["card"]
    assert captured["customer_email"] == "buyer@example.com"
    assert captured["metadata"] == {"userId": "guest"}
    assert captured["success_url"].endswith("session_id={CHECKOUT_SESSION_ID}")
    assert captured["line_items"] == [line_item.to_stripe()]


@pytest.mark.asyncio
async def test_create_checkout_session_omits_blank_email(stripe_gateway, line_item, monkeypatch):
    captured = {}

    def fake_create(**kwargs):
        captured.update(kwargs)
        return stripe_session({"id": "cs_new", "url": "https://checkout.stripe.com/c/cs_new"})

    monkeypatch.setattr(stripe.checkout.Session, "create", fake_create)

    await stripe_gateway.create_checkout_session(line_item=line_item, metadata={"userId": "guest"})

    assert "customer_email" not in captured


@pytest.mark.asyncio
async def test_retrieve_unknown_session(stripe_gateway, monkeypatch):
    def fake_retrieve(session_id, **kwargs):
        raise stripe.InvalidRequestError("No such checkout.session: cs_x", "id")

    monkeypatch.setattr(stripe.checkout.Session, "retrieve", fake_retrieve)

    with pytest.raises(CheckoutSessionNotFoundError):
        await stripe_gateway.retrieve_checkout_session("cs_x")


@pytest.mark.asyncio
async def test_retrieve_connection_failure(stripe_gateway, monkeypatch):
    def fake_retrieve(session_id, **kwargs):
        raise stripe.APIConnectionError("Network down")

    monkeypatch.setattr(stripe.checkout.Session, "retrieve", fake_retrieve)

    with pytest.raises(PaymentGatewayError) as exc_info:
        await stripe_gateway.retrieve_checkout_session("cs_x")
    assert not isinstance(exc_info.value, CheckoutSessionNotFoundError)


def test_line_item_without_image():
    item = LineItem(name="Plan", description="Desc", unit_amount=5000)
    assert "images" not in item.to_stripe()["price_data"]["product_data"]


@pytest.mark.asyncio
async def test_retrieve_paid_session(stripe_gateway, monkeypatch):
    captured = {}

    def fake_retrieve(session_id, **kwargs):
        captured["session_id"] = session_id
        captured.update(kwargs)
        return stripe_session({
            "id": session_id,
            "payment_status": "paid",
            "customer_details": {"email": "buyer@example.com"},
            "amount_total": 5000,
            "currency": "usd",
            "metadata": {"userId": "64b7f0c2a1b2c3d4e5f60718"},
        })

    monkeypatch.setattr(stripe.checkout.Session, "retrieve", fake_retrieve)

    session = await stripe_gateway.retrieve_checkout_session("cs_1")

    assert captured == {"session_id": "cs_1", "api_key": "sk_test_fake"}
    assert session.is_paid
    assert session.customer_email == "buyer@example.com"
    assert session.amount_total == 5000
    assert session.metadata == {"userId": "64b7f0c2a1b2c3d4e5f60718"}


def test_from_stripe_accepts_plain_mapping():
    session = CheckoutSession.from_stripe({"id": "cs_3", "payment_status": "paid"})

    assert session.is_paid
    assert session.metadata == {}
