import pytest

from app.core.exceptions import ExternalServiceError, ResourceNotFoundError


@pytest.mark.asyncio
async def test_guest_checkout_without_email_is_tagged_guest(checkout_service, gateway):
    url = await checkout_service.create_guest_checkout_session()

    assert url.startswith("https://checkout.stripe.test/")
    assert gateway.created[0]["metadata"] == {"userId": "guest"}
    assert gateway.created[0]["customer_email"] is None


@pytest.mark.asyncio
async def test_guest_checkout_forwards_email(checkout_service, gateway):
    await checkout_service.create_guest_checkout_session("buyer@example.com")

    assert gateway.created[0]["metadata"] == {"userId": "guest"}
    assert gateway.created[0]["customer_email"] == "buyer@example.com"


@pytest.mark.asyncio
async def test_checkout_uses_fixed_line_item(checkout_service, gateway):
    await checkout_service.create_guest_checkout_session()

    item = gateway.created[0]["line_item"].to_stripe()
    assert item["quantity"] == 1
    assert item["price_data"]["unit_amount"] == 5000
    assert item["price_data"]["currency"] == "usd"
    assert item["price_data"]["product_data"]["name"] == "Sleep Haven Personalized Plan"
    assert item["price_data"]["product_data"]["images"] == ["https://cdn.sleephaven.test/plan.png"]


@pytest.mark.asyncio
async def test_checkout_for_known_user(checkout_service, gateway, user_store):
    account = await user_store.create("Jane", "jane@example.com", "hash")

    await checkout_service.create_checkout_session(account.id)

    assert gateway.created[0]["metadata"] == {"userId": account.id}


@pytest.mark.asyncio
async def test_checkout_without_requester_is_guest(checkout_service, gateway):
    await checkout_service.create_checkout_session(None)
    assert gateway.created[0]["metadata"] == {"userId": "guest"}


@pytest.mark.asyncio
async def test_checkout_for_unknown_user_skips_gateway(checkout_service, gateway):
    with pytest.raises(ResourceNotFoundError, match="User not found"):
        await checkout_service.create_checkout_session("64b7f0c2a1b2c3d4e5f60718")
    assert gateway.created == []


@pytest.mark.asyncio
async def test_checkout_gateway_failure(checkout_service, gateway):
    gateway.unavailable = True
    with pytest.raises(ExternalServiceError):
        await checkout_service.create_guest_checkout_session()


@pytest.mark.asyncio
async def test_verify_payment_reports_session_state(checkout_service, gateway):
    gateway.add_session("cs_1", payment_status="paid", customer_email="c@example.com", amount_total=5000, user_id="guest")

    result = await checkout_service.verify_payment("cs_1")

    assert result.model_dump(by_alias=True) == {
        "paymentStatus": "paid",
        "customerEmail": "c@example.com",
        "amountTotal": 5000,
        "userId": "guest",
    }
    assert result.is_paid


@pytest.mark.asyncio
async def test_verify_payment_does_not_fail_unpaid(checkout_service, gateway):
    gateway.add_session("cs_2", payment_status="unpaid")

    result = await checkout_service.verify_payment("cs_2")

    assert result.payment_status == "unpaid"
    assert not result.is_paid


@pytest.mark.asyncio
async def test_verify_unknown_session(checkout_service):
    with pytest.raises(ResourceNotFoundError, match="Payment session not found"):
        await checkout_service.verify_payment("cs_nope")
