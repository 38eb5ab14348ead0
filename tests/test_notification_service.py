import smtplib

import pytest

from app.services.notification_service import (
    EmailNotificationService,
    NotificationError,
    render_receipt_email,
)


def test_receipt_email_contents():
    msg = render_receipt_email(
        to_email="sam@example.com",
        from_email="hello@sleephaven.test",
        name="Sam <script>",
        payment_id="cs_paid_1",
        amount_cents=5000,
        currency="usd",
        item="Sleep Haven Personalized Plan",
        site_url="https://www.sleephaven.ai",
    )

    assert msg["To"] == "sam@example.com"
    assert msg["Subject"] == "Welcome to Sleep Haven - Your Account & Receipt"

    text = msg.get_body(preferencelist=("plain",)).get_content()
    html_body = msg.get_body(preferencelist=("html",)).get_content()
    assert "cs_paid_1" in text
    assert "$50.00" in text
    assert "$50.00" in html_body
    assert "Sam &lt;script&gt;" in html_body
    assert "www.sleephaven.ai</a>" in html_body


@pytest.mark.asyncio
async def test_unconfigured_transport_raises():
    service = EmailNotificationService(
        host="smtp.test", port=465, username=None, password=None,
        site_url="https://www.sleephaven.ai", product_name="Plan",
    )

    with pytest.raises(NotificationError):
        await service.send_payment_confirmation("sam@example.com", "Sam", "cs_1", 5000)


@pytest.mark.asyncio
async def test_smtp_failure_raises_notification_error(monkeypatch):
    service = EmailNotificationService(
        host="smtp.test", port=465, username="user", password="pass",
        site_url="https://www.sleephaven.ai", product_name="Plan",
    )

    def broken_deliver(msg):
        raise smtplib.SMTPAuthenticationError(535, b"bad credentials")

    monkeypatch.setattr(service, "_deliver", broken_deliver)

    with pytest.raises(NotificationError, match="sam@example.com"):
        await service.send_payment_confirmation("sam@example.com", "Sam", "cs_1", 5000)


@pytest.mark.asyncio
async def test_successful_delivery(monkeypatch):
    service = EmailNotificationService(
        host="smtp.test", port=465, username="user", password="pass",
        site_url="https://www.sleephaven.ai", product_name="Plan",
    )
    delivered = []
    monkeypatch.setattr(service, "_deliver", delivered.append)

    await service.send_payment_confirmation("sam@example.com", "Sam", "cs_1", 5000)

    assert len(delivered) == 1
    assert delivered[0]["To"] == "sam@example.com"
