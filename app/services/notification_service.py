"""
app/services/notification_service.py

Purpose: Transactional email

- Renders the welcome + receipt email sent after a paid registration
- Delivers it over SMTP (SSL) in a worker thread
- Raises NotificationError on failure; callers decide whether it matters
"""

import asyncio
import html
import smtplib
from email.message import EmailMessage
from typing import Optional

from app.core.config import settings
from app.core.logging import get_logger
from utils.constants import WELCOME_EMAIL_SUBJECT, WELCOME_EMAIL_HTML, WELCOME_EMAIL_TEXT
from utils.time_utils import format_amount, format_receipt_date, utcnow

logger = get_logger(__name__)


class NotificationError(Exception):
    """Raised when an email could not be delivered."""
    pass


def render_receipt_email(
    to_email: str,
    from_email: str,
    name: str,
    payment_id: str,
    amount_cents: Optional[int],
    currency: str,
    item: str,
    site_url: str,
) -> EmailMessage:
    """
    Builds the welcome/receipt message with a plain-text fallback.
    """
    now = utcnow()
    values = {
        "name": name,
        "payment_id": payment_id,
        "amount": format_amount(amount_cents, currency),
        "date": format_receipt_date(now),
        "item": item,
        "site_url": site_url,
        "year": now.year,
    }

    msg = EmailMessage()
    msg["Subject"] = WELCOME_EMAIL_SUBJECT
    msg["From"] = from_email
    msg["To"] = to_email
    msg.set_content(WELCOME_EMAIL_TEXT.format(**values))

    escaped = {k: html.escape(str(v)) for k, v in values.items()}
    escaped["site_label"] = html.escape(site_url.split("://", 1)[-1].rstrip("/"))
    msg.add_alternative(WELCOME_EMAIL_HTML.format(**escaped), subtype="html")
    return msg


class EmailNotificationService:
    """
    Sends transactional email through an SMTP server.
    """

    def __init__(
        self,
        host: str,
        port: int,
        username: Optional[str],
        password: Optional[str],
        site_url: str,
        product_name: str,
        timeout: float = 10.0,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.site_url = site_url
        self.product_name = product_name
        self.timeout = timeout

    def is_configured(self) -> bool:
        return bool(self.username and self.password)

    async def send_payment_confirmation(
        self,
        email: str,
        name: str,
        session_id: str,
        amount_cents: Optional[int],
        currency: str = "usd",
    ) -> None:
        """
        Sends the welcome + receipt email.

        Raises:
            NotificationError: If SMTP is not configured or delivery fails
        """
        if not self.is_configured():
            raise NotificationError("Email transport is not configured")

        msg = render_receipt_email(
            to_email=email,
            from_email=self.username,
            name=name,
            payment_id=session_id,
            amount_cents=amount_cents,
            currency=currency,
            item=self.product_name,
            site_url=self.site_url,
        )

        try:
            await asyncio.to_thread(self._deliver, msg)
        except (smtplib.SMTPException, OSError) as e:
            raise NotificationError(f"Failed to send email to {email}: {e}") from e

        logger.info(f"Confirmation email sent to {email}", extra={"email": email})

    def _deliver(self, msg: EmailMessage) -> None:
        with smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout) as smtp:
            smtp.login(self.username, self.password)
            smtp.send_message(msg)


def build_notification_service() -> EmailNotificationService:
    return EmailNotificationService(
        host=settings.SMTP_HOST,
        port=settings.SMTP_PORT,
        username=settings.EMAIL_USER,
        password=settings.EMAIL_PASS,
        site_url=settings.SITE_URL,
        product_name=settings.PRODUCT_NAME,
    )
