"""Email channel sender using aiosmtplib.

Supports:
- STARTTLS (port 587)
- Implicit SSL/TLS (port 465)
- Authentication when credentials are configured
- multipart/alternative bodies (plain text + HTML)
"""

from __future__ import annotations

import re
from datetime import UTC, datetime
from email.message import EmailMessage
from email.utils import format_datetime, formataddr, make_msgid
from typing import TYPE_CHECKING

import aiosmtplib

from notification_service.core.exceptions import InvalidDestinationError
from notification_service.features.notifications.channels.base import (
    BaseChannelSender,
    build_retry_policy,
)
from notification_service.features.notifications.schemas import Channel, EmailContent

if TYPE_CHECKING:
    from notification_service.core.settings import EmailSettings
    from notification_service.features.notifications.schemas import RenderedContent
    from notification_service.utils.retry import RetryPolicy

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class EmailSender(BaseChannelSender):
    """Sends rendered email content through one SMTP server.

    Example:
        sender = EmailSender(get_email_settings())
        outcome = await sender.send("client@example.com", content)
    """

    channel = Channel.EMAIL

    def __init__(self, settings: EmailSettings, retry_policy: RetryPolicy | None = None) -> None:
        super().__init__(retry_policy or build_retry_policy(settings))
        self._settings = settings
        if not settings.enabled:
            self.disable("email channel disabled")
        elif not settings.is_configured:
            self.disable("SMTP host is not configured")
        else:
            self._logger.info(
                "SMTP sender initialized",
                extra={
                    "host": settings.smtp_host,
                    "port": settings.smtp_port,
                    "use_tls": settings.use_tls,
                    "use_ssl": settings.use_ssl,
                    "auth": settings.requires_auth,
                },
            )

    def prepare_destination(self, destination: str) -> str:
        address = super().prepare_destination(destination)
        if not _EMAIL_RE.match(address):
            raise InvalidDestinationError(destination, "not an email address")
        return address

    def is_retryable(self, exc: Exception) -> bool:
        if isinstance(exc, aiosmtplib.SMTPAuthenticationError):
            return False
        if isinstance(exc, aiosmtplib.SMTPRecipientsRefused):
            return False
        if isinstance(exc, aiosmtplib.SMTPResponseException):
            # 4xx replies are transient, 5xx are permanent
            return 400 <= exc.code < 500
        if isinstance(exc, (aiosmtplib.SMTPConnectError, aiosmtplib.SMTPServerDisconnected, aiosmtplib.SMTPTimeoutError)):
            return True
        return super().is_retryable(exc)

    def build_message(self, to: str, content: EmailContent) -> EmailMessage:
        settings = self._settings
        from_email = str(settings.from_email)
        message = EmailMessage()
        message["From"] = formataddr((settings.from_name, from_email)) if settings.from_name else from_email
        message["To"] = to
        message["Subject"] = content.subject
        message["Date"] = format_datetime(datetime.now(UTC))
        message["Message-ID"] = make_msgid(domain=from_email.rpartition("@")[2] or None)
        message.set_content(content.text or " ")
        message.add_alternative(content.html, subtype="html")
        return message

    async def _send(self, destination: str, content: RenderedContent) -> str | None:
        if not isinstance(content, EmailContent):
            msg = f"email sender cannot send {type(content).__name__}"
            raise TypeError(msg)

        settings = self._settings
        message = self.build_message(destination, content)
        password = settings.smtp_password.get_secret_value() if settings.smtp_password else None

        await aiosmtplib.send(
            message,
            hostname=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_username,
            password=password,
            use_tls=settings.use_ssl,
            start_tls=settings.use_tls if not settings.use_ssl else False,
            timeout=settings.timeout,
        )
        return message["Message-ID"]
