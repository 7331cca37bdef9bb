"""SMS channel sender backed by the Twilio REST API."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

from twilio.base.exceptions import TwilioException, TwilioRestException
from twilio.rest import Client

from notification_service.core.exceptions import InvalidDestinationError
from notification_service.features.notifications.channels.base import (
    BaseChannelSender,
    build_retry_policy,
)
from notification_service.features.notifications.schemas import Channel
from notification_service.utils.phone import (
    DEFAULT_COUNTRY_CODE,
    is_valid_phone_number,
    normalize_phone_number,
)

if TYPE_CHECKING:
    from notification_service.core.settings import SmsSettings
    from notification_service.features.notifications.schemas import RenderedContent
    from notification_service.utils.retry import RetryPolicy


class SmsSender(BaseChannelSender):
    """Sends short text messages through Twilio.

    The Twilio client is synchronous, so each call runs in a worker thread.
    A ``client`` can be injected; otherwise one is built from settings and a
    construction failure disables the sender.
    """

    channel = Channel.SMS

    def __init__(
        self,
        settings: SmsSettings,
        retry_policy: RetryPolicy | None = None,
        *,
        client: Any | None = None,
        country_code: str = DEFAULT_COUNTRY_CODE,
    ) -> None:
        super().__init__(retry_policy or build_retry_policy(settings))
        self._settings = settings
        self._country_code = country_code
        self._client = client

        if not settings.enabled:
            self.disable("sms channel disabled")
        elif not settings.from_number:
            self.disable("SMS sender number is not configured")
        elif self._client is None:
            if not settings.is_configured:
                self.disable("Twilio credentials are not configured")
            else:
                try:
                    self._client = Client(
                        settings.twilio_account_sid,
                        settings.twilio_auth_token.get_secret_value(),
                    )
                except TwilioException as exc:
                    self.disable(f"Twilio client setup failed: {exc}")

    def prepare_destination(self, destination: str) -> str:
        number = normalize_phone_number(destination, self._country_code)
        if not is_valid_phone_number(number):
            raise InvalidDestinationError(destination, "not a valid phone number")
        return number

    def is_retryable(self, exc: Exception) -> bool:
        if isinstance(exc, TwilioRestException):
            return exc.status == 429 or exc.status >= 500
        return super().is_retryable(exc)

    async def _send(self, destination: str, content: RenderedContent) -> str | None:
        message = await asyncio.to_thread(
            self._client.messages.create,
            to=destination,
            from_=self._settings.from_number,
            body=content.text,
        )
        return message.sid
