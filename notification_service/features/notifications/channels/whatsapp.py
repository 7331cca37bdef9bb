"""WhatsApp channel sender using the WhatsApp Business Cloud API."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx

from notification_service.core.exceptions import InvalidDestinationError, ProviderError
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
    from notification_service.core.settings import WhatsAppSettings
    from notification_service.features.notifications.schemas import RenderedContent
    from notification_service.utils.retry import RetryPolicy

_RETRYABLE_STATUS = frozenset({408, 429})


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    return response.text[:200]


class WhatsAppSender(BaseChannelSender):
    """Sends text messages via ``POST /{phone_number_id}/messages``.

    Owns a single ``httpx.AsyncClient``; call ``aclose()`` on shutdown.
    """

    channel = Channel.WHATSAPP

    def __init__(
        self,
        settings: WhatsAppSettings,
        retry_policy: RetryPolicy | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        country_code: str = DEFAULT_COUNTRY_CODE,
    ) -> None:
        super().__init__(retry_policy or build_retry_policy(settings))
        self._settings = settings
        self._country_code = country_code
        self._client: httpx.AsyncClient | None = None

        if not settings.enabled:
            self.disable("whatsapp channel disabled")
        elif not settings.is_configured:
            self.disable("WhatsApp access token or phone number id is not configured")
        else:
            self._client = httpx.AsyncClient(
                base_url=settings.api_base_url,
                timeout=settings.timeout,
                transport=transport,
                headers={
                    "Authorization": f"Bearer {settings.access_token.get_secret_value()}",
                    "Content-Type": "application/json",
                },
            )

    def prepare_destination(self, destination: str) -> str:
        number = normalize_phone_number(destination, self._country_code)
        if not is_valid_phone_number(number):
            raise InvalidDestinationError(destination, "not a valid phone number")
        return number

    def is_retryable(self, exc: Exception) -> bool:
        if isinstance(exc, httpx.TransportError):
            return True
        return super().is_retryable(exc)

    def build_payload(self, destination: str, text: str) -> dict[str, Any]:
        return {
            "messaging_product": "whatsapp",
            "to": destination.lstrip("+"),
            "type": "text",
            "text": {"body": text},
        }

    async def _send(self, destination: str, content: RenderedContent) -> str | None:
        response = await self._client.post(
            f"/{self._settings.phone_number_id}/messages",
            json=self.build_payload(destination, content.text),
        )
        if response.is_error:
            status = response.status_code
            raise ProviderError(
                f"WhatsApp API returned {status}: {_error_message(response)}",
                retryable=status in _RETRYABLE_STATUS or status >= 500,
                extra={"status_code": status},
            )

        # Accepted from here on; a malformed body only loses the message id
        try:
            body = response.json()
        except ValueError:
            return None
        messages = body.get("messages") if isinstance(body, dict) else None
        if not isinstance(messages, list) or not messages or not isinstance(messages[0], dict):
            return None
        return messages[0].get("id")

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
