"""Unit tests for the email, SMS and WhatsApp senders.

No provider is contacted: aiosmtplib.send is patched, the Twilio client is a
MagicMock and WhatsApp traffic goes through httpx.MockTransport.
"""
from __future__ import annotations

import json
from unittest.mock import AsyncMock, MagicMock, patch

import aiosmtplib
import httpx
import pytest
from pydantic import SecretStr
from twilio.base.exceptions import TwilioException, TwilioRestException

from notification_service.core.settings import EmailSettings, SmsSettings, WhatsAppSettings
from notification_service.features.notifications.channels import (
    ChannelSender,
    EmailSender,
    SmsSender,
    WhatsAppSender,
)
from notification_service.features.notifications.channels.base import PROVIDER_UNAVAILABLE
from notification_service.features.notifications.schemas import (
    ChatContent,
    EmailContent,
    SmsContent,
)
from notification_service.utils.retry import RetryPolicy

EMAIL = EmailContent(subject="Hello", html="<p>Hello</p>", text="Hello")
SMS = SmsContent(text="Hello from LegalPro", length=19, max_length=160)
CHAT = ChatContent(text="Hello from LegalPro", length=19)


async def instant(_seconds: float) -> None:
    return None


def fast_policy(max_retries: int = 2) -> RetryPolicy:
    return RetryPolicy(max_retries=max_retries, sleep=instant)


# =============================================================================
# Email
# =============================================================================


@pytest.fixture
def email_settings() -> EmailSettings:
    return EmailSettings(
        enabled=True,
        smtp_host="smtp.example.com",
        smtp_port=587,
        smtp_username="mailer",
        smtp_password=SecretStr("secret"),
        from_email="noreply@legalpro.co.ke",
        from_name="LegalPro",
    )


@pytest.mark.unit
class TestEmailSender:
    """Test suite for EmailSender."""

    def test_satisfies_protocol(self, email_settings):
        assert isinstance(EmailSender(email_settings), ChannelSender)

    def test_disabled_without_host(self):
        sender = EmailSender(EmailSettings(enabled=True))

        assert not sender.available
        assert sender.disabled_reason == "SMTP host is not configured"

    def test_disabled_when_turned_off(self, email_settings):
        sender = EmailSender(email_settings.model_copy(update={"enabled": False}))
        assert not sender.available

    def test_build_message(self, email_settings):
        message = EmailSender(email_settings).build_message("amina@example.com", EMAIL)

        assert message["To"] == "amina@example.com"
        assert message["Subject"] == "Hello"
        assert message["From"] == "LegalPro <noreply@legalpro.co.ke>"
        assert message["Message-ID"].endswith("@legalpro.co.ke>")
        assert message.is_multipart()

    @pytest.mark.asyncio
    async def test_send_success(self, email_settings):
        sender = EmailSender(email_settings)

        with patch(
            "notification_service.features.notifications.channels.email.aiosmtplib.send",
            new_callable=AsyncMock,
        ) as mock_send:
            outcome = await sender.send("amina@example.com", EMAIL)

        assert outcome.success
        assert outcome.provider_id.startswith("<")
        mock_send.assert_awaited_once()
        kwargs = mock_send.call_args.kwargs
        assert kwargs["hostname"] == "smtp.example.com"
        assert kwargs["port"] == 587
        assert kwargs["username"] == "mailer"
        assert kwargs["password"] == "secret"
        assert kwargs["start_tls"] is True
        assert kwargs["use_tls"] is False

    @pytest.mark.asyncio
    async def test_invalid_address_not_sent(self, email_settings):
        sender = EmailSender(email_settings)

        with patch(
            "notification_service.features.notifications.channels.email.aiosmtplib.send",
            new_callable=AsyncMock,
        ) as mock_send:
            outcome = await sender.send("not-an-email", EMAIL)

        assert not outcome.success
        assert not outcome.retryable
        assert outcome.code == "invalid-destination"
        mock_send.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unavailable_sender_never_calls_provider(self):
        sender = EmailSender(EmailSettings(enabled=False))

        with patch(
            "notification_service.features.notifications.channels.email.aiosmtplib.send",
            new_callable=AsyncMock,
        ) as mock_send:
            outcome = await sender.send("amina@example.com", EMAIL)

        assert outcome.error == PROVIDER_UNAVAILABLE
        mock_send.assert_not_awaited()

    @pytest.mark.parametrize(
        ("exc", "retryable"),
        [
            (aiosmtplib.SMTPServerDisconnected("gone"), True),
            (aiosmtplib.SMTPConnectError("refused"), True),
            (aiosmtplib.SMTPResponseException(421, "try later"), True),
            (aiosmtplib.SMTPResponseException(550, "mailbox unavailable"), False),
            (aiosmtplib.SMTPAuthenticationError(535, "bad credentials"), False),
            (ValueError("bug"), False),
        ],
    )
    def test_error_classification(self, email_settings, exc, retryable):
        assert EmailSender(email_settings).is_retryable(exc) is retryable

    @pytest.mark.asyncio
    async def test_deliver_retries_transient_errors(self, email_settings):
        sender = EmailSender(email_settings, fast_policy(max_retries=2))

        with patch(
            "notification_service.features.notifications.channels.email.aiosmtplib.send",
            new_callable=AsyncMock,
            side_effect=[aiosmtplib.SMTPServerDisconnected("gone"), ({}, "OK")],
        ) as mock_send:
            report = await sender.deliver("amina@example.com", EMAIL)

        assert report.success
        assert report.attempts == 2
        assert report.retries == 1
        assert mock_send.await_count == 2

    @pytest.mark.asyncio
    async def test_deliver_stops_on_permanent_error(self, email_settings):
        sender = EmailSender(email_settings, fast_policy(max_retries=3))

        with patch(
            "notification_service.features.notifications.channels.email.aiosmtplib.send",
            new_callable=AsyncMock,
            side_effect=aiosmtplib.SMTPResponseException(550, "mailbox unavailable"),
        ) as mock_send:
            report = await sender.deliver("amina@example.com", EMAIL)

        assert not report.success
        assert not report.exhausted
        assert report.attempts == 1
        assert mock_send.await_count == 1


# =============================================================================
# SMS
# =============================================================================


@pytest.fixture
def sms_settings() -> SmsSettings:
    return SmsSettings(
        enabled=True,
        twilio_account_sid="AC123",
        twilio_auth_token=SecretStr("token"),
        from_number="+15550001111",
    )


@pytest.fixture
def twilio_client() -> MagicMock:
    client = MagicMock()
    client.messages.create.return_value = MagicMock(sid="SM123")
    return client


@pytest.mark.unit
class TestSmsSender:
    """Test suite for SmsSender."""

    @pytest.mark.asyncio
    async def test_send_normalizes_number(self, sms_settings, twilio_client):
        sender = SmsSender(sms_settings, client=twilio_client)

        outcome = await sender.send("0712 345 678", SMS)

        assert outcome.success
        assert outcome.provider_id == "SM123"
        twilio_client.messages.create.assert_called_once_with(
            to="+254712345678",
            from_="+15550001111",
            body="Hello from LegalPro",
        )

    @pytest.mark.asyncio
    async def test_trunk_zero_after_country_code(self, sms_settings, twilio_client):
        sender = SmsSender(sms_settings, client=twilio_client)

        await sender.send("+254 0712 345 678", SMS)

        assert twilio_client.messages.create.call_args.kwargs["to"] == "+254712345678"

    @pytest.mark.asyncio
    async def test_unassigned_number_rejected(self, sms_settings, twilio_client):
        sender = SmsSender(sms_settings, client=twilio_client)

        outcome = await sender.send("+254 12", SMS)

        assert outcome.code == "invalid-destination"
        twilio_client.messages.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_country_code(self, sms_settings, twilio_client):
        sender = SmsSender(sms_settings, client=twilio_client, country_code="255")

        await sender.send("0712345678", SMS)

        assert twilio_client.messages.create.call_args.kwargs["to"] == "+255712345678"

    @pytest.mark.asyncio
    async def test_invalid_number(self, sms_settings, twilio_client):
        sender = SmsSender(sms_settings, client=twilio_client)

        outcome = await sender.send("call me", SMS)

        assert outcome.code == "invalid-destination"
        twilio_client.messages.create.assert_not_called()

    def test_disabled_without_sender_number(self, twilio_client):
        sender = SmsSender(SmsSettings(enabled=True), client=twilio_client)
        assert sender.disabled_reason == "SMS sender number is not configured"

    def test_disabled_without_credentials(self):
        sender = SmsSender(SmsSettings(enabled=True, from_number="+15550001111"))
        assert not sender.available

    def test_client_setup_failure_disables(self, sms_settings):
        with patch(
            "notification_service.features.notifications.channels.sms.Client",
            side_effect=TwilioException("bad credentials"),
        ):
            sender = SmsSender(sms_settings)

        assert not sender.available
        assert "bad credentials" in sender.disabled_reason

    def test_client_built_from_settings(self, sms_settings):
        with patch("notification_service.features.notifications.channels.sms.Client") as mock_client:
            sender = SmsSender(sms_settings)

        assert sender.available
        mock_client.assert_called_once_with("AC123", "token")

    @pytest.mark.parametrize(
        ("status", "retryable"),
        [(429, True), (500, True), (503, True), (400, False), (404, False)],
    )
    def test_twilio_error_classification(self, sms_settings, twilio_client, status, retryable):
        sender = SmsSender(sms_settings, client=twilio_client)
        exc = TwilioRestException(status, "https://api.twilio.com/Messages", msg="error")

        assert sender.is_retryable(exc) is retryable

    @pytest.mark.asyncio
    async def test_deliver_exhausts_retries(self, sms_settings, twilio_client):
        twilio_client.messages.create.side_effect = TwilioRestException(
            503,
            "https://api.twilio.com/Messages",
            msg="unavailable",
        )
        sender = SmsSender(sms_settings, fast_policy(max_retries=2), client=twilio_client)

        report = await sender.deliver("0712345678", SMS)

        assert not report.success
        assert report.exhausted
        assert report.attempts == 3
        assert len(report.errors) == 3


# =============================================================================
# WhatsApp
# =============================================================================


@pytest.fixture
def whatsapp_settings() -> WhatsAppSettings:
    return WhatsAppSettings(
        enabled=True,
        access_token=SecretStr("wa-token"),
        phone_number_id="1234567890",
    )


def whatsapp_sender(settings: WhatsAppSettings, handler, **kwargs) -> WhatsAppSender:
    return WhatsAppSender(settings, transport=httpx.MockTransport(handler), **kwargs)


@pytest.mark.unit
class TestWhatsAppSender:
    """Test suite for WhatsAppSender."""

    @pytest.mark.asyncio
    async def test_send_posts_cloud_api_payload(self, whatsapp_settings):
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={"messages": [{"id": "wamid.ABC"}]})

        sender = whatsapp_sender(whatsapp_settings, handler)
        outcome = await sender.send("0712345678", CHAT)
        await sender.aclose()

        assert outcome.success
        assert outcome.provider_id == "wamid.ABC"
        (request,) = requests
        assert str(request.url) == "https://graph.facebook.com/v18.0/1234567890/messages"
        assert request.headers["Authorization"] == "Bearer wa-token"
        assert json.loads(request.content) == {
            "messaging_product": "whatsapp",
            "to": "254712345678",
            "type": "text",
            "text": {"body": "Hello from LegalPro"},
        }

    @pytest.mark.parametrize(
        ("status", "retryable"),
        [(400, False), (401, False), (408, True), (429, True), (500, True)],
    )
    @pytest.mark.asyncio
    async def test_error_status(self, whatsapp_settings, status, retryable):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(status, json={"error": {"message": "Recipient not allowed"}})

        sender = whatsapp_sender(whatsapp_settings, handler)
        outcome = await sender.send("0712345678", CHAT)

        assert not outcome.success
        assert outcome.retryable is retryable
        assert "Recipient not allowed" in outcome.error
        assert outcome.code == "provider-error"

    @pytest.mark.asyncio
    async def test_transport_error_is_retryable(self, whatsapp_settings):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        sender = whatsapp_sender(whatsapp_settings, handler)
        outcome = await sender.send("0712345678", CHAT)

        assert not outcome.success
        assert outcome.retryable

    @pytest.mark.asyncio
    async def test_deliver_retries_then_succeeds(self, whatsapp_settings):
        responses = iter(
            [
                httpx.Response(503, text="busy"),
                httpx.Response(200, json={"messages": [{"id": "wamid.XYZ"}]}),
            ],
        )

        def handler(request: httpx.Request) -> httpx.Response:
            return next(responses)

        sender = whatsapp_sender(whatsapp_settings, handler, retry_policy=fast_policy())
        report = await sender.deliver("+254712345678", CHAT)

        assert report.success
        assert report.outcome.provider_id == "wamid.XYZ"
        assert report.attempts == 2

    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(200, json=["queued"]),
            httpx.Response(200, json={"messages": "queued"}),
            httpx.Response(200, json={"messages": []}),
            httpx.Response(200, text="OK"),
        ],
    )
    @pytest.mark.asyncio
    async def test_accepted_with_unexpected_body(self, whatsapp_settings, response):
        def handler(request: httpx.Request) -> httpx.Response:
            return response

        sender = whatsapp_sender(whatsapp_settings, handler)
        outcome = await sender.send("0712345678", CHAT)

        assert outcome.success
        assert outcome.provider_id is None

    def test_disabled_without_credentials(self):
        sender = WhatsAppSender(WhatsAppSettings(enabled=True))
        assert not sender.available

    @pytest.mark.asyncio
    async def test_aclose_without_client(self):
        await WhatsAppSender(WhatsAppSettings(enabled=False)).aclose()
