"""Pytest configuration and shared fixtures.

Organization:
    - Environment: keep provider credentials out of the test run
    - Senders: FakeSender, an in-memory channel sender with scripted results
    - Dispatch fixtures: settings, renderer, config store and a dispatcher builder
"""

from __future__ import annotations

import asyncio
import os
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import pytest

from notification_service.core.settings import NotificationSettings, clear_settings_cache
from notification_service.features.notifications.channels.base import BaseChannelSender
from notification_service.features.notifications.channels.dispatcher import (
    NotificationDispatcher,
)
from notification_service.features.notifications.config import (
    DEFAULT_EVENTS,
    EventConfigStore,
    QuietHoursPolicy,
)
from notification_service.features.notifications.schemas import (
    Channel,
    ChannelConfig,
    Priority,
    Recipient,
)
from notification_service.features.notifications.templates import TemplateRenderer
from notification_service.utils.retry import RetryPolicy

if TYPE_CHECKING:
    from notification_service.features.notifications.schemas import RenderedContent

# Never reach real providers from the test suite
os.environ.setdefault("EMAIL_ENABLED", "false")
os.environ.setdefault("SMS_ENABLED", "false")
os.environ.setdefault("WHATSAPP_ENABLED", "false")
os.environ.setdefault("LOG_CONSOLE_ENABLED", "false")

# 15:00 in Nairobi, outside the default 22:00-07:00 quiet window
NOON_UTC = datetime(2025, 1, 15, 12, 0, tzinfo=UTC)
# 23:00 in Nairobi, inside the quiet window
NIGHT_UTC = datetime(2025, 1, 15, 20, 0, tzinfo=UTC)


async def no_sleep(_seconds: float) -> None:
    return None


# ============================================================================
# Senders
# ============================================================================


class FakeSender(BaseChannelSender):
    """Channel sender that records calls and replays scripted results.

    ``results`` items are provider ids (str) or exceptions to raise. Once the
    script runs out every call succeeds with a generated id. ``gate`` is an
    optional event the send waits on before completing.
    """

    def __init__(
        self,
        channel: Channel,
        *,
        results: list[Any] | None = None,
        available: bool = True,
        gate: asyncio.Event | None = None,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        self.channel = channel
        super().__init__(retry_policy or RetryPolicy(max_retries=0, sleep=no_sleep))
        self.calls: list[tuple[str, RenderedContent]] = []
        self.started = asyncio.Event()
        self.gate = gate
        self._results = list(results or [])
        if not available:
            self.disable("fake provider offline")

    async def _send(self, destination: str, content: RenderedContent) -> str | None:
        self.calls.append((destination, content))
        self.started.set()
        if self.gate is not None:
            await self.gate.wait()
        if self._results:
            item = self._results.pop(0)
            if isinstance(item, Exception):
                raise item
            return item
        return f"{self.channel}-{len(self.calls)}"


# ============================================================================
# Dispatch fixtures
# ============================================================================


@pytest.fixture
def fake_sender() -> type[FakeSender]:
    """The FakeSender class, for tests that script their own senders."""
    return FakeSender


@pytest.fixture
def noon() -> datetime:
    return NOON_UTC


@pytest.fixture
def night() -> datetime:
    return NIGHT_UTC


@pytest.fixture(autouse=True)
def _fresh_settings():
    """Drop cached settings between tests."""
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def notification_settings() -> NotificationSettings:
    return NotificationSettings(frontend_url="https://app.legalpro.test")


@pytest.fixture
def renderer(notification_settings: NotificationSettings) -> TemplateRenderer:
    return TemplateRenderer(settings=notification_settings)


@pytest.fixture
def recipient() -> Recipient:
    return Recipient(
        id="user-1",
        first_name="Amina",
        email="amina@example.com",
        phone="0712345678",
    )


@pytest.fixture
def welcome_store() -> EventConfigStore:
    """``welcome`` routed to email and SMS only, both immediate."""
    return EventConfigStore(
        {
            "welcome": {
                Channel.EMAIL: ChannelConfig(Channel.EMAIL, True, "welcome", Priority.HIGH),
                Channel.SMS: ChannelConfig(Channel.SMS, True, "welcome", Priority.MEDIUM),
            },
        },
    )


@pytest.fixture
def default_store() -> EventConfigStore:
    return EventConfigStore(DEFAULT_EVENTS)


@pytest.fixture
def senders() -> dict[Channel, FakeSender]:
    return {channel: FakeSender(channel) for channel in Channel}


@pytest.fixture
def make_dispatcher(senders, renderer, welcome_store):
    """Build a dispatcher; keyword arguments override the defaults."""

    def _make(**overrides: Any) -> NotificationDispatcher:
        options: dict[str, Any] = {
            "senders": senders,
            "renderer": renderer,
            "config_store": welcome_store,
            "quiet_hours": QuietHoursPolicy(enabled=False),
            "clock": lambda: NOON_UTC,
            "sleep": no_sleep,
        }
        options.update(overrides)
        return NotificationDispatcher(**options)

    return _make
