"""Template definitions and the per-channel registry they live in."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar

from notification_service.core.exceptions import TemplateNotFoundError
from notification_service.features.notifications.schemas import Channel

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

DEFAULT_SMS_MAX_LENGTH = 160


@dataclass(frozen=True)
class EmailTemplate:
    """Email template.

    Attributes:
        template_id: Registry key, e.g. ``appointment-confirmation``.
        subject: Jinja2 subject line. ``data["subject"]`` overrides it.
        html: Jinja2 HTML body, rendered with autoescaping.
        text: Optional plain-text body. Derived from ``html`` when omitted.
        required_fields: Data keys that must be present and non-blank.
    """

    template_id: str
    subject: str
    html: str
    text: str | None = None
    required_fields: tuple[str, ...] = ()

    channel: ClassVar[Channel] = Channel.EMAIL


@dataclass(frozen=True)
class SmsTemplate:
    template_id: str
    text: str
    required_fields: tuple[str, ...] = ()
    # None falls back to the renderer's configured limit
    max_length: int | None = None

    channel: ClassVar[Channel] = Channel.SMS


@dataclass(frozen=True)
class ChatTemplate:
    template_id: str
    text: str
    required_fields: tuple[str, ...] = ()

    channel: ClassVar[Channel] = Channel.WHATSAPP


NotificationTemplate = EmailTemplate | SmsTemplate | ChatTemplate


class TemplateRegistry:
    """Templates keyed by ``(channel, template_id)``.

    The same id may be registered once per channel; registering it again on
    the same channel replaces the earlier definition.
    """

    def __init__(self, templates: Iterable[NotificationTemplate] = ()) -> None:
        self._templates: dict[tuple[Channel, str], NotificationTemplate] = {}
        for template in templates:
            self.register(template)

    def register(self, template: NotificationTemplate) -> None:
        self._templates[(template.channel, template.template_id)] = template

    def get(self, template_id: str, channel: Channel = Channel.EMAIL) -> NotificationTemplate:
        try:
            return self._templates[(channel, template_id)]
        except KeyError:
            raise TemplateNotFoundError(template_id, channel=str(channel)) from None

    def ids(self, channel: Channel) -> list[str]:
        return sorted(tid for (ch, tid) in self._templates if ch is channel)

    def __contains__(self, key: object) -> bool:
        return key in self._templates

    def __iter__(self) -> Iterator[NotificationTemplate]:
        return iter(self._templates.values())

    def __len__(self) -> int:
        return len(self._templates)
