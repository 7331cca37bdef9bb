"""Template rendering for multi-channel notifications.

Provides Jinja2-based rendering of email (subject, HTML, plain text), SMS and
WhatsApp chat templates, keyed by channel and template id.
"""

from __future__ import annotations

from notification_service.features.notifications.templates.library import (
    BUILTIN_TEMPLATES,
    build_default_registry,
)
from notification_service.features.notifications.templates.registry import (
    ChatTemplate,
    EmailTemplate,
    NotificationTemplate,
    SmsTemplate,
    TemplateRegistry,
)
from notification_service.features.notifications.templates.renderer import (
    TemplateRenderer,
    get_template_renderer,
)

__all__ = [
    "BUILTIN_TEMPLATES",
    "ChatTemplate",
    "EmailTemplate",
    "NotificationTemplate",
    "SmsTemplate",
    "TemplateRegistry",
    "TemplateRenderer",
    "build_default_registry",
    "get_template_renderer",
]
