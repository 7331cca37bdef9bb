"""Jinja2 template rendering for notifications with validation and sandboxing."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

from jinja2 import Template, TemplateSyntaxError, UndefinedError
from jinja2.sandbox import SandboxedEnvironment

from notification_service.core.exceptions import (
    TemplateError,
    TemplateRenderError,
    TemplateValidationError,
)
from notification_service.features.notifications.metrics import (
    notification_sms_length_exceeded_total,
)
from notification_service.features.notifications.schemas import (
    Channel,
    ChatContent,
    EmailContent,
    RenderedContent,
    SmsContent,
)
from notification_service.features.notifications.templates.filters import (
    FILTERS,
    html_to_text,
)
from notification_service.features.notifications.templates.library import (
    build_default_registry,
)
from notification_service.features.notifications.templates.registry import (
    DEFAULT_SMS_MAX_LENGTH,
    ChatTemplate,
    EmailTemplate,
    NotificationTemplate,
    SmsTemplate,
    TemplateRegistry,
)
from notification_service.infra.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Mapping

    from notification_service.core.settings import NotificationSettings


class TemplateRenderer:
    """Jinja2 template renderer with security sandboxing and validation.

    Uses SandboxedEnvironment to prevent arbitrary code execution. HTML bodies
    are autoescaped; subjects, SMS and chat text are rendered verbatim.
    Required fields are checked before any template is evaluated.
    """

    def __init__(
        self,
        registry: TemplateRegistry | None = None,
        *,
        settings: NotificationSettings | None = None,
        sms_max_length: int = DEFAULT_SMS_MAX_LENGTH,
    ) -> None:
        self._logger = get_logger(__name__)
        self._registry = registry if registry is not None else build_default_registry()
        self._sms_max_length = sms_max_length

        if settings is None:
            from notification_service.core.settings import get_notification_settings

            settings = get_notification_settings()
        self._frontend_url = settings.frontend_url.rstrip("/")
        self._defaults: dict[str, Any] = {
            "company_name": settings.company_name,
            "support_email": settings.support_email,
            "support_phone": settings.support_phone,
            "website_url": self._frontend_url,
            "dashboard_url": f"{self._frontend_url}/dashboard",
        }

        self._html_env = self._make_env(autoescape=True)
        self._text_env = self._make_env(autoescape=False)
        self._compiled: dict[tuple[Channel, str, str], Template] = {}

    @property
    def registry(self) -> TemplateRegistry:
        return self._registry

    def _make_env(self, *, autoescape: bool) -> SandboxedEnvironment:
        env = SandboxedEnvironment(autoescape=autoescape, trim_blocks=True, lstrip_blocks=True)
        env.filters.update(FILTERS)
        env.globals["dashboard_link"] = self.dashboard_link
        return env

    def dashboard_link(self, path: str = "") -> str:
        return f"{self._frontend_url}/dashboard{path}"

    def default_context(self) -> dict[str, Any]:
        return {**self._defaults, "current_year": datetime.now().year}

    def render(
        self,
        template_id: str,
        data: Mapping[str, Any] | None = None,
        *,
        channel: Channel = Channel.EMAIL,
    ) -> RenderedContent:
        """Render ``template_id`` for ``channel``.

        Args:
            template_id: Registered template id.
            data: Template variables. Caller values win over the defaults.
            channel: Which channel's template to use.

        Returns:
            EmailContent, SmsContent or ChatContent depending on the channel.

        Raises:
            TemplateNotFoundError: If the id is not registered for the channel.
            TemplateValidationError: If required fields are missing or blank.
            TemplateRenderError: If Jinja2 fails to compile or evaluate the template.
        """
        channel = Channel(channel)
        template = self._registry.get(template_id, channel)
        context = {**self.default_context(), **(data or {})}
        self._validate_context(template, context)

        try:
            match template:
                case EmailTemplate():
                    content: RenderedContent = self._render_email(template, context)
                case SmsTemplate():
                    content = self._render_sms(template, context)
                case ChatTemplate():
                    text = self._render_part(template, "text", template.text, context).strip()
                    content = ChatContent(text=text, length=len(text))
        except TemplateError:
            raise
        except UndefinedError as exc:
            msg = f"Missing variable in template {template_id}: {exc}"
            raise TemplateRenderError(msg, template_id=template_id) from exc
        except TemplateSyntaxError as exc:
            msg = f"Syntax error in template {template_id}: {exc}"
            raise TemplateRenderError(msg, template_id=template_id) from exc
        except Exception as exc:
            msg = f"Failed to render template {template_id}: {exc}"
            raise TemplateRenderError(msg, template_id=template_id) from exc

        self._logger.debug(
            f"Rendered template {template_id} for channel {channel}",
            extra={"template_id": template_id, "channel": str(channel)},
        )
        return content

    def _validate_context(self, template: NotificationTemplate, context: Mapping[str, Any]) -> None:
        missing = [f for f in template.required_fields if context.get(f) is None]
        invalid = [
            f
            for f in template.required_fields
            if isinstance(context.get(f), str) and not context[f].strip()
        ]
        if missing or invalid:
            raise TemplateValidationError(template.template_id, missing=missing, invalid=invalid)

    def _compile(self, template: NotificationTemplate, part: str, source: str) -> Template:
        key = (template.channel, template.template_id, part)
        compiled = self._compiled.get(key)
        if compiled is None:
            env = self._html_env if part == "html" else self._text_env
            compiled = env.from_string(source)
            self._compiled[key] = compiled
        return compiled

    def _render_part(
        self,
        template: NotificationTemplate,
        part: str,
        source: str,
        context: Mapping[str, Any],
    ) -> str:
        return self._compile(template, part, source).render(**context)

    def _render_email(self, template: EmailTemplate, context: Mapping[str, Any]) -> EmailContent:
        if context.get("subject"):
            subject = str(context["subject"])
        else:
            subject = self._render_part(template, "subject", template.subject, context)
        html = self._render_part(template, "html", template.html, context)
        if template.text:
            text = self._render_part(template, "text", template.text, context).strip()
        else:
            text = html_to_text(html)
        return EmailContent(subject=" ".join(subject.split()), html=html, text=text)

    def _render_sms(self, template: SmsTemplate, context: Mapping[str, Any]) -> SmsContent:
        text = self._render_part(template, "text", template.text, context).strip()
        max_length = template.max_length or self._sms_max_length
        exceeds = len(text) > max_length
        if exceeds:
            notification_sms_length_exceeded_total.inc()
            self._logger.warning(
                f"SMS message exceeds max length ({len(text)}/{max_length})",
                extra={"template_id": template.template_id, "length": len(text), "max_length": max_length},
            )
        return SmsContent(text=text, length=len(text), max_length=max_length, exceeds_max_length=exceeds)

    def available_templates(self) -> dict[str, list[str]]:
        """Registered template ids grouped by channel."""
        return {str(channel): self._registry.ids(channel) for channel in Channel}

    def clear_cache(self) -> None:
        self._compiled.clear()
        self._logger.info("Template cache cleared")


# Singleton instance
_renderer: TemplateRenderer | None = None


def get_template_renderer() -> TemplateRenderer:
    """Get or create the singleton TemplateRenderer instance."""
    global _renderer
    if _renderer is None:
        _renderer = TemplateRenderer()
    return _renderer
