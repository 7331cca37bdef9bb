"""Notification CLI commands.

This module provides CLI commands for operating the dispatch engine:
- Inspect the event routing table
- List and preview templates
- Normalize phone numbers
- Send a notification through the configured providers
"""

from __future__ import annotations

import json
import sys
from typing import Any

import click

from notification_service.cli.utils import (
    coro,
    error,
    header,
    info,
    outcome_line,
    success,
    warning,
)
from notification_service.core.exceptions import TemplateError
from notification_service.features.notifications.schemas import (
    Channel,
    EmailContent,
    Recipient,
    SmsContent,
)

_CHANNEL_CHOICE = click.Choice([c.value for c in Channel], case_sensitive=False)


def _parse_data(raw: str | None) -> dict[str, Any]:
    if not raw:
        return {}
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        msg = f"--data is not valid JSON: {exc}"
        raise click.BadParameter(msg) from exc
    if not isinstance(data, dict):
        msg = "--data must be a JSON object"
        raise click.BadParameter(msg)
    return data


@click.command(name="events")
def list_events() -> None:
    """List configured event types and their channel routing."""
    from notification_service.core.settings import get_notification_settings
    from notification_service.features.notifications.config import build_event_config_store

    store = build_event_config_store(get_notification_settings())

    header("Configured Events")
    for event_type in store.event_types():
        click.secho(f"\n{event_type}", bold=True)
        for channel in store.channels_for(event_type):
            config = store.get_config(event_type, channel)
            state = "on " if config.enabled else "off"
            click.echo(
                f"  {channel!s:<9} [{state}] template={config.template_id} "
                f"priority={config.priority} delay={config.delay_ms}ms",
            )


@click.command(name="templates")
def list_templates() -> None:
    """List registered templates per channel."""
    from notification_service.features.notifications.templates import get_template_renderer

    renderer = get_template_renderer()
    header("Registered Templates")
    for channel, template_ids in renderer.available_templates().items():
        click.secho(f"\n{channel}", bold=True)
        for template_id in template_ids:
            click.echo(f"  {template_id}")


@click.command(name="render")
@click.argument("template_id")
@click.option(
    "--channel",
    "-c",
    type=_CHANNEL_CHOICE,
    default=Channel.EMAIL.value,
    show_default=True,
    help="Channel whose template to render",
)
@click.option("--data", "-d", "raw_data", help="Template data as a JSON object")
def render_template(template_id: str, channel: str, raw_data: str | None) -> None:
    """Render TEMPLATE_ID with sample data and print the result.

    Examples:
    \b
      notification-service render case-update -d '{"first_name": "Amina", "case_title": "Estate of Mwangi", "status": "Active", "update_message": "Filed."}'
      notification-service render caseUpdate -c sms -d '{...}'
    """
    from notification_service.features.notifications.templates import TemplateRenderer

    data = _parse_data(raw_data)
    renderer = TemplateRenderer()

    try:
        content = renderer.render(template_id, data, channel=Channel(channel))
    except TemplateError as exc:
        error(exc.detail)
        sys.exit(1)

    header(f"{channel}:{template_id}")
    match content:
        case EmailContent(subject=subject, html=html, text=text):
            click.echo(f"Subject: {subject}\n")
            click.echo(text)
            click.secho("\n--- html ---", dim=True)
            click.echo(html)
        case SmsContent(text=text, length=length, max_length=max_length, exceeds_max_length=exceeds):
            click.echo(text)
            click.echo()
            if exceeds:
                warning(f"Length {length}/{max_length} exceeds the SMS limit")
            else:
                info(f"Length {length}/{max_length}")
        case _:
            click.echo(content.text)


@click.command(name="normalize-phone")
@click.argument("number")
@click.option("--country-code", default=None, help="Calling code for local numbers (default from settings)")
def normalize_phone(number: str, country_code: str | None) -> None:
    """Print NUMBER in canonical E.164 form."""
    from notification_service.core.settings import get_notification_settings
    from notification_service.utils.phone import is_valid_phone_number, normalize_phone_number

    code = country_code or get_notification_settings().default_country_code
    normalized = normalize_phone_number(number, code)
    if not is_valid_phone_number(normalized):
        error(f"{number!r} does not look like a phone number (got {normalized!r})")
        sys.exit(1)
    click.echo(normalized)


@click.command(name="send")
@click.argument("event_type")
@click.option("--email", "-e", default=None, help="Recipient email address")
@click.option("--phone", "-p", default=None, help="Recipient phone number")
@click.option("--name", "-n", "first_name", default=None, help="Recipient first name")
@click.option("--recipient-id", default="cli", show_default=True, help="Recipient identifier")
@click.option("--data", "-d", "raw_data", help="Template data as a JSON object")
@click.option(
    "--channel",
    "-c",
    "channels",
    type=_CHANNEL_CHOICE,
    multiple=True,
    help="Limit to these channels (repeatable)",
)
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON")
@coro
async def send_notification(
    event_type: str,
    email: str | None,
    phone: str | None,
    first_name: str | None,
    recipient_id: str,
    raw_data: str | None,
    channels: tuple[str, ...],
    as_json: bool,
) -> None:
    """Dispatch EVENT_TYPE through the configured providers.

    Exits non-zero when the event is unknown or any channel failed.

    Examples:
    \b
      notification-service send welcome -e amina@example.com -p 0712345678 -n Amina
      notification-service send hearingNotice -p 0712345678 -c sms -d '{...}'
    """
    from notification_service.features.notifications.factory import build_notification_dispatcher

    if not email and not phone:
        msg = "provide at least one of --email or --phone"
        raise click.UsageError(msg)

    data = _parse_data(raw_data)
    recipient = Recipient(id=recipient_id, first_name=first_name, email=email, phone=phone)
    dispatcher = build_notification_dispatcher()

    try:
        result = await dispatcher.dispatch(
            recipient,
            event_type,
            data,
            channels=[Channel(c) for c in channels] or None,
        )
    finally:
        await dispatcher.aclose()

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
    else:
        header(f"Dispatch: {event_type}")
        if result.error:
            error(result.error)
        for outcome in result.channels.values():
            outcome_line(outcome)
        click.echo()
        if result.ok and result.any_sent:
            success("Notification sent")
        elif result.ok:
            warning("Nothing was sent")

    if not result.ok:
        sys.exit(1)
