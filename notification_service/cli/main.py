"""Main CLI entry point for notification-service commands."""

import click

from notification_service import __version__
from notification_service.cli.commands import notifications
from notification_service.infra.logging.config import setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="notification-service")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Notification Service CLI - inspect and exercise the dispatch engine.

    \b
    Commands:
      events           Event types and their channel routing
      templates        Registered templates per channel
      render           Render a template with sample data
      normalize-phone  Canonical E.164 form of a phone number
      send             Dispatch an event through the configured providers

    \b
    Quick Start:
      notification-service events
      notification-service render welcome -d '{"first_name": "Amina"}'
      notification-service send welcome -e amina@example.com -n Amina
    """
    ctx.ensure_object(dict)


cli.add_command(notifications.list_events)
cli.add_command(notifications.list_templates)
cli.add_command(notifications.render_template)
cli.add_command(notifications.normalize_phone)
cli.add_command(notifications.send_notification)


def main() -> None:
    """Entry point for CLI."""
    setup_logging()
    cli(obj={})


if __name__ == "__main__":
    main()
