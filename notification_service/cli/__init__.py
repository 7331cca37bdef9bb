"""Command-line interface for the notification service."""
