"""Jinja2 filters shared by all notification templates."""

from __future__ import annotations

import html
import re
from datetime import UTC, date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

_DATE_FORMATS = {
    "short": "%d/%m/%Y",
    "long": "%A, %d %B %Y",
    "time": "%H:%M",
    "datetime": "%d/%m/%Y, %H:%M:%S",
}

_STATUS_CLASSES = {
    "active": "active",
    "pending": "pending",
    "completed": "completed",
    "closed": "closed",
    "cancelled": "closed",
    "in progress": "active",
    "under review": "pending",
}

_BLOCK_END = re.compile(r"<\s*(br\s*/?|/p|/li|/h[1-6]|/div|/tr)\s*>", re.IGNORECASE)
_TAG = re.compile(r"<[^>]*>")
_SPACES = re.compile(r"[ \t\r\f\v]+")


def _coerce_date(value: Any) -> date | None:
    if isinstance(value, date):
        return value
    if isinstance(value, (int, float)):
        # Epoch milliseconds, as produced by JavaScript clients
        return datetime.fromtimestamp(value / 1000, tz=UTC)
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    return None


def format_date(value: Any, fmt: str = "short") -> str:
    """Format a date, datetime, ISO string or epoch-ms value.

    Unparseable strings are returned unchanged so free-form values like
    "Tomorrow" still read naturally.
    """
    if value is None or value == "":
        return ""
    parsed = _coerce_date(value)
    if parsed is None:
        return str(value)
    if fmt in ("time", "datetime") and not isinstance(parsed, datetime):
        parsed = datetime(parsed.year, parsed.month, parsed.day)
    return parsed.strftime(_DATE_FORMATS.get(fmt, _DATE_FORMATS["short"]))


def format_currency(amount: Any, currency: str = "KES") -> str:
    if not amount:
        return f"{currency} 0"
    try:
        value = Decimal(str(amount).replace(",", ""))
    except InvalidOperation:
        return f"{currency} {amount}"
    if value == value.to_integral_value():
        return f"{currency} {int(value):,}"
    return f"{currency} {value:,.2f}"


def status_class(status: Any) -> str:
    """Map a case status to a CSS modifier."""
    if not isinstance(status, str) or not status:
        return "pending"
    return _STATUS_CLASSES.get(status.lower(), "pending")


def truncate_text(text: Any, length: int = 100) -> str:
    if not text:
        return ""
    text = str(text)
    if len(text) <= length:
        return text
    return text[:length] + "..."


def html_to_text(markup: str) -> str:
    """Reduce an HTML body to readable plain text, one block per line."""
    text = _BLOCK_END.sub("\n", markup)
    text = _TAG.sub("", text)
    text = html.unescape(text)
    lines = (_SPACES.sub(" ", line).strip() for line in text.splitlines())
    return "\n".join(line for line in lines if line)


FILTERS = {
    "format_date": format_date,
    "format_currency": format_currency,
    "status_class": status_class,
    "truncate_text": truncate_text,
}
