"""Phone number helpers for SMS and WhatsApp destinations.

Parsing and validation go through ``phonenumbers`` (Google's libphonenumber).
Numbers are reduced to a single E.164 form before they reach a provider:

    >>> normalize_phone_number("0712 345 678")
    '+254712345678'
    >>> normalize_phone_number("+254 0712 345 678")
    '+254712345678'
"""

from __future__ import annotations

import re
from urllib.parse import quote

import phonenumbers

DEFAULT_COUNTRY_CODE = "254"

_DIALABLE = re.compile(r"[^\d+]")


def region_for_country_code(country_code: str) -> str:
    """Map a calling code such as ``"254"`` to its main region (``"KE"``).

    Unknown codes map to ``"ZZ"``.
    """
    code = country_code.lstrip("+")
    if not code.isdigit():
        return phonenumbers.UNKNOWN_REGION
    return phonenumbers.region_code_for_country_code(int(code))


def _prefix_country_code(compact: str, country_code: str) -> str:
    # International dialing prefix (00 / 000) written instead of "+"
    if compact.startswith("00"):
        return "+" + compact.lstrip("0")
    if compact.startswith("+"):
        return compact
    # Full number written without "+", or a bare subscriber number
    if compact.startswith(country_code) and len(compact) > len(country_code) + 8:
        return f"+{compact}"
    if len(compact) == 9:
        return f"+{country_code}{compact}"
    return compact


def parse_phone_number(
    value: str | None,
    country_code: str = DEFAULT_COUNTRY_CODE,
) -> phonenumbers.PhoneNumber | None:
    """Parse ``value``, reading local numbers as belonging to ``country_code``.

    Returns ``None`` when the input cannot be read as a phone number at all.
    """
    if not value:
        return None
    code = country_code.lstrip("+")
    compact = _DIALABLE.sub("", value)
    if not compact.strip("+"):
        return None

    candidate = _prefix_country_code(compact, code)
    try:
        return phonenumbers.parse(candidate, region_for_country_code(code))
    except phonenumbers.NumberParseException:
        return None


def normalize_phone_number(value: str | None, country_code: str = DEFAULT_COUNTRY_CODE) -> str:
    """Return ``value`` in E.164 form, or ``""`` when it cannot be parsed.

    A trunk ``0`` written after the country code is dropped, so
    ``+254 0712 345 678`` and ``+44 (0)20 7946 0958`` come out as the numbers
    their owners would dial. Applying the function to its own output returns
    the same string.
    """
    parsed = parse_phone_number(value, country_code)
    if parsed is None:
        return ""
    return phonenumbers.format_number(parsed, phonenumbers.PhoneNumberFormat.E164)


def is_valid_phone_number(value: str | None, country_code: str = DEFAULT_COUNTRY_CODE) -> bool:
    """Check that ``value`` is a dialable number for its region."""
    parsed = parse_phone_number(value, country_code)
    return parsed is not None and phonenumbers.is_valid_number(parsed)


def is_kenyan_mobile(value: str) -> bool:
    """Check for a Kenyan mobile line (Safaricom, Airtel, Telkom ``07xx``/``01xx``)."""
    parsed = parse_phone_number(value)
    if parsed is None or parsed.country_code != 254:
        return False
    return phonenumbers.number_type(parsed) == phonenumbers.PhoneNumberType.MOBILE


def whatsapp_chat_url(phone: str, message: str = "") -> str:
    """Build a ``wa.me`` click-to-chat link, optionally prefilled with ``message``."""
    number = normalize_phone_number(phone).lstrip("+")
    url = f"https://wa.me/{number}"
    if message:
        url = f"{url}?text={quote(message)}"
    return url
