"""Expiration parsing and freshness checks for credential records."""

import re
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

EXPIRATION_FIELD = "expiration"

# ECMAScript expanded years such as "+275760-09-13T00:00:00.000Z"
_EXPANDED_YEAR = re.compile(r"^([+-])\d{6}-")

_FAR_FUTURE = datetime.max.replace(tzinfo=timezone.utc)
_FAR_PAST = datetime.min.replace(tzinfo=timezone.utc)


def _parse_iso(value: str) -> Optional[datetime]:
    text = value.strip()
    if not text:
        return None

    expanded = _EXPANDED_YEAR.match(text)
    if expanded:
        return _FAR_FUTURE if expanded.group(1) == "+" else _FAR_PAST

    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"

    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_expiration(value: Any) -> Optional[datetime]:
    """
    Convert an expiration value into an aware UTC datetime.

    Accepts ISO-8601 strings, datetime objects and numeric epoch
    milliseconds. Booleans and anything else are rejected.

    Args:
        value: Raw expiration value from a credential record

    Returns:
        Aware datetime, or None if the value cannot be interpreted
    """
    if isinstance(value, bool) or value is None:
        return None

    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)

    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return _FAR_FUTURE if value > 0 else _FAR_PAST

    if isinstance(value, str):
        return _parse_iso(value)

    return None


def get_expiration(record: Any) -> Optional[datetime]:
    """Return the parsed ``expiration`` of a record mapping, if any."""
    if not isinstance(record, Mapping):
        return None
    return parse_expiration(record.get(EXPIRATION_FIELD))


def is_fresh(record: Any, now: Optional[datetime] = None) -> bool:
    """
    Check whether a credential record can still be used.

    A record is fresh only if its expiration is strictly after ``now``.
    Missing or unparsable expirations are never trusted.

    Args:
        record: Credential record mapping
        now: Reference time, defaults to the current UTC time

    Returns:
        True if the record is fresh, False otherwise
    """
    expiration = get_expiration(record)
    if expiration is None:
        return False

    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    return expiration > now
