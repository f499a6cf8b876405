"""Timestamp helpers. Timestamps are stored as ISO 8601 strings in UTC."""

from datetime import date, datetime
from typing import Callable

import pytz

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(pytz.utc)


def utc_today(clock: Clock = utc_now) -> date:
    return clock().astimezone(pytz.utc).date()


def parse_timestamp(value: str) -> datetime:
    """Parse a stored ISO timestamp into an aware UTC datetime."""
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        return pytz.utc.localize(parsed)
    return parsed.astimezone(pytz.utc)
