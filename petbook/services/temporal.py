"""Date and time normalisation helpers shared by the scheduling services.

Appointments carry a calendar ``date`` and a local wall-clock ``time`` with no
timezone. Everything here works on naive local values: aware datetimes are
converted to the host's local time and then stripped of their tzinfo.
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime, time
from typing import Optional, Union

logger = logging.getLogger(__name__)

_DAY_KEY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TIME_RE = re.compile(r"(\d{1,2}):(\d{2})")
_STRICT_TIME_RE = re.compile(r"(\d{1,2}):(\d{2})(?::[0-5]\d)?")

DateLike = Union[str, date, datetime, None]


def to_local_naive(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def to_day_key(value: DateLike) -> Optional[str]:
    """Return the ``YYYY-MM-DD`` day key for ``value`` or ``None``.

    Strings already in day-key shape pass through untouched. Timestamps are
    truncated to their local calendar date.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return to_local_naive(value).date().isoformat()
    if isinstance(value, date):
        return value.isoformat()

    text = str(value).strip()
    if not text:
        return None
    if _DAY_KEY_RE.match(text):
        return text
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return None
    return to_local_naive(parsed).date().isoformat()


def parse_day_key(day_key: str) -> Optional[date]:
    try:
        return date.fromisoformat(day_key)
    except (TypeError, ValueError):
        return None


def parse_time_of_day(value: Optional[str]) -> Optional[time]:
    """Extract the first ``H:MM`` / ``HH:MM`` time found in ``value``."""
    if not value:
        return None
    match = _TIME_RE.search(str(value))
    if not match:
        return None
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        return None
    return time(hour=hours, minute=minutes)


def parse_clock_strict(value: Optional[str]) -> Optional[time]:
    """Parse a whole ``H:MM`` / ``HH:MM[:SS]`` value; anything else is rejected."""
    if not value:
        return None
    match = _STRICT_TIME_RE.fullmatch(str(value).strip())
    if not match:
        return None
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        return None
    return time(hour=hours, minute=minutes)


def combine_day_and_time(day_key: str, value: Optional[str]) -> Optional[datetime]:
    """Combine a day key with a wall-clock string; ``None`` when either is unusable."""
    day = parse_day_key(day_key)
    clock = parse_time_of_day(value)
    if day is None or clock is None:
        if value:
            logger.debug("Ignoring malformed appointment time %r on %s", value, day_key)
        return None
    return datetime.combine(day, clock)


def format_hhmm(value: Optional[str]) -> str:
    """Pad a ``H:M`` style value to ``HH:MM``; falls back to the first five characters."""
    if not value:
        return ""
    safe = value.strip()
    parts = safe.split(":")
    if len(parts) >= 2:
        return f"{parts[0].strip().zfill(2)}:{parts[1].strip().zfill(2)}"
    return safe[:5]


def coerce_now(value: Union[str, datetime, None]) -> datetime:
    if value is None:
        return datetime.now()
    if isinstance(value, datetime):
        return to_local_naive(value)
    return to_local_naive(datetime.fromisoformat(str(value).replace("Z", "+00:00")))


def today_local_iso() -> str:
    return date.today().isoformat()
