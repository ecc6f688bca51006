"""Bucketing and chronological ordering of appointments for listings.

Read-side code: a malformed record never raises here. Unparsable times count
as upcoming on their own day (so same-day work stays visible) but are kept out
of the past bucket.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time
from typing import Callable, Iterable, List, Optional, Tuple, Union

from petbook.schemas.appointment import Appointment, AppointmentStatus, PaymentStatus
from petbook.services.temporal import (
    combine_day_and_time,
    coerce_now,
    parse_time_of_day,
    to_day_key,
)

logger = logging.getLogger(__name__)

UnpaidPredicate = Callable[[Appointment, datetime], bool]

_CLOSED_STATUSES = {AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED}
_OVERDUE_ACTIVE_STATUSES = {AppointmentStatus.IN_PROGRESS, AppointmentStatus.CONFIRMED}


def appointment_datetime(appointment: Appointment) -> Optional[datetime]:
    day_key = to_day_key(appointment.date)
    if day_key is None:
        return None
    return combine_day_and_time(day_key, appointment.time)


def is_unpaid_past_or_completed(appointment: Appointment, now: datetime) -> bool:
    """Default predicate for the ``unpaid`` bucket.

    Completed work dated today or earlier counts regardless of the clock;
    otherwise the appointment must already have started.
    """
    if appointment.payment_status == PaymentStatus.PAID:
        return False
    if appointment.status == AppointmentStatus.CANCELLED:
        return False
    day_key = to_day_key(appointment.date)
    if day_key is None:
        return False
    today_key = now.date().isoformat()
    if appointment.status == AppointmentStatus.COMPLETED:
        return day_key <= today_key
    starts_at = combine_day_and_time(day_key, appointment.time)
    if starts_at is None:
        return day_key < today_key
    return starts_at < now


def _is_upcoming(appointment: Appointment, day_key: str, today: str, now: datetime) -> bool:
    if appointment.status in _CLOSED_STATUSES:
        return False
    if day_key > today:
        return True
    if day_key < today:
        return appointment.status in _OVERDUE_ACTIVE_STATUSES
    if appointment.status == AppointmentStatus.IN_PROGRESS:
        return True
    starts_at = combine_day_and_time(day_key, appointment.time)
    if starts_at is None:
        return True
    return starts_at >= now


def _is_past(appointment: Appointment, day_key: str, today: str, now: datetime) -> bool:
    if day_key < today:
        return True
    if day_key > today:
        return False
    starts_at = combine_day_and_time(day_key, appointment.time)
    if starts_at is None:
        return False
    return starts_at < now


def classify(
    items: Iterable[Appointment],
    mode: str,
    today: Union[str, date],
    now: Union[str, datetime, None] = None,
    *,
    unpaid_predicate: Optional[UnpaidPredicate] = None,
    pending_only: bool = False,
) -> List[Appointment]:
    """Return the members of ``items`` that belong to the ``mode`` bucket.

    ``today`` is the caller's local day key and ``now`` the local clock; both
    are explicit so results are reproducible. Input order is preserved.
    """
    if mode not in ("upcoming", "past", "unpaid"):
        raise ValueError(f"Unknown filter mode '{mode}'")
    today_key = to_day_key(today)
    if today_key is None:
        raise ValueError(f"today '{today}' is not a valid day key")
    current = coerce_now(now)
    predicate = unpaid_predicate or is_unpaid_past_or_completed

    selected: List[Appointment] = []
    for appointment in items:
        if pending_only and appointment.status != AppointmentStatus.PENDING:
            continue

        if mode == "unpaid":
            if predicate(appointment, current):
                selected.append(appointment)
            continue

        day_key = to_day_key(appointment.date)
        if day_key is None:
            logger.debug("Skipping appointment %s without a usable date", appointment.appointment_id)
            continue

        if mode == "upcoming" and _is_upcoming(appointment, day_key, today_key, current):
            selected.append(appointment)
        elif mode == "past" and _is_past(appointment, day_key, today_key, current):
            selected.append(appointment)
    return selected


def _sort_key(appointment: Appointment) -> Tuple[int, str, time]:
    day_key = to_day_key(appointment.date)
    if day_key is None:
        return (1, "", time.min)
    return (0, day_key, parse_time_of_day(appointment.time) or time.min)


def sort_ascending(items: Iterable[Appointment]) -> List[Appointment]:
    """Stable chronological sort by ``(day, time)``.

    Missing or bad times sort as midnight of their day; appointments without a
    usable date go last, in their original order.
    """
    return sorted(items, key=_sort_key)


def count_overdue_unpaid(items: Iterable[Appointment], today: Union[str, date]) -> int:
    """Count completed appointments dated on or before ``today`` that are still unpaid."""
    today_key = to_day_key(today)
    if today_key is None:
        return 0
    total = 0
    for appointment in items:
        if appointment.status != AppointmentStatus.COMPLETED:
            continue
        if appointment.payment_status == PaymentStatus.PAID:
            continue
        day_key = to_day_key(appointment.date)
        if day_key is not None and day_key <= today_key:
            total += 1
    return total
