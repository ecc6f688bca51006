"""Expansion of a recurring booking intent into concrete occurrence dates."""

from __future__ import annotations

import logging
import re
import uuid
from datetime import date
from typing import Callable, List, Optional

from dateutil.relativedelta import relativedelta

from petbook.schemas.appointment import (
    Appointment,
    AppointmentStatus,
    BookingIntent,
    BookingRequest,
    PaymentStatus,
    RecurrenceRule,
)
from petbook.services.exceptions import ValidationError
from petbook.services.temporal import format_hhmm, parse_clock_strict

logger = logging.getLogger(__name__)

DEFAULT_MAX_OCCURRENCES = 366

_STEP_DAYS = {"weekly": 7, "biweekly": 14}
_ICAL_WEEKDAYS = ["MO", "TU", "WE", "TH", "FR", "SA", "SU"]


def _parse_date(value: Optional[str], field: str) -> date:
    if not value:
        raise ValidationError(f"{field} is required", field=field)
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError as exc:
        raise ValidationError(f"{field} '{value}' is not a valid YYYY-MM-DD date", field=field, cause=exc) from exc


def occurrence_at(start: date, frequency: str, index: int) -> date:
    """Return the ``index``-th occurrence (0 based) counted from ``start``.

    Monthly steps are always taken from ``start`` so that a day-of-month clamped
    in a short month comes back in the following long month.
    """
    if frequency == "monthly":
        return start + relativedelta(months=index)
    try:
        step = _STEP_DAYS[frequency]
    except KeyError as exc:
        raise ValidationError(f"Unsupported recurrence frequency '{frequency}'", field="frequency") from exc
    return start + relativedelta(days=step * index)


def expand(intent: BookingIntent, *, max_occurrences: int = DEFAULT_MAX_OCCURRENCES) -> List[date]:
    """Return the ascending occurrence dates for ``intent``.

    Raises :class:`ValidationError` before producing anything when the intent is
    malformed or would exceed ``max_occurrences``.
    """
    start = _parse_date(intent.start_date, "start_date")
    if parse_clock_strict(intent.time) is None:
        raise ValidationError(f"time '{intent.time}' is not a valid HH:MM value", field="time")

    rule = intent.rule
    if not rule.enabled:
        return [start]

    if rule.end_mode == "after":
        count = rule.occurrence_count
        if count is None or count < 1:
            raise ValidationError("occurrence_count must be a positive integer", field="occurrence_count")
        if count > max_occurrences:
            raise ValidationError(
                f"occurrence_count {count} exceeds the maximum of {max_occurrences}",
                field="occurrence_count",
            )
        return [occurrence_at(start, rule.frequency, index) for index in range(count)]

    until = _parse_date(rule.until_date, "until_date")
    if until < start:
        raise ValidationError(
            f"until_date {until.isoformat()} is before start_date {start.isoformat()}",
            field="until_date",
        )

    occurrences: List[date] = []
    index = 0
    while True:
        candidate = occurrence_at(start, rule.frequency, index)
        if candidate > until:
            break
        if len(occurrences) >= max_occurrences:
            raise ValidationError(
                f"Recurrence until {until.isoformat()} yields more than {max_occurrences} occurrences",
                field="until_date",
            )
        occurrences.append(candidate)
        index += 1
    return occurrences


def build_recurrence_rule(frequency: str, start_date: str) -> Optional[str]:
    """Return the iCal rule string stored alongside a series."""
    try:
        start = date.fromisoformat(str(start_date).strip())
    except (TypeError, ValueError):
        return None

    by_day = _ICAL_WEEKDAYS[start.weekday()]
    if frequency == "weekly":
        return f"FREQ=WEEKLY;INTERVAL=1;BYDAY={by_day}"
    if frequency == "biweekly":
        return f"FREQ=WEEKLY;INTERVAL=2;BYDAY={by_day}"
    if frequency == "monthly":
        return f"FREQ=MONTHLY;INTERVAL=1;BYMONTHDAY={start.day}"
    return None


def parse_recurrence_frequency(rule: Optional[str]) -> Optional[str]:
    if not rule:
        return None
    freq_match = re.search(r"FREQ=([A-Z]+)", rule, re.IGNORECASE)
    interval_match = re.search(r"INTERVAL=(\d+)", rule, re.IGNORECASE)
    freq = freq_match.group(1).upper() if freq_match else None
    interval = int(interval_match.group(1)) if interval_match else 1
    if freq == "WEEKLY":
        return "biweekly" if interval == 2 else "weekly"
    if freq == "MONTHLY":
        return "monthly"
    return None


def build_series(
    request: BookingRequest,
    *,
    max_occurrences: int = DEFAULT_MAX_OCCURRENCES,
    series_id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
) -> List[Appointment]:
    """Expand ``request`` into unsaved appointments sharing one series id.

    A disabled rule, or an enabled one that yields a single date, produces a
    one-off appointment without a series.
    """
    dates = expand(request.intent, max_occurrences=max_occurrences)
    rule: RecurrenceRule = request.intent.rule
    series_id = series_id_factory() if rule.enabled and len(dates) > 1 else None
    rule_string = build_recurrence_rule(rule.frequency, request.intent.start_date) if series_id else None
    time_value = format_hhmm(request.intent.time)

    logger.info(
        "Expanded booking for customer %s into %d occurrence(s)", request.customer_id, len(dates)
    )
    return [
        Appointment(
            tenant_id=request.tenant_id,
            customer_id=request.customer_id,
            pet_id=request.pet_id,
            service_ids=list(request.service_ids),
            date=occurrence.isoformat(),
            time=time_value,
            duration_minutes=request.duration_minutes,
            status=AppointmentStatus.SCHEDULED,
            payment_status=PaymentStatus.UNPAID,
            notes=request.notes,
            series_id=series_id,
            series_occurrence=position if series_id else None,
            recurrence_rule=rule_string,
        )
        for position, occurrence in enumerate(dates, start=1)
    ]
