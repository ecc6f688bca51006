import os
import sys
from datetime import datetime

import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from petbook.schemas.appointment import Appointment
from petbook.services.classifier import (
    classify,
    count_overdue_unpaid,
    is_unpaid_past_or_completed,
    sort_ascending,
)

TODAY = "2025-06-10"
NOW = datetime(2025, 6, 10, 9, 0)

STATUSES = ["scheduled", "pending", "in_progress", "confirmed", "completed", "cancelled"]


def _appt(
    appointment_id: str,
    day: str,
    time: str | None = "10:00",
    status: str = "scheduled",
    payment: str = "unpaid",
) -> Appointment:
    return Appointment(
        appointment_id=appointment_id,
        tenant_id="acc-1",
        customer_id="CUS-1",
        service_ids=["SRV-1"],
        date=day,
        time=time,
        status=status,
        payment_status=payment,
    )


def _ids(items):
    return [item.appointment_id for item in items]


def test_same_day_earlier_time_is_past_not_upcoming() -> None:
    item = _appt("a", "2025-06-10", "08:30")

    assert _ids(classify([item], "past", TODAY, NOW)) == ["a"]
    assert classify([item], "upcoming", TODAY, NOW) == []


def test_upcoming_rules() -> None:
    items = [
        _appt("future", "2025-06-11", "08:00"),
        _appt("future-done", "2025-06-11", status="completed"),
        _appt("future-cancelled", "2025-06-12", status="cancelled"),
        _appt("overdue-scheduled", "2025-06-09"),
        _appt("overdue-confirmed", "2025-06-09", status="confirmed"),
        _appt("overdue-running", "2025-06-01", status="in_progress"),
        _appt("later-today", "2025-06-10", "09:00"),
        _appt("earlier-today-running", "2025-06-10", "07:00", status="in_progress"),
        _appt("earlier-today", "2025-06-10", "07:00", status="confirmed"),
    ]

    assert _ids(classify(items, "upcoming", TODAY, NOW)) == [
        "future",
        "overdue-confirmed",
        "overdue-running",
        "later-today",
        "earlier-today-running",
    ]


def test_past_rules() -> None:
    items = [
        _appt("yesterday", "2025-06-09", "23:00"),
        _appt("yesterday-done", "2025-06-09", status="completed"),
        _appt("earlier-today", "2025-06-10", "08:59"),
        _appt("now", "2025-06-10", "09:00"),
        _appt("tomorrow", "2025-06-11", "07:00"),
    ]

    assert _ids(classify(items, "past", TODAY, NOW)) == [
        "yesterday",
        "yesterday-done",
        "earlier-today",
    ]


@pytest.mark.parametrize("time", ["soon", None, "99:99"])
def test_unparsable_same_day_time_fails_open_for_upcoming_only(time) -> None:
    item = _appt("odd", "2025-06-10", time)

    assert _ids(classify([item], "upcoming", TODAY, NOW)) == ["odd"]
    assert classify([item], "past", TODAY, NOW) == []


def test_undated_items_are_left_out_of_time_buckets() -> None:
    item = _appt("undated", "someday")

    assert classify([item], "upcoming", TODAY, NOW) == []
    assert classify([item], "past", TODAY, NOW) == []


def test_timestamp_dates_are_truncated_to_day() -> None:
    item = _appt("stamped", "2025-06-11T00:00:00", "08:00")

    assert _ids(classify([item], "upcoming", TODAY, NOW)) == ["stamped"]


def test_pending_only_applies_to_every_mode() -> None:
    items = [
        _appt("pending-future", "2025-06-12", status="pending"),
        _appt("scheduled-future", "2025-06-12"),
        _appt("pending-past", "2025-06-01", status="pending"),
        _appt("scheduled-past", "2025-06-01"),
    ]

    assert _ids(classify(items, "upcoming", TODAY, NOW, pending_only=True)) == ["pending-future"]
    assert _ids(classify(items, "past", TODAY, NOW, pending_only=True)) == ["pending-past"]
    assert _ids(classify(items, "unpaid", TODAY, NOW, pending_only=True)) == ["pending-past"]


def test_unpaid_uses_default_predicate() -> None:
    items = [
        _appt("done-later-today", "2025-06-10", "18:00", status="completed"),
        _appt("done-paid", "2025-06-09", status="completed", payment="paid"),
        _appt("missed", "2025-06-09"),
        _appt("cancelled", "2025-06-09", status="cancelled"),
        _appt("tomorrow", "2025-06-11"),
        _appt("done-tomorrow", "2025-06-11", status="completed"),
    ]

    assert _ids(classify(items, "unpaid", TODAY, NOW)) == ["done-later-today", "missed"]
    assert is_unpaid_past_or_completed(items[0], NOW) is True


def test_unpaid_applies_caller_predicate() -> None:
    items = [_appt("a", "2025-06-09"), _appt("b", "2025-06-30")]

    result = classify(
        items,
        "unpaid",
        TODAY,
        NOW,
        unpaid_predicate=lambda appointment, now: appointment.date > now.date().isoformat(),
    )

    assert _ids(result) == ["b"]


def test_past_includes_overdue_active_work() -> None:
    items = [
        _appt("conf", "2025-06-09", status="confirmed"),
        _appt("run", "2025-06-09", status="in_progress"),
        _appt("run-today", "2025-06-10", "08:00", status="in_progress"),
    ]

    assert _ids(classify(items, "past", TODAY, NOW)) == ["conf", "run", "run-today"]
    assert _ids(classify(items, "upcoming", TODAY, NOW)) == ["conf", "run", "run-today"]


def test_upcoming_and_past_overlap_only_on_active_work() -> None:
    slots = [
        ("2025-06-09", "10:00"),
        ("2025-06-10", "08:00"),
        ("2025-06-10", "09:00"),
        ("2025-06-10", "11:00"),
        ("2025-06-10", "n/a"),
        ("2025-06-11", "08:00"),
    ]
    items = [
        _appt(f"{day}-{time}-{status}", day, time, status=status)
        for day, time in slots
        for status in STATUSES
    ]

    upcoming = set(_ids(classify(items, "upcoming", TODAY, NOW)))
    past = set(_ids(classify(items, "past", TODAY, NOW)))

    assert upcoming & past == {
        "2025-06-09-10:00-in_progress",
        "2025-06-09-10:00-confirmed",
        "2025-06-10-08:00-in_progress",
    }
    for item in items:
        if item.status.value in ("completed", "cancelled"):
            assert item.appointment_id not in upcoming
            continue
        assert item.appointment_id in upcoming | past


def test_classify_accepts_iso_now_and_rejects_bad_input() -> None:
    item = _appt("a", "2025-06-10", "08:30")

    assert _ids(classify([item], "past", TODAY, "2025-06-10T09:00:00")) == ["a"]
    with pytest.raises(ValueError):
        classify([item], "archived", TODAY, NOW)
    with pytest.raises(ValueError):
        classify([item], "past", "yesterday", NOW)


def test_sort_orders_by_day_then_time() -> None:
    items = [
        _appt("c", "2025-06-11", "08:00"),
        _appt("b", "2025-06-10", "14:00"),
        _appt("a", "2025-06-10", "9:15"),
        _appt("d", "2025-06-12", "07:00"),
    ]

    assert _ids(sort_ascending(items)) == ["a", "b", "c", "d"]


def test_sort_is_stable_and_idempotent() -> None:
    items = [
        _appt("second-day", "2025-06-11", "10:00"),
        _appt("tie-1", "2025-06-10", "10:00"),
        _appt("bad-time", "2025-06-10", "whenever"),
        _appt("undated-1", ""),
        _appt("tie-2", "2025-06-10", "10:00"),
        _appt("midnight", "2025-06-10", "00:00"),
        _appt("undated-2", "not a date"),
    ]

    once = sort_ascending(items)
    twice = sort_ascending(once)

    assert _ids(once) == [
        "bad-time",
        "midnight",
        "tie-1",
        "tie-2",
        "second-day",
        "undated-1",
        "undated-2",
    ]
    assert _ids(twice) == _ids(once)


def test_count_overdue_unpaid() -> None:
    items = [
        _appt("a", "2025-06-10", "18:00", status="completed"),
        _appt("b", "2025-06-01", status="completed", payment="paid"),
        _appt("c", "2025-06-02", status="completed"),
        _appt("d", "2025-06-11", status="completed"),
        _appt("e", "2025-06-02"),
    ]

    assert count_overdue_unpaid(items, TODAY) == 2
