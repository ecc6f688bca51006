import os
import sys

import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from petbook.schemas.appointment import Appointment, AppointmentStatus, PaymentStatus
from petbook.services import lifecycle
from petbook.services.exceptions import InvalidStateError, ValidationError


def _appt(status: str = "scheduled", payment: str = "unpaid") -> Appointment:
    return Appointment(
        appointment_id="APT-1",
        tenant_id="acc-1",
        customer_id="CUS-1",
        service_ids=["SRV-1"],
        date="2025-06-10",
        time="10:00",
        status=status,
        payment_status=payment,
    )


def test_new_appointment_defaults() -> None:
    appointment = Appointment(tenant_id="acc-1", customer_id="CUS-1", date="2025-06-10")

    assert appointment.status == AppointmentStatus.SCHEDULED
    assert appointment.payment_status == PaymentStatus.UNPAID


@pytest.mark.parametrize("current", [status.value for status in AppointmentStatus])
@pytest.mark.parametrize("target", [status.value for status in AppointmentStatus])
def test_any_status_can_move_to_any_other(current: str, target: str) -> None:
    original = _appt(current)

    updated = lifecycle.set_status(original, target)

    assert updated.status.value == target
    assert original.status.value == current
    assert updated.payment_status == original.payment_status


def test_unknown_status_is_a_validation_error() -> None:
    with pytest.raises(ValidationError) as excinfo:
        lifecycle.set_status(_appt(), "archived")

    assert excinfo.value.field == "status"


def test_transition_table_controls_allowed_moves(monkeypatch) -> None:
    monkeypatch.setitem(
        lifecycle.ALLOWED_TRANSITIONS,
        AppointmentStatus.CANCELLED,
        frozenset({AppointmentStatus.CANCELLED}),
    )

    with pytest.raises(InvalidStateError) as excinfo:
        lifecycle.set_status(_appt("cancelled"), "scheduled")

    assert excinfo.value.current == "cancelled"
    assert excinfo.value.requested == "scheduled"


def test_toggle_payment_flips_independently_of_status() -> None:
    completed = _appt("completed")

    paid = lifecycle.toggle_payment(completed)
    unpaid = lifecycle.toggle_payment(paid)

    assert paid.payment_status == PaymentStatus.PAID
    assert unpaid.payment_status == PaymentStatus.UNPAID
    assert paid.status == AppointmentStatus.COMPLETED
    assert completed.payment_status == PaymentStatus.UNPAID


@pytest.mark.parametrize("status", [status.value for status in AppointmentStatus])
def test_delete_guard_requires_cancelled(status: str) -> None:
    appointment = _appt(status)

    assert lifecycle.can_delete(appointment) is (status == "cancelled")
    if status == "cancelled":
        lifecycle.ensure_deletable(appointment)
    else:
        with pytest.raises(InvalidStateError) as excinfo:
            lifecycle.ensure_deletable(appointment)
        assert excinfo.value.current == status


def test_completed_and_cancelled_are_practically_terminal() -> None:
    assert lifecycle.PRACTICALLY_TERMINAL == {
        AppointmentStatus.COMPLETED,
        AppointmentStatus.CANCELLED,
    }
