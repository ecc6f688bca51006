from __future__ import annotations

import logging
from typing import Dict, FrozenSet, Union

from petbook.schemas.appointment import Appointment, AppointmentStatus, PaymentStatus
from petbook.services.exceptions import InvalidStateError, ValidationError

logger = logging.getLogger(__name__)

# Operators may move an appointment between any two statuses. Tighten the
# workflow by removing targets here.
ALLOWED_TRANSITIONS: Dict[AppointmentStatus, FrozenSet[AppointmentStatus]] = {
    status: frozenset(AppointmentStatus) for status in AppointmentStatus
}

# Never left automatically; callers should treat them as final.
PRACTICALLY_TERMINAL: FrozenSet[AppointmentStatus] = frozenset(
    {AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED}
)

DELETABLE_STATUSES: FrozenSet[AppointmentStatus] = frozenset({AppointmentStatus.CANCELLED})


def parse_status(value: Union[str, AppointmentStatus]) -> AppointmentStatus:
    try:
        return AppointmentStatus(value)
    except ValueError as exc:
        allowed = ", ".join(status.value for status in AppointmentStatus)
        raise ValidationError(
            f"Unknown appointment status '{value}'. Expected one of: {allowed}",
            field="status",
            cause=exc,
        ) from exc


def can_transition(current: AppointmentStatus, target: AppointmentStatus) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def set_status(appointment: Appointment, next_status: Union[str, AppointmentStatus]) -> Appointment:
    """Return a copy of ``appointment`` moved to ``next_status``."""
    target = parse_status(next_status)
    current = appointment.status
    if not can_transition(current, target):
        raise InvalidStateError(
            f"Cannot move appointment from '{current.value}' to '{target.value}'",
            current=current.value,
            requested=target.value,
        )
    if current in PRACTICALLY_TERMINAL and current != target:
        logger.info(
            "Appointment %s re-opened from %s to %s",
            appointment.appointment_id,
            current.value,
            target.value,
        )
    return appointment.model_copy(update={"status": target})


def toggle_payment(appointment: Appointment) -> Appointment:
    flipped = (
        PaymentStatus.UNPAID
        if appointment.payment_status == PaymentStatus.PAID
        else PaymentStatus.PAID
    )
    return appointment.model_copy(update={"payment_status": flipped})


def can_delete(appointment: Appointment) -> bool:
    return appointment.status in DELETABLE_STATUSES


def ensure_deletable(appointment: Appointment) -> None:
    if not can_delete(appointment):
        raise InvalidStateError(
            "Only cancelled appointments can be deleted",
            current=appointment.status.value,
            requested="delete",
        )
