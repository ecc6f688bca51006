from __future__ import annotations

import logging
from typing import Any, List, Optional

from petbook.clients.backend import BackendClient
from petbook.schemas.appointment import (
    Appointment,
    AppointmentListRequest,
    AppointmentListResponse,
    BookingIntent,
    BookingRequest,
    OccurrencePreviewResponse,
    OverdueCountResponse,
    SeriesBookingResponse,
    SeriesOccurrencesResponse,
)
from petbook.services import classifier, lifecycle, recurrence
from petbook.services.exceptions import NotFoundError, ServiceError, ValidationError
from petbook.services.mock_store import AppointmentRepository, get_mock_store
from petbook.services.temporal import coerce_now, to_day_key, today_local_iso

logger = logging.getLogger(__name__)


def _extract_items(data: Any) -> List[dict]:
    if isinstance(data, list):
        return [item for item in data if isinstance(item, dict)]
    if isinstance(data, dict):
        for key in ("items", "data", "appointments"):
            nested = data.get(key)
            if isinstance(nested, list):
                return [item for item in nested if isinstance(item, dict)]
    return []


class AppointmentService:
    def __init__(
        self,
        client: BackendClient,
        *,
        repository: AppointmentRepository | None = None,
        max_occurrences: int = recurrence.DEFAULT_MAX_OCCURRENCES,
    ) -> None:
        self._client = client
        self._repository = repository
        self._max_occurrences = max_occurrences
        if self._client.use_mock_data:
            self._repository = repository or get_mock_store().appointments

    def _require_repository(self) -> AppointmentRepository:
        if not self._repository:
            raise RuntimeError("Mock appointment repository not configured")
        return self._repository

    async def preview(self, intent: BookingIntent) -> OccurrencePreviewResponse:
        dates = recurrence.expand(intent, max_occurrences=self._max_occurrences)
        rule = (
            recurrence.build_recurrence_rule(intent.rule.frequency, intent.start_date)
            if intent.rule.enabled
            else None
        )
        return OccurrencePreviewResponse(
            dates=[value.isoformat() for value in dates],
            recurrence_rule=rule,
        )

    async def book(self, request: BookingRequest) -> SeriesBookingResponse:
        logger.info(
            "Booking appointment(s) for customer %s in tenant %s",
            request.customer_id,
            request.tenant_id,
        )
        occurrences = recurrence.build_series(request, max_occurrences=self._max_occurrences)
        series_id = occurrences[0].series_id if occurrences else None
        rule = occurrences[0].recurrence_rule if occurrences else None

        created: List[Appointment] = []
        failure: Optional[ServiceError] = None
        for occurrence in occurrences:
            try:
                created.append(await self._create(occurrence))
            except ServiceError as exc:
                logger.warning(
                    "Stopped series %s after %d of %d occurrence(s): %s",
                    series_id,
                    len(created),
                    len(occurrences),
                    exc,
                )
                failure = exc
                break

        if failure is not None and not created:
            raise failure

        partial = len(created) < len(occurrences)
        message = (
            f"Only {len(created)} of {len(occurrences)} occurrences were saved."
            if partial
            else None
        )
        return SeriesBookingResponse(
            series_id=series_id,
            recurrence_rule=rule,
            expected=len(occurrences),
            created=len(created),
            partial=partial,
            message=message,
            appointments=created,
        )

    async def list(self, request: AppointmentListRequest) -> AppointmentListResponse:
        logger.info("Listing %s appointments for tenant %s", request.mode, request.tenant_id)
        today = request.today or today_local_iso()
        try:
            now = coerce_now(request.now)
        except ValueError as exc:
            raise ValidationError(f"now '{request.now}' is not an ISO datetime", field="now", cause=exc) from exc
        items = await self._fetch_all(request.tenant_id)
        try:
            selected = classifier.classify(
                items,
                request.mode,
                today,
                now,
                pending_only=request.pending_only,
            )
        except ValueError as exc:
            raise ValidationError(str(exc), field="today", cause=exc) from exc
        ordered = classifier.sort_ascending(selected)
        return AppointmentListResponse(
            mode=request.mode,
            today=today,
            total=len(ordered),
            items=ordered,
        )

    async def overdue_count(self, tenant_id: str, today: str | None = None) -> OverdueCountResponse:
        """Count completed work dated on or before ``today`` that is still unpaid."""
        logger.info("Counting overdue unpaid appointments for tenant %s", tenant_id)
        today_key = to_day_key(today or today_local_iso())
        if today_key is None:
            raise ValidationError(f"today '{today}' is not a valid day key", field="today")
        items = await self._fetch_all(tenant_id)
        return OverdueCountResponse(
            tenant_id=tenant_id,
            today=today_key,
            count=classifier.count_overdue_unpaid(items, today_key),
        )

    async def get(self, appointment_id: str) -> Appointment:
        if self._client.use_mock_data:
            await self._client.simulate_latency()
            record = await self._require_repository().get(appointment_id)
            if record is None:
                raise NotFoundError(f"Appointment '{appointment_id}' not found")
            return record

        try:
            data = await self._client.get(f"/appointments/{appointment_id}")
            if not data:
                raise NotFoundError(f"Appointment '{appointment_id}' not found")
            return Appointment(**data)
        except ServiceError:
            raise
        except Exception as exc:  # pragma: no cover - defensive
            logger.exception("Unexpected error while loading appointment")
            raise ServiceError("Failed to load appointment", cause=exc)

    async def update_status(self, appointment_id: str, status: str) -> Appointment:
        logger.info("Setting status of appointment %s to %s", appointment_id, status)
        current = await self.get(appointment_id)
        updated = lifecycle.set_status(current, status)
        return await self._save(updated, {"status": updated.status.value})

    async def toggle_payment(self, appointment_id: str) -> Appointment:
        logger.info("Toggling payment of appointment %s", appointment_id)
        current = await self.get(appointment_id)
        updated = lifecycle.toggle_payment(current)
        return await self._save(updated, {"payment_status": updated.payment_status.value})

    async def delete(self, appointment_id: str) -> None:
        logger.info("Deleting appointment %s", appointment_id)
        current = await self.get(appointment_id)
        lifecycle.ensure_deletable(current)

        if self._client.use_mock_data:
            await self._client.simulate_latency()
            if not await self._require_repository().delete(appointment_id):
                raise NotFoundError(f"Appointment '{appointment_id}' not found")
            return

        try:
            await self._client.delete(f"/appointments/{appointment_id}")
        except ServiceError:
            raise
        except Exception as exc:  # pragma: no cover - defensive
            logger.exception("Unexpected error while deleting appointment")
            raise ServiceError("Failed to delete appointment", cause=exc)

    async def list_series(self, series_id: str) -> SeriesOccurrencesResponse:
        logger.info("Listing occurrences of series %s", series_id)
        if self._client.use_mock_data:
            await self._client.simulate_latency()
            items = await self._require_repository().list_series(series_id)
        else:
            try:
                data = await self._client.get(f"/appointments/series/{series_id}/occurrences")
                items = [Appointment(**item) for item in _extract_items(data)]
            except ServiceError:
                raise
            except Exception as exc:  # pragma: no cover - defensive
                logger.exception("Unexpected error while listing series occurrences")
                raise ServiceError("Failed to list series occurrences", cause=exc)

        ordered = sorted(items, key=lambda item: item.series_occurrence or 0)
        rule = next((item.recurrence_rule for item in ordered if item.recurrence_rule), None)
        return SeriesOccurrencesResponse(
            series_id=series_id,
            recurrence_rule=rule,
            frequency=recurrence.parse_recurrence_frequency(rule),
            total=len(ordered),
            items=ordered,
        )

    async def delete_series(self, series_id: str) -> int:
        logger.info("Deleting series %s", series_id)
        if self._client.use_mock_data:
            await self._client.simulate_latency()
            return await self._require_repository().delete_series(series_id)

        try:
            data = await self._client.post(f"/appointments/series/{series_id}/delete", {})
            if isinstance(data, dict) and isinstance(data.get("deleted"), int):
                return data["deleted"]
            return 0
        except ServiceError:
            raise
        except Exception as exc:  # pragma: no cover - defensive
            logger.exception("Unexpected error while deleting series")
            raise ServiceError("Failed to delete series", cause=exc)

    async def _create(self, appointment: Appointment) -> Appointment:
        if self._client.use_mock_data:
            await self._client.simulate_latency()
            return await self._require_repository().create(appointment)

        try:
            payload = appointment.model_dump(mode="json", exclude={"appointment_id"})
            data = await self._client.post("/appointments", payload)
            return Appointment(**data)
        except ServiceError:
            raise
        except Exception as exc:  # pragma: no cover - defensive
            logger.exception("Unexpected error while creating appointment")
            raise ServiceError("Failed to create appointment", cause=exc)

    async def _fetch_all(self, tenant_id: str) -> List[Appointment]:
        if self._client.use_mock_data:
            await self._client.simulate_latency()
            return await self._require_repository().list(tenant_id)

        try:
            data = await self._client.get("/appointments", params={"tenant_id": tenant_id})
            return [Appointment(**item) for item in _extract_items(data)]
        except ServiceError:
            raise
        except Exception as exc:  # pragma: no cover - defensive
            logger.exception("Unexpected error while listing appointments")
            raise ServiceError("Failed to list appointments", cause=exc)

    async def _save(self, appointment: Appointment, changes: dict) -> Appointment:
        if self._client.use_mock_data:
            await self._client.simulate_latency()
            try:
                return await self._require_repository().update(appointment)
            except KeyError as exc:
                raise NotFoundError(str(exc), cause=exc) from exc

        try:
            data = await self._client.patch(f"/appointments/{appointment.appointment_id}", changes)
            return Appointment(**data) if data else appointment
        except ServiceError:
            raise
        except Exception as exc:  # pragma: no cover - defensive
            logger.exception("Unexpected error while updating appointment")
            raise ServiceError("Failed to update appointment", cause=exc)
