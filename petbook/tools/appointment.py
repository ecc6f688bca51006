from typing import Optional

from fastapi import APIRouter, Depends

from petbook.dependencies.services import get_appointment_service
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
    StatusUpdateRequest,
)
from petbook.services import AppointmentService
from petbook.services.exceptions import ServiceError
from petbook.tools.errors import http_error

router = APIRouter()


@router.post("/preview", response_model=OccurrencePreviewResponse)
async def preview_occurrences(
    req: BookingIntent,
    service: AppointmentService = Depends(get_appointment_service),
):
    try:
        return await service.preview(req)
    except ServiceError as exc:
        raise http_error(exc) from exc


@router.post("/book", response_model=SeriesBookingResponse)
async def book_appointment(
    req: BookingRequest,
    service: AppointmentService = Depends(get_appointment_service),
):
    try:
        return await service.book(req)
    except ServiceError as exc:
        raise http_error(exc) from exc


@router.post("/list", response_model=AppointmentListResponse)
async def list_appointments(
    req: AppointmentListRequest,
    service: AppointmentService = Depends(get_appointment_service),
):
    try:
        return await service.list(req)
    except ServiceError as exc:
        raise http_error(exc) from exc


@router.get("/overdue-count", response_model=OverdueCountResponse)
async def overdue_count(
    tenant_id: str,
    today: Optional[str] = None,
    service: AppointmentService = Depends(get_appointment_service),
):
    try:
        return await service.overdue_count(tenant_id, today)
    except ServiceError as exc:
        raise http_error(exc) from exc


@router.get("/series/{series_id}", response_model=SeriesOccurrencesResponse)
async def list_series(
    series_id: str,
    service: AppointmentService = Depends(get_appointment_service),
):
    try:
        return await service.list_series(series_id)
    except ServiceError as exc:
        raise http_error(exc) from exc


@router.post("/series/{series_id}/delete")
async def delete_series(
    series_id: str,
    service: AppointmentService = Depends(get_appointment_service),
):
    try:
        deleted = await service.delete_series(series_id)
    except ServiceError as exc:
        raise http_error(exc) from exc
    return {"status": "deleted", "series_id": series_id, "deleted": deleted}


@router.post("/{appointment_id}/status", response_model=Appointment)
async def update_status(
    appointment_id: str,
    req: StatusUpdateRequest,
    service: AppointmentService = Depends(get_appointment_service),
):
    try:
        return await service.update_status(appointment_id, req.status)
    except ServiceError as exc:
        raise http_error(exc) from exc


@router.post("/{appointment_id}/payment", response_model=Appointment)
async def toggle_payment(
    appointment_id: str,
    service: AppointmentService = Depends(get_appointment_service),
):
    try:
        return await service.toggle_payment(appointment_id)
    except ServiceError as exc:
        raise http_error(exc) from exc


@router.delete("/{appointment_id}")
async def delete_appointment(
    appointment_id: str,
    service: AppointmentService = Depends(get_appointment_service),
):
    try:
        await service.delete(appointment_id)
    except ServiceError as exc:
        raise http_error(exc) from exc
    return {"status": "deleted", "appointment_id": appointment_id}
