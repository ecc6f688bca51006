from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class AppointmentStatus(str, Enum):
    SCHEDULED = "scheduled"
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    UNPAID = "unpaid"
    PAID = "paid"


RecurrenceFrequency = Literal["weekly", "biweekly", "monthly"]
RecurrenceEndMode = Literal["after", "on"]
FilterMode = Literal["upcoming", "past", "unpaid"]


class Appointment(BaseModel):
    appointment_id: Optional[str] = None
    tenant_id: str
    customer_id: str
    pet_id: Optional[str] = None
    service_ids: List[str] = Field(default_factory=list)
    date: str                        # YYYY-MM-DD
    time: Optional[str] = None       # HH:MM local wall clock
    duration_minutes: Optional[int] = None
    status: AppointmentStatus = AppointmentStatus.SCHEDULED
    payment_status: PaymentStatus = PaymentStatus.UNPAID
    notes: Optional[str] = None
    series_id: Optional[str] = None
    series_occurrence: Optional[int] = None
    recurrence_rule: Optional[str] = None  # iCal RRULE shared by the series


class RecurrenceRule(BaseModel):
    enabled: bool = False
    frequency: RecurrenceFrequency = "weekly"
    end_mode: RecurrenceEndMode = "after"
    occurrence_count: Optional[int] = None
    until_date: Optional[str] = None


class BookingIntent(BaseModel):
    start_date: str
    time: str
    rule: RecurrenceRule = Field(default_factory=RecurrenceRule)


class BookingRequest(BaseModel):
    tenant_id: str
    customer_id: str
    pet_id: Optional[str] = None
    service_ids: List[str] = Field(..., min_length=1)
    duration_minutes: Optional[int] = Field(None, ge=0)
    notes: Optional[str] = None
    intent: BookingIntent


class OccurrencePreviewResponse(BaseModel):
    dates: List[str]
    recurrence_rule: Optional[str] = None


class SeriesBookingResponse(BaseModel):
    series_id: Optional[str] = None
    recurrence_rule: Optional[str] = None
    expected: int
    created: int
    partial: bool = False
    message: Optional[str] = None
    appointments: List[Appointment]


class AppointmentListRequest(BaseModel):
    tenant_id: str
    mode: FilterMode = "upcoming"
    today: Optional[str] = None      # YYYY-MM-DD, defaults to the local date
    now: Optional[str] = None        # ISO local datetime, defaults to the local clock
    pending_only: bool = False


class AppointmentListResponse(BaseModel):
    mode: FilterMode
    today: str
    total: int
    items: List[Appointment]


class StatusUpdateRequest(BaseModel):
    status: str


class SeriesOccurrencesResponse(BaseModel):
    series_id: str
    recurrence_rule: Optional[str] = None
    frequency: Optional[RecurrenceFrequency] = None
    total: int
    items: List[Appointment]


class OverdueCountResponse(BaseModel):
    tenant_id: str
    today: str
    count: int
