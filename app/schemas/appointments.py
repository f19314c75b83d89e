"""Appointment schemas for request/response validation."""

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field

from app.schemas.prescriptions import PrescriptionItemResponse, PrescriptionResponse


class AppointmentStatus(str, Enum):
    """Appointment status enumeration."""

    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        """Whether no further transition is defined from this status."""
        return self is not AppointmentStatus.SCHEDULED


class AppointmentCreate(BaseModel):
    """Schema for creating a new appointment.

    ``date`` accepts a bare ``YYYY-MM-DD`` day (anchored at local noon) or a
    full ISO-8601 datetime; omitted means now.
    """

    patient_id: UUID
    doctor_id: UUID | None = None
    date: str | None = Field(None, max_length=40)
    reason: str | None = Field(None, max_length=500)
    notes: str | None = Field(None, max_length=1000)


class AppointmentUpdate(BaseModel):
    """Schema for cancelling or rescheduling an appointment."""

    status: AppointmentStatus | None = None
    date: str | None = Field(None, max_length=40)


class AppointmentResponse(BaseModel):
    """Schema for appointment response."""

    id: UUID
    patient_id: UUID
    doctor_id: UUID | None
    date: datetime
    reason: str
    notes: str | None = None
    status: AppointmentStatus
    created_at: datetime
    updated_at: datetime
    completed_at: datetime | None = None
    cancelled_at: datetime | None = None

    model_config = {"from_attributes": True}


class AgendaEntry(BaseModel):
    """Appointment as shown on the agenda/calendar."""

    id: UUID
    patient_id: UUID
    patient_name: str
    patient_image: str | None = None
    date: datetime
    reason: str
    status: AppointmentStatus


class PatientAppointmentResponse(AppointmentResponse):
    """Appointment in a patient's history, with its prescription summary."""

    doctor_name: str | None = None
    has_prescription: bool = False
    diagnosis: str | None = None


class AppointmentDetailsResponse(BaseModel):
    """Appointment joined with its prescription and items."""

    appointment: PatientAppointmentResponse
    prescription: PrescriptionResponse | None = None
    items: list[PrescriptionItemResponse] = Field(default_factory=list)
