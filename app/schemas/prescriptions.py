"""Prescription schemas for request/response validation."""

from datetime import date, datetime
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field, field_validator


class PrescriptionItemType(str, Enum):
    """Conventional pharmaceutical or traditional/herbal remedy."""

    ALLOPATHIC = "allopathic"
    TRADITIONAL = "traditional"


# Labels used by the clinic's existing front-end
LEGACY_ITEM_TYPES = {
    "alopático": PrescriptionItemType.ALLOPATHIC,
    "alopatico": PrescriptionItemType.ALLOPATHIC,
    "tradicional": PrescriptionItemType.TRADITIONAL,
}


class PrescriptionItemCreate(BaseModel):
    """One line of a prescription."""

    type: PrescriptionItemType
    name: str = Field(..., min_length=1, max_length=300)
    dosage: str | None = Field(None, max_length=300)
    frequency: str | None = Field(None, max_length=300)
    duration: str | None = Field(None, max_length=200)
    end_date: date | None = None
    is_ongoing: bool | None = Field(
        None,
        description="Open-ended regimen; derived from duration when omitted",
    )
    plant_id: UUID | None = None
    treatment_id: UUID | None = None

    @field_validator("type", mode="before")
    @classmethod
    def map_legacy_type(cls, v: Any) -> Any:
        """Accept the Portuguese labels sent by the legacy UI."""
        if isinstance(v, str):
            return LEGACY_ITEM_TYPES.get(v.strip().lower(), v.strip().lower())
        return v


class FollowUpRequest(BaseModel):
    """Follow-up booking request.

    Kept as raw strings: a malformed follow-up must not reject the prescription.
    """

    date: str = Field(..., max_length=40)
    time: str | None = Field(None, max_length=20)


class PrescriptionCreate(BaseModel):
    """Schema for finalizing an appointment with a prescription."""

    appointment_id: UUID
    doctor_id: UUID | None = None
    items: list[PrescriptionItemCreate] = Field(default_factory=list)
    notes: str | None = Field(None, max_length=5000)
    diagnosis: str | None = Field(None, max_length=1000)
    follow_up: FollowUpRequest | None = None


class FinalizeResponse(BaseModel):
    """Result of finalizing an appointment."""

    prescription_id: UUID
    appointment_id: UUID
    follow_up_appointment_id: UUID | None = None
    warnings: list[str] = Field(default_factory=list)


class PrescriptionResponse(BaseModel):
    """Schema for prescription response."""

    id: UUID
    appointment_id: UUID
    doctor_id: UUID | None = None
    notes: str | None = None
    diagnosis: str | None = None
    created_at: datetime

    model_config = {"from_attributes": True}


class PrescriptionItemResponse(BaseModel):
    """Schema for prescription item response."""

    id: UUID
    prescription_id: UUID
    position: int
    type: PrescriptionItemType
    name: str
    dosage: str | None = None
    frequency: str | None = None
    duration: str | None = None
    end_date: date | None = None
    is_ongoing: bool
    plant_id: UUID | None = None
    treatment_id: UUID | None = None
    catalog_name: str | None = None

    model_config = {"from_attributes": True}


class ActiveTreatmentResponse(BaseModel):
    """Prescription item still in effect for a patient."""

    id: UUID
    name: str
    type: PrescriptionItemType
    dosage: str | None = None
    frequency: str | None = None
    duration: str | None = None
    end_date: date | None = None
    is_ongoing: bool
    start_date: datetime
    doctor_name: str | None = None
