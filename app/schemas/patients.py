"""Patient read schemas."""

from datetime import date
from enum import Enum
from uuid import UUID

from pydantic import BaseModel


class PatientStatus(str, Enum):
    """Patient status enumeration."""

    WAITING = "waiting"
    IN_TREATMENT = "in_treatment"
    COMPLETED = "completed"
    DECEASED = "deceased"
    ARCHIVED = "archived"

    @property
    def is_inactive(self) -> bool:
        """Inactive patients cannot be scheduled or prescribed for."""
        return self in (PatientStatus.DECEASED, PatientStatus.ARCHIVED)


class PatientResponse(BaseModel):
    """Patient with its effective status.

    ``status`` is ``waiting`` whenever the patient has a scheduled appointment
    today; ``resting_status`` is what is stored.
    """

    id: UUID
    name: str
    mother_name: str | None = None
    date_of_birth: date | None = None
    village: str | None = None
    image_url: str | None = None
    status: PatientStatus
    resting_status: PatientStatus


class PatientStatusResponse(BaseModel):
    """Derived queue status for a patient."""

    patient_id: UUID
    waiting_today: bool
    status: PatientStatus
