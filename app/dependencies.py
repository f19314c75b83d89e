"""FastAPI dependencies."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings, get_settings
from app.database import get_db
from app.services.appointment_service import AppointmentService
from app.services.patient_service import PatientService
from app.services.prescription_service import PrescriptionService
from app.services.status_service import StatusService

# Type aliases for dependency injection
DatabaseSession = Annotated[AsyncSession, Depends(get_db)]
AppSettings = Annotated[Settings, Depends(get_settings)]


def get_appointment_service(db: DatabaseSession, config: AppSettings) -> AppointmentService:
    """Build the appointment service for a request."""
    return AppointmentService(db, config)


def get_prescription_service(db: DatabaseSession, config: AppSettings) -> PrescriptionService:
    """Build the prescription service for a request."""
    return PrescriptionService(db, config)


def get_patient_service(db: DatabaseSession, config: AppSettings) -> PatientService:
    """Build the patient service for a request."""
    return PatientService(db, config)


def get_status_service(db: DatabaseSession, config: AppSettings) -> StatusService:
    """Build the status service for a request."""
    return StatusService(db, config)


AppointmentServiceDep = Annotated[AppointmentService, Depends(get_appointment_service)]
PrescriptionServiceDep = Annotated[PrescriptionService, Depends(get_prescription_service)]
PatientServiceDep = Annotated[PatientService, Depends(get_patient_service)]
StatusServiceDep = Annotated[StatusService, Depends(get_status_service)]
