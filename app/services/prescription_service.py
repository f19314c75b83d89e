"""Prescription finalization.

Issuing a prescription is what completes an appointment. The prescription, its
items and the status change commit together; a requested follow-up visit is
booked afterwards in its own unit of work so that a failed booking never
undoes the prescription.
"""

import re
import unicodedata
from uuid import UUID

import structlog
from sqlalchemy import and_, insert, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings, settings
from app.core import clock
from app.core.exceptions import (
    AlreadyFinalizedException,
    AppException,
    EmptyPrescriptionException,
    InvalidTransitionException,
    ValidationException,
)
from app.database import store_errors, transaction
from app.models.appointments import appointments
from app.models.prescriptions import prescription_items, prescriptions
from app.schemas.appointments import AppointmentStatus
from app.schemas.prescriptions import (
    FinalizeResponse,
    PrescriptionCreate,
    PrescriptionItemCreate,
)
from app.services.appointment_service import AppointmentService

logger = structlog.get_logger()

# Matched against accent-stripped, casefolded text
ONGOING_DURATION_PATTERN = re.compile(r"\b(continu(?:[oa]s?|ous|amente)|ongoing)\b")


def _strip_accents(value: str) -> str:
    return "".join(
        char for char in unicodedata.normalize("NFKD", value) if not unicodedata.combining(char)
    )


def is_ongoing_duration(duration: str | None) -> bool:
    """Whether a free-text duration describes an open-ended regimen."""
    if not duration:
        return False
    return bool(ONGOING_DURATION_PATTERN.search(_strip_accents(duration).casefold()))


def item_values(prescription_id: UUID, position: int, item: PrescriptionItemCreate) -> dict:
    """Row values for a prescription item; ``is_ongoing`` is fixed at write time."""
    is_ongoing = item.is_ongoing
    if is_ongoing is None:
        is_ongoing = is_ongoing_duration(item.duration)

    return {
        "prescription_id": prescription_id,
        "position": position,
        "type": item.type.value,
        "name": item.name,
        "dosage": item.dosage,
        "frequency": item.frequency,
        "duration": item.duration,
        "end_date": item.end_date,
        "is_ongoing": is_ongoing,
        "plant_id": item.plant_id,
        "treatment_id": item.treatment_id,
    }


class PrescriptionService:
    """Service for issuing prescriptions."""

    def __init__(self, db: AsyncSession, config: Settings = settings):
        """Initialize service with database session and settings."""
        self.db = db
        self.config = config
        self.appointments = AppointmentService(db, config)

    async def finalize(self, data: PrescriptionCreate) -> FinalizeResponse:
        """
        Issue a prescription and complete its appointment.

        Args:
            data: Prescription, items and optional follow-up request

        Returns:
            Identifiers of the prescription and follow-up, plus warnings

        Raises:
            EmptyPrescriptionException: If there are no items and no notes
            NotFoundException: If appointment not found
            AlreadyFinalizedException: If the appointment is already completed
            InvalidTransitionException: If the appointment is cancelled or the
                patient is inactive
            StoreUnavailableException: If the database cannot be reached
        """
        notes = (data.notes or "").strip()
        if not data.items and not notes:
            raise EmptyPrescriptionException()

        try:
            async with transaction(self.db, "finalize_prescription"):
                appointment = await self.appointments.lock_appointment(data.appointment_id)
                status = AppointmentStatus(appointment.status)
                if status is AppointmentStatus.COMPLETED:
                    raise AlreadyFinalizedException()
                if status is AppointmentStatus.CANCELLED:
                    raise InvalidTransitionException("Cancelled appointments cannot be finalized")
                await self.appointments.patients.require_active_patient(appointment.patient_id)

                now = clock.utcnow()
                completed = await self.db.execute(
                    update(appointments)
                    .where(
                        and_(
                            appointments.c.id == data.appointment_id,
                            appointments.c.status == AppointmentStatus.SCHEDULED.value,
                        )
                    )
                    .values(
                        status=AppointmentStatus.COMPLETED.value,
                        completed_at=now,
                        updated_at=now,
                    )
                )
                if completed.rowcount == 0:
                    raise AlreadyFinalizedException()

                doctor_id = (
                    data.doctor_id or appointment.doctor_id or self.config.default_clinician_id
                )
                result = await self.db.execute(
                    insert(prescriptions)
                    .values(
                        appointment_id=data.appointment_id,
                        doctor_id=doctor_id,
                        notes=notes or None,
                        diagnosis=data.diagnosis,
                        created_at=now,
                    )
                    .returning(prescriptions.c.id)
                )
                prescription_id = result.scalar_one()

                if data.items:
                    await self.db.execute(
                        insert(prescription_items),
                        [
                            item_values(prescription_id, position, item)
                            for position, item in enumerate(data.items)
                        ],
                    )
        except IntegrityError as e:
            raise await self._integrity_error(data.appointment_id) from e

        logger.info(
            "prescription_finalized",
            prescription_id=str(prescription_id),
            appointment_id=str(data.appointment_id),
            items=len(data.items),
        )

        response = FinalizeResponse(
            prescription_id=prescription_id,
            appointment_id=data.appointment_id,
        )

        if data.follow_up:
            try:
                follow_up = await self.appointments.schedule_follow_up(
                    patient_id=appointment.patient_id,
                    doctor_id=doctor_id,
                    date_value=data.follow_up.date,
                    time_value=data.follow_up.time,
                )
            except (AppException, SQLAlchemyError) as e:
                message = e.message if isinstance(e, AppException) else str(e)
                logger.warning(
                    "follow_up_booking_failed",
                    appointment_id=str(data.appointment_id),
                    prescription_id=str(prescription_id),
                    error=message,
                )
                response.warnings.append(
                    f"Prescription saved, but the follow-up could not be scheduled: {message}"
                )
            else:
                response.follow_up_appointment_id = follow_up.id

        return response

    async def _integrity_error(self, appointment_id: UUID) -> AppException:
        """Classify a constraint violation raised while finalizing."""
        async with store_errors("finalize_prescription"):
            result = await self.db.execute(
                select(prescriptions.c.id).where(prescriptions.c.appointment_id == appointment_id)
            )
        if result.first() is not None:
            # Lost a race against a concurrent finalize
            return AlreadyFinalizedException()
        return ValidationException("Prescription references an unknown clinician or catalog entry")
