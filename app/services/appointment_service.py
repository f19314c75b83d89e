"""Appointment service for business logic."""

from datetime import datetime
from typing import Any
from uuid import UUID

import structlog
from sqlalchemy import and_, func, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings, settings
from app.core import clock
from app.core.exceptions import InvalidTransitionException, NotFoundException, ValidationException
from app.database import store_errors, transaction
from app.models.appointments import appointments
from app.models.patients import patients
from app.models.pharmacies import medicinal_plants, traditional_treatments
from app.models.prescriptions import prescription_items, prescriptions
from app.models.users import users
from app.schemas.appointments import (
    AgendaEntry,
    AppointmentCreate,
    AppointmentDetailsResponse,
    AppointmentResponse,
    AppointmentStatus,
    AppointmentUpdate,
    PatientAppointmentResponse,
)
from app.schemas.prescriptions import PrescriptionItemResponse, PrescriptionResponse
from app.services.patient_service import PatientService

logger = structlog.get_logger()

DEFAULT_REASON = "Initial consultation"
FOLLOW_UP_NOTES = "Scheduled from prescription"


class AppointmentService:
    """Service for managing appointments.

    ``scheduled`` is the only status that accepts changes. ``cancelled`` is
    reached through :meth:`cancel_appointment` and ``completed`` only through
    prescription finalization.
    """

    def __init__(self, db: AsyncSession, config: Settings = settings):
        """Initialize service with database session and settings."""
        self.db = db
        self.config = config
        self.patients = PatientService(db, config)

    async def _insert(
        self,
        patient_id: UUID,
        doctor_id: UUID | None,
        appointment_at: datetime,
        reason: str,
        notes: str | None,
    ) -> AppointmentResponse:
        """Insert a scheduled appointment inside its own unit of work."""
        async with transaction(self.db, "create_appointment"):
            await self.patients.require_active_patient(patient_id)

            now = clock.utcnow()
            stmt = (
                insert(appointments)
                .values(
                    patient_id=patient_id,
                    doctor_id=doctor_id or self.config.default_clinician_id,
                    date=appointment_at,
                    reason=reason,
                    notes=notes,
                    status=AppointmentStatus.SCHEDULED.value,
                    created_at=now,
                    updated_at=now,
                )
                .returning(appointments)
            )
            result = await self.db.execute(stmt)
            row = result.fetchone()

        logger.info(
            "appointment_created",
            appointment_id=str(row.id),
            patient_id=str(patient_id),
            date=row.date.isoformat(),
        )
        return AppointmentResponse.model_validate(dict(row._mapping))

    async def create_appointment(self, data: AppointmentCreate) -> AppointmentResponse:
        """
        Create a new appointment.

        Args:
            data: Appointment creation data

        Returns:
            Created appointment, always scheduled

        Raises:
            ValidationException: If the date cannot be parsed
            NotFoundException: If the patient does not exist
            InvalidTransitionException: If the patient is inactive
        """
        appointment_at = clock.normalize(data.date, self.config.tz)
        return await self._insert(
            patient_id=data.patient_id,
            doctor_id=data.doctor_id,
            appointment_at=appointment_at,
            reason=(data.reason or "").strip() or DEFAULT_REASON,
            notes=data.notes,
        )

    async def schedule_follow_up(
        self,
        patient_id: UUID,
        doctor_id: UUID | None,
        date_value: str,
        time_value: str | None,
    ) -> AppointmentResponse:
        """
        Book a follow-up visit from a finalized appointment.

        Args:
            patient_id: Patient ID
            doctor_id: Clinician who issued the prescription
            date_value: Calendar day (YYYY-MM-DD)
            time_value: Wall-clock time (HH:MM), defaults to the configured time

        Returns:
            Created follow-up appointment
        """
        appointment_at = clock.combine_date_time(
            date_value,
            time_value or self.config.follow_up_default_time,
            self.config.tz,
        )
        return await self._insert(
            patient_id=patient_id,
            doctor_id=doctor_id,
            appointment_at=appointment_at,
            reason=self.config.follow_up_reason,
            notes=FOLLOW_UP_NOTES,
        )

    async def lock_appointment(self, appointment_id: UUID) -> Any:
        """
        Read an appointment row, locking it until the transaction ends.

        Raises:
            NotFoundException: If appointment not found
        """
        stmt = select(appointments).where(appointments.c.id == appointment_id).with_for_update()
        result = await self.db.execute(stmt)
        row = result.fetchone()
        if not row:
            raise NotFoundException("Appointment not found")
        return row

    async def get_appointment(self, appointment_id: UUID) -> AppointmentResponse:
        """
        Get appointment by ID.

        Raises:
            NotFoundException: If appointment not found
        """
        async with store_errors("get_appointment"):
            result = await self.db.execute(
                select(appointments).where(appointments.c.id == appointment_id)
            )
        row = result.fetchone()
        if not row:
            raise NotFoundException("Appointment not found")
        return AppointmentResponse.model_validate(dict(row._mapping))

    async def _apply(
        self,
        appointment_id: UUID,
        status: AppointmentStatus | None = None,
        appointment_at: datetime | None = None,
    ) -> AppointmentResponse:
        """Apply a status and/or date change to a scheduled appointment."""
        async with transaction(self.db, "update_appointment"):
            current = await self.lock_appointment(appointment_id)
            current_status = AppointmentStatus(current.status)

            if current_status.is_terminal:
                raise InvalidTransitionException(
                    f"Appointment is {current_status.value} and can no longer be changed"
                )
            if status is AppointmentStatus.COMPLETED:
                raise InvalidTransitionException(
                    "Appointments are completed by issuing a prescription"
                )

            now = clock.utcnow()
            values: dict[str, Any] = {"updated_at": now}
            if status is AppointmentStatus.CANCELLED:
                values["status"] = status.value
                values["cancelled_at"] = now
            if appointment_at is not None:
                values["date"] = appointment_at

            stmt = (
                update(appointments)
                .where(
                    and_(
                        appointments.c.id == appointment_id,
                        appointments.c.status == AppointmentStatus.SCHEDULED.value,
                    )
                )
                .values(**values)
                .returning(appointments)
            )
            result = await self.db.execute(stmt)
            row = result.fetchone()
            if not row:
                raise InvalidTransitionException("Appointment is no longer scheduled")

        logger.info(
            "appointment_updated",
            appointment_id=str(appointment_id),
            status=row.status,
            date=row.date.isoformat(),
        )
        return AppointmentResponse.model_validate(dict(row._mapping))

    async def update_appointment(
        self,
        appointment_id: UUID,
        data: AppointmentUpdate,
    ) -> AppointmentResponse:
        """
        Cancel or reschedule an appointment.

        Args:
            appointment_id: Appointment ID
            data: Status and/or date change

        Returns:
            Updated appointment

        Raises:
            NotFoundException: If appointment not found
            InvalidTransitionException: If the appointment is completed or cancelled,
                or completion is requested directly
            ValidationException: If the date cannot be parsed
        """
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        # A blank date leaves the schedule alone; moving to now is bring_to_now
        if not (changes.get("date") or "").strip():
            changes.pop("date", None)
        if not changes:
            # No changes, return current state
            return await self.get_appointment(appointment_id)

        appointment_at = None
        if "date" in changes:
            appointment_at = clock.normalize(changes["date"], self.config.tz)

        return await self._apply(
            appointment_id,
            status=changes.get("status"),
            appointment_at=appointment_at,
        )

    async def cancel_appointment(self, appointment_id: UUID) -> AppointmentResponse:
        """Cancel a scheduled appointment."""
        return await self._apply(appointment_id, status=AppointmentStatus.CANCELLED)

    async def bring_to_now(self, appointment_id: UUID) -> AppointmentResponse:
        """Move a scheduled appointment to the current instant."""
        return await self._apply(appointment_id, appointment_at=clock.utcnow())

    async def list_appointments(
        self,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[AgendaEntry]:
        """
        List appointments in a date window for the agenda.

        Args:
            start: Inclusive lower bound, unbounded if None
            end: Inclusive upper bound, unbounded if None

        Returns:
            Appointments ordered by date ascending
        """
        if start and end and start > end:
            raise ValidationException("Start date must not be after end date")

        conditions = []
        if start:
            conditions.append(appointments.c.date >= start)
        if end:
            conditions.append(appointments.c.date <= end)

        stmt = (
            select(
                appointments.c.id,
                appointments.c.patient_id,
                patients.c.name.label("patient_name"),
                patients.c.image_url.label("patient_image"),
                appointments.c.date,
                appointments.c.reason,
                appointments.c.status,
            )
            .select_from(appointments.join(patients, appointments.c.patient_id == patients.c.id))
            .where(*conditions)
            .order_by(appointments.c.date.asc())
        )

        async with store_errors("list_appointments"):
            result = await self.db.execute(stmt)
        return [AgendaEntry.model_validate(dict(row._mapping)) for row in result]

    def _history_query(self):
        return select(
            appointments,
            users.c.full_name.label("doctor_name"),
            prescriptions.c.id.is_not(None).label("has_prescription"),
            prescriptions.c.diagnosis,
        ).select_from(
            appointments.outerjoin(users, appointments.c.doctor_id == users.c.id).outerjoin(
                prescriptions, prescriptions.c.appointment_id == appointments.c.id
            )
        )

    async def get_patient_appointments(self, patient_id: UUID) -> list[PatientAppointmentResponse]:
        """
        List a patient's appointments, newest first.

        Each entry tells whether a prescription was issued and its diagnosis.

        Raises:
            NotFoundException: If the patient does not exist
        """
        await self.patients.require_patient(patient_id)

        stmt = (
            self._history_query()
            .where(appointments.c.patient_id == patient_id)
            .order_by(appointments.c.date.desc())
        )
        async with store_errors("get_patient_appointments"):
            result = await self.db.execute(stmt)
        return [PatientAppointmentResponse.model_validate(dict(row._mapping)) for row in result]

    async def get_appointment_details(self, appointment_id: UUID) -> AppointmentDetailsResponse:
        """
        Get an appointment with its prescription and items.

        Catalog entry names are copied onto the items that reference one.

        Raises:
            NotFoundException: If appointment not found
        """
        async with store_errors("get_appointment_details"):
            result = await self.db.execute(
                self._history_query().where(appointments.c.id == appointment_id)
            )
            row = result.fetchone()
            if not row:
                raise NotFoundException("Appointment not found")

            result = await self.db.execute(
                select(prescriptions).where(prescriptions.c.appointment_id == appointment_id)
            )
            prescription = result.fetchone()

            items = []
            if prescription:
                items_stmt = (
                    select(
                        prescription_items,
                        func.coalesce(medicinal_plants.c.name, traditional_treatments.c.name).label(
                            "catalog_name"
                        ),
                    )
                    .select_from(
                        prescription_items.outerjoin(
                            medicinal_plants,
                            prescription_items.c.plant_id == medicinal_plants.c.id,
                        ).outerjoin(
                            traditional_treatments,
                            prescription_items.c.treatment_id == traditional_treatments.c.id,
                        )
                    )
                    .where(prescription_items.c.prescription_id == prescription.id)
                    .order_by(prescription_items.c.position.asc())
                )
                result = await self.db.execute(items_stmt)
                items = [
                    PrescriptionItemResponse.model_validate(dict(item._mapping)) for item in result
                ]

        return AppointmentDetailsResponse(
            appointment=PatientAppointmentResponse.model_validate(dict(row._mapping)),
            prescription=(
                PrescriptionResponse.model_validate(dict(prescription._mapping))
                if prescription
                else None
            ),
            items=items,
        )
