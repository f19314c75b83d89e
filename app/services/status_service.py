"""Derived patient status.

Nothing computed here is ever written back to storage.
"""

from collections.abc import Iterable
from datetime import date, datetime
from uuid import UUID

from sqlalchemy import and_, exists, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings, settings
from app.core import clock
from app.database import store_errors
from app.models.appointments import appointments
from app.models.prescriptions import prescription_items, prescriptions
from app.models.users import users
from app.schemas.appointments import AppointmentStatus
from app.schemas.prescriptions import ActiveTreatmentResponse


class StatusService:
    """Answers queue and treatment questions from appointment data."""

    def __init__(self, db: AsyncSession, config: Settings = settings):
        """Initialize service with database session and settings."""
        self.db = db
        self.config = config

    def _scheduled_today(self, now: datetime | None):
        start, end = clock.today_bounds(self.config.tz, now)
        return and_(
            appointments.c.status == AppointmentStatus.SCHEDULED.value,
            appointments.c.date >= start,
            appointments.c.date < end,
        )

    async def is_waiting_today(self, patient_id: UUID, now: datetime | None = None) -> bool:
        """
        Check whether the patient has a scheduled appointment today.

        Args:
            patient_id: Patient ID
            now: Override for the current instant

        Returns:
            True if the patient is in today's queue

        Raises:
            StoreUnavailableException: If the database cannot be reached
        """
        stmt = select(
            exists().where(
                and_(
                    appointments.c.patient_id == patient_id,
                    self._scheduled_today(now),
                )
            )
        )
        async with store_errors("is_waiting_today"):
            result = await self.db.execute(stmt)
        return bool(result.scalar())

    async def waiting_patient_ids(
        self,
        patient_ids: Iterable[UUID],
        now: datetime | None = None,
    ) -> set[UUID]:
        """Subset of the given patients that are in today's queue."""
        patient_ids = list(patient_ids)
        if not patient_ids:
            return set()

        stmt = (
            select(appointments.c.patient_id)
            .where(
                and_(
                    appointments.c.patient_id.in_(patient_ids),
                    self._scheduled_today(now),
                )
            )
            .distinct()
        )
        async with store_errors("waiting_patient_ids"):
            result = await self.db.execute(stmt)
        return set(result.scalars().all())

    async def active_treatments(
        self,
        patient_id: UUID,
        on_date: date | None = None,
    ) -> list[ActiveTreatmentResponse]:
        """
        List prescription items still in effect for a patient.

        An item is active while its end date has not passed, or indefinitely
        when it is ongoing. Items with an end date come first, latest first.

        Args:
            patient_id: Patient ID
            on_date: Calendar day to evaluate, defaults to today in the clinic

        Returns:
            Active prescription items

        Raises:
            StoreUnavailableException: If the database cannot be reached
        """
        on_date = on_date or clock.local_today(self.config.tz)

        stmt = (
            select(
                prescription_items.c.id,
                prescription_items.c.name,
                prescription_items.c.type,
                prescription_items.c.dosage,
                prescription_items.c.frequency,
                prescription_items.c.duration,
                prescription_items.c.end_date,
                prescription_items.c.is_ongoing,
                prescriptions.c.created_at.label("start_date"),
                users.c.full_name.label("doctor_name"),
            )
            .select_from(
                prescription_items.join(
                    prescriptions, prescription_items.c.prescription_id == prescriptions.c.id
                )
                .join(appointments, prescriptions.c.appointment_id == appointments.c.id)
                .outerjoin(users, prescriptions.c.doctor_id == users.c.id)
            )
            .where(
                and_(
                    appointments.c.patient_id == patient_id,
                    or_(
                        prescription_items.c.end_date >= on_date,
                        prescription_items.c.is_ongoing.is_(True),
                    ),
                )
            )
            .order_by(
                prescription_items.c.end_date.desc().nulls_last(),
                prescriptions.c.created_at.desc(),
                prescription_items.c.position.asc(),
            )
        )

        async with store_errors("active_treatments"):
            result = await self.db.execute(stmt)
        return [ActiveTreatmentResponse.model_validate(dict(row._mapping)) for row in result]
