"""Patient read model."""

from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings, settings
from app.core.exceptions import InvalidTransitionException, NotFoundException
from app.database import store_errors
from app.models.patients import patients
from app.schemas.patients import PatientResponse, PatientStatus, PatientStatusResponse
from app.services.status_service import StatusService


class PatientService:
    """Read access to patients, with the derived waiting status applied."""

    def __init__(self, db: AsyncSession, config: Settings = settings):
        """Initialize service with database session and settings."""
        self.db = db
        self.config = config
        self.status = StatusService(db, config)

    async def require_patient(self, patient_id: UUID) -> Any:
        """
        Fetch the patient row.

        Raises:
            NotFoundException: If the patient does not exist
        """
        async with store_errors("require_patient"):
            result = await self.db.execute(select(patients).where(patients.c.id == patient_id))
        row = result.fetchone()
        if not row:
            raise NotFoundException("Patient not found")
        return row

    async def require_active_patient(self, patient_id: UUID) -> Any:
        """
        Fetch the patient row, rejecting deceased or archived patients.

        Raises:
            NotFoundException: If the patient does not exist
            InvalidTransitionException: If the patient is inactive
        """
        row = await self.require_patient(patient_id)
        if PatientStatus(row.status).is_inactive:
            raise InvalidTransitionException(
                f"Patient is {row.status}; new appointments and prescriptions are blocked"
            )
        return row

    @staticmethod
    def _to_response(row: Any, waiting: bool) -> PatientResponse:
        resting = PatientStatus(row.status)
        effective = PatientStatus.WAITING if waiting and not resting.is_inactive else resting
        return PatientResponse(
            id=row.id,
            name=row.name,
            mother_name=row.mother_name,
            date_of_birth=row.date_of_birth,
            village=row.village,
            image_url=row.image_url,
            status=effective,
            resting_status=resting,
        )

    async def get_patient(self, patient_id: UUID) -> PatientResponse:
        """Get a patient with its effective status."""
        row = await self.require_patient(patient_id)
        waiting = await self.status.is_waiting_today(patient_id)
        return self._to_response(row, waiting)

    async def list_patients(self, limit: int = 20, offset: int = 0) -> list[PatientResponse]:
        """List patients by name with their effective status."""
        stmt = select(patients).order_by(patients.c.name.asc()).limit(limit).offset(offset)
        async with store_errors("list_patients"):
            result = await self.db.execute(stmt)
        rows = result.fetchall()

        waiting_ids = await self.status.waiting_patient_ids([row.id for row in rows])
        return [self._to_response(row, row.id in waiting_ids) for row in rows]

    async def get_status(self, patient_id: UUID) -> PatientStatusResponse:
        """Get the derived queue status of a patient."""
        row = await self.require_patient(patient_id)
        waiting = await self.status.is_waiting_today(patient_id)
        return PatientStatusResponse(
            patient_id=row.id,
            waiting_today=waiting,
            status=self._to_response(row, waiting).status,
        )
