"""Tests for derived patient status and active treatments."""

from collections.abc import AsyncGenerator
from datetime import UTC, date, datetime, time, timedelta
from uuid import uuid4

import pytest
import pytest_asyncio
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from app.config import Settings
from app.core.exceptions import StoreUnavailableException
from app.database import get_db
from app.main import app
from app.schemas.appointments import AppointmentCreate
from app.schemas.prescriptions import PrescriptionCreate
from app.services.appointment_service import AppointmentService
from app.services.prescription_service import PrescriptionService
from app.services.status_service import StatusService
from tests.conftest import local_datetime, local_today

UNREACHABLE_DATABASE_URL = "sqlite+aiosqlite:////nonexistent-dir/clinic.db"


@pytest_asyncio.fixture
async def broken_session() -> AsyncGenerator[AsyncSession, None]:
    """Session on a database that cannot be opened."""
    engine = create_async_engine(UNREACHABLE_DATABASE_URL, poolclass=NullPool)
    async with async_sessionmaker(engine, class_=AsyncSession)() as session:
        yield session
    await engine.dispose()


@pytest.mark.asyncio
async def test_waiting_today_until_finalized(
    client: AsyncClient,
    patient: dict,
    sample_item: dict,
) -> None:
    """A patient scheduled today waits until the visit is finalized."""
    before = await client.get(f"/api/v1/patients/{patient['id']}/status")
    assert before.json()["waiting_today"] is False
    assert before.json()["status"] == "in_treatment"

    create_response = await client.post(
        "/api/v1/appointments/",
        json={"patient_id": str(patient["id"])},
    )
    appointment_id = create_response.json()["id"]

    waiting = await client.get(f"/api/v1/patients/{patient['id']}/status")
    assert waiting.status_code == 200
    assert waiting.json()["waiting_today"] is True
    assert waiting.json()["status"] == "waiting"

    await client.post(
        "/api/v1/prescriptions/",
        json={"appointment_id": appointment_id, "items": [sample_item]},
    )

    after = await client.get(f"/api/v1/patients/{patient['id']}/status")
    assert after.json()["waiting_today"] is False
    assert after.json()["status"] == "in_treatment"


@pytest.mark.asyncio
async def test_waiting_ignores_other_days_and_states(
    db_session: AsyncSession,
    test_settings: Settings,
    patient: dict,
) -> None:
    """Only scheduled appointments on the clinic's current day count."""
    appointment_service = AppointmentService(db_session, test_settings)
    status_service = StatusService(db_session, test_settings)
    today = local_today()

    tomorrow = await appointment_service.create_appointment(
        AppointmentCreate(patient_id=patient["id"], date=(today + timedelta(days=1)).isoformat())
    )
    assert await status_service.is_waiting_today(patient["id"]) is False

    cancelled = await appointment_service.create_appointment(
        AppointmentCreate(patient_id=patient["id"], date=today.isoformat())
    )
    await appointment_service.cancel_appointment(cancelled.id)
    assert await status_service.is_waiting_today(patient["id"]) is False

    # Tomorrow's appointment counts once tomorrow comes
    next_day = tomorrow.date + timedelta(minutes=1)
    assert await status_service.is_waiting_today(patient["id"], now=next_day) is True


@pytest.mark.asyncio
async def test_waiting_uses_clinic_calendar_day(
    db_session: AsyncSession,
    test_settings: Settings,
    patient: dict,
) -> None:
    """A late-evening visit belongs to the local day, not the UTC one."""
    await AppointmentService(db_session, test_settings).create_appointment(
        AppointmentCreate(patient_id=patient["id"], date="2024-06-01T22:30")
    )
    status_service = StatusService(db_session, test_settings)

    # 2024-06-02 01:00 UTC is still 2024-06-01 in Sao Paulo
    assert await status_service.is_waiting_today(
        patient["id"], now=datetime(2024, 6, 2, 1, 0, tzinfo=UTC)
    )
    assert not await status_service.is_waiting_today(
        patient["id"], now=local_datetime(date(2024, 6, 2), time(8, 0))
    )


@pytest.mark.asyncio
async def test_waiting_patient_ids(
    db_session: AsyncSession,
    test_settings: Settings,
    patient: dict,
    other_patient: dict,
) -> None:
    """Batch lookup returns only the patients queued today."""
    await AppointmentService(db_session, test_settings).create_appointment(
        AppointmentCreate(patient_id=patient["id"])
    )
    status_service = StatusService(db_session, test_settings)

    waiting = await status_service.waiting_patient_ids([patient["id"], other_patient["id"]])
    assert waiting == {patient["id"]}
    assert await status_service.waiting_patient_ids([]) == set()


@pytest.mark.asyncio
async def test_active_treatments(
    client: AsyncClient,
    patient: dict,
    clinician: dict,
) -> None:
    """Items stay active until their end date, ongoing ones indefinitely."""
    today = local_today()
    create_response = await client.post(
        "/api/v1/appointments/",
        json={"patient_id": str(patient["id"])},
    )
    await client.post(
        "/api/v1/prescriptions/",
        json={
            "appointment_id": create_response.json()["id"],
            "items": [
                {"type": "allopathic", "name": "Losartana 50mg", "duration": "Contínuo"},
                {
                    "type": "allopathic",
                    "name": "Amoxicilina 500mg",
                    "end_date": (today - timedelta(days=1)).isoformat(),
                },
                {
                    "type": "traditional",
                    "name": "Chá de Boldo",
                    "end_date": today.isoformat(),
                },
                {
                    "type": "traditional",
                    "name": "Chá de Guaco",
                    "end_date": (today + timedelta(days=5)).isoformat(),
                },
            ],
        },
    )

    response = await client.get(f"/api/v1/patients/{patient['id']}/active-treatments")
    assert response.status_code == 200
    data = response.json()
    assert [item["name"] for item in data] == ["Chá de Guaco", "Chá de Boldo", "Losartana 50mg"]
    assert data[-1]["is_ongoing"] is True
    assert data[-1]["end_date"] is None
    assert all(item["doctor_name"] == clinician["full_name"] for item in data)


@pytest.mark.asyncio
async def test_ongoing_treatment_stays_active(
    db_session: AsyncSession,
    test_settings: Settings,
    patient: dict,
) -> None:
    """An ongoing item without end date is active on any future date."""
    appointment = await AppointmentService(db_session, test_settings).create_appointment(
        AppointmentCreate(patient_id=patient["id"])
    )
    await PrescriptionService(db_session, test_settings).finalize(
        PrescriptionCreate(
            appointment_id=appointment.id,
            items=[
                {"type": "allopathic", "name": "Metformina", "duration": "uso contínuo"},
                {"type": "allopathic", "name": "Dipirona", "end_date": "2024-06-04"},
            ],
        )
    )
    status_service = StatusService(db_session, test_settings)

    later = await status_service.active_treatments(patient["id"], on_date=date(2030, 1, 1))
    assert [item.name for item in later] == ["Metformina"]

    earlier = await status_service.active_treatments(patient["id"], on_date=date(2024, 6, 4))
    assert [item.name for item in earlier] == ["Dipirona", "Metformina"]


@pytest.mark.asyncio
async def test_active_treatments_unknown_patient(client: AsyncClient) -> None:
    """Active treatments of a missing patient are not found."""
    response = await client.get(f"/api/v1/patients/{uuid4()}/active-treatments")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_store_unavailable(broken_session: AsyncSession, test_settings: Settings) -> None:
    """Connectivity failures surface as a retryable error."""
    status_service = StatusService(broken_session, test_settings)

    with pytest.raises(StoreUnavailableException):
        await status_service.is_waiting_today(uuid4())

    with pytest.raises(StoreUnavailableException):
        await status_service.active_treatments(uuid4())


@pytest.mark.asyncio
async def test_store_unavailable_http_status(
    client: AsyncClient,
    broken_session: AsyncSession,
) -> None:
    """Connectivity failures map to 503."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield broken_session

    app.dependency_overrides[get_db] = override_get_db

    response = await client.get(f"/api/v1/patients/{uuid4()}/status")
    assert response.status_code == 503
    assert response.json()["error"] == "StoreUnavailableException"
    assert response.json()["code"] == "store_unavailable"
    assert response.json()["retryable"] is True
