import os
import sys
import tempfile
from collections.abc import AsyncGenerator
from datetime import UTC, date, datetime, time
from pathlib import Path
from uuid import uuid4
from zoneinfo import ZoneInfo

import pytest
import pytest_asyncio
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Test database URL - MUST be different from production
# Defaults to a throwaway SQLite file; set TEST_DATABASE_URL to use PostgreSQL
TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL") or (
    f"sqlite+aiosqlite:///{Path(tempfile.gettempdir()) / f'clinic_api_test_{os.getpid()}.db'}"
)

# Additional safety: ensure we're not using production database
if os.getenv("DATABASE_URL") and os.getenv("DATABASE_URL") == os.getenv("TEST_DATABASE_URL"):
    print("\n❌ CRITICAL ERROR: Test database URL is same as production database!")
    print("This would DROP all production data during tests.")
    print("Please set TEST_DATABASE_URL to a separate test database in .env")
    sys.exit(1)

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", TEST_DATABASE_URL)
os.environ.setdefault("LOG_FORMAT", "console")

from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import insert  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool  # noqa: E402

from app.config import Settings, get_settings, settings  # noqa: E402
from app.database import async_database_url, get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.models import metadata  # noqa: E402
from app.models.patients import patients  # noqa: E402
from app.models.pharmacies import medicinal_plants  # noqa: E402
from app.models.users import users  # noqa: E402

CLINIC_TZ = ZoneInfo("America/Sao_Paulo")

ASYNC_TEST_DATABASE_URL = async_database_url(TEST_DATABASE_URL)
IS_SQLITE = ASYNC_TEST_DATABASE_URL.startswith("sqlite")

# Use NullPool to avoid event loop issues between tests
test_engine = create_async_engine(
    ASYNC_TEST_DATABASE_URL,
    echo=False,  # Set to True for SQL debugging
    poolclass=NullPool,
    # Concurrent writers wait on the SQLite file lock instead of failing
    connect_args={"timeout": 30} if IS_SQLITE else {},
)

# Create test session factory
TestSessionLocal = async_sessionmaker(
    test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


def local_datetime(day: date, at: time) -> datetime:
    """Instant of a wall-clock time at the clinic, in UTC."""
    return datetime.combine(day, at, tzinfo=CLINIC_TZ).astimezone(UTC)


def local_today() -> date:
    """Today's date at the clinic."""
    return datetime.now(CLINIC_TZ).date()


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    # Create tables
    async with test_engine.begin() as conn:
        await conn.run_sync(metadata.drop_all)
        await conn.run_sync(metadata.create_all)

    # Create session
    async with TestSessionLocal() as session:
        yield session

    # Drop tables after test
    async with test_engine.begin() as conn:
        await conn.run_sync(metadata.drop_all)


@pytest.fixture
def session_factory(db_session: AsyncSession) -> async_sessionmaker[AsyncSession]:
    """Factory for extra sessions on the same test database."""
    return TestSessionLocal


@pytest_asyncio.fixture
async def clinician(db_session: AsyncSession) -> dict:
    """Create the default clinician."""
    clinician_data = {
        "id": uuid4(),
        "full_name": "Dra. Ana Souza",
        "email": "ana.souza@example.org",
    }
    await db_session.execute(insert(users).values(**clinician_data))
    await db_session.commit()
    return clinician_data


@pytest.fixture
def test_settings(clinician: dict) -> Settings:
    """Settings with the default clinician and a fixed clinic timezone."""
    return settings.model_copy(
        update={
            "default_clinician_id": clinician["id"],
            "clinic_timezone": "America/Sao_Paulo",
        }
    )


async def _create_patient(db_session: AsyncSession, **overrides) -> dict:
    patient_data = {
        "id": uuid4(),
        "name": "Iracema Tukano",
        "mother_name": "Jaci Tukano",
        "village": "Aldeia Pari-Cachoeira",
        "status": "in_treatment",
    }
    patient_data.update(overrides)
    await db_session.execute(insert(patients).values(**patient_data))
    await db_session.commit()
    return patient_data


@pytest_asyncio.fixture
async def patient(db_session: AsyncSession) -> dict:
    """Create an active patient."""
    return await _create_patient(db_session)


@pytest_asyncio.fixture
async def other_patient(db_session: AsyncSession) -> dict:
    """Create a second active patient."""
    return await _create_patient(db_session, name="Raoni Baniwa", mother_name=None)


@pytest_asyncio.fixture
async def deceased_patient(db_session: AsyncSession) -> dict:
    """Create an inactive patient."""
    return await _create_patient(db_session, name="Tainá Desana", status="deceased")


@pytest_asyncio.fixture
async def plant(db_session: AsyncSession) -> dict:
    """Create a catalog plant."""
    plant_data = {
        "id": uuid4(),
        "name": "Guaco",
        "scientific_name": "Mikania glomerata",
    }
    await db_session.execute(insert(medicinal_plants).values(**plant_data))
    await db_session.commit()
    return plant_data


@pytest_asyncio.fixture
async def client(
    db_session: AsyncSession,
    test_settings: Settings,
) -> AsyncGenerator[AsyncClient, None]:
    """Create a test HTTP client."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: test_settings

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def sample_item() -> dict:
    """Sample traditional remedy line."""
    return {
        "type": "traditional",
        "name": "Chá de Guaco",
        "dosage": "200ml",
        "frequency": "2x/dia",
        "duration": "7 dias",
    }
