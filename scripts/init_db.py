"""Script to initialize the database."""

import argparse
import asyncio

from sqlalchemy import insert, select

from app.database import AsyncSessionLocal, engine
from app.models import metadata
from app.models.pharmacies import medicinal_plants, traditional_treatments
from app.models.users import users

PLANTS = [
    {
        "name": "Erva-baleeira",
        "scientific_name": "Cordia verbenacea",
        "indigenous_name": "Tira-dor",
        "main_use": "Analgésico",
        "indications": "Dores musculares, contusões e reumatismo",
    },
    {
        "name": "Guaco",
        "scientific_name": "Mikania glomerata",
        "indigenous_name": "Coração de Jesus",
        "main_use": "Expectorante",
    },
    {
        "name": "Copaíba",
        "scientific_name": "Copaifera langsdorffii",
        "indigenous_name": "Kupa'iwa",
        "main_use": "Cicatrizante",
    },
]

TREATMENTS = [
    {
        "name": "Chá de Casca de Jatobá",
        "origin": "Povo Tukano",
        "indications": "Febre, dores musculares, inflamação na garganta",
    },
]


async def init_db(seed: bool, clinician_email: str, clinician_name: str) -> None:
    """Create all tables and optionally seed the default clinician and catalog."""
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)

    print("✓ Database initialized successfully!")

    if not seed:
        return

    async with AsyncSessionLocal() as session:
        result = await session.execute(select(users.c.id).where(users.c.email == clinician_email))
        clinician_id = result.scalar()
        if clinician_id is None:
            result = await session.execute(
                insert(users)
                .values(full_name=clinician_name, email=clinician_email)
                .returning(users.c.id)
            )
            clinician_id = result.scalar_one()

        existing = await session.execute(select(medicinal_plants.c.id).limit(1))
        if existing.first() is None:
            await session.execute(insert(medicinal_plants), PLANTS)
            await session.execute(insert(traditional_treatments), TREATMENTS)

        await session.commit()

    print("✓ Seed data loaded")
    print(f"  Set DEFAULT_CLINICIAN_ID={clinician_id}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Initialize the clinic database")
    parser.add_argument("--seed", action="store_true", help="Load default clinician and catalog")
    parser.add_argument("--clinician-email", default="clinician@example.org")
    parser.add_argument("--clinician-name", default="Default Clinician")
    args = parser.parse_args()

    asyncio.run(init_db(args.seed, args.clinician_email, args.clinician_name))
