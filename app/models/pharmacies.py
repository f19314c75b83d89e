"""Herbal pharmacy catalog models using SQLAlchemy Core."""

from uuid import uuid4

from sqlalchemy import Column, Table, Text, Uuid

from app.models.base import UTCDateTime, metadata, utcnow

# Medicinal plants
medicinal_plants = Table(
    "medicinal_plants",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid4),
    Column("name", Text, nullable=False),
    Column("scientific_name", Text, nullable=True),
    Column("indigenous_name", Text, nullable=True),
    Column("main_use", Text, nullable=True),
    Column("indications", Text, nullable=True),
    Column("created_at", UTCDateTime, nullable=False, default=utcnow),
)

# Traditional compound treatments
traditional_treatments = Table(
    "traditional_treatments",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid4),
    Column("name", Text, nullable=False),
    Column("origin", Text, nullable=True),
    Column("indications", Text, nullable=True),
    Column("created_at", UTCDateTime, nullable=False, default=utcnow),
)
