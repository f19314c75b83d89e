"""Clinician model definition using SQLAlchemy Core."""

from uuid import uuid4

from sqlalchemy import Boolean, Column, Table, Text, Uuid, text

from app.models.base import UTCDateTime, metadata, utcnow

users = Table(
    "users",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid4),
    Column("full_name", Text, nullable=False),
    Column("email", Text, nullable=False, unique=True, index=True),
    Column("role", Text, nullable=False, server_default=text("'doctor'")),
    # Account state
    Column("is_active", Boolean, nullable=False, server_default=text("true")),
    # Audit
    Column("created_at", UTCDateTime, nullable=False, default=utcnow),
)
