"""Database models."""

from app.models.appointments import appointments
from app.models.base import metadata
from app.models.patients import patients
from app.models.pharmacies import medicinal_plants, traditional_treatments
from app.models.prescriptions import prescription_items, prescriptions
from app.models.users import users

__all__ = [
    "appointments",
    "medicinal_plants",
    "metadata",
    "patients",
    "prescription_items",
    "prescriptions",
    "traditional_treatments",
    "users",
]
