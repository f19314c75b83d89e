"""Prescription endpoints."""

from fastapi import APIRouter, status

from app.dependencies import PrescriptionServiceDep
from app.schemas.prescriptions import FinalizeResponse, PrescriptionCreate

router = APIRouter()


@router.post(
    "/",
    response_model=FinalizeResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["Prescriptions"],
    summary="Issue prescription and complete the appointment",
)
async def finalize_prescription(
    data: PrescriptionCreate,
    service: PrescriptionServiceDep,
) -> FinalizeResponse:
    """
    Issue a prescription for an appointment.

    The appointment is completed in the same transaction. A requested follow-up
    that cannot be booked is reported in ``warnings``; the prescription is kept.
    Do not retry blindly on a network error: read the appointment first, a
    second call for a completed appointment returns 409.

    Args:
        data: Prescription data
        service: Prescription service

    Returns:
        Prescription and follow-up identifiers
    """
    return await service.finalize(data)
