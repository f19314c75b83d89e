"""Patient read endpoints."""

from uuid import UUID

from fastapi import APIRouter, Query, status

from app.dependencies import AppointmentServiceDep, PatientServiceDep, StatusServiceDep
from app.schemas.appointments import PatientAppointmentResponse
from app.schemas.patients import PatientResponse, PatientStatusResponse
from app.schemas.prescriptions import ActiveTreatmentResponse

router = APIRouter()


@router.get(
    "/patients",
    response_model=list[PatientResponse],
    status_code=status.HTTP_200_OK,
    tags=["Patients"],
    summary="List patients",
)
async def list_patients(
    service: PatientServiceDep,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
) -> list[PatientResponse]:
    """List patients by name, with today's waiting status applied."""
    return await service.list_patients(limit=limit, offset=offset)


@router.get(
    "/patients/{patient_id}",
    response_model=PatientResponse,
    status_code=status.HTTP_200_OK,
    tags=["Patients"],
    summary="Get patient",
)
async def get_patient(
    patient_id: UUID,
    service: PatientServiceDep,
) -> PatientResponse:
    """Get a patient with today's waiting status applied."""
    return await service.get_patient(patient_id)


@router.get(
    "/patients/{patient_id}/status",
    response_model=PatientStatusResponse,
    status_code=status.HTTP_200_OK,
    tags=["Patients"],
    summary="Get derived patient status",
)
async def get_patient_status(
    patient_id: UUID,
    service: PatientServiceDep,
) -> PatientStatusResponse:
    """Whether the patient is in today's queue."""
    return await service.get_status(patient_id)


@router.get(
    "/patients/{patient_id}/appointments",
    response_model=list[PatientAppointmentResponse],
    status_code=status.HTTP_200_OK,
    tags=["Patients"],
    summary="List patient appointments",
)
async def get_patient_appointments(
    patient_id: UUID,
    service: AppointmentServiceDep,
) -> list[PatientAppointmentResponse]:
    """
    List a patient's appointments, newest first.

    Args:
        patient_id: Patient ID
        service: Appointment service

    Returns:
        Appointment history with prescription summaries
    """
    return await service.get_patient_appointments(patient_id)


@router.get(
    "/patients/{patient_id}/active-treatments",
    response_model=list[ActiveTreatmentResponse],
    status_code=status.HTTP_200_OK,
    tags=["Patients"],
    summary="List active treatments",
)
async def get_active_treatments(
    patient_id: UUID,
    patients: PatientServiceDep,
    service: StatusServiceDep,
) -> list[ActiveTreatmentResponse]:
    """
    List prescribed items still in effect for a patient.

    Args:
        patient_id: Patient ID
        patients: Patient service
        service: Status service

    Returns:
        Ongoing items and items whose end date has not passed
    """
    await patients.require_patient(patient_id)
    return await service.active_treatments(patient_id)
