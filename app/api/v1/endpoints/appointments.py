"""Appointment endpoints."""

from uuid import UUID

from fastapi import APIRouter, Query, status

from app.core import clock
from app.dependencies import AppointmentServiceDep, AppSettings
from app.schemas.appointments import (
    AgendaEntry,
    AppointmentCreate,
    AppointmentDetailsResponse,
    AppointmentResponse,
    AppointmentUpdate,
)

router = APIRouter()


@router.post(
    "/",
    response_model=AppointmentResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["Appointments"],
    summary="Create new appointment",
)
async def create_appointment(
    data: AppointmentCreate,
    service: AppointmentServiceDep,
) -> AppointmentResponse:
    """
    Schedule a new appointment.

    A date without a time is placed at noon, clinic time.

    Args:
        data: Appointment creation data
        service: Appointment service

    Returns:
        Created appointment
    """
    return await service.create_appointment(data)


@router.get(
    "/",
    response_model=list[AgendaEntry],
    status_code=status.HTTP_200_OK,
    tags=["Appointments"],
    summary="List appointments for the agenda",
)
async def list_appointments(
    service: AppointmentServiceDep,
    config: AppSettings,
    start_date: str | None = Query(None),
    end_date: str | None = Query(None),
) -> list[AgendaEntry]:
    """
    List appointments within a date window.

    Args:
        service: Appointment service
        config: Application settings
        start_date: Window start; a bare date means the start of that day
        end_date: Window end; a bare date means the end of that day

    Returns:
        Appointments ordered by date
    """
    return await service.list_appointments(
        start=clock.range_start(start_date, config.tz),
        end=clock.range_end(end_date, config.tz),
    )


@router.get(
    "/{appointment_id}",
    response_model=AppointmentResponse,
    status_code=status.HTTP_200_OK,
    tags=["Appointments"],
    summary="Get appointment by ID",
)
async def get_appointment(
    appointment_id: UUID,
    service: AppointmentServiceDep,
) -> AppointmentResponse:
    """
    Get a specific appointment by ID.

    Raises:
        NotFoundException: If appointment not found
    """
    return await service.get_appointment(appointment_id)


@router.get(
    "/{appointment_id}/details",
    response_model=AppointmentDetailsResponse,
    status_code=status.HTTP_200_OK,
    tags=["Appointments"],
    summary="Get appointment with its prescription",
)
async def get_appointment_details(
    appointment_id: UUID,
    service: AppointmentServiceDep,
) -> AppointmentDetailsResponse:
    """Get an appointment with its prescription and prescribed items."""
    return await service.get_appointment_details(appointment_id)


@router.put(
    "/{appointment_id}",
    response_model=AppointmentResponse,
    status_code=status.HTTP_200_OK,
    tags=["Appointments"],
    summary="Update appointment",
)
async def update_appointment(
    appointment_id: UUID,
    data: AppointmentUpdate,
    service: AppointmentServiceDep,
) -> AppointmentResponse:
    """
    Cancel or reschedule an appointment.

    Completed and cancelled appointments reject every change with 409.

    Args:
        appointment_id: Appointment ID
        data: Update data
        service: Appointment service

    Returns:
        Updated appointment
    """
    return await service.update_appointment(appointment_id, data)


@router.post(
    "/{appointment_id}/cancel",
    response_model=AppointmentResponse,
    status_code=status.HTTP_200_OK,
    tags=["Appointments"],
    summary="Cancel appointment",
)
async def cancel_appointment(
    appointment_id: UUID,
    service: AppointmentServiceDep,
) -> AppointmentResponse:
    """Cancel a scheduled appointment."""
    return await service.cancel_appointment(appointment_id)


@router.post(
    "/{appointment_id}/bring-to-now",
    response_model=AppointmentResponse,
    status_code=status.HTTP_200_OK,
    tags=["Appointments"],
    summary="Move appointment to the current time",
)
async def bring_to_now(
    appointment_id: UUID,
    service: AppointmentServiceDep,
) -> AppointmentResponse:
    """Move a scheduled appointment to now, e.g. when the patient arrives early."""
    return await service.bring_to_now(appointment_id)
