"""Appointment endpoints — booking, editing, payment status and notes."""

from fastapi import APIRouter, Depends, HTTPException, status

from salon.application.schemas import (
    AppointmentCreate,
    AppointmentDetailsResponse,
    AppointmentNotesUpdate,
    AppointmentUpdate,
)
from salon.application.services import SalonService
from salon.domain.exceptions import EntityNotFoundError, WriteRejectedError
from salon.infrastructure.dependencies import get_salon_service

router = APIRouter(prefix="/appointments", tags=["Appointments"])


@router.get("", response_model=list[AppointmentDetailsResponse])
async def list_appointments(
    service: SalonService = Depends(get_salon_service),
) -> list[AppointmentDetailsResponse]:
    """All appointments in chronological order."""
    return [AppointmentDetailsResponse.from_details(d) for d in service.list_appointments()]


@router.post("", response_model=AppointmentDetailsResponse, status_code=status.HTTP_201_CREATED)
async def book_appointment(
    data: AppointmentCreate,
    service: SalonService = Depends(get_salon_service),
) -> AppointmentDetailsResponse:
    try:
        appointment = await service.book_appointment(data)
    except WriteRejectedError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    return AppointmentDetailsResponse.from_details(service.describe(appointment))


@router.patch("/{appointment_id}", response_model=AppointmentDetailsResponse)
async def update_appointment(
    appointment_id: str,
    data: AppointmentUpdate,
    service: SalonService = Depends(get_salon_service),
) -> AppointmentDetailsResponse:
    try:
        appointment = await service.update_appointment(appointment_id, data)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except WriteRejectedError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    return AppointmentDetailsResponse.from_details(service.describe(appointment))


@router.post("/{appointment_id}/toggle-paid", response_model=AppointmentDetailsResponse)
async def toggle_paid(
    appointment_id: str,
    service: SalonService = Depends(get_salon_service),
) -> AppointmentDetailsResponse:
    """Flip the paid flag."""
    try:
        appointment = await service.toggle_paid(appointment_id)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except WriteRejectedError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    return AppointmentDetailsResponse.from_details(service.describe(appointment))


@router.put("/{appointment_id}/notes", response_model=AppointmentDetailsResponse)
async def update_notes(
    appointment_id: str,
    data: AppointmentNotesUpdate,
    service: SalonService = Depends(get_salon_service),
) -> AppointmentDetailsResponse:
    try:
        appointment = await service.update_notes(appointment_id, data.notes)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except WriteRejectedError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    return AppointmentDetailsResponse.from_details(service.describe(appointment))


@router.delete("/{appointment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_appointment(
    appointment_id: str,
    service: SalonService = Depends(get_salon_service),
) -> None:
    try:
        await service.remove_appointment(appointment_id)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except WriteRejectedError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
