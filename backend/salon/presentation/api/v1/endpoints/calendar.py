"""Calendar and history views over the mirrored appointments."""

import datetime as dt

from fastapi import APIRouter, Depends, Query

from salon.application.schemas import AppointmentDetailsResponse
from salon.application.services import SalonService
from salon.infrastructure.dependencies import get_salon_service

router = APIRouter(tags=["Calendar"])


@router.get("/calendar/days", response_model=list[dt.date])
async def calendar_days(
    service: SalonService = Depends(get_salon_service),
) -> list[dt.date]:
    """Distinct days that have at least one appointment (for highlighting)."""
    return service.calendar_days()


@router.get("/calendar/{day}", response_model=list[AppointmentDetailsResponse])
async def day_schedule(
    day: dt.date,
    service: SalonService = Depends(get_salon_service),
) -> list[AppointmentDetailsResponse]:
    """One day's appointments, earliest first."""
    return [AppointmentDetailsResponse.from_details(d) for d in service.day_schedule(day)]


@router.get("/history", response_model=list[AppointmentDetailsResponse])
async def history(
    client_id: str | None = Query(None, description="Only this client's visits"),
    date: dt.date | None = Query(None, description="Only visits on this day"),
    service: SalonService = Depends(get_salon_service),
) -> list[AppointmentDetailsResponse]:
    """Visit history, newest first."""
    return [
        AppointmentDetailsResponse.from_details(d)
        for d in service.history(client_id=client_id, on_date=date)
    ]
