"""Pydantic DTOs for the Appointment feature and its calendar/history views."""

import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, Field

from salon.domain.entities import AppointmentDetails


class AppointmentCreate(BaseModel):
    """Schema for booking a new appointment.

    When ``amount`` is omitted the service's current price is charged.
    """

    client_id: str = Field(..., min_length=1)
    service_id: str = Field(..., min_length=1)
    date: dt.date = Field(..., examples=["2024-03-15"])
    time: dt.time = Field(..., examples=["10:00"])
    amount: Decimal | None = Field(None, ge=0)
    is_paid: bool = False
    notes: str | None = None


class AppointmentUpdate(BaseModel):
    """Schema for editing an appointment — all fields optional."""

    client_id: str | None = Field(None, min_length=1)
    service_id: str | None = Field(None, min_length=1)
    date: dt.date | None = None
    time: dt.time | None = None
    amount: Decimal | None = Field(None, ge=0)
    is_paid: bool | None = None
    notes: str | None = None


class AppointmentNotesUpdate(BaseModel):
    """Schema for replacing an appointment's free-text notes."""

    notes: str | None = None


class AppointmentResponse(BaseModel):
    """Schema returned to the client."""

    id: str
    client_id: str
    service_id: str
    date: dt.date
    time: dt.time
    amount: Decimal
    is_paid: bool
    notes: str | None

    model_config = {"from_attributes": True}


class AppointmentDetailsResponse(AppointmentResponse):
    """Appointment joined with display names (placeholders for orphans)."""

    client_name: str
    service_name: str

    @classmethod
    def from_details(cls, details: AppointmentDetails) -> "AppointmentDetailsResponse":
        return cls(
            **AppointmentResponse.model_validate(
                details.appointment, from_attributes=True
            ).model_dump(),
            client_name=details.client_name,
            service_name=details.service_name,
        )
