"""Domain entities for appointments and their display projection."""

from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal

UNKNOWN_CLIENT = "Unknown Client"
UNKNOWN_SERVICE = "Unknown Service"


@dataclass(frozen=True)
class Appointment:
    """A booked visit.

    ``amount`` is the price charged at booking time and is independent of
    the service's current price. ``client_id`` and ``service_id`` may point
    at rows that no longer exist (orphan references).
    """

    id: str
    client_id: str
    service_id: str
    date: date
    time: time
    amount: Decimal
    is_paid: bool = False
    notes: str | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class AppointmentDetails:
    """An appointment joined with display names for its references.

    Dangling references resolve to placeholder labels rather than errors.
    """

    appointment: Appointment
    client_name: str = UNKNOWN_CLIENT
    service_name: str = UNKNOWN_SERVICE
    client_exists: bool = False
    service_exists: bool = False
