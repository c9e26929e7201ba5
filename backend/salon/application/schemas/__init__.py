from .client import ClientCreate, ClientUpdate, ClientResponse
from .service import ServiceCreate, ServiceUpdate, ServiceResponse
from .appointment import (
    AppointmentCreate,
    AppointmentUpdate,
    AppointmentNotesUpdate,
    AppointmentResponse,
    AppointmentDetailsResponse,
)

__all__ = [
    "ClientCreate",
    "ClientUpdate",
    "ClientResponse",
    "ServiceCreate",
    "ServiceUpdate",
    "ServiceResponse",
    "AppointmentCreate",
    "AppointmentUpdate",
    "AppointmentNotesUpdate",
    "AppointmentResponse",
    "AppointmentDetailsResponse",
]
