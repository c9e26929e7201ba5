from .client import Client
from .service import Service
from .appointment import Appointment, AppointmentDetails, UNKNOWN_CLIENT, UNKNOWN_SERVICE
from .change_event import ChangeEvent, ChangeKind, Row, RowKey, Table
from .mirror_state import MirrorState, OrphanPolicy, WriteStrategy
from .write_intent import DeleteIntent, InsertIntent, UpdateIntent, WriteIntent

__all__ = [
    "Client",
    "Service",
    "Appointment",
    "AppointmentDetails",
    "UNKNOWN_CLIENT",
    "UNKNOWN_SERVICE",
    "ChangeEvent",
    "ChangeKind",
    "Row",
    "RowKey",
    "Table",
    "MirrorState",
    "OrphanPolicy",
    "WriteStrategy",
    "InsertIntent",
    "UpdateIntent",
    "DeleteIntent",
    "WriteIntent",
]
