"""Domain entity — a salon client."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Client:
    """A person who books appointments.

    ``id`` and ``created_at`` are assigned by the remote store and never
    change after creation.
    """

    id: str
    name: str
    phone: str
    email: str | None = None
    created_at: datetime | None = None
