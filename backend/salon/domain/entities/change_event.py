"""Domain types describing mirrored tables and row-level change events."""

from dataclasses import dataclass
from enum import Enum
from typing import Union

from .appointment import Appointment
from .client import Client
from .service import Service

Row = Union[Client, Service, Appointment]


class Table(str, Enum):
    """Tables held by the remote store and mirrored locally."""

    CLIENTS = "clients"
    SERVICES = "services"
    APPOINTMENTS = "appointments"


class ChangeKind(str, Enum):
    """Row mutation kinds emitted by the change feed."""

    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass(frozen=True)
class RowKey:
    """Identity-only stand-in for a row, e.g. the old image of a DELETE."""

    id: str


@dataclass(frozen=True)
class ChangeEvent:
    """One row mutation as delivered by a remote store's change feed.

    ``before`` is set for DELETE (and may be set for UPDATE); ``after`` is
    set for INSERT and UPDATE.
    """

    table: Table
    kind: ChangeKind
    before: Row | RowKey | None = None
    after: Row | None = None

    @property
    def row_id(self) -> str | None:
        row = self.after if self.after is not None else self.before
        return row.id if row is not None else None
