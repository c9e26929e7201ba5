"""Write intents — caller-issued requests to mutate one row in the remote store."""

from dataclasses import dataclass, field
from typing import Any, Union


@dataclass(frozen=True)
class InsertIntent:
    """Create a row. The store assigns ``id`` (and ``created_at`` where present)."""

    payload: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class UpdateIntent:
    """Apply a partial-field patch to an existing row."""

    id: str
    patch: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class DeleteIntent:
    """Remove an existing row."""

    id: str


WriteIntent = Union[InsertIntent, UpdateIntent, DeleteIntent]
