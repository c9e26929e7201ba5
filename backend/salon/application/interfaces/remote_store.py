"""Abstract interface (port) for the hosted backend that owns all durable state."""

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

from salon.domain.entities import ChangeEvent, Row, Table
from salon.domain.exceptions import FeedDisconnectedError

ChangeHandler = Callable[[ChangeEvent], None]
DisconnectHandler = Callable[[FeedDisconnectedError], None]


class Subscription(ABC):
    """Handle for one table's change feed."""

    @abstractmethod
    async def cancel(self) -> None:
        """Stop delivery. Calling it more than once is a no-op."""
        ...


class RemoteStore(ABC):
    """Port for the remote store — implemented in the infrastructure layer.

    Every call may fail with ``RemoteStoreError``.
    """

    @property
    @abstractmethod
    def backend_name(self) -> str:
        """Short identifier used in logs and errors (e.g. ``"supabase"``)."""
        ...

    @abstractmethod
    async def select_all(self, table: Table) -> list[Row]:
        """Bulk read of every row in a table."""
        ...

    @abstractmethod
    async def insert(self, table: Table, payload: dict[str, Any]) -> Row:
        """Create a row and return it as acknowledged by the store."""
        ...

    @abstractmethod
    async def update(self, table: Table, row_id: str, patch: dict[str, Any]) -> Row:
        """Patch a row and return its acknowledged state."""
        ...

    @abstractmethod
    async def delete(self, table: Table, row_id: str) -> Row | None:
        """Delete a row. Returns the deleted row when the store reports it."""
        ...

    @abstractmethod
    async def subscribe(
        self,
        table: Table,
        handler: ChangeHandler,
        on_disconnect: DisconnectHandler | None = None,
    ) -> Subscription:
        """Start delivering change events for ``table`` to ``handler``.

        ``on_disconnect`` is invoked if the feed drops after subscribing.
        """
        ...

    async def close(self) -> None:
        """Release connections held by the adapter."""
        return None
