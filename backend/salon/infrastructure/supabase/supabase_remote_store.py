"""Supabase adapter — PostgREST for CRUD, Realtime ``postgres_changes`` for the feed."""

import logging
from typing import Any
from uuid import uuid4

import httpx
from supabase import AsyncClient, PostgrestAPIError, acreate_client

from salon.application.interfaces import (
    ChangeHandler,
    DisconnectHandler,
    RemoteStore,
    Subscription,
)
from salon.domain.entities import ChangeEvent, ChangeKind, Row, RowKey, Table
from salon.domain.exceptions import FeedDisconnectedError, RemoteStoreError
from salon.infrastructure.supabase.row_mapping import row_to_entity, to_wire

logger = logging.getLogger(__name__)

_BACKEND = "supabase"
_DROPPED_STATES = frozenset({"CHANNEL_ERROR", "TIMED_OUT", "CLOSED"})


class SupabaseSubscription(Subscription):
    """One Realtime channel bound to a single table."""

    def __init__(self, client: AsyncClient, table: Table, on_disconnect: DisconnectHandler | None):
        self._client = client
        self._table = table
        self._on_disconnect = on_disconnect
        self.channel: Any = None
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def handle_status(self, status: Any, error: Exception | None = None) -> None:
        """Channel status callback — reports drops that we did not ask for."""
        state = str(getattr(status, "value", status))
        if self._cancelled:
            return
        if state == "SUBSCRIBED":
            logger.info("Realtime channel for '%s' subscribed", self._table.value)
            return
        if state in _DROPPED_STATES and self._on_disconnect is not None:
            reason = f"{state}: {error}" if error else state
            self._on_disconnect(FeedDisconnectedError(self._table.value, reason))

    async def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        if self.channel is None:
            return
        try:
            await self._client.remove_channel(self.channel)
        except Exception as exc:
            raise RemoteStoreError(_BACKEND, f"unsubscribe {self._table.value}", str(exc)) from exc


class SupabaseRemoteStore(RemoteStore):
    """Implements the RemoteStore port on top of the supabase async client."""

    def __init__(self, client: AsyncClient, *, schema: str = "public"):
        self._client = client
        self._schema = schema

    @classmethod
    async def connect(cls, url: str, key: str, *, schema: str = "public") -> "SupabaseRemoteStore":
        try:
            client = await acreate_client(url, key)
        except Exception as exc:
            raise RemoteStoreError(_BACKEND, "connect", str(exc)) from exc
        return cls(client, schema=schema)

    @property
    def backend_name(self) -> str:
        return _BACKEND

    # ── CRUD via PostgREST ───────────────────────────────────────────

    async def select_all(self, table: Table) -> list[Row]:
        data = await self._execute(
            f"select {table.value}",
            self._client.table(table.value).select("*"),
        )
        try:
            return [row_to_entity(table, row) for row in data]
        except (KeyError, TypeError, ValueError) as exc:
            raise RemoteStoreError(_BACKEND, f"select {table.value}", f"malformed row: {exc}") from exc

    async def insert(self, table: Table, payload: dict[str, Any]) -> Row:
        data = await self._execute(
            f"insert {table.value}",
            self._client.table(table.value).insert(to_wire(payload)),
        )
        if not data:
            raise RemoteStoreError(_BACKEND, f"insert {table.value}", "no row returned")
        return row_to_entity(table, data[0])

    async def update(self, table: Table, row_id: str, patch: dict[str, Any]) -> Row:
        data = await self._execute(
            f"update {table.value}",
            self._client.table(table.value).update(to_wire(patch)).eq("id", row_id),
        )
        if not data:
            raise RemoteStoreError(_BACKEND, f"update {table.value}", f"no row with id '{row_id}'")
        return row_to_entity(table, data[0])

    async def delete(self, table: Table, row_id: str) -> Row | None:
        data = await self._execute(
            f"delete {table.value}",
            self._client.table(table.value).delete().eq("id", row_id),
        )
        return row_to_entity(table, data[0]) if data else None

    async def _execute(self, operation: str, query: Any) -> list[dict[str, Any]]:
        try:
            response = await query.execute()
        except PostgrestAPIError as exc:
            raise RemoteStoreError(_BACKEND, operation, exc.message or str(exc)) from exc
        except httpx.HTTPError as exc:
            raise RemoteStoreError(_BACKEND, operation, f"{type(exc).__name__}: {exc}") from exc
        return response.data or []

    # ── Change feed via Realtime ─────────────────────────────────────

    async def subscribe(
        self,
        table: Table,
        handler: ChangeHandler,
        on_disconnect: DisconnectHandler | None = None,
    ) -> Subscription:
        subscription = SupabaseSubscription(self._client, table, on_disconnect)

        def _on_change(payload: dict[str, Any]) -> None:
            if subscription.cancelled:
                return
            event = parse_change(table, payload)
            if event is not None:
                handler(event)

        try:
            channel = self._client.channel(f"salon-{table.value}-{uuid4().hex[:8]}")
            channel.on_postgres_changes(
                "*", schema=self._schema, table=table.value, callback=_on_change
            )
            subscription.channel = channel
            await channel.subscribe(subscription.handle_status)
        except Exception as exc:
            raise RemoteStoreError(_BACKEND, f"subscribe {table.value}", str(exc)) from exc
        return subscription

    async def close(self) -> None:
        try:
            await self._client.remove_all_channels()
        except Exception as exc:
            logger.warning("Failed to close Supabase realtime channels: %s", exc)


def parse_change(table: Table, payload: dict[str, Any]) -> ChangeEvent | None:
    """Map a Realtime ``postgres_changes`` payload → ChangeEvent.

    Returns None (and logs) for payloads that cannot be interpreted.
    """
    data = payload.get("data", payload)
    raw_kind = data.get("type") or data.get("eventType")
    record = data.get("record") or data.get("new") or None
    old_record = data.get("old_record") or data.get("old") or None
    try:
        kind = ChangeKind(str(raw_kind).upper())
        after = row_to_entity(table, record) if record else None
        before = _old_image(table, old_record)
    except (KeyError, TypeError, ValueError) as exc:
        logger.warning("Dropping malformed %s change on '%s': %s", raw_kind, table.value, exc)
        return None
    if kind is not ChangeKind.DELETE and after is None:
        logger.warning("Dropping %s change on '%s' without a record", kind.value, table.value)
        return None
    return ChangeEvent(table=table, kind=kind, before=before, after=after)


def _old_image(table: Table, old_record: dict[str, Any] | None) -> Row | RowKey | None:
    if not old_record or "id" not in old_record:
        return None
    try:
        return row_to_entity(table, old_record)
    except (KeyError, TypeError, ValueError):
        # Default replica identity only ships the primary key.
        return RowKey(str(old_record["id"]))
