"""Local mirror — in-memory copy of the remote store's three tables.

The mirror seeds itself with one bulk read per table and then follows the
store's change feed. Reads never touch the network. Writes are forwarded to
the store and only become visible locally once acknowledged.
"""

import asyncio
import logging
from collections.abc import Callable
from datetime import date

from salon.application.interfaces import RemoteStore, Subscription
from salon.domain.entities import (
    Appointment,
    ChangeEvent,
    ChangeKind,
    DeleteIntent,
    InsertIntent,
    MirrorState,
    OrphanPolicy,
    Row,
    RowKey,
    Table,
    UpdateIntent,
    WriteIntent,
    WriteStrategy,
)
from salon.domain.exceptions import (
    FeedDisconnectedError,
    LoadPartialFailure,
    RemoteStoreError,
    WriteRejectedError,
)
from salon.infrastructure.logging.colored_logger import SyncLogger, SyncStage

logger = logging.getLogger(__name__)
slog = SyncLogger("LocalMirror")

TABLES = (Table.CLIENTS, Table.SERVICES, Table.APPOINTMENTS)

# Called after every applied change; ``event`` is None when a whole table was (re)loaded.
MirrorListener = Callable[[Table, ChangeEvent | None], None]

_PARENT_FIELDS = {
    Table.CLIENTS: "client_id",
    Table.SERVICES: "service_id",
}


def merge_change(
    rows: dict[str, Row],
    kind: ChangeKind | str,
    before: Row | RowKey | None = None,
    after: Row | None = None,
) -> dict[str, Row]:
    """Return the collection that results from applying one change event.

    ``rows`` is never mutated. INSERT of a known id and DELETE of an unknown
    id return ``rows`` unchanged. UPDATE of an unknown id appends it.
    """
    kind = ChangeKind(kind)

    if kind is ChangeKind.DELETE:
        target = before if before is not None else after
        if target is None or target.id not in rows:
            return rows
        return {row_id: row for row_id, row in rows.items() if row_id != target.id}

    if after is None:
        raise ValueError(f"{kind.value} event without an 'after' row")
    if kind is ChangeKind.INSERT and after.id in rows:
        return rows

    merged = dict(rows)
    merged[after.id] = after  # keeps position on replace, appends otherwise
    return merged


class LocalMirror:
    """Synchronously readable mirror of clients, services and appointments.

    Owns its collections exclusively: callers get immutable snapshots and go
    through ``write()`` for every mutation. All mutations run on the event
    loop, so a read never observes a half-applied event.
    """

    def __init__(
        self,
        remote_store: RemoteStore,
        *,
        write_strategy: WriteStrategy = WriteStrategy.DIRECT,
        orphan_policy: OrphanPolicy = OrphanPolicy.KEEP,
        echo_timeout: float = 2.0,
        resubscribe_attempts: int = 5,
        resubscribe_delay: float = 1.0,
        resync_on_reconnect: bool = True,
    ) -> None:
        self._store = remote_store
        self._write_strategy = WriteStrategy(write_strategy)
        self._orphan_policy = OrphanPolicy(orphan_policy)
        self._echo_timeout = echo_timeout
        self._resubscribe_attempts = max(1, resubscribe_attempts)
        self._resubscribe_delay = resubscribe_delay
        self._resync_on_reconnect = resync_on_reconnect

        self._rows: dict[Table, dict[str, Row]] = {table: {} for table in TABLES}
        self._state = MirrorState.UNINITIALIZED
        self._closing = False
        self._subscriptions: dict[Table, Subscription] = {}
        self._disconnected: set[Table] = set()
        self._resubscribe_tasks: dict[Table, asyncio.Task] = {}
        self._read_buffers: dict[Table, list[ChangeEvent]] = {}
        self._echo_waiters: dict[tuple[Table, str], list[asyncio.Event]] = {}
        self._listeners: list[MirrorListener] = []
        self.last_load_failure: LoadPartialFailure | None = None

    # ── Lifecycle ────────────────────────────────────────────────────

    @property
    def state(self) -> MirrorState:
        return self._state

    @property
    def is_loading(self) -> bool:
        """True until the initial bulk load has settled."""
        return self._state in (MirrorState.UNINITIALIZED, MirrorState.LOADING)

    @property
    def write_strategy(self) -> WriteStrategy:
        return self._write_strategy

    @property
    def orphan_policy(self) -> OrphanPolicy:
        return self._orphan_policy

    @property
    def failed_tables(self) -> list[str]:
        return self.last_load_failure.tables if self.last_load_failure else []

    async def load(self) -> None:
        """Subscribe to every feed, then bulk-read all tables concurrently.

        Never raises for store failures: a table whose read fails stays empty,
        the failure is logged, and the mirror still becomes usable.
        """
        if self._state is not MirrorState.UNINITIALIZED:
            logger.warning("load() called on a %s mirror — ignoring", self._state.value)
            return

        self._state = MirrorState.LOADING
        with slog.timed_step(SyncStage.LOAD, "Loading mirror", backend=self._store.backend_name):
            for table in TABLES:
                await self._subscribe(table)

            results = await asyncio.gather(
                *(self._read_table(table) for table in TABLES),
                return_exceptions=True,
            )

        errors: dict[str, BaseException] = {}
        for table, result in zip(TABLES, results):
            if isinstance(result, BaseException):
                errors[table.value] = result
                slog.step_error(SyncStage.LOAD, f"Bulk read of '{table.value}' failed", error=result)

        self.last_load_failure = LoadPartialFailure(errors) if errors else None
        if self.last_load_failure:
            slog.step_error(
                SyncStage.LOAD,
                f"{self.last_load_failure} — continuing with a partial mirror",
                level=logging.WARNING,
            )

        if self._closing:
            return
        self._state = MirrorState.DEGRADED if self._disconnected else MirrorState.READY
        slog.step_complete(
            SyncStage.LOAD,
            f"Mirror {self._state.value}",
            **{table.value: len(self._rows[table]) for table in TABLES},
        )

    async def close(self) -> None:
        """Cancel every feed subscription and stop applying events.

        Safe to call more than once; subscriptions are cancelled exactly once.
        """
        if self._closing:
            return
        self._closing = True

        tasks = list(self._resubscribe_tasks.values())
        self._resubscribe_tasks.clear()
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

        subscriptions = list(self._subscriptions.items())
        self._subscriptions.clear()
        for table, subscription in subscriptions:
            try:
                await subscription.cancel()
            except RemoteStoreError as exc:
                slog.step_error(
                    SyncStage.FEED,
                    f"Could not cancel '{table.value}' subscription",
                    error=exc,
                    level=logging.WARNING,
                )

        for table in TABLES:
            self._wake_echo_waiters(table)
        self._state = MirrorState.CLOSED
        logger.info("LocalMirror closed")

    async def __aenter__(self) -> "LocalMirror":
        await self.load()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    # ── Listeners ────────────────────────────────────────────────────

    def add_listener(self, listener: MirrorListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: MirrorListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, table: Table, event: ChangeEvent | None) -> None:
        for listener in list(self._listeners):
            try:
                listener(table, event)
            except Exception:
                logger.exception("Mirror listener %r failed", listener)

    # ── Reads ────────────────────────────────────────────────────────

    def snapshot(self, table: Table | str) -> tuple[Row, ...]:
        """Current rows of ``table`` in insertion order."""
        return tuple(self._rows[Table(table)].values())

    def get(self, table: Table | str, row_id: str) -> Row | None:
        return self._rows[Table(table)].get(row_id)

    def appointments_on_date(self, on_date: date | str) -> list[Appointment]:
        """Appointments on one calendar day, earliest first (stable on ties)."""
        on_date = _as_date(on_date)
        matches = [a for a in self._rows[Table.APPOINTMENTS].values() if a.date == on_date]
        return sorted(matches, key=lambda a: a.time)

    def appointments_for_client(self, client_id: str) -> list[Appointment]:
        """A client's appointments, most recent first."""
        matches = [
            a for a in self._rows[Table.APPOINTMENTS].values() if a.client_id == client_id
        ]
        return sorted(matches, key=lambda a: (a.date, a.time), reverse=True)

    def dates_with_appointments(self) -> frozenset[date]:
        return frozenset(a.date for a in self._rows[Table.APPOINTMENTS].values())

    # ── Incremental sync ─────────────────────────────────────────────

    def apply_change(
        self,
        table: Table | str,
        kind: ChangeKind | str,
        before: Row | RowKey | None = None,
        after: Row | None = None,
    ) -> None:
        """Apply one change-feed event to the local collection."""
        self._apply(ChangeEvent(Table(table), ChangeKind(kind), before, after))

    def _apply(self, event: ChangeEvent) -> None:
        current = self._rows[event.table]
        updated = merge_change(current, event.kind, event.before, event.after)
        self._resolve_echo(event)
        if updated is current:
            return
        self._rows[event.table] = updated
        self._notify(event.table, event)

    def _on_feed_event(self, event: ChangeEvent) -> None:
        if self._closing:
            slog.detail("Dropping feed event after close", table=event.table.value, id=event.row_id)
            return
        slog.detail(f"{event.kind.value} {event.table.value}", id=event.row_id)
        buffer = self._read_buffers.get(event.table)
        if buffer is not None:
            buffer.append(event)
        self._apply(event)

    async def _read_table(self, table: Table) -> None:
        """Replace ``table`` with a fresh bulk read.

        Feed events that arrive while the read is in flight are replayed on
        top of its result, so they are not lost to the replacement.
        """
        self._read_buffers[table] = []
        try:
            rows = await self._store.select_all(table)
        finally:
            buffered = self._read_buffers.pop(table, [])

        seeded: dict[str, Row] = {row.id: row for row in rows}
        for event in buffered:
            seeded = merge_change(seeded, event.kind, event.before, event.after)
        self._rows[table] = seeded
        self._notify(table, None)

    # ── Writes ───────────────────────────────────────────────────────

    async def write(self, table: Table | str, intent: WriteIntent) -> Row | bool:
        """Forward a write intent to the store.

        Returns the acknowledged row for inserts and updates, ``True`` for
        deletes. Raises ``WriteRejectedError`` if the store refuses; nothing
        is applied locally in that case. Once this returns, ``snapshot()``
        reflects the write.

        Under the CASCADE orphan policy a client or service delete removes
        its appointments only after the parent delete was acknowledged.
        """
        table = Table(table)
        operation = _operation_name(intent)
        if self._closing:
            raise WriteRejectedError(table.value, operation, "mirror is closed")

        row: Row | None = None
        try:
            with slog.timed_step(SyncStage.WRITE, f"{operation} {table.value}"):
                if isinstance(intent, InsertIntent):
                    row = await self._store.insert(table, intent.payload)
                    event = ChangeEvent(table, ChangeKind.INSERT, after=row)
                elif isinstance(intent, UpdateIntent):
                    row = await self._store.update(table, intent.id, intent.patch)
                    event = ChangeEvent(table, ChangeKind.UPDATE, after=row)
                elif isinstance(intent, DeleteIntent):
                    deleted = await self._store.delete(table, intent.id)
                    event = ChangeEvent(
                        table, ChangeKind.DELETE, before=deleted or RowKey(intent.id)
                    )
                else:
                    raise TypeError(f"Unsupported write intent: {intent!r}")
        except RemoteStoreError as exc:
            raise WriteRejectedError(table.value, operation, exc.message) from exc

        await self._fold_in(event)

        if (
            isinstance(intent, DeleteIntent)
            and self._orphan_policy is OrphanPolicy.CASCADE
            and table in _PARENT_FIELDS
        ):
            await self._cascade_delete(table, intent.id)
        return row if row is not None else True

    async def _fold_in(self, event: ChangeEvent) -> None:
        """Make an acknowledged write visible according to the write strategy."""
        if (
            self._write_strategy is WriteStrategy.FEED
            and event.table in self._subscriptions
            and event.table not in self._disconnected
            and not self._closing
        ):
            if self._reflects(event):
                return
            key = (event.table, event.row_id)
            waiter = asyncio.Event()
            self._echo_waiters.setdefault(key, []).append(waiter)
            try:
                await asyncio.wait_for(waiter.wait(), timeout=self._echo_timeout)
            except asyncio.TimeoutError:
                slog.step_error(
                    SyncStage.FEED,
                    f"No feed echo for {event.table.value}/{event.row_id} within "
                    f"{self._echo_timeout:.1f}s — applying acknowledged row",
                    level=logging.WARNING,
                )
            finally:
                waiters = self._echo_waiters.get(key, [])
                if waiter in waiters:
                    waiters.remove(waiter)
                if not waiters:
                    self._echo_waiters.pop(key, None)

        if not self._reflects(event):
            self._apply(event)

    def _reflects(self, event: ChangeEvent) -> bool:
        rows = self._rows[event.table]
        if event.kind is ChangeKind.DELETE:
            return event.row_id not in rows
        return rows.get(event.row_id) == event.after

    def _resolve_echo(self, event: ChangeEvent) -> None:
        for waiter in self._echo_waiters.pop((event.table, event.row_id), []):
            waiter.set()

    def _wake_echo_waiters(self, table: Table) -> None:
        for key in [key for key in self._echo_waiters if key[0] is table]:
            for waiter in self._echo_waiters.pop(key):
                waiter.set()

    async def _cascade_delete(self, table: Table, parent_id: str) -> None:
        field = _PARENT_FIELDS[table]
        dependents = [
            a for a in self._rows[Table.APPOINTMENTS].values() if getattr(a, field) == parent_id
        ]
        if dependents:
            logger.info(
                "Cascading delete of %s %s to %d appointment(s)",
                table.value, parent_id, len(dependents),
            )
        # The parent is already gone; a dependent the store refuses stays as an orphan.
        for appointment in dependents:
            try:
                await self.write(Table.APPOINTMENTS, DeleteIntent(appointment.id))
            except WriteRejectedError as exc:
                slog.step_error(
                    SyncStage.WRITE,
                    f"Cascade delete of appointment {appointment.id} failed — left as orphan",
                    error=exc,
                    level=logging.WARNING,
                )

    # ── Feed connection management ───────────────────────────────────

    async def _subscribe(self, table: Table) -> bool:
        try:
            self._subscriptions[table] = await self._store.subscribe(
                table,
                self._on_feed_event,
                on_disconnect=lambda error, table=table: self._on_feed_disconnect(table, error),
            )
        except RemoteStoreError as exc:
            self._on_feed_disconnect(table, FeedDisconnectedError(table.value, exc.message))
            return False
        return True

    def _on_feed_disconnect(self, table: Table, error: FeedDisconnectedError) -> None:
        if self._closing:
            return
        slog.step_error(SyncStage.FEED, str(error), level=logging.WARNING)
        self._disconnected.add(table)
        if self._state is MirrorState.READY:
            self._state = MirrorState.DEGRADED
        # Writers waiting on this feed fall back to their acknowledged rows.
        self._wake_echo_waiters(table)

        task = self._resubscribe_tasks.get(table)
        if task is not None and not task.done():
            return
        self._resubscribe_tasks[table] = asyncio.get_running_loop().create_task(
            self._resubscribe(table)
        )

    async def _resubscribe(self, table: Table) -> None:
        stale = self._subscriptions.pop(table, None)
        if stale is not None:
            try:
                await stale.cancel()
            except RemoteStoreError as exc:
                logger.debug("Ignoring cancel failure on dropped '%s' feed: %s", table.value, exc)

        delay = self._resubscribe_delay
        for attempt in range(1, self._resubscribe_attempts + 1):
            await asyncio.sleep(delay)
            if self._closing:
                return
            slog.step_start(SyncStage.RESYNC, f"Resubscribing to '{table.value}'", attempt=attempt)
            try:
                subscription = await self._store.subscribe(
                    table,
                    self._on_feed_event,
                    on_disconnect=lambda error: self._on_feed_disconnect(table, error),
                )
            except RemoteStoreError as exc:
                slog.step_error(
                    SyncStage.RESYNC,
                    f"Resubscribe to '{table.value}' failed",
                    error=exc,
                    level=logging.WARNING,
                )
                delay *= 2
                continue

            if self._closing:
                await subscription.cancel()
                return
            self._subscriptions[table] = subscription
            self._disconnected.discard(table)

            try:
                if self._resync_on_reconnect:
                    try:
                        await self._read_table(table)
                    except RemoteStoreError as exc:
                        slog.step_error(
                            SyncStage.RESYNC,
                            f"Resync of '{table.value}' failed — keeping stale rows",
                            error=exc,
                            level=logging.WARNING,
                        )
            finally:
                # The feed is live again whether or not the resync read worked.
                if not self._disconnected and self._state is MirrorState.DEGRADED:
                    self._state = MirrorState.READY
            slog.step_complete(SyncStage.RESYNC, f"Feed for '{table.value}' restored")
            return

        slog.step_error(
            SyncStage.RESYNC,
            f"Giving up on '{table.value}' feed after {self._resubscribe_attempts} "
            "attempt(s); serving the last known snapshot",
        )


def _as_date(value: date | str) -> date:
    if isinstance(value, str):
        return date.fromisoformat(value)
    return value


def _operation_name(intent: WriteIntent) -> str:
    if isinstance(intent, InsertIntent):
        return "insert"
    if isinstance(intent, UpdateIntent):
        return "update"
    if isinstance(intent, DeleteIntent):
        return "delete"
    return type(intent).__name__
