"""Self-hosted RemoteStore backed by SQLAlchemy async sessions.

Writes commit to the database and then publish a ChangeEvent on the
in-process broadcaster, giving the mirror the same insert/update/delete
feed the hosted backend provides.
"""

import datetime as dt
from decimal import Decimal, InvalidOperation
from typing import Any

from sqlalchemy import Date, Numeric, Time, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from salon.application.interfaces import (
    ChangeHandler,
    DisconnectHandler,
    RemoteStore,
    Subscription,
)
from salon.domain.entities import Appointment, ChangeEvent, ChangeKind, Client, Row, Service, Table
from salon.domain.exceptions import RemoteStoreError
from salon.infrastructure.database.base import Base
from salon.infrastructure.database.change_broadcaster import ChangeBroadcaster
from salon.infrastructure.database.models import AppointmentModel, ClientModel, ServiceModel

_BACKEND = "database"

_MODELS: dict[Table, type[Base]] = {
    Table.CLIENTS: ClientModel,
    Table.SERVICES: ServiceModel,
    Table.APPOINTMENTS: AppointmentModel,
}

# Store-assigned columns that callers may not set.
_READ_ONLY_COLUMNS = frozenset({"id", "created_at"})


class SQLAlchemyRemoteStore(RemoteStore):
    """Implements the RemoteStore port using SQLAlchemy async sessions."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        broadcaster: ChangeBroadcaster | None = None,
        engine: AsyncEngine | None = None,
    ):
        self._session_factory = session_factory
        self._broadcaster = broadcaster or ChangeBroadcaster()
        self._engine = engine

    @property
    def backend_name(self) -> str:
        return _BACKEND

    @property
    def broadcaster(self) -> ChangeBroadcaster:
        return self._broadcaster

    async def select_all(self, table: Table) -> list[Row]:
        model = _MODELS[table]
        stmt = select(model).order_by(
            model.name if table is Table.SERVICES else model.created_at
        )
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                return [_to_entity(table, m) for m in result.scalars().all()]
        except SQLAlchemyError as exc:
            raise RemoteStoreError(_BACKEND, f"select {table.value}", str(exc)) from exc

    async def insert(self, table: Table, payload: dict[str, Any]) -> Row:
        values = _coerce_values(table, payload, operation="insert")
        try:
            async with self._session_factory() as session:
                model = _MODELS[table](**values)
                session.add(model)
                await session.commit()
                entity = _to_entity(table, model)
        except SQLAlchemyError as exc:
            raise RemoteStoreError(_BACKEND, f"insert {table.value}", str(exc)) from exc

        self._broadcaster.publish(ChangeEvent(table, ChangeKind.INSERT, after=entity))
        return entity

    async def update(self, table: Table, row_id: str, patch: dict[str, Any]) -> Row:
        values = _coerce_values(table, patch, operation="update")
        try:
            async with self._session_factory() as session:
                model = await session.get(_MODELS[table], row_id)
                if model is None:
                    raise RemoteStoreError(
                        _BACKEND, f"update {table.value}", f"no row with id '{row_id}'"
                    )
                before = _to_entity(table, model)
                for column, value in values.items():
                    setattr(model, column, value)
                await session.commit()
                after = _to_entity(table, model)
        except SQLAlchemyError as exc:
            raise RemoteStoreError(_BACKEND, f"update {table.value}", str(exc)) from exc

        self._broadcaster.publish(ChangeEvent(table, ChangeKind.UPDATE, before=before, after=after))
        return after

    async def delete(self, table: Table, row_id: str) -> Row | None:
        try:
            async with self._session_factory() as session:
                model = await session.get(_MODELS[table], row_id)
                if model is None:
                    return None
                before = _to_entity(table, model)
                await session.delete(model)
                await session.commit()
        except SQLAlchemyError as exc:
            raise RemoteStoreError(_BACKEND, f"delete {table.value}", str(exc)) from exc

        self._broadcaster.publish(ChangeEvent(table, ChangeKind.DELETE, before=before))
        return before

    async def subscribe(
        self,
        table: Table,
        handler: ChangeHandler,
        on_disconnect: DisconnectHandler | None = None,
    ) -> Subscription:
        # In-process delivery cannot drop, so on_disconnect is never called.
        return self._broadcaster.subscribe(table, handler)

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()


async def create_tables(engine) -> None:
    """Create the clients/services/appointments tables if missing."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


# ── Mapping ──────────────────────────────────────────────────────────


def _to_entity(table: Table, model: Any) -> Row:
    """Map ORM model → domain entity."""
    if table is Table.CLIENTS:
        return Client(
            id=model.id,
            name=model.name,
            phone=model.phone,
            email=model.email,
            created_at=model.created_at,
        )
    if table is Table.SERVICES:
        return Service(
            id=model.id,
            name=model.name,
            duration=model.duration,
            price=Decimal(model.price),
        )
    return Appointment(
        id=model.id,
        client_id=model.client_id,
        service_id=model.service_id,
        date=model.date,
        time=model.time,
        amount=Decimal(model.amount),
        is_paid=bool(model.is_paid),
        notes=model.notes,
        created_at=model.created_at,
    )


def _coerce_values(table: Table, values: dict[str, Any], *, operation: str) -> dict[str, Any]:
    """Validate column names and convert ISO strings for typed columns."""
    columns = _MODELS[table].__table__.columns
    coerced: dict[str, Any] = {}
    for key, value in values.items():
        if key in _READ_ONLY_COLUMNS or key not in columns:
            raise RemoteStoreError(
                _BACKEND, f"{operation} {table.value}", f"column '{key}' cannot be written"
            )
        coerced[key] = _coerce(columns[key].type, value, table=table, key=key, operation=operation)
    return coerced


def _coerce(column_type: Any, value: Any, *, table: Table, key: str, operation: str) -> Any:
    if value is None:
        return None
    try:
        if isinstance(column_type, Date) and isinstance(value, str):
            return dt.date.fromisoformat(value)
        if isinstance(column_type, Time) and isinstance(value, str):
            return dt.time.fromisoformat(value)
        if isinstance(column_type, Numeric) and not isinstance(value, Decimal):
            return Decimal(str(value))
    except (ValueError, InvalidOperation) as exc:
        raise RemoteStoreError(
            _BACKEND, f"{operation} {table.value}", f"invalid value for '{key}': {value!r}"
        ) from exc
    return value
