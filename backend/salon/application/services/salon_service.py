"""Application service (use cases) for the salon's clients, services and appointments."""

import re
from datetime import date
from decimal import Decimal
from typing import Any

from pydantic import BaseModel

from salon.application.schemas import (
    AppointmentCreate,
    AppointmentUpdate,
    ClientCreate,
    ClientUpdate,
    ServiceCreate,
    ServiceUpdate,
)
from salon.application.services.local_mirror import LocalMirror
from salon.domain.entities import (
    Appointment,
    AppointmentDetails,
    Client,
    DeleteIntent,
    InsertIntent,
    Service,
    Table,
    UNKNOWN_CLIENT,
    UNKNOWN_SERVICE,
    UpdateIntent,
)
from salon.domain.exceptions import EntityNotFoundError

_WHITESPACE = re.compile(r"\s+")


class SalonService:
    """Orchestrates the admin use cases on top of the local mirror.

    Reads are served from the mirror's snapshot; every mutation is a write
    intent forwarded through ``LocalMirror.write``.
    """

    def __init__(self, mirror: LocalMirror):
        self._mirror = mirror

    # ── Clients ──────────────────────────────────────────────────────

    def list_clients(self) -> list[Client]:
        return sorted(self._mirror.snapshot(Table.CLIENTS), key=lambda c: c.name.casefold())

    def get_client(self, client_id: str) -> Client:
        client = self._mirror.get(Table.CLIENTS, client_id)
        if client is None:
            raise EntityNotFoundError("Client", client_id)
        return client

    def search_clients(self, query: str) -> list[Client]:
        """Case- and whitespace-insensitive substring match on client names."""
        needle = _normalize(query)
        clients = self.list_clients()
        if not needle:
            return clients
        return [c for c in clients if needle in _normalize(c.name)]

    async def add_client(self, data: ClientCreate) -> Client:
        payload = data.model_dump()
        payload["email"] = payload.get("email") or None
        return await self._mirror.write(Table.CLIENTS, InsertIntent(payload))

    async def update_client(self, client_id: str, data: ClientUpdate) -> Client:
        current = self.get_client(client_id)
        patch = _patch(data, nullable={"email"})
        if "email" in patch:
            patch["email"] = patch["email"] or None
        if not patch:
            return current
        return await self._mirror.write(Table.CLIENTS, UpdateIntent(client_id, patch))

    async def remove_client(self, client_id: str) -> bool:
        self.get_client(client_id)
        return await self._mirror.write(Table.CLIENTS, DeleteIntent(client_id))

    # ── Services ─────────────────────────────────────────────────────

    def list_services(self) -> list[Service]:
        return sorted(self._mirror.snapshot(Table.SERVICES), key=lambda s: s.name.casefold())

    def get_service(self, service_id: str) -> Service:
        service = self._mirror.get(Table.SERVICES, service_id)
        if service is None:
            raise EntityNotFoundError("Service", service_id)
        return service

    async def add_service(self, data: ServiceCreate) -> Service:
        return await self._mirror.write(Table.SERVICES, InsertIntent(data.model_dump()))

    async def update_service(self, service_id: str, data: ServiceUpdate) -> Service:
        current = self.get_service(service_id)
        patch = _patch(data)
        if not patch:
            return current
        return await self._mirror.write(Table.SERVICES, UpdateIntent(service_id, patch))

    async def remove_service(self, service_id: str) -> bool:
        self.get_service(service_id)
        return await self._mirror.write(Table.SERVICES, DeleteIntent(service_id))

    # ── Appointments ─────────────────────────────────────────────────

    def list_appointments(self) -> list[AppointmentDetails]:
        appointments = sorted(
            self._mirror.snapshot(Table.APPOINTMENTS), key=lambda a: (a.date, a.time)
        )
        return [self.describe(a) for a in appointments]

    def get_appointment(self, appointment_id: str) -> Appointment:
        appointment = self._mirror.get(Table.APPOINTMENTS, appointment_id)
        if appointment is None:
            raise EntityNotFoundError("Appointment", appointment_id)
        return appointment

    async def book_appointment(self, data: AppointmentCreate) -> Appointment:
        """Book a visit; the charged amount defaults to the service's current price."""
        payload = data.model_dump()
        if payload.get("amount") is None:
            payload["amount"] = self._current_price(data.service_id)
        payload["notes"] = payload.get("notes") or None
        return await self._mirror.write(Table.APPOINTMENTS, InsertIntent(payload))

    async def update_appointment(
        self, appointment_id: str, data: AppointmentUpdate
    ) -> Appointment:
        current = self.get_appointment(appointment_id)
        patch = _patch(data, nullable={"notes"})
        # Switching service re-prices the visit unless an amount was given.
        if (
            "service_id" in patch
            and patch["service_id"] != current.service_id
            and patch.get("amount") is None
        ):
            patch["amount"] = self._current_price(patch["service_id"], current.amount)
        if "notes" in patch:
            patch["notes"] = patch["notes"] or None
        if not patch:
            return current
        return await self._mirror.write(
            Table.APPOINTMENTS, UpdateIntent(appointment_id, patch)
        )

    async def toggle_paid(self, appointment_id: str) -> Appointment:
        current = self.get_appointment(appointment_id)
        return await self._mirror.write(
            Table.APPOINTMENTS,
            UpdateIntent(appointment_id, {"is_paid": not current.is_paid}),
        )

    async def update_notes(self, appointment_id: str, notes: str | None) -> Appointment:
        self.get_appointment(appointment_id)
        return await self._mirror.write(
            Table.APPOINTMENTS, UpdateIntent(appointment_id, {"notes": notes or None})
        )

    async def remove_appointment(self, appointment_id: str) -> bool:
        self.get_appointment(appointment_id)
        return await self._mirror.write(Table.APPOINTMENTS, DeleteIntent(appointment_id))

    # ── Calendar & history views ─────────────────────────────────────

    def day_schedule(self, on_date: date) -> list[AppointmentDetails]:
        return [self.describe(a) for a in self._mirror.appointments_on_date(on_date)]

    def client_history(self, client_id: str) -> list[AppointmentDetails]:
        return [self.describe(a) for a in self._mirror.appointments_for_client(client_id)]

    def history(
        self, client_id: str | None = None, on_date: date | None = None
    ) -> list[AppointmentDetails]:
        """All appointments newest first, optionally narrowed by client and/or day."""
        if client_id is not None:
            appointments = self._mirror.appointments_for_client(client_id)
        else:
            appointments = sorted(
                self._mirror.snapshot(Table.APPOINTMENTS),
                key=lambda a: (a.date, a.time),
                reverse=True,
            )
        if on_date is not None:
            appointments = [a for a in appointments if a.date == on_date]
        return [self.describe(a) for a in appointments]

    def calendar_days(self) -> list[date]:
        return sorted(self._mirror.dates_with_appointments())

    def describe(self, appointment: Appointment) -> AppointmentDetails:
        """Join an appointment with display names; orphans get placeholders."""
        client = self._mirror.get(Table.CLIENTS, appointment.client_id)
        service = self._mirror.get(Table.SERVICES, appointment.service_id)
        return AppointmentDetails(
            appointment=appointment,
            client_name=client.name if client else UNKNOWN_CLIENT,
            service_name=service.name if service else UNKNOWN_SERVICE,
            client_exists=client is not None,
            service_exists=service is not None,
        )

    def _current_price(self, service_id: str, fallback: Decimal = Decimal("0")) -> Decimal:
        service = self._mirror.get(Table.SERVICES, service_id)
        return service.price if service else fallback


def _normalize(text: str) -> str:
    return _WHITESPACE.sub("", text).lower()


def _patch(data: BaseModel, nullable: frozenset[str] | set[str] = frozenset()) -> dict[str, Any]:
    """Fields the caller sent; an explicit null only clears a nullable column."""
    return {
        field: value
        for field, value in data.model_dump(exclude_unset=True).items()
        if value is not None or field in nullable
    }
