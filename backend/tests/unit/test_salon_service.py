"""Unit tests for the SalonService use cases."""

import uuid
from dataclasses import replace
from datetime import date, time
from decimal import Decimal
from typing import Any

import pytest
import pytest_asyncio

from salon.application.interfaces import RemoteStore, Subscription
from salon.application.schemas import (
    AppointmentCreate,
    AppointmentUpdate,
    ClientCreate,
    ClientUpdate,
    ServiceCreate,
    ServiceUpdate,
)
from salon.application.services import LocalMirror, SalonService
from salon.domain.entities import (
    Appointment,
    Client,
    Row,
    Service,
    Table,
    UNKNOWN_CLIENT,
    UNKNOWN_SERVICE,
)
from salon.domain.exceptions import EntityNotFoundError, RemoteStoreError, WriteRejectedError


# ── Fakes ────────────────────────────────────────────────────────────


_ROW_TYPES = {Table.CLIENTS: Client, Table.SERVICES: Service, Table.APPOINTMENTS: Appointment}


class FakeSubscription(Subscription):
    async def cancel(self) -> None:
        return None


class FakeRemoteStore(RemoteStore):
    """In-memory remote store without a change feed."""

    def __init__(self):
        self.rows: dict[Table, dict[str, Row]] = {table: {} for table in Table}
        self.reject_writes = False

    @property
    def backend_name(self) -> str:
        return "fake"

    async def select_all(self, table: Table) -> list[Row]:
        return list(self.rows[table].values())

    async def insert(self, table: Table, payload: dict[str, Any]) -> Row:
        if self.reject_writes:
            raise RemoteStoreError("fake", "insert", "offline")
        row = _ROW_TYPES[table](id=str(uuid.uuid4()), **payload)
        self.rows[table][row.id] = row
        return row

    async def update(self, table: Table, row_id: str, patch: dict[str, Any]) -> Row:
        if self.reject_writes:
            raise RemoteStoreError("fake", "update", "offline")
        row = replace(self.rows[table][row_id], **patch)
        self.rows[table][row_id] = row
        return row

    async def delete(self, table: Table, row_id: str) -> Row | None:
        if self.reject_writes:
            raise RemoteStoreError("fake", "delete", "offline")
        return self.rows[table].pop(row_id, None)

    async def subscribe(self, table, handler, on_disconnect=None) -> Subscription:
        return FakeSubscription()


@pytest.fixture
def store() -> FakeRemoteStore:
    return FakeRemoteStore()


@pytest_asyncio.fixture
async def service(store: FakeRemoteStore):
    mirror = LocalMirror(store)
    await mirror.load()
    yield SalonService(mirror)
    await mirror.close()


async def _seed(service: SalonService):
    anna = await service.add_client(ClientCreate(name="Anna Maria", phone="555-1"))
    cut = await service.add_service(ServiceCreate(name="Haircut", duration=45, price=Decimal("35.00")))
    return anna, cut


# ── Clients ──────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_add_client_normalizes_empty_email(service: SalonService):
    client = await service.add_client(ClientCreate(name="Bea", phone="555-2", email=""))
    assert client.email is None
    assert service.get_client(client.id) == client


@pytest.mark.asyncio
async def test_list_clients_is_alphabetical(service: SalonService):
    for name in ["zoe", "Adam", "mia"]:
        await service.add_client(ClientCreate(name=name, phone="1"))
    assert [c.name for c in service.list_clients()] == ["Adam", "mia", "zoe"]


@pytest.mark.asyncio
async def test_search_clients_ignores_case_and_spaces(service: SalonService):
    anna, _ = await _seed(service)
    await service.add_client(ClientCreate(name="Bea", phone="2"))

    assert service.search_clients("annam") == [anna]
    assert service.search_clients("  ANNA  MA ") == [anna]
    assert len(service.search_clients("")) == 2


@pytest.mark.asyncio
async def test_update_client(service: SalonService):
    anna, _ = await _seed(service)
    updated = await service.update_client(anna.id, ClientUpdate(phone="555-9"))
    assert updated.phone == "555-9"
    assert updated.name == "Anna Maria"


@pytest.mark.asyncio
async def test_update_missing_client_raises(service: SalonService):
    with pytest.raises(EntityNotFoundError):
        await service.update_client("nope", ClientUpdate(name="X"))


@pytest.mark.asyncio
async def test_update_client_ignores_nulls_for_required_fields(service: SalonService):
    anna, _ = await _seed(service)
    await service.update_client(anna.id, ClientUpdate(email="anna@example.com"))

    updated = await service.update_client(anna.id, ClientUpdate(name=None, email=None))

    assert updated.name == "Anna Maria"
    assert updated.email is None


@pytest.mark.asyncio
async def test_empty_update_returns_current_row_without_writing(
    store: FakeRemoteStore, service: SalonService
):
    anna, cut = await _seed(service)
    store.reject_writes = True

    assert await service.update_client(anna.id, ClientUpdate(phone=None)) == anna
    assert await service.update_service(cut.id, ServiceUpdate(price=None)) == cut


@pytest.mark.asyncio
async def test_remove_client_leaves_history_with_placeholder(service: SalonService):
    anna, cut = await _seed(service)
    await service.book_appointment(
        AppointmentCreate(client_id=anna.id, service_id=cut.id, date=date(2024, 3, 1), time=time(9))
    )

    assert await service.remove_client(anna.id) is True

    history = service.client_history(anna.id)
    assert len(history) == 1
    assert history[0].client_name == UNKNOWN_CLIENT
    assert history[0].client_exists is False
    assert history[0].service_name == "Haircut"


# ── Services ─────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_service_crud(service: SalonService):
    _, cut = await _seed(service)
    updated = await service.update_service(cut.id, ServiceUpdate(price=Decimal("40")))
    assert updated.price == Decimal("40")

    await service.remove_service(cut.id)
    with pytest.raises(EntityNotFoundError):
        service.get_service(cut.id)


# ── Appointments ─────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_booking_defaults_amount_to_service_price(service: SalonService):
    anna, cut = await _seed(service)
    appt = await service.book_appointment(
        AppointmentCreate(client_id=anna.id, service_id=cut.id, date=date(2024, 3, 15), time=time(10))
    )
    assert appt.amount == Decimal("35.00")
    assert appt.is_paid is False
    assert appt.notes is None


@pytest.mark.asyncio
async def test_booking_amount_is_a_snapshot(service: SalonService):
    anna, cut = await _seed(service)
    appt = await service.book_appointment(
        AppointmentCreate(client_id=anna.id, service_id=cut.id, date=date(2024, 3, 15), time=time(10))
    )
    await service.update_service(cut.id, ServiceUpdate(price=Decimal("50")))
    assert service.get_appointment(appt.id).amount == Decimal("35.00")


@pytest.mark.asyncio
async def test_booking_unknown_service_charges_zero(service: SalonService):
    anna, _ = await _seed(service)
    appt = await service.book_appointment(
        AppointmentCreate(client_id=anna.id, service_id="gone", date=date(2024, 3, 15), time=time(10))
    )
    assert appt.amount == Decimal("0")
    assert service.describe(appt).service_name == UNKNOWN_SERVICE


@pytest.mark.asyncio
async def test_changing_service_reprices_unless_amount_given(service: SalonService):
    anna, cut = await _seed(service)
    color = await service.add_service(ServiceCreate(name="Color", duration=90, price=Decimal("80")))
    appt = await service.book_appointment(
        AppointmentCreate(client_id=anna.id, service_id=cut.id, date=date(2024, 3, 15), time=time(10))
    )

    repriced = await service.update_appointment(appt.id, AppointmentUpdate(service_id=color.id))
    assert repriced.amount == Decimal("80")

    manual = await service.update_appointment(
        appt.id, AppointmentUpdate(service_id=cut.id, amount=Decimal("20"))
    )
    assert manual.amount == Decimal("20")


@pytest.mark.asyncio
async def test_toggle_paid_and_notes(service: SalonService):
    anna, cut = await _seed(service)
    appt = await service.book_appointment(
        AppointmentCreate(client_id=anna.id, service_id=cut.id, date=date(2024, 3, 15), time=time(10))
    )

    assert (await service.toggle_paid(appt.id)).is_paid is True
    assert (await service.toggle_paid(appt.id)).is_paid is False
    assert (await service.update_notes(appt.id, "bring photo")).notes == "bring photo"
    assert (await service.update_notes(appt.id, "")).notes is None


@pytest.mark.asyncio
async def test_toggle_paid_missing_appointment(service: SalonService):
    with pytest.raises(EntityNotFoundError):
        await service.toggle_paid("missing")


@pytest.mark.asyncio
async def test_rejected_write_propagates(store: FakeRemoteStore, service: SalonService):
    store.reject_writes = True
    with pytest.raises(WriteRejectedError):
        await service.add_client(ClientCreate(name="X", phone="1"))
    assert service.list_clients() == []


# ── Views ────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_day_schedule_history_and_calendar(service: SalonService):
    anna, cut = await _seed(service)
    bea = await service.add_client(ClientCreate(name="Bea", phone="2"))
    for client, day, at in [
        (anna, date(2024, 3, 15), time(14)),
        (bea, date(2024, 3, 15), time(9, 30)),
        (anna, date(2024, 3, 1), time(11)),
    ]:
        await service.book_appointment(
            AppointmentCreate(client_id=client.id, service_id=cut.id, date=day, time=at)
        )

    schedule = service.day_schedule(date(2024, 3, 15))
    assert [d.client_name for d in schedule] == ["Bea", "Anna Maria"]

    assert [d.appointment.date for d in service.client_history(anna.id)] == [
        date(2024, 3, 15),
        date(2024, 3, 1),
    ]
    assert len(service.history()) == 3
    assert len(service.history(on_date=date(2024, 3, 15))) == 2
    assert len(service.history(client_id=anna.id, on_date=date(2024, 3, 1))) == 1
    assert service.calendar_days() == [date(2024, 3, 1), date(2024, 3, 15)]
    assert [d.appointment.time for d in service.list_appointments()] == [
        time(11),
        time(9, 30),
        time(14),
    ]
