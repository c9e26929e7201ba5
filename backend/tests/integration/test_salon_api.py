"""End-to-end tests for the /api/v1 endpoints over a mirror of an in-memory database."""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.pool import StaticPool

from salon.application.services import LocalMirror
from salon.infrastructure.database import (
    SQLAlchemyRemoteStore,
    create_engine,
    create_session_factory,
    create_tables,
)
from salon.main import create_app


@pytest_asyncio.fixture
async def api():
    engine = create_engine(
        "sqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await create_tables(engine)
    store = SQLAlchemyRemoteStore(create_session_factory(engine), engine=engine)
    mirror = LocalMirror(store)
    await mirror.load()

    app = create_app()
    app.state.mirror = mirror
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    await mirror.close()
    await store.close()


async def _seed(api: AsyncClient) -> tuple[dict, dict]:
    client = (await api.post("/api/v1/clients", json={"name": "Anna Nowak", "phone": "555-1"})).json()
    service = (
        await api.post("/api/v1/services", json={"name": "Haircut", "duration": 45, "price": "35.00"})
    ).json()
    return client, service


@pytest.mark.asyncio
async def test_health_reports_ready_mirror(api: AsyncClient):
    response = await api.get("/api/v1/health")
    assert response.json()["mirror"] == {"state": "ready", "loading": False, "failed_tables": []}


@pytest.mark.asyncio
async def test_client_lifecycle(api: AsyncClient):
    created = await api.post("/api/v1/clients", json={"name": "Anna Nowak", "phone": "555-1", "email": ""})
    assert created.status_code == 201
    client = created.json()
    assert client["email"] is None

    found = await api.get("/api/v1/clients/search", params={"q": "annano"})
    assert [c["id"] for c in found.json()] == [client["id"]]

    patched = await api.patch(f"/api/v1/clients/{client['id']}", json={"phone": "555-2"})
    assert patched.json()["phone"] == "555-2"

    assert (await api.delete(f"/api/v1/clients/{client['id']}")).status_code == 204
    assert (await api.get("/api/v1/clients")).json() == []
    assert (await api.delete(f"/api/v1/clients/{client['id']}")).status_code == 404


@pytest.mark.asyncio
async def test_null_patch_leaves_required_fields_unchanged(api: AsyncClient):
    client, service = await _seed(api)

    patched = await api.patch(f"/api/v1/clients/{client['id']}", json={"name": None})
    assert patched.status_code == 200
    assert patched.json()["name"] == "Anna Nowak"

    repriced = await api.patch(f"/api/v1/services/{service['id']}", json={"price": None})
    assert repriced.status_code == 200
    assert repriced.json()["price"] == service["price"]


@pytest.mark.asyncio
async def test_client_validation(api: AsyncClient):
    response = await api.post("/api/v1/clients", json={"name": "", "phone": "1"})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_booking_and_day_schedule(api: AsyncClient):
    client, service = await _seed(api)
    for at in ["14:00", "09:30", "11:00"]:
        response = await api.post(
            "/api/v1/appointments",
            json={"client_id": client["id"], "service_id": service["id"], "date": "2024-03-15", "time": at},
        )
        assert response.status_code == 201
        assert response.json()["amount"] == "35.00"
        assert response.json()["is_paid"] is False

    day = (await api.get("/api/v1/calendar/2024-03-15")).json()
    assert [a["time"] for a in day] == ["09:30:00", "11:00:00", "14:00:00"]
    assert {a["client_name"] for a in day} == {"Anna Nowak"}

    assert (await api.get("/api/v1/calendar/days")).json() == ["2024-03-15"]


@pytest.mark.asyncio
async def test_paid_toggle_notes_and_history(api: AsyncClient):
    client, service = await _seed(api)
    appt = (
        await api.post(
            "/api/v1/appointments",
            json={
                "client_id": client["id"],
                "service_id": service["id"],
                "date": "2024-01-10",
                "time": "10:00",
                "amount": "100",
            },
        )
    ).json()

    toggled = await api.post(f"/api/v1/appointments/{appt['id']}/toggle-paid")
    assert toggled.json()["is_paid"] is True

    noted = await api.put(f"/api/v1/appointments/{appt['id']}/notes", json={"notes": "prefers short"})
    assert noted.json()["notes"] == "prefers short"

    history = (await api.get("/api/v1/history", params={"client_id": client["id"]})).json()
    assert [h["id"] for h in history] == [appt["id"]]
    assert (await api.get(f"/api/v1/clients/{client['id']}/history")).json() == history
    assert (await api.get("/api/v1/history", params={"date": "2024-01-11"})).json() == []


@pytest.mark.asyncio
async def test_orphaned_appointment_shows_placeholders(api: AsyncClient):
    client, service = await _seed(api)
    await api.post(
        "/api/v1/appointments",
        json={"client_id": client["id"], "service_id": service["id"], "date": "2024-03-15", "time": "10:00"},
    )

    await api.delete(f"/api/v1/clients/{client['id']}")
    await api.delete(f"/api/v1/services/{service['id']}")

    day = (await api.get("/api/v1/calendar/2024-03-15")).json()
    assert len(day) == 1
    assert day[0]["client_name"] == "Unknown Client"
    assert day[0]["service_name"] == "Unknown Service"


@pytest.mark.asyncio
async def test_unknown_appointment_returns_404(api: AsyncClient):
    assert (await api.post("/api/v1/appointments/missing/toggle-paid")).status_code == 404
    assert (await api.patch("/api/v1/appointments/missing", json={"notes": "x"})).status_code == 404
    assert (await api.delete("/api/v1/appointments/missing")).status_code == 404
