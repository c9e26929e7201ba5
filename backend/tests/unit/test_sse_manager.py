"""Unit tests for the SSEManager broadcaster."""

import asyncio
import json

import pytest

from salon.application.services import SSEManager
from salon.domain.entities import ChangeEvent, ChangeKind, RowKey, Table


async def _next_message(stream) -> asyncio.Task:
    task = asyncio.ensure_future(stream.__anext__())
    await asyncio.sleep(0)
    return task


def _parse(message: str) -> tuple[str, dict]:
    event_line, data_line = message.strip().split("\n")
    return event_line.removeprefix("event: "), json.loads(data_line.removeprefix("data: "))


@pytest.mark.asyncio
async def test_mirror_change_is_delivered_to_subscribers():
    sse = SSEManager()
    stream = sse.subscribe()
    pending = await _next_message(stream)
    assert sse.client_count == 1

    sse.on_mirror_change(Table.CLIENTS, ChangeEvent(Table.CLIENTS, ChangeKind.DELETE, before=RowKey("c1")))

    event_type, data = _parse(await pending)
    assert event_type == "mirror_change"
    assert data == {"table": "clients", "kind": "DELETE", "id": "c1"}
    await stream.aclose()
    assert sse.client_count == 0


@pytest.mark.asyncio
async def test_table_reload_is_published_without_row():
    sse = SSEManager()
    stream = sse.subscribe()
    pending = await _next_message(stream)

    sse.on_mirror_change(Table.APPOINTMENTS, None)

    _, data = _parse(await pending)
    assert data == {"table": "appointments", "kind": "RELOAD", "id": None}
    await stream.aclose()


@pytest.mark.asyncio
async def test_slow_client_is_disconnected_when_queue_fills():
    sse = SSEManager(max_queue_size=2)
    stream = sse.subscribe()
    pending = await _next_message(stream)

    # No await between publishes, so the reader never drains its queue.
    for i in range(3):
        sse.publish("ping", {"n": i})

    assert sse.client_count == 0
    with pytest.raises(StopAsyncIteration):
        await pending


@pytest.mark.asyncio
async def test_shutdown_ends_streams():
    sse = SSEManager()
    stream = sse.subscribe()
    pending = await _next_message(stream)

    await sse.shutdown()

    with pytest.raises(StopAsyncIteration):
        await pending
    assert sse.client_count == 0
