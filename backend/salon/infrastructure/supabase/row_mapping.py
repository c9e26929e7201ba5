"""Mapping between PostgREST / Realtime JSON rows and domain entities."""

import logging
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any

from salon.domain.entities import Appointment, Client, Row, Service, Table

logger = logging.getLogger(__name__)


def row_to_entity(table: Table, row: dict[str, Any]) -> Row:
    """Map a JSON row → domain entity. Raises KeyError/ValueError on malformed rows."""
    if table is Table.CLIENTS:
        return Client(
            id=str(row["id"]),
            name=row["name"],
            phone=row["phone"],
            email=row.get("email") or None,
            created_at=_parse_datetime(row.get("created_at")),
        )
    if table is Table.SERVICES:
        return Service(
            id=str(row["id"]),
            name=row["name"],
            duration=int(row["duration"]),
            price=_parse_decimal(row["price"]),
        )
    return Appointment(
        id=str(row["id"]),
        client_id=str(row["client_id"]),
        service_id=str(row["service_id"]),
        date=date.fromisoformat(str(row["date"])),
        time=time.fromisoformat(str(row["time"])),
        amount=_parse_decimal(row["amount"]),
        is_paid=bool(row.get("is_paid") or False),
        notes=row.get("notes") or None,
        created_at=_parse_datetime(row.get("created_at")),
    )


def to_wire(values: dict[str, Any]) -> dict[str, Any]:
    """Make a payload JSON-serializable for PostgREST."""
    wire: dict[str, Any] = {}
    for key, value in values.items():
        if isinstance(value, (date, datetime, time)):
            wire[key] = value.isoformat()
        elif isinstance(value, Decimal):
            wire[key] = str(value)
        else:
            wire[key] = value
    return wire


def _parse_decimal(value: Any) -> Decimal:
    return Decimal(str(value))


def _parse_datetime(value: Any) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    text = str(value).replace("Z", "+00:00")
    # Realtime sends short offsets such as "+00"
    has_time = "T" in text or " " in text
    if has_time and text[-3] in "+-" and text[-2:].isdigit():
        text += ":00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        logger.debug("Unparseable timestamp %r — leaving created_at empty", value)
        return None
