"""Domain entity — a bookable salon service."""

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class Service:
    """A treatment offered by the salon, with its current list price."""

    id: str
    name: str
    duration: int  # minutes
    price: Decimal
