"""
ORDER STATUS MAPPER

Maps a requested (generic) order status to the value that gets persisted,
and to which lifecycle field it belongs.

DESIGN PRINCIPLES:
- Pure and total: never raises, no database access, no side effects
- COD orders write to cod_status using the table below
- Every other order writes the requested value to status unchanged
"""

from __future__ import annotations

from dataclasses import dataclass

FIELD_STATUS = "status"
FIELD_COD_STATUS = "cod_status"

COD_STATUS_MAP = {
    "PENDING": "PENDING",
    "CONFIRMED": "SUBMITTED",  # ready to hand over to the courier
    "SHIPPED": "DISPATCHED",  # out for delivery
    "DELIVERED": "DELIVERED",
    "CANCELLED": "CANCELLED",
    "REFUNDED": "CANCELLED",
    "SUBMITTED": "SUBMITTED",
    "DISPATCHED": "DISPATCHED",
    "FAILED": "FAILED",
}

COD_DEFAULT_STATUS = "PENDING"


@dataclass(frozen=True)
class StatusTarget:
    field: str
    value: str


def map_to_cod_status(requested) -> str:
    return COD_STATUS_MAP.get(str(requested or ""), COD_DEFAULT_STATUS)


def map_status(requested, *, is_cod: bool) -> StatusTarget:
    if is_cod:
        return StatusTarget(field=FIELD_COD_STATUS, value=map_to_cod_status(requested))
    return StatusTarget(field=FIELD_STATUS, value=requested)
