"""
ORDER STATUS UPDATE (ADMIN)

Flow:
1) Load order (+ parcel, + customer)
2) is_cod = payment_method == COD
3) Map requested status (orders.services.status_mapper)
4) Persist into the authoritative field (orders.services.lifecycle)
5) Reload for a consistent response view
6) Emit a parcel-creation intent, processed after commit

The intent is fire-and-forget: courier failures are logged by the
processor and never fail or roll back the status update.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import partial

from django.db import transaction

from orders.models import Order
from orders.services.exceptions import InvalidStatusError, OrderNotFoundError
from orders.services.lifecycle import OrderLifecycle, apply_lifecycle, kind_for
from orders.services.status_mapper import StatusTarget, map_status
from shipping.services.parcel_service import (
    get_parcel,
    is_parcel_creation_eligible,
    process_parcel_creation_intent,
)

logger = logging.getLogger(__name__)

STANDARD_STATUSES = {
    Order.STATUS_PENDING,
    Order.STATUS_CONFIRMED,
    Order.STATUS_SHIPPED,
    Order.STATUS_DELIVERED,
    Order.STATUS_CANCELLED,
    Order.STATUS_REFUNDED,
}

# Courier-facing values an admin may pick directly on COD orders
COD_ONLY_STATUSES = {
    Order.COD_SUBMITTED,
    Order.COD_DISPATCHED,
    Order.COD_FAILED,
}

RECOGNIZED_STATUSES = STANDARD_STATUSES | COD_ONLY_STATUSES


@dataclass(frozen=True)
class StatusUpdateResult:
    order: Order
    requested: str
    target: StatusTarget
    parcel_intent_emitted: bool


def _load_order(order_id) -> Order:
    order = (
        Order.objects.select_related("parcel", "user")
        .prefetch_related("items")
        .filter(id=order_id)
        .first()
    )
    if order is None:
        raise OrderNotFoundError(f"Order {order_id} not found")
    return order


def update_order_status(*, order_id, requested_status: str, actor=None) -> StatusUpdateResult:
    order = _load_order(order_id)
    is_cod = order.is_cod

    if not is_cod and requested_status in COD_ONLY_STATUSES:
        raise InvalidStatusError(
            f"'{requested_status}' only applies to cash-on-delivery orders"
        )

    target = map_status(requested_status, is_cod=is_cod)

    logger.info(
        "Updating order status",
        extra={
            "order_number": order.order_number,
            "requested": requested_status,
            "final": target.value,
            "field": target.field,
            "is_cod": is_cod,
            "actor": getattr(actor, "email", None),
        },
    )

    parcel = get_parcel(order)
    emit_intent = is_cod and is_parcel_creation_eligible(
        order=order, parcel=parcel, cod_status=target.value
    )

    with transaction.atomic():
        apply_lifecycle(order, OrderLifecycle(kind=kind_for(order), value=target.value))

        if emit_intent:
            transaction.on_commit(
                partial(
                    process_parcel_creation_intent,
                    order_id=order.id,
                    cod_status=target.value,
                ),
                robust=True,
            )

    return StatusUpdateResult(
        order=_load_order(order.id),
        requested=requested_status,
        target=target,
        parcel_intent_emitted=emit_intent,
    )
