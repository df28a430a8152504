"""
ORDER LIFECYCLE (PERSISTENCE BOUNDARY)

An order has ONE effective lifecycle value, modelled as a discriminated
OrderLifecycle(kind, value):

- kind="cod"      -> stored in Order.cod_status
- kind="standard" -> stored in Order.status

Only this module reads/writes the raw field pair. Everything else
(status update handler, delivery poller, webhook) works with OrderLifecycle.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from django.db.models import Q
from django.utils import timezone

from orders.models import Order
from orders.services.status_mapper import FIELD_COD_STATUS, FIELD_STATUS

logger = logging.getLogger(__name__)

KIND_STANDARD = "standard"
KIND_COD = "cod"

DELIVERED = "DELIVERED"

TERMINAL_VALUES = {
    "DELIVERED",
    "CANCELLED",
    "REFUNDED",
    "FAILED",
}

# Non-terminal values the delivery poller keeps watching
OPEN_COD_VALUES = {
    Order.COD_PENDING,
    Order.COD_SUBMITTED,
    Order.COD_DISPATCHED,
}
OPEN_STANDARD_VALUES = {
    Order.STATUS_PENDING,
    Order.STATUS_CONFIRMED,
    Order.STATUS_SHIPPED,
}

_SHIPPED_VALUES = {Order.STATUS_SHIPPED, Order.COD_DISPATCHED}


@dataclass(frozen=True)
class OrderLifecycle:
    kind: str
    value: str

    @property
    def field(self) -> str:
        return FIELD_COD_STATUS if self.kind == KIND_COD else FIELD_STATUS

    @property
    def is_terminal(self) -> bool:
        return self.value in TERMINAL_VALUES


def kind_for(order: Order) -> str:
    return KIND_COD if order.is_cod else KIND_STANDARD


def lifecycle_of(order: Order) -> OrderLifecycle:
    kind = kind_for(order)
    value = order.cod_status if kind == KIND_COD else order.status
    return OrderLifecycle(kind=kind, value=value)


def is_terminal(order: Order) -> bool:
    return lifecycle_of(order).is_terminal


def apply_lifecycle(order: Order, lifecycle: OrderLifecycle) -> Order:
    """
    Persist the lifecycle value into the field its kind selects.
    The other field keeps its last-written value.
    """
    if lifecycle.kind != kind_for(order):
        raise ValueError(
            f"Order {order.order_number} is '{kind_for(order)}', "
            f"cannot apply a '{lifecycle.kind}' lifecycle"
        )

    now = timezone.now()
    setattr(order, lifecycle.field, lifecycle.value)
    order.updated_at = now
    fields = [lifecycle.field, "updated_at"]

    if lifecycle.value == DELIVERED and not order.delivered_at:
        order.delivered_at = now
        fields.append("delivered_at")
    if lifecycle.value in _SHIPPED_VALUES and not order.shipped_at:
        order.shipped_at = now
        fields.append("shipped_at")

    order.save(update_fields=fields)

    logger.info(
        "Order lifecycle updated",
        extra={
            "order_number": order.order_number,
            "field": lifecycle.field,
            "value": lifecycle.value,
        },
    )
    return order


def mark_delivered(order: Order) -> Order:
    return apply_lifecycle(order, OrderLifecycle(kind=kind_for(order), value=DELIVERED))


def open_lifecycle_q(prefix: str = "") -> Q:
    """
    Orders whose AUTHORITATIVE lifecycle field is still open.

    A COD order's stale `status` (never written for COD) must not keep it
    in scope once cod_status is terminal, and vice versa.
    """
    cod = Q(**{f"{prefix}payment_method": Order.PAYMENT_COD})
    return (cod & Q(**{f"{prefix}cod_status__in": OPEN_COD_VALUES})) | (
        ~cod & Q(**{f"{prefix}status__in": OPEN_STANDARD_VALUES})
    )


def open_tracked_orders():
    """
    Orders with a courier tracking number and an open lifecycle.
    Used by the delivery-status poller.
    """
    return (
        Order.objects.filter(parcel__isnull=False, parcel__tracking__isnull=False)
        .filter(open_lifecycle_q())
        .select_related("parcel", "user")
        .order_by("created_at")
    )


def delivered_lifecycle_q(prefix: str = "") -> Q:
    cod = Q(**{f"{prefix}payment_method": Order.PAYMENT_COD})
    return (cod & Q(**{f"{prefix}cod_status": DELIVERED})) | (
        ~cod & Q(**{f"{prefix}status": DELIVERED})
    )
