# shipping/services/status_checker.py

"""
COURIER STATUS CHECKER (POLLER)

Batch job, triggered by an external scheduler:
1) scan orders with tracking + open authoritative lifecycle
2) ask the courier for each parcel's status
3) record changes on the parcel (append-only history)
4) delivered synonyms -> order lifecycle DELIVERED

Per-order failures are collected and never abort the batch.
Re-running with no courier change is a no-op.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, time as dt_time

from django.db import transaction
from django.utils import timezone

from orders.models import Order
from orders.services.lifecycle import (
    delivered_lifecycle_q,
    is_terminal,
    lifecycle_of,
    mark_delivered,
    open_lifecycle_q,
    open_tracked_orders,
)
from shipping.models import ShippingParcel
from shipping.services.config import get_courier_settings
from shipping.services.courier_client import YalidineClient

logger = logging.getLogger(__name__)

DELIVERED_SYNONYMS = frozenset(
    {
        "delivered",
        "livré",
        "remis",
        "complete",
        "completed",
        "success",
        "successful",
    }
)

UNKNOWN_STATUS = "unknown"


def parse_courier_status(data) -> str:
    if not isinstance(data, dict):
        return UNKNOWN_STATUS
    status = (
        data.get("status")
        or data.get("parcel_status")
        or data.get("state")
        or data.get("last_status")
        or UNKNOWN_STATUS
    )
    return str(status).strip().lower()


def is_delivered_status(status: str) -> bool:
    return (status or "").strip().lower() in DELIVERED_SYNONYMS


@dataclass(frozen=True)
class OrderCheckOutcome:
    updated: bool = False
    delivered: bool = False
    status: str | None = None
    error: str | None = None


@dataclass
class StatusCheckResult:
    checked: int = 0
    updated: int = 0
    delivered: int = 0
    errors: list = field(default_factory=list)

    def as_summary(self, preview: int = 5) -> dict:
        return {
            "checked": self.checked,
            "updated": self.updated,
            "delivered": self.delivered,
            "errors_count": len(self.errors),
            "errors": self.errors[:preview],
        }


class StatusChecker:
    def __init__(self, client=None, *, sleep=time.sleep, delay: float | None = None):
        self._client = client
        self._sleep = sleep
        self._delay = delay

    @property
    def client(self):
        if self._client is None:
            self._client = YalidineClient()
        return self._client

    @property
    def delay(self) -> float:
        if self._delay is None:
            self._delay = get_courier_settings().poll_delay_seconds
        return self._delay

    # --------------------------------------------------
    # BATCH
    # --------------------------------------------------

    def check_all_pending_orders(self) -> StatusCheckResult:
        result = StatusCheckResult()

        try:
            orders = list(open_tracked_orders())
            logger.info("Courier status check started", extra={"orders": len(orders)})

            for index, order in enumerate(orders):
                tracking = order.parcel.tracking
                if not tracking:
                    continue

                if index and self.delay:
                    self._sleep(self.delay)

                result.checked += 1
                try:
                    outcome = self.check_order_status(order.id, tracking)
                except Exception as exc:
                    logger.exception(
                        "Courier status check failed for order",
                        extra={"order_number": order.order_number, "tracking": tracking},
                    )
                    result.errors.append(f"Failed to check order {order.order_number}: {exc}")
                    continue

                if outcome.error:
                    result.errors.append(
                        f"Failed to check order {order.order_number}: {outcome.error}"
                    )
                    continue

                if outcome.updated:
                    result.updated += 1
                    if outcome.delivered:
                        result.delivered += 1
                        logger.info(
                            "Order delivered per courier",
                            extra={"order_number": order.order_number, "tracking": tracking},
                        )

        except Exception as exc:
            logger.exception("Courier status check aborted")
            result.errors.append(f"System error: {exc}")

        logger.info(
            "Courier status check completed",
            extra={
                "checked": result.checked,
                "updated": result.updated,
                "delivered": result.delivered,
                "errors": len(result.errors),
            },
        )
        return result

    # --------------------------------------------------
    # SINGLE ORDER
    # --------------------------------------------------

    def check_order_status(self, order_id, tracking: str) -> OrderCheckOutcome:
        lookup = self.client.get_parcel(tracking)
        if not lookup.ok:
            return OrderCheckOutcome(error=lookup.error or "Courier lookup failed")

        status = parse_courier_status(lookup.data)

        with transaction.atomic():
            order = (
                Order.objects.select_for_update(of=("self",))
                .select_related("parcel")
                .filter(id=order_id)
                .first()
            )
            if order is None:
                return OrderCheckOutcome(error="Order not found")

            parcel = getattr(order, "parcel", None)
            if parcel is None:
                return OrderCheckOutcome(error="Parcel not found")

            if (parcel.status or UNKNOWN_STATUS).lower() == status:
                return OrderCheckOutcome(status=status)

            parcel.record_status(status, source=ShippingParcel.SOURCE_API)
            parcel.save(
                update_fields=["status", "status_history", "last_status_check", "updated_at"]
            )

            delivered = False
            if is_delivered_status(status):
                if not is_terminal(order):
                    mark_delivered(order)
                    delivered = True
            else:
                # Non-delivery courier states stay on the parcel only
                logger.info(
                    "Courier status recorded without order transition",
                    extra={
                        "order_number": order.order_number,
                        "status": status,
                        "lifecycle": lifecycle_of(order).value,
                    },
                )

        return OrderCheckOutcome(updated=True, delivered=delivered, status=status)


# ==================================================
# STATS (admin dashboard)
# ==================================================


def get_status_check_stats() -> dict:
    tracked = Order.objects.filter(parcel__isnull=False, parcel__tracking__isnull=False)

    today_start = timezone.make_aware(
        datetime.combine(timezone.localdate(), dt_time.min),
        timezone.get_current_timezone(),
    )

    last_check = (
        ShippingParcel.objects.filter(last_status_check__isnull=False)
        .order_by("-last_status_check")
        .values_list("last_status_check", flat=True)
        .first()
    )

    return {
        "total_tracked": tracked.count(),
        "pending_orders": tracked.filter(open_lifecycle_q()).count(),
        "delivered_today": Order.objects.filter(delivered_lifecycle_q())
        .filter(delivered_at__gte=today_start)
        .count(),
        "last_check_time": last_check,
    }
