# shipping/services/webhook.py

"""
COURIER WEBHOOK PROCESSING

Batch format: {"type": "<event type>", "events": [{event_id, occurred_at, data}, ...]}

- every event is stored once in CourierEvent (event_id is the key);
  a replayed event is acknowledged but not applied again
- parcel status text is recorded on the parcel
- the order lifecycle only moves forward and never leaves a terminal value
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import unicodedata
from datetime import timezone as dt_timezone
from dataclasses import dataclass

from django.db import transaction
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from orders.models import Order
from orders.services.lifecycle import (
    OrderLifecycle,
    apply_lifecycle,
    is_terminal,
    kind_for,
    lifecycle_of,
)
from shipping.models import CourierEvent, ShippingParcel
from shipping.services.exceptions import WebhookSignatureError

logger = logging.getLogger(__name__)

EVENT_PARCEL_CREATED = "parcel_created"
EVENT_PARCEL_DELETED = "parcel_deleted"
EVENT_STATUS_UPDATED = "parcel_status_updated"

OUTCOME_DELIVERED = "delivered"
OUTCOME_CANCELLED = "cancelled"
OUTCOME_SHIPPED = "shipped"
OUTCOME_FAILED = "failed"

_LIFECYCLE_TARGETS = {
    # outcome: (standard value, cod value)
    OUTCOME_DELIVERED: (Order.STATUS_DELIVERED, Order.COD_DELIVERED),
    OUTCOME_CANCELLED: (Order.STATUS_CANCELLED, Order.COD_CANCELLED),
    OUTCOME_SHIPPED: (Order.STATUS_SHIPPED, Order.COD_DISPATCHED),
}

# Values a "shipped" event may move forward from
_SHIPPABLE_FROM = {
    Order.STATUS_PENDING,
    Order.STATUS_CONFIRMED,
    Order.COD_SUBMITTED,
}


def verify_signature(raw_body: bytes, signature: str | None, secret: str) -> None:
    """
    X-Yalidine-Signature = hex HMAC-SHA256(raw body, secret).
    No secret configured -> nothing to verify.
    """
    if not secret:
        return
    if not signature:
        raise WebhookSignatureError("Missing signature")

    computed = hmac.new(secret.encode("utf-8"), raw_body, hashlib.sha256).hexdigest()
    if not hmac.compare_digest(computed, signature.strip().lower()):
        raise WebhookSignatureError("Invalid signature")


def normalize_status_text(value) -> str:
    """
    "Livré" -> "livre"
    """
    text = unicodedata.normalize("NFD", str(value or ""))
    return "".join(c for c in text if unicodedata.category(c) != "Mn").strip().lower()


def classify_event(event_type: str, status_text: str) -> str | None:
    if event_type == EVENT_PARCEL_DELETED:
        return OUTCOME_CANCELLED
    if event_type == EVENT_PARCEL_CREATED:
        return OUTCOME_SHIPPED
    if event_type != EVENT_STATUS_UPDATED:
        return None

    normalized = normalize_status_text(status_text)
    if "livr" in normalized:
        return OUTCOME_DELIVERED
    if "retour" in normalized:
        return OUTCOME_CANCELLED
    if "echou" in normalized or "echec" in normalized or "failed" in normalized:
        return OUTCOME_FAILED
    return OUTCOME_SHIPPED


@dataclass
class WebhookBatchResult:
    type: str
    received: int = 0
    stored: int = 0
    duplicates: int = 0
    applied: int = 0


def _find_parcel(data: dict) -> ShippingParcel | None:
    tracking = data.get("tracking")
    qs = ShippingParcel.objects.select_related("order")
    if tracking:
        parcel = qs.filter(tracking=tracking).first()
        if parcel is not None:
            return parcel

    courier_order_id = data.get("order_id")
    if courier_order_id:
        return (
            qs.filter(courier_order_id=str(courier_order_id)).first()
            or qs.filter(order__order_number=str(courier_order_id)).first()
        )
    return None


def _apply_outcome(order: Order, outcome: str | None) -> bool:
    if outcome not in _LIFECYCLE_TARGETS or is_terminal(order):
        return False

    standard_value, cod_value = _LIFECYCLE_TARGETS[outcome]
    value = cod_value if order.is_cod else standard_value

    current = lifecycle_of(order).value
    if current == value:
        return False
    if outcome == OUTCOME_SHIPPED and current not in _SHIPPABLE_FROM:
        return False

    apply_lifecycle(order, OrderLifecycle(kind=kind_for(order), value=value))
    return True


def _apply_event(event_type: str, data: dict, *, at) -> bool:
    parcel = _find_parcel(data)
    if parcel is None:
        logger.info(
            "Webhook event for unknown parcel",
            extra={"type": event_type, "tracking": data.get("tracking")},
        )
        return False

    status_text = str(data.get("status") or "").strip()
    fields = set()

    if data.get("tracking") and not parcel.tracking:
        parcel.tracking = data["tracking"]
        fields.add("tracking")
    if data.get("label"):
        parcel.label_url = data["label"]
        fields.add("label_url")

    status = status_text.lower() or (
        "deleted" if event_type == EVENT_PARCEL_DELETED else ""
    )
    if status and status != (parcel.status or "").lower():
        parcel.record_status(status, source=ShippingParcel.SOURCE_WEBHOOK, at=at)
        fields.update({"status", "status_history", "last_status_check"})

    if fields:
        parcel.save(update_fields=[*fields, "updated_at"])

    order = Order.objects.select_for_update().get(id=parcel.order_id)
    transitioned = _apply_outcome(order, classify_event(event_type, status_text))

    logger.info(
        "Webhook event applied",
        extra={
            "type": event_type,
            "order_number": order.order_number,
            "status": status,
            "transitioned": transitioned,
        },
    )
    return bool(fields) or transitioned


def process_webhook_batch(payload: dict) -> WebhookBatchResult:
    event_type = str(payload.get("type") or "")
    events = payload.get("events") or []
    result = WebhookBatchResult(type=event_type, received=len(events))

    for event in events:
        if not isinstance(event, dict):
            continue
        event_id = event.get("event_id")
        if not event_id:
            continue

        occurred_at = parse_datetime(str(event.get("occurred_at") or "")) or timezone.now()
        if timezone.is_naive(occurred_at):
            occurred_at = timezone.make_aware(occurred_at, dt_timezone.utc)

        try:
            with transaction.atomic():
                _, created = CourierEvent.objects.get_or_create(
                    id=str(event_id),
                    defaults={
                        "type": event_type,
                        "occurred_at": occurred_at,
                        "payload": event,
                    },
                )
                if not created:
                    result.duplicates += 1
                    continue

                result.stored += 1
                if _apply_event(event_type, event.get("data") or {}, at=occurred_at):
                    result.applied += 1
        except Exception:
            logger.exception(
                "Webhook event processing failed",
                extra={"event_id": str(event_id), "type": event_type},
            )

    return result
