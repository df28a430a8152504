# shipping/services/parcel_service.py

"""
PARCEL SERVICE

Courier parcel lifecycle for COD orders:
- parcel-creation intent (emitted by the admin status update, run after commit)
- manual create / update / local delete from the admin parcel endpoints

The intent processor never raises: courier trouble is logged and the
parcel simply stays without tracking.
"""

from __future__ import annotations

import logging

from django.db import transaction
from django.utils import timezone

from orders.models import Order
from orders.services.lifecycle import OrderLifecycle, apply_lifecycle, kind_for
from shipping.models import Commune, ShippingParcel, Wilaya
from shipping.services.config import get_courier_settings
from shipping.services.courier_client import YalidineClient
from shipping.services.exceptions import (
    CourierError,
    ParcelAlreadyCreatedError,
    ParcelError,
    ParcelNotFoundError,
)

logger = logging.getLogger(__name__)

# Mapped COD values that hand the parcel over to the courier
AUTO_CREATE_COD_STATUSES = {Order.COD_SUBMITTED, Order.COD_DISPATCHED}

# Standard parcel profile sent to the courier (1 kg, no dimensions)
STANDARD_WEIGHT_KG = 1

_CANCELLABLE_COD_STATUSES = {Order.COD_SUBMITTED, Order.COD_DISPATCHED}


def get_parcel(order: Order) -> ShippingParcel | None:
    return getattr(order, "parcel", None)


def is_parcel_creation_eligible(*, order: Order, parcel, cod_status: str) -> bool:
    return (
        order.is_cod
        and parcel is not None
        and not parcel.tracking
        and cod_status in AUTO_CREATE_COD_STATUSES
    )


def build_parcel_payload(parcel: ShippingParcel, *, from_wilaya_name: str = "") -> dict:
    """
    Courier create payload from the parcel's last-saved data.
    Dimensions are forced to the standard profile and insurance is always on.
    """
    payload = {
        "order_id": parcel.courier_order_id,
        "firstname": parcel.firstname,
        "familyname": parcel.familyname,
        "contact_phone": parcel.contact_phone,
        "address": parcel.address,
        "to_wilaya_name": parcel.to_wilaya_name,
        "to_commune_name": parcel.to_commune_name,
        "product_list": parcel.product_list,
        "price": float(parcel.price or 0),
        "height": None,
        "width": None,
        "length": None,
        "weight": STANDARD_WEIGHT_KG,
        "is_stopdesk": parcel.is_stopdesk,
        "freeshipping": parcel.freeshipping,
        "has_exchange": parcel.has_exchange,
        "do_insurance": True,
        "parcel_sub_type": None,
        "has_receipt": None,
    }

    if parcel.stopdesk_id:
        payload["stopdesk_id"] = parcel.stopdesk_id

    origin = parcel.from_wilaya_name or from_wilaya_name
    if origin:
        payload["from_wilaya_name"] = origin
    if parcel.from_address:
        payload["from_address"] = parcel.from_address

    return payload


def _store_created_parcel(parcel: ShippingParcel, payload: dict, result) -> ShippingParcel:
    data = result.data or {}
    parcel.tracking = data.get("tracking")
    parcel.label_url = data.get("label_url")
    parcel.status = (data.get("status") or "created").lower()
    parcel.last_payload = {
        "request": payload,
        "response": result.raw,
        "result": {"ok": result.ok, "data": data, "error": result.error},
        "timestamp": timezone.now().isoformat(),
    }
    parcel.save(
        update_fields=["tracking", "label_url", "status", "last_payload", "updated_at"]
    )
    return parcel


def _create_with_courier(parcel: ShippingParcel, client: YalidineClient):
    payload = build_parcel_payload(
        parcel, from_wilaya_name=get_courier_settings().from_wilaya_name
    )
    result = client.create_parcel(payload)
    if not result.ok or not (result.data or {}).get("tracking"):
        return payload, result, False
    return payload, result, True


# ==================================================
# PARCEL-CREATION INTENT (after commit)
# ==================================================


def process_parcel_creation_intent(*, order_id, cod_status: str, client=None):
    """
    Best-effort parcel creation after a COD status change.

    Returns the updated parcel, or None when skipped/failed.
    """
    try:
        courier_settings = get_courier_settings()

        order = Order.objects.select_related("parcel").filter(id=order_id).first()
        if order is None:
            logger.warning("Parcel intent for missing order", extra={"order_id": str(order_id)})
            return None

        parcel = get_parcel(order)
        if not is_parcel_creation_eligible(order=order, parcel=parcel, cod_status=cod_status):
            logger.info(
                "Parcel intent no longer eligible",
                extra={"order_number": order.order_number, "cod_status": cod_status},
            )
            return None

        if not courier_settings.auto_create_enabled:
            logger.info(
                "Parcel auto-creation disabled, skipping courier call",
                extra={"order_number": order.order_number, "cod_status": cod_status},
            )
            return None

        client = client or YalidineClient(courier_settings)
        payload, result, created = _create_with_courier(parcel, client)

        if not created:
            logger.warning(
                "Parcel auto-creation failed",
                extra={"order_number": order.order_number, "error": result.error},
            )
            return None

        _store_created_parcel(parcel, payload, result)
        logger.info(
            "Parcel auto-created",
            extra={"order_number": order.order_number, "tracking": parcel.tracking},
        )
        return parcel

    except Exception:
        logger.exception(
            "Parcel creation intent crashed",
            extra={"order_id": str(order_id), "cod_status": cod_status},
        )
        return None


# ==================================================
# MANUAL ADMIN OPERATIONS
# ==================================================


def _require_cod_parcel(order: Order) -> ShippingParcel:
    if not order.is_cod:
        raise ParcelError("Only COD orders supported")
    parcel = get_parcel(order)
    if parcel is None:
        raise ParcelNotFoundError("No courier parcel data found")
    return parcel


def create_parcel_for_order(order: Order, *, client=None) -> ShippingParcel:
    """
    Manual creation. Unlike the intent processor, failures raise.
    """
    parcel = _require_cod_parcel(order)
    if parcel.tracking:
        raise ParcelAlreadyCreatedError(f"Parcel already created ({parcel.tracking})")

    client = client or YalidineClient()
    payload, result, created = _create_with_courier(parcel, client)
    if not created:
        raise CourierError(result.error or "Failed to create parcel")

    with transaction.atomic():
        _store_created_parcel(parcel, payload, result)
        if order.cod_status == Order.COD_PENDING:
            apply_lifecycle(order, OrderLifecycle(kind=kind_for(order), value=Order.COD_SUBMITTED))

    logger.info(
        "Parcel created manually",
        extra={"order_number": order.order_number, "tracking": parcel.tracking},
    )
    return parcel


def _resolve_location_names(parcel: ShippingParcel) -> tuple[str, str]:
    """
    Exact courier spelling from the synced reference tables, when known.
    """
    wilaya_name = parcel.to_wilaya_name
    commune_name = parcel.to_commune_name

    wilaya = Wilaya.objects.filter(name__iexact=wilaya_name, active=True).first()
    if wilaya is None:
        return wilaya_name, commune_name

    commune = Commune.objects.filter(
        wilaya=wilaya, name__iexact=commune_name, active=True
    ).first()
    return wilaya.name, (commune.name if commune else commune_name)


def update_parcel_for_order(order: Order, *, client=None) -> ShippingParcel:
    parcel = _require_cod_parcel(order)
    if not parcel.tracking:
        raise ParcelError("No existing parcel to update")
    if not parcel.to_wilaya_name or not parcel.to_commune_name:
        raise ParcelError("Parcel has no destination wilaya/commune")

    client = client or YalidineClient()
    wilaya_name, commune_name = _resolve_location_names(parcel)

    payload = build_parcel_payload(
        parcel, from_wilaya_name=get_courier_settings().from_wilaya_name
    )
    payload.update({"to_wilaya_name": wilaya_name, "to_commune_name": commune_name})
    for unsupported in ("parcel_sub_type", "has_receipt", "from_address"):
        payload.pop(unsupported, None)
    payload = {k: v for k, v in payload.items() if v is not None}

    result = client.update_parcel(parcel.tracking, payload)
    if not result.ok:
        raise CourierError(result.error or "Failed to update parcel")

    data = result.data or {}
    parcel.to_wilaya_name = wilaya_name
    parcel.to_commune_name = commune_name
    parcel.label_url = data.get("label_url") or parcel.label_url
    parcel.status = (data.get("status") or "updated").lower()
    parcel.last_payload = {
        "action": "updated",
        "request": payload,
        "response": result.raw,
        "timestamp": timezone.now().isoformat(),
    }
    parcel.save(
        update_fields=[
            "to_wilaya_name",
            "to_commune_name",
            "label_url",
            "status",
            "last_payload",
            "updated_at",
        ]
    )
    return parcel


def delete_parcel_locally(order: Order, *, client=None, remote: bool = False) -> str | None:
    """
    Clear tracking on our side (status "cancelled").
    With remote=True the courier parcel is deleted first; a courier failure
    leaves the local record untouched.

    Returns the previous tracking number.
    """
    parcel = _require_cod_parcel(order)
    previous = parcel.tracking

    if remote and previous:
        client = client or YalidineClient()
        result = client.delete_parcel(previous)
        if not result.ok:
            raise CourierError(result.error or "Failed to delete parcel")

    with transaction.atomic():
        parcel.tracking = None
        parcel.label_url = None
        parcel.status = "cancelled"
        parcel.last_payload = {
            "action": "deleted",
            "remote": bool(remote and previous),
            "previous_tracking": previous,
            "timestamp": timezone.now().isoformat(),
        }
        parcel.save(update_fields=["tracking", "label_url", "status", "last_payload", "updated_at"])

        if order.cod_status in _CANCELLABLE_COD_STATUSES:
            apply_lifecycle(order, OrderLifecycle(kind=kind_for(order), value=Order.COD_CANCELLED))

    logger.info(
        "Parcel deleted locally",
        extra={"order_number": order.order_number, "previous_tracking": previous},
    )
    return previous
