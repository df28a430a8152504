# shipping/services/location_sync.py

"""
COURIER LOCATION SYNC

Pages through courier reference data and upserts it locally:
- wilayas   (GET wilayas/)
- communes  (GET communes/)
- stop desks (GET centers/, fallback: communes/?has_stop_desk=true)

Rows missing from the latest full fetch are deactivated, never deleted.
"""

from __future__ import annotations

import json
import logging
import time
from decimal import Decimal, InvalidOperation
from pathlib import Path

from django.core.serializers.json import DjangoJSONEncoder
from django.db import transaction
from django.utils import timezone
from django.utils.text import slugify

from shipping.models import Commune, StopDesk, Wilaya
from shipping.services.config import get_courier_settings
from shipping.services.courier_client import YalidineClient
from shipping.services.exceptions import CourierError

logger = logging.getLogger(__name__)


def _unique_slug(model, base: str, ident, seen: set) -> str:
    """
    Slug free in this batch and not held by another id in the table
    (deactivated rows keep theirs).
    """
    slug = slugify(base) or str(ident)
    if slug in seen or model.objects.filter(slug=slug).exclude(id=ident).exists():
        slug = f"{slug}-{ident}"
    seen.add(slug)
    return slug


def parse_gps(value) -> tuple[Decimal | None, Decimal | None]:
    """
    "36.75,3.04" -> (Decimal("36.750000"), Decimal("3.040000"))
    """
    if not value:
        return None, None
    parts = [p.strip() for p in str(value).split(",")]
    if len(parts) != 2:
        return None, None
    try:
        lat, lng = (Decimal(p).quantize(Decimal("0.000001")) for p in parts)
    except (InvalidOperation, ValueError):
        return None, None
    if not (-90 <= lat <= 90 and -180 <= lng <= 180):
        return None, None
    return lat, lng


# --------------------------------------------------
# FETCH
# --------------------------------------------------


def _centers_to_stop_desks(centers: list) -> list[dict]:
    desks = []
    for center in centers:
        if not center.get("center_id") or not center.get("wilaya_id"):
            continue
        lat, lng = parse_gps(center.get("gps"))
        desks.append(
            {
                "id": int(center["center_id"]),
                "name": center.get("name") or f"Centre {center['center_id']}",
                "name_ar": None,
                "address": center.get("address") or "",
                "wilaya_id": int(center["wilaya_id"]),
                "commune_id": center.get("commune_id"),
                "phone": None,
                "latitude": lat,
                "longitude": lng,
            }
        )
    return desks


def _communes_to_stop_desks(communes: list) -> list[dict]:
    desks = []
    for commune in communes:
        if not commune.get("id") or not commune.get("wilaya_id"):
            continue
        desks.append(
            {
                "id": int(commune["id"]) + StopDesk.SYNTHETIC_ID_OFFSET,
                "name": f"Agence Yalidine {commune.get('name')}",
                "name_ar": commune.get("name"),
                "address": f"{commune.get('name')}, {commune.get('wilaya_name') or 'Unknown'}",
                "wilaya_id": int(commune["wilaya_id"]),
                "commune_id": commune.get("id"),
                "phone": None,
                "latitude": None,
                "longitude": None,
            }
        )
    return desks


def fetch_stop_desks(client: YalidineClient) -> list[dict] | None:
    """
    Centers first; commune-derived desks when centers are empty or failing.
    None means neither source answered.
    """
    try:
        desks = _centers_to_stop_desks(client.fetch_centers())
        if desks:
            return desks
        logger.warning("No centers returned by courier, using commune fallback")
    except CourierError as exc:
        logger.warning("Courier centers fetch failed", extra={"error": str(exc)})

    try:
        communes = client.fetch_communes(has_stop_desk="true")
    except CourierError as exc:
        logger.error("Stop desk fallback failed", extra={"error": str(exc)})
        return None

    return _communes_to_stop_desks(communes)


# --------------------------------------------------
# UPSERT
# --------------------------------------------------


def _upsert_wilayas(rows: list) -> set:
    ids, seen = set(), set()
    for row in rows:
        wid = int(row["id"])
        Wilaya.objects.update_or_create(
            id=wid,
            defaults={
                "name": row.get("name") or "",
                "name_ar": row.get("name_ar"),
                "slug": _unique_slug(Wilaya, row.get("name") or "", wid, seen),
                "zone": row.get("zone"),
                "is_deliverable": bool(row.get("is_deliverable", True)),
                "active": True,
            },
        )
        ids.add(wid)
    return ids


def _upsert_communes(rows: list, wilaya_ids: set) -> set:
    ids, seen = set(), set()
    for row in rows:
        cid, wid = int(row["id"]), int(row.get("wilaya_id") or 0)
        if wid not in wilaya_ids:
            logger.warning(
                "Skipping commune with unknown wilaya",
                extra={"commune_id": cid, "wilaya_id": wid},
            )
            continue
        Commune.objects.update_or_create(
            id=cid,
            defaults={
                "wilaya_id": wid,
                "name": row.get("name") or "",
                "name_ar": row.get("name_ar"),
                "slug": _unique_slug(Commune, f"{row.get('name')}-{wid}", cid, seen),
                "has_stop_desk": bool(row.get("has_stop_desk", False)),
                "is_deliverable": bool(row.get("is_deliverable", True)),
                "delivery_time_parcel": row.get("delivery_time_parcel"),
                "delivery_time_payment": row.get("delivery_time_payment"),
                "active": True,
            },
        )
        ids.add(cid)
    return ids


def _upsert_stop_desks(rows: list, wilaya_ids: set, commune_ids: set) -> set:
    ids = set()
    for row in rows:
        if row["wilaya_id"] not in wilaya_ids:
            continue
        commune_id = row.get("commune_id")
        commune_id = int(commune_id) if commune_id and int(commune_id) in commune_ids else None
        StopDesk.objects.update_or_create(
            id=row["id"],
            defaults={
                "wilaya_id": row["wilaya_id"],
                "commune_id": commune_id,
                "name": row["name"],
                "name_ar": row.get("name_ar"),
                "address": row.get("address") or "",
                "slug": slugify(f"{row['name']}-{row['wilaya_id']}") or str(row["id"]),
                "phone": row.get("phone"),
                "latitude": row.get("latitude"),
                "longitude": row.get("longitude"),
                "active": True,
            },
        )
        ids.add(row["id"])
    return ids


def sync_locations(client: YalidineClient | None = None, *, sleep=time.sleep) -> dict:
    """
    Full sync. Courier errors on wilayas/communes abort before any write.

    Returns {"wilayas": n, "communes": n, "stopdesks": n}.
    """
    client = client or YalidineClient()
    throttle = get_courier_settings().page_throttle_seconds

    wilayas = client.fetch_wilayas()
    sleep(throttle)
    communes = client.fetch_communes()
    sleep(throttle)
    stop_desks = fetch_stop_desks(client)

    with transaction.atomic():
        wilaya_ids = _upsert_wilayas(wilayas)
        commune_ids = _upsert_communes(communes, wilaya_ids)

        Wilaya.objects.exclude(id__in=wilaya_ids).update(active=False)
        Commune.objects.exclude(id__in=commune_ids).update(active=False)

        stop_desk_ids = set()
        if stop_desks is not None:
            stop_desk_ids = _upsert_stop_desks(stop_desks, wilaya_ids, commune_ids)
            StopDesk.objects.exclude(id__in=stop_desk_ids).update(active=False)

    counts = {
        "wilayas": len(wilaya_ids),
        "communes": len(commune_ids),
        "stopdesks": len(stop_desk_ids),
    }
    logger.info("Courier locations synced", extra=counts)
    return counts


def write_snapshot(path) -> Path:
    """
    Dump the local reference tables to a JSON file.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    snapshot = {
        "wilayas": list(Wilaya.objects.order_by("name").values()),
        "communes": list(Commune.objects.order_by("name").values()),
        "stopdesks": list(StopDesk.objects.order_by("name").values()),
        "generated_at": timezone.now(),
    }
    path.write_text(
        json.dumps(snapshot, cls=DjangoJSONEncoder, ensure_ascii=False, indent=2),
        encoding="utf-8",
    )
    return path
