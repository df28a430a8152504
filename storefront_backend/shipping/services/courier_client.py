# shipping/services/courier_client.py

"""
YALIDINE COURIER CLIENT

Thin REST wrapper over the courier API (urllib, JSON in/out).

- create_parcel / get_parcel / update_parcel / delete_parcel never raise:
  failures come back as CourierResult(ok=False, error=...)
- iter_pages / fetch_all raise CourierError (callers decide)
- every HTTP call goes through RetryPolicy (429 / 5xx / network)

Auth: two static headers, X-API-ID and X-API-TOKEN.
"""

from __future__ import annotations

import http.client
import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Iterator
from urllib.error import HTTPError, URLError
from urllib.parse import quote, urlencode
from urllib.request import Request, urlopen

from shipping.services.config import CourierSettings, get_courier_settings
from shipping.services.exceptions import (
    CourierConnectionError,
    CourierError,
    CourierHTTPError,
    CourierNotConfiguredError,
)
from shipping.services.retry import RetryPolicy

logger = logging.getLogger(__name__)

NOT_CONFIGURED = "Yalidine API not configured"

# Dropped from the create payload when null
_OPTIONAL_NUMERIC_FIELDS = ("height", "width", "length", "weight")


@dataclass(frozen=True)
class CourierResult:
    ok: bool
    data: Any = None
    error: str | None = None
    raw: Any = None


def _safe_preview(text: str, limit: int = 800) -> str:
    text = (text or "").strip()
    if len(text) <= limit:
        return text
    return text[:limit] + " ...(truncated)"


def _error_detail(body: str) -> str:
    """
    Prefer the courier's own message when the body is JSON.
    """
    try:
        parsed = json.loads(body or "")
    except ValueError:
        return _safe_preview(body)

    if isinstance(parsed, dict):
        msg = parsed.get("message") or parsed.get("error")
        if isinstance(msg, dict):
            msg = msg.get("message")
        if msg:
            return str(msg)
    return _safe_preview(json.dumps(parsed, ensure_ascii=False))


def _first_record(data):
    """
    The parcel endpoint answers either the parcel itself, a list, or
    an envelope {"data": [...]}.
    """
    if isinstance(data, list):
        return data[0] if data else {}
    if isinstance(data, dict):
        inner = data.get("data")
        if isinstance(inner, list) and inner:
            return inner[0]
    return data


def normalize_created_parcel(raw) -> dict:
    """
    Known create-parcel response shapes:
    - [ {...} ]
    - {"parcels": [ {...} ]}
    - {"<order_id>": {"success": true, "tracking": ...}}
    """
    if isinstance(raw, list):
        first = raw[0] if raw else {}
    elif isinstance(raw, dict) and isinstance(raw.get("parcels"), list) and raw["parcels"]:
        first = raw["parcels"][0]
    else:
        first = raw

    if isinstance(first, dict) and not first.get("tracking") and not first.get("status"):
        for value in first.values():
            if isinstance(value, dict):
                first = value
                break

    if not isinstance(first, dict):
        first = {}

    return {
        "tracking": first.get("tracking")
        or first.get("tracking_code")
        or first.get("tracking_number"),
        "label_url": first.get("label_url") or first.get("labelUrl") or first.get("label"),
        "status": first.get("status") or ("created" if first.get("success") else "pending"),
    }


class YalidineClient:
    def __init__(
        self,
        courier_settings: CourierSettings | None = None,
        *,
        retry_policy: RetryPolicy | None = None,
        sleep=time.sleep,
    ):
        self.settings = courier_settings or get_courier_settings()
        self.retry_policy = retry_policy or RetryPolicy.from_settings(self.settings, sleep=sleep)
        self._sleep = sleep

    @property
    def is_configured(self) -> bool:
        return self.settings.is_configured

    # --------------------------------------------------
    # HTTP
    # --------------------------------------------------

    def _headers(self) -> dict:
        return {
            "X-API-ID": self.settings.api_id,
            "X-API-TOKEN": self.settings.api_token,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def _url(self, path: str, params: dict | None = None) -> str:
        url = f"{self.settings.api_base}{path.lstrip('/')}"
        if params:
            url = f"{url}?{urlencode(params)}"
        return url

    def _send(self, method: str, url: str, body=None):
        data = None
        if body is not None:
            data = json.dumps(body, ensure_ascii=False, default=str).encode("utf-8")

        req = Request(url, data=data, headers=self._headers(), method=method)

        try:
            with urlopen(req, timeout=self.settings.request_timeout) as resp:
                raw = resp.read().decode("utf-8", errors="replace")
        except HTTPError as e:
            raw = ""
            try:
                raw = e.read().decode("utf-8", errors="replace")
            except Exception:
                raw = ""
            retry_after = e.headers.get("Retry-After") if e.headers else None
            raise CourierHTTPError(e.code, _error_detail(raw), retry_after=retry_after) from e
        except URLError as e:
            raise CourierConnectionError(f"Yalidine URLError: {e.reason}") from e
        except (OSError, http.client.HTTPException) as e:
            # timeouts and dropped connections surface unwrapped from getresponse()/read()
            raise CourierConnectionError(f"Yalidine connection error: {e!r}") from e

        if not raw.strip():
            return {}
        try:
            return json.loads(raw)
        except ValueError as e:
            raise CourierError(f"Invalid JSON response: {_safe_preview(raw)}") from e

    def request(self, method: str, path: str, *, body=None, params: dict | None = None):
        if not self.is_configured:
            raise CourierNotConfiguredError(NOT_CONFIGURED)
        url = self._url(path, params)
        return self.retry_policy.run(lambda: self._send(method, url, body))

    # --------------------------------------------------
    # PARCELS
    # --------------------------------------------------

    def create_parcel(self, payload: dict) -> CourierResult:
        logger.info(
            "Creating Yalidine parcel",
            extra={
                "order_id": payload.get("order_id"),
                "to_wilaya_name": payload.get("to_wilaya_name"),
                "to_commune_name": payload.get("to_commune_name"),
                "price": payload.get("price"),
            },
        )

        if not self.is_configured:
            logger.warning("Yalidine API not configured, creating mock parcel")
            tracking = f"YLD{int(time.time() * 1000)}"
            return CourierResult(
                ok=True,
                data={
                    "tracking": tracking,
                    "label_url": f"https://yalidine.app/label/{tracking}",
                    "status": "pending",
                },
                raw={"mock": True, "tracking": tracking},
            )

        clean = {
            k: v
            for k, v in payload.items()
            if not (k in _OPTIONAL_NUMERIC_FIELDS and v is None)
        }

        try:
            raw = self.request("POST", "parcels/", body=[clean])
        except CourierHTTPError as e:
            logger.error(
                "Yalidine parcel creation rejected",
                extra={"status": e.status, "detail": e.body},
            )
            return CourierResult(ok=False, error=e.body or str(e), raw={"status": e.status})
        except CourierError as e:
            logger.error("Yalidine parcel creation failed", extra={"error": str(e)})
            return CourierResult(ok=False, error=str(e), raw={"error": str(e)})

        data = normalize_created_parcel(raw)
        logger.info("Yalidine parcel created", extra={"tracking": data["tracking"]})
        return CourierResult(ok=True, data=data, raw=raw)

    def get_parcel(self, tracking: str) -> CourierResult:
        if not self.is_configured:
            return CourierResult(ok=False, error=NOT_CONFIGURED)

        try:
            raw = self.request("GET", f"parcels/{quote(str(tracking), safe='')}")
        except CourierError as e:
            logger.warning(
                "Yalidine parcel lookup failed",
                extra={"tracking": tracking, "error": str(e)},
            )
            return CourierResult(ok=False, error=str(e))

        return CourierResult(ok=True, data=_first_record(raw), raw=raw)

    def update_parcel(self, tracking: str, updates: dict) -> CourierResult:
        if not self.is_configured:
            logger.warning("Yalidine API not configured, returning mock update")
            return CourierResult(
                ok=True,
                data={"tracking": tracking, **updates},
                raw={"mock": True, "tracking": tracking, "action": "update"},
            )

        try:
            raw = self.request("PATCH", f"parcels/{quote(str(tracking), safe='')}", body=updates)
        except CourierError as e:
            return CourierResult(ok=False, error=str(e))
        return CourierResult(ok=True, data=_first_record(raw), raw=raw)

    def delete_parcel(self, tracking: str) -> CourierResult:
        if not self.is_configured:
            logger.warning("Yalidine API not configured, returning mock delete")
            return CourierResult(
                ok=True,
                data={"tracking": tracking, "deleted": True},
                raw={"mock": True, "tracking": tracking, "action": "delete"},
            )

        try:
            raw = self.request("DELETE", f"parcels/{quote(str(tracking), safe='')}")
        except CourierError as e:
            return CourierResult(ok=False, error=str(e))
        return CourierResult(ok=True, data={"tracking": tracking, "deleted": True}, raw=raw)

    # --------------------------------------------------
    # REFERENCE DATA (paginated)
    # --------------------------------------------------

    def iter_pages(
        self, path: str, *, params: dict | None = None, page_size: int = 50
    ) -> Iterator[list]:
        """
        Yield one batch per page. Continues while the response carries
        links.next or has_more; throttles between pages.
        """
        if not path.endswith("/"):
            path = f"{path}/"

        page = 1
        while True:
            query = {**(params or {}), "page": page, "page_size": page_size}
            data = self.request("GET", path, params=query)

            if isinstance(data, dict):
                batch = data.get("data")
                if batch is None:
                    batch = data.get("items")
                if batch is None:
                    batch = []
                links = data.get("links") or {}
                has_more = bool(links.get("next")) or bool(data.get("has_more"))
            else:
                batch = data or []
                has_more = False

            yield list(batch)

            if not has_more:
                return
            page += 1
            self._sleep(self.settings.page_throttle_seconds)

    def fetch_all(self, path: str, *, params: dict | None = None, page_size: int = 50) -> list:
        items: list = []
        for batch in self.iter_pages(path, params=params, page_size=page_size):
            items.extend(batch)
        return items

    def fetch_wilayas(self) -> list:
        return self.fetch_all("wilayas/")

    def fetch_communes(self, **filters) -> list:
        return self.fetch_all("communes/", params=filters or None)

    def fetch_centers(self) -> list:
        return self.fetch_all("centers/")
