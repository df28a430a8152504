# shipping/services/config.py

"""
COURIER CONFIG RESOLVER

Read settings.SHIPPING["YALIDINE"] at call time (once per invocation).
Nothing here is cached at import, so override_settings works in tests.
"""

from __future__ import annotations

from dataclasses import dataclass

from django.conf import settings

DEFAULT_API_BASE = "https://api.yalidine.app/v1/"


@dataclass(frozen=True)
class CourierSettings:
    api_base: str = DEFAULT_API_BASE
    api_id: str = ""
    api_token: str = ""
    from_wilaya_name: str = ""
    auto_create_enabled: bool = False
    webhook_secret: str = ""
    poll_delay_seconds: float = 0.5
    page_throttle_seconds: float = 0.8
    max_retries: int = 5
    base_backoff_seconds: float = 0.6
    request_timeout: int = 25

    @property
    def is_configured(self) -> bool:
        return bool(self.api_base and self.api_id and self.api_token)


def _as_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def get_courier_settings() -> CourierSettings:
    shipping = getattr(settings, "SHIPPING", {}) or {}
    cfg = shipping.get("YALIDINE") or {}
    defaults = CourierSettings()

    base = (cfg.get("API_BASE") or defaults.api_base).strip()
    if not base.endswith("/"):
        base = f"{base}/"

    return CourierSettings(
        api_base=base,
        api_id=(cfg.get("API_ID") or "").strip(),
        api_token=(cfg.get("API_TOKEN") or "").strip(),
        from_wilaya_name=(cfg.get("FROM_WILAYA_NAME") or "").strip(),
        auto_create_enabled=_as_bool(cfg.get("AUTO_CREATE_ENABLED", False)),
        webhook_secret=(cfg.get("WEBHOOK_SECRET") or "").strip(),
        poll_delay_seconds=float(cfg.get("POLL_DELAY_SECONDS", defaults.poll_delay_seconds)),
        page_throttle_seconds=float(
            cfg.get("PAGE_THROTTLE_SECONDS", defaults.page_throttle_seconds)
        ),
        max_retries=int(cfg.get("MAX_RETRIES", defaults.max_retries)),
        base_backoff_seconds=float(
            cfg.get("BASE_BACKOFF_SECONDS", defaults.base_backoff_seconds)
        ),
        request_timeout=int(cfg.get("REQUEST_TIMEOUT", defaults.request_timeout)),
    )
