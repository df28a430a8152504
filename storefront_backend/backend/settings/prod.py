# backend/settings/prod.py
"""
PRODUCTION SETTINGS

Fails closed on anything an API deployment cannot run without:
SECRET_KEY, ALLOWED_HOSTS, a Postgres DATABASE_URL, https CORS/CSRF origins
and the scheduler secret. Courier credentials are required once parcel
auto-creation is switched on.
"""

from __future__ import annotations

from django.core.exceptions import ImproperlyConfigured

from .base import *  # noqa: F403
from .base import BASE_DIR, MIDDLEWARE, SHIPPING, env


def _required(name: str, value):
    if not value:
        raise ImproperlyConfigured(f"{name} must be set in production.")
    return value


DEBUG = False

SECRET_KEY = _required("SECRET_KEY", (env("SECRET_KEY", default="") or "").strip())
if SECRET_KEY == "dev-insecure-change-me":
    raise ImproperlyConfigured("SECRET_KEY is still the development placeholder.")

ALLOWED_HOSTS = _required("ALLOWED_HOSTS", env.list("ALLOWED_HOSTS", default=[]))

# ----------------------------
# Database (Postgres only)
# ----------------------------
if _required("DATABASE_URL", (env("DATABASE_URL", default="") or "").strip()).startswith("sqlite"):
    raise ImproperlyConfigured("SQLite is not supported in production.")

DATABASES = {"default": env.db("DATABASE_URL")}
DATABASES["default"]["CONN_MAX_AGE"] = env.int("DB_CONN_MAX_AGE", default=60)

# ----------------------------
# Static (admin + API docs), served by WhiteNoise
# ----------------------------
STATIC_ROOT = env("STATIC_ROOT", default=str(BASE_DIR / "staticfiles"))
MIDDLEWARE.insert(1, "whitenoise.middleware.WhiteNoiseMiddleware")
STORAGES = {
    "default": {"BACKEND": "django.core.files.storage.FileSystemStorage"},
    "staticfiles": {"BACKEND": "whitenoise.storage.CompressedManifestStaticFilesStorage"},
}

# ----------------------------
# TLS terminated at the proxy
# ----------------------------
SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")
SECURE_SSL_REDIRECT = env.bool("SECURE_SSL_REDIRECT", default=True)
SECURE_HSTS_SECONDS = env.int("SECURE_HSTS_SECONDS", default=3600)
SECURE_HSTS_INCLUDE_SUBDOMAINS = env.bool("SECURE_HSTS_INCLUDE_SUBDOMAINS", default=True)

SESSION_COOKIE_SECURE = True
CSRF_COOKIE_SECURE = True
SECURE_CONTENT_TYPE_NOSNIFF = True
X_FRAME_OPTIONS = "DENY"

# ----------------------------
# CORS / CSRF: explicit https origins
# ----------------------------
CORS_ALLOWED_ORIGINS = env.list("CORS_ALLOWED_ORIGINS", default=[])
CSRF_TRUSTED_ORIGINS = env.list("CSRF_TRUSTED_ORIGINS", default=[])
CORS_ALLOW_CREDENTIALS = False

for _name, _origins in (
    ("CORS_ALLOWED_ORIGINS", CORS_ALLOWED_ORIGINS),
    ("CSRF_TRUSTED_ORIGINS", CSRF_TRUSTED_ORIGINS),
):
    _required(_name, _origins)
    if any(not origin.startswith("https://") for origin in _origins):
        raise ImproperlyConfigured(f"{_name} must only list https:// origins.")

# ----------------------------
# Courier + scheduler
# ----------------------------
_yalidine = SHIPPING["YALIDINE"]
if _yalidine["AUTO_CREATE_ENABLED"] and not (_yalidine["API_ID"] and _yalidine["API_TOKEN"]):
    raise ImproperlyConfigured(
        "YALIDINE_API_ID and YALIDINE_API_TOKEN must be set when "
        "YALIDINE_ENABLE_AUTO_CREATE is on."
    )

CRON_SECRET = _required("CRON_SECRET", (env("CRON_SECRET", default="") or "").strip())
