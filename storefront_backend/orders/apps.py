# orders/apps.py

"""
ORDERS APP CONFIG

Storefront orders:
- Order aggregate (generic status + COD courier-facing status)
- Admin status transitions
"""

from django.apps import AppConfig


class OrdersConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "orders"
    verbose_name = "Orders"
