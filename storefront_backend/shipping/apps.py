# shipping/apps.py

"""
SHIPPING APP CONFIG

Courier (Yalidine) integration:
- Parcel records (one per order) + status history
- Delivery-status poller
- Location reference data (wilayas / communes / stop desks)
- Courier webhook
"""

from django.apps import AppConfig


class ShippingConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "shipping"
    verbose_name = "Shipping (Yalidine)"
