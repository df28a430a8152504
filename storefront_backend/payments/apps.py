# payments/apps.py

"""
PAYMENTS APP CONFIG

Provider payment confirmations for non-COD orders.
"""

from django.apps import AppConfig


class PaymentsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "payments"
    verbose_name = "Payments"
