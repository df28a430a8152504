# orders/models/order.py

import uuid
from decimal import ROUND_HALF_UP, Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone


class Order(models.Model):
    """
    Storefront order.

    Two lifecycle fields:
    - status:     generic lifecycle (card / transfer / paypal orders)
    - cod_status: courier-facing lifecycle (cash-on-delivery orders)

    Exactly one of them is authoritative, selected by payment_method.
    Business code must go through orders.services.lifecycle instead of
    reading either field directly.
    """

    STATUS_PENDING = "PENDING"
    STATUS_CONFIRMED = "CONFIRMED"
    STATUS_SHIPPED = "SHIPPED"
    STATUS_DELIVERED = "DELIVERED"
    STATUS_CANCELLED = "CANCELLED"
    STATUS_REFUNDED = "REFUNDED"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_CONFIRMED, "Confirmed"),
        (STATUS_SHIPPED, "Shipped"),
        (STATUS_DELIVERED, "Delivered"),
        (STATUS_CANCELLED, "Cancelled"),
        (STATUS_REFUNDED, "Refunded"),
    ]

    COD_PENDING = "PENDING"
    COD_SUBMITTED = "SUBMITTED"
    COD_DISPATCHED = "DISPATCHED"
    COD_DELIVERED = "DELIVERED"
    COD_CANCELLED = "CANCELLED"
    COD_FAILED = "FAILED"

    COD_STATUS_CHOICES = [
        (COD_PENDING, "Pending"),
        (COD_SUBMITTED, "Submitted to courier"),
        (COD_DISPATCHED, "Dispatched"),
        (COD_DELIVERED, "Delivered"),
        (COD_CANCELLED, "Cancelled"),
        (COD_FAILED, "Failed"),
    ]

    PAYMENT_COD = "COD"
    PAYMENT_CARD = "CARD"
    PAYMENT_BANK_TRANSFER = "BANK_TRANSFER"
    PAYMENT_PAYPAL = "PAYPAL"

    PAYMENT_METHOD_CHOICES = [
        (PAYMENT_COD, "Cash on delivery"),
        (PAYMENT_CARD, "Card"),
        (PAYMENT_BANK_TRANSFER, "Bank transfer"),
        (PAYMENT_PAYPAL, "PayPal"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    order_number = models.CharField(
        max_length=64,
        unique=True,
        blank=True,
        help_text="System-generated human-readable order number",
    )

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="orders",
    )

    # Customer snapshot (guest checkout has no user)
    customer_first_name = models.CharField(max_length=100, blank=True, default="")
    customer_last_name = models.CharField(max_length=100, blank=True, default="")
    customer_email = models.EmailField(blank=True, default="")
    customer_phone = models.CharField(max_length=40, blank=True, default="")

    status = models.CharField(
        max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING
    )
    cod_status = models.CharField(
        max_length=16, choices=COD_STATUS_CHOICES, default=COD_PENDING
    )
    payment_method = models.CharField(
        max_length=16, choices=PAYMENT_METHOD_CHOICES, default=PAYMENT_CARD
    )

    # Money (server authoritative); total_cents mirrors total
    total = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    total_cents = models.BigIntegerField(default=0)

    # Shipping address snapshot
    address = models.CharField(max_length=255, blank=True, default="")
    city = models.CharField(max_length=120, blank=True, default="")
    state = models.CharField(max_length=120, blank=True, default="")
    postal_code = models.CharField(max_length=20, blank=True, default="")
    country = models.CharField(max_length=2, blank=True, default="DZ")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    shipped_at = models.DateTimeField(null=True, blank=True)
    delivered_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["created_at"], name="orders_orde_created_0e4f1a_idx"),
            models.Index(fields=["status"], name="orders_orde_status_7b2d9c_idx"),
            models.Index(fields=["cod_status"], name="orders_orde_cod_sta_3a81e0_idx"),
            models.Index(fields=["payment_method"], name="orders_orde_payment_c5d2b7_idx"),
        ]

    @property
    def is_cod(self) -> bool:
        return self.payment_method == self.PAYMENT_COD

    @property
    def customer_full_name(self) -> str:
        return f"{self.customer_first_name} {self.customer_last_name}".strip()

    def save(self, *args, **kwargs):
        if not self.order_number:
            prefix = timezone.now().strftime("ORD%Y%m%d")
            self.order_number = f"{prefix}-{uuid.uuid4().hex[:8].upper()}"

        total = Decimal(str(self.total or "0"))
        self.total_cents = int(
            (total * Decimal("100")).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
        )

        update_fields = kwargs.get("update_fields")
        if update_fields is not None and "total" in update_fields:
            kwargs["update_fields"] = {*update_fields, "total_cents"}

        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.order_number} | {self.payment_method} | {self.total}"
