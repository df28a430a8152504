# orders/models/order_item.py

from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models


class OrderItem(models.Model):
    """
    Line item snapshot (name/sku/price frozen at checkout).
    """

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="items",
    )

    product_name = models.CharField(max_length=255)
    sku = models.CharField(max_length=64, blank=True, default="")

    unit_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])

    class Meta:
        ordering = ["id"]

    @property
    def line_total(self) -> Decimal:
        return (self.unit_price or Decimal("0.00")) * int(self.quantity or 0)

    def __str__(self):
        return f"{self.product_name} x{self.quantity}"
