# shipping/models/parcel.py

from decimal import Decimal

from django.db import models
from django.utils import timezone


class ShippingParcel(models.Model):
    """
    Courier parcel for an order (one-to-one).

    Lifecycle:
    - Created at checkout as a placeholder (tracking=NULL) for COD orders,
      holding the recipient/parcel payload to send to the courier.
    - tracking + label_url are set once, when the courier accepts creation.
    - Every successful poll appends to status_history.
    - Never deleted while the order exists; a local "delete" only clears tracking.
    """

    SOURCE_API = "yalidine_api"
    SOURCE_WEBHOOK = "yalidine_webhook"
    SOURCE_ADMIN = "admin"

    order = models.OneToOneField(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="parcel",
    )

    tracking = models.CharField(max_length=64, null=True, blank=True, unique=True)
    label_url = models.URLField(max_length=500, null=True, blank=True)

    # Courier free-text status, lowercase-normalized
    status = models.CharField(max_length=64, blank=True, default="")
    status_history = models.JSONField(default=list, blank=True)
    last_status_check = models.DateTimeField(null=True, blank=True)

    # Audit trail of the last courier call: {request, response, timestamp}
    last_payload = models.JSONField(default=dict, blank=True)

    # Courier payload (last saved)
    courier_order_id = models.CharField(max_length=64)
    firstname = models.CharField(max_length=100)
    familyname = models.CharField(max_length=100)
    contact_phone = models.CharField(max_length=40)
    address = models.CharField(max_length=255)
    to_wilaya_name = models.CharField(max_length=120)
    to_commune_name = models.CharField(max_length=120)
    product_list = models.TextField(blank=True, default="")
    price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    weight = models.DecimalField(max_digits=6, decimal_places=2, null=True, blank=True)
    height = models.PositiveIntegerField(null=True, blank=True)
    width = models.PositiveIntegerField(null=True, blank=True)
    length = models.PositiveIntegerField(null=True, blank=True)

    is_stopdesk = models.BooleanField(default=False)
    stopdesk_id = models.PositiveIntegerField(null=True, blank=True)
    freeshipping = models.BooleanField(default=False)
    has_exchange = models.BooleanField(default=False)
    do_insurance = models.BooleanField(default=True)

    from_wilaya_name = models.CharField(max_length=120, blank=True, default="")
    from_address = models.CharField(max_length=255, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="shipping_sh_status_4c1e2a_idx"),
            models.Index(fields=["last_status_check"], name="shipping_sh_last_st_9d0b7e_idx"),
        ]

    @property
    def is_created(self) -> bool:
        return bool(self.tracking)

    def record_status(self, status: str, *, source: str = SOURCE_API, at=None) -> None:
        """
        Append-only history entry + current status. Caller saves.
        """
        at = at or timezone.now()
        self.status_history = [
            *(self.status_history or []),
            {"status": status, "timestamp": at.isoformat(), "source": source},
        ]
        self.status = status
        self.last_status_check = at

    def __str__(self):
        return f"{self.courier_order_id} | {self.tracking or 'not created'} | {self.status}"
