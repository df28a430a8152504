# shipping/models/location.py

"""
COURIER LOCATION REFERENCE DATA

Externally sourced (Yalidine), locally cached.

Rules:
- Primary key is the courier-assigned numeric id (no auto ids)
- Records missing from the latest full sync are deactivated, never deleted
  (orders/parcels keep pointing at them)
"""

from django.db import models


class Wilaya(models.Model):
    id = models.PositiveIntegerField(primary_key=True)
    name = models.CharField(max_length=120)
    name_ar = models.CharField(max_length=120, null=True, blank=True)
    slug = models.SlugField(max_length=160, unique=True)
    zone = models.PositiveSmallIntegerField(null=True, blank=True)
    is_deliverable = models.BooleanField(default=True)
    active = models.BooleanField(default=True)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return f"{self.id} - {self.name}"


class Commune(models.Model):
    id = models.PositiveIntegerField(primary_key=True)
    wilaya = models.ForeignKey(
        Wilaya,
        on_delete=models.PROTECT,
        related_name="communes",
    )
    name = models.CharField(max_length=120)
    name_ar = models.CharField(max_length=120, null=True, blank=True)
    # name + wilaya id: commune names repeat across wilayas
    slug = models.SlugField(max_length=180, unique=True)
    has_stop_desk = models.BooleanField(default=False)
    is_deliverable = models.BooleanField(default=True)
    delivery_time_parcel = models.PositiveSmallIntegerField(null=True, blank=True)
    delivery_time_payment = models.PositiveSmallIntegerField(null=True, blank=True)
    active = models.BooleanField(default=True)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["wilaya", "active"], name="shipping_co_wilaya__5e7f31_idx"),
        ]

    def __str__(self):
        return f"{self.name} ({self.wilaya_id})"


class StopDesk(models.Model):
    """
    Courier pickup point ("stop desk").

    Ids >= SYNTHETIC_ID_OFFSET are derived from communes that advertise a
    stop desk, used when the centers endpoint returns nothing.
    """

    SYNTHETIC_ID_OFFSET = 100000

    id = models.PositiveIntegerField(primary_key=True)
    wilaya = models.ForeignKey(
        Wilaya,
        on_delete=models.PROTECT,
        related_name="stop_desks",
    )
    commune = models.ForeignKey(
        Commune,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="stop_desks",
    )
    name = models.CharField(max_length=160)
    name_ar = models.CharField(max_length=160, null=True, blank=True)
    address = models.CharField(max_length=255, blank=True, default="")
    slug = models.SlugField(max_length=220)
    phone = models.CharField(max_length=40, null=True, blank=True)
    latitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    longitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    active = models.BooleanField(default=True)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["wilaya", "active"], name="shipping_st_wilaya__8a2c44_idx"),
        ]

    @property
    def is_synthetic(self) -> bool:
        return self.id >= self.SYNTHETIC_ID_OFFSET

    def __str__(self):
        return f"{self.name} ({self.wilaya_id})"
