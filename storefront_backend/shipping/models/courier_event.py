# shipping/models/courier_event.py

from django.db import models
from django.utils import timezone


class CourierEvent(models.Model):
    """
    Webhook event log.

    Idempotency rule:
    - id is the courier event_id; a redelivered event is stored once
      and applied once.
    """

    id = models.CharField(max_length=128, primary_key=True)
    type = models.CharField(max_length=64)
    occurred_at = models.DateTimeField(default=timezone.now)
    payload = models.JSONField(default=dict, blank=True)
    received_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-occurred_at"]

    def __str__(self):
        return f"{self.type} | {self.id}"
