# orders/serializers/status_command.py

from rest_framework import serializers

from orders.services.status_update import RECOGNIZED_STATUSES


class OrderStatusCommandSerializer(serializers.Serializer):
    """
    Command serializer for the admin status update.

    Validates input only; mapping to the authoritative field happens in
    orders.services.status_update.
    """

    status = serializers.ChoiceField(choices=sorted(RECOGNIZED_STATUSES))
