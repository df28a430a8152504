# shipping/serializers/parcel.py

from rest_framework import serializers

from shipping.models import ShippingParcel


class ParcelSerializer(serializers.ModelSerializer):
    order_number = serializers.CharField(source="order.order_number", read_only=True)

    class Meta:
        model = ShippingParcel
        fields = [
            "order_number",
            "tracking",
            "label_url",
            "status",
            "status_history",
            "last_status_check",
            "to_wilaya_name",
            "to_commune_name",
            "is_stopdesk",
            "stopdesk_id",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
