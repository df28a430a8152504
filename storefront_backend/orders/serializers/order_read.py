# orders/serializers/order_read.py

from decimal import Decimal

from rest_framework import serializers

from orders.models import Order
from orders.services.lifecycle import lifecycle_of


class OrderAdminSerializer(serializers.ModelSerializer):
    """
    Back-office order view.

    - status is the EFFECTIVE lifecycle value (cod_status for COD orders)
    - total for COD orders is derived from total_cents
    - items_count is the sum of item quantities
    """

    customer = serializers.SerializerMethodField()
    status = serializers.SerializerMethodField()
    total = serializers.SerializerMethodField()
    items_count = serializers.SerializerMethodField()
    shipping_address = serializers.SerializerMethodField()
    parcel = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "customer",
            "status",
            "payment_method",
            "total",
            "items_count",
            "shipping_address",
            "parcel",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_customer(self, obj):
        user = obj.user
        return {
            "first_name": (user.first_name if user else "") or obj.customer_first_name,
            "last_name": (user.last_name if user else "") or obj.customer_last_name,
            "email": (user.email if user else "") or obj.customer_email,
        }

    def get_status(self, obj):
        return lifecycle_of(obj).value

    def get_total(self, obj):
        if obj.is_cod:
            amount = Decimal(obj.total_cents) / Decimal("100")
        else:
            amount = Decimal(str(obj.total or "0"))
        return str(amount.quantize(Decimal("0.01")))

    def get_items_count(self, obj):
        return sum(item.quantity for item in obj.items.all())

    def get_shipping_address(self, obj):
        return {
            "address": obj.address,
            "city": obj.city,
            "state": obj.state,
            "postal_code": obj.postal_code,
            "country": obj.country,
        }

    def get_parcel(self, obj):
        parcel = getattr(obj, "parcel", None)
        if parcel is None:
            return None
        return {
            "tracking": parcel.tracking,
            "status": parcel.status,
            "created": parcel.is_created,
        }
