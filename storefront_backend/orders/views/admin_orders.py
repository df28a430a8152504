# orders/views/admin_orders.py

from rest_framework import viewsets
from rest_framework.permissions import IsAuthenticated

from orders.filters import OrderAdminFilter
from orders.models import Order
from orders.serializers import OrderAdminSerializer
from permissions.roles import CAP_ORDERS_VIEW, HasAnyCapability


class AdminOrderViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Back-office order list / detail.

    Filters: status, cod_status, payment_method, order_number,
    created_after, created_before, has_tracking
    """

    serializer_class = OrderAdminSerializer
    filterset_class = OrderAdminFilter
    permission_classes = [IsAuthenticated, HasAnyCapability]
    required_any_capabilities = {CAP_ORDERS_VIEW}

    def get_queryset(self):
        return (
            Order.objects.select_related("user", "parcel")
            .prefetch_related("items")
            .order_by("-created_at")
        )
