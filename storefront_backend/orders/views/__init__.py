from .admin_orders import AdminOrderViewSet
from .order_status import AdminOrderStatusView

__all__ = [
    "AdminOrderStatusView",
    "AdminOrderViewSet",
]
