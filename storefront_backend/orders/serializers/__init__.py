from .order_read import OrderAdminSerializer
from .status_command import OrderStatusCommandSerializer

__all__ = [
    "OrderAdminSerializer",
    "OrderStatusCommandSerializer",
]
