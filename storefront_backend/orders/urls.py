# orders/urls.py
"""
ORDERS API URLS

Base path (mounted in backend/urls.py):
    /api/orders/

Back office:
- GET   admin/                      list (filterable)
- GET   admin/<uuid>/               detail
- PATCH admin/<uuid>/status/        status update

Explicit routes are registered BEFORE router URLs.
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from orders.views import AdminOrderStatusView, AdminOrderViewSet

app_name = "orders"

router = DefaultRouter()
router.register(r"admin", AdminOrderViewSet, basename="admin-order")

urlpatterns = [
    path(
        "admin/<uuid:order_id>/status/",
        AdminOrderStatusView.as_view(),
        name="admin-order-status",
    ),
    path("", include(router.urls)),
]
