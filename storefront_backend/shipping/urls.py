# shipping/urls.py
"""
SHIPPING API URLS

Base path (mounted in backend/urls.py):
    /api/shipping/

Public:
- GET  wilayas/ | communes/?wilaya= | stopdesks/?wilaya=
- POST webhooks/yalidine/

Scheduler:
- GET|POST cron/status-check/

Back office:
- POST|PATCH|DELETE admin/orders/<order_id>/parcel/
- GET|POST admin/status-check/
"""

from django.urls import path

from shipping.views import (
    AdminParcelView,
    AdminStatusCheckView,
    CommuneListView,
    CronStatusCheckView,
    StopDeskListView,
    WilayaListView,
    YalidineWebhookView,
)

app_name = "shipping"

urlpatterns = [
    # Public lookups
    path("wilayas/", WilayaListView.as_view(), name="wilaya-list"),
    path("communes/", CommuneListView.as_view(), name="commune-list"),
    path("stopdesks/", StopDeskListView.as_view(), name="stopdesk-list"),
    # Courier push
    path("webhooks/yalidine/", YalidineWebhookView.as_view(), name="yalidine-webhook"),
    # Scheduler
    path("cron/status-check/", CronStatusCheckView.as_view(), name="cron-status-check"),
    # Back office
    path(
        "admin/orders/<uuid:order_id>/parcel/",
        AdminParcelView.as_view(),
        name="admin-order-parcel",
    ),
    path("admin/status-check/", AdminStatusCheckView.as_view(), name="admin-status-check"),
]
