from .locations import CommuneListView, StopDeskListView, WilayaListView
from .parcel_admin import AdminParcelView
from .status_check import AdminStatusCheckView, CronStatusCheckView
from .webhook import YalidineWebhookView

__all__ = [
    "AdminParcelView",
    "AdminStatusCheckView",
    "CommuneListView",
    "CronStatusCheckView",
    "StopDeskListView",
    "WilayaListView",
    "YalidineWebhookView",
]
