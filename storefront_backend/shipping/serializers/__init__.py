from .location import (
    CommuneSerializer,
    LocationQuerySerializer,
    StopDeskSerializer,
    WilayaSerializer,
)
from .parcel import ParcelSerializer
from .status_check import StatusCheckCommandSerializer

__all__ = [
    "CommuneSerializer",
    "LocationQuerySerializer",
    "ParcelSerializer",
    "StatusCheckCommandSerializer",
    "StopDeskSerializer",
    "WilayaSerializer",
]
