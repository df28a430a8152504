# shipping/models/__init__.py

"""
SHIPPING MODELS PACKAGE EXPORTS
"""

from .courier_event import CourierEvent
from .location import Commune, StopDesk, Wilaya
from .parcel import ShippingParcel

__all__ = [
    "ShippingParcel",
    "Wilaya",
    "Commune",
    "StopDesk",
    "CourierEvent",
]
