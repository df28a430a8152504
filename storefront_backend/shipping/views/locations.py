# shipping/views/locations.py
"""
PUBLIC LOCATION LOOKUPS (CHECKOUT FORMS)

GET /api/shipping/wilayas/
GET /api/shipping/communes/?wilaya=<id>
GET /api/shipping/stopdesks/?wilaya=<id>

Active rows only; data comes from the courier location sync.
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework.generics import ListAPIView
from rest_framework.permissions import AllowAny
from rest_framework.throttling import AnonRateThrottle

from shipping.models import Commune, StopDesk, Wilaya
from shipping.serializers import (
    CommuneSerializer,
    LocationQuerySerializer,
    StopDeskSerializer,
    WilayaSerializer,
)

WILAYA_PARAM = OpenApiParameter(
    name="wilaya",
    type=int,
    location=OpenApiParameter.QUERY,
    required=True,
    description="Courier wilaya id",
)


class PublicLookupThrottle(AnonRateThrottle):
    scope = "public_lookup"


class _PublicLocationListView(ListAPIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = [PublicLookupThrottle]
    pagination_class = None

    def wilaya_id(self) -> int:
        query = LocationQuerySerializer(data=self.request.query_params)
        query.is_valid(raise_exception=True)
        return query.validated_data["wilaya"]


@extend_schema(tags=["Shipping"])
class WilayaListView(_PublicLocationListView):
    serializer_class = WilayaSerializer

    def get_queryset(self):
        return Wilaya.objects.filter(active=True).order_by("id")


@extend_schema(tags=["Shipping"], parameters=[WILAYA_PARAM])
class CommuneListView(_PublicLocationListView):
    serializer_class = CommuneSerializer

    def get_queryset(self):
        return Commune.objects.filter(active=True, wilaya_id=self.wilaya_id()).order_by("name")


@extend_schema(tags=["Shipping"], parameters=[WILAYA_PARAM])
class StopDeskListView(_PublicLocationListView):
    serializer_class = StopDeskSerializer

    def get_queryset(self):
        return StopDesk.objects.filter(active=True, wilaya_id=self.wilaya_id()).order_by("name")
