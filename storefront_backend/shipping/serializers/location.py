# shipping/serializers/location.py

from rest_framework import serializers

from shipping.models import Commune, StopDesk, Wilaya


class LocationQuerySerializer(serializers.Serializer):
    wilaya = serializers.IntegerField(required=True, min_value=1)


class WilayaSerializer(serializers.ModelSerializer):
    class Meta:
        model = Wilaya
        fields = ["id", "name", "name_ar", "slug", "zone", "is_deliverable"]


class CommuneSerializer(serializers.ModelSerializer):
    class Meta:
        model = Commune
        fields = [
            "id",
            "wilaya_id",
            "name",
            "name_ar",
            "slug",
            "has_stop_desk",
            "is_deliverable",
            "delivery_time_parcel",
        ]


class StopDeskSerializer(serializers.ModelSerializer):
    class Meta:
        model = StopDesk
        fields = [
            "id",
            "wilaya_id",
            "commune_id",
            "name",
            "name_ar",
            "address",
            "slug",
            "phone",
            "latitude",
            "longitude",
        ]
