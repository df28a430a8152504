# shipping/admin.py

from django.contrib import admin

from shipping.models import Commune, CourierEvent, ShippingParcel, StopDesk, Wilaya


# ======================================================
# PARCEL ADMIN
# ======================================================


@admin.register(ShippingParcel)
class ShippingParcelAdmin(admin.ModelAdmin):
    list_display = (
        "courier_order_id",
        "order",
        "tracking",
        "status",
        "last_status_check",
        "created_at",
    )
    readonly_fields = (
        "tracking",
        "label_url",
        "status",
        "status_history",
        "last_status_check",
        "last_payload",
        "created_at",
        "updated_at",
    )
    search_fields = ("courier_order_id", "tracking", "order__order_number")
    list_filter = ("status", "is_stopdesk")


@admin.register(CourierEvent)
class CourierEventAdmin(admin.ModelAdmin):
    list_display = ("id", "type", "occurred_at", "received_at")
    readonly_fields = ("id", "type", "occurred_at", "payload", "received_at")
    list_filter = ("type",)


# ======================================================
# LOCATIONS (read-mostly, owned by the courier sync)
# ======================================================


@admin.register(Wilaya)
class WilayaAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "zone", "is_deliverable", "active")
    list_filter = ("active", "is_deliverable")
    search_fields = ("name",)


@admin.register(Commune)
class CommuneAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "wilaya", "has_stop_desk", "active")
    list_filter = ("active", "has_stop_desk", "wilaya")
    search_fields = ("name",)


@admin.register(StopDesk)
class StopDeskAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "wilaya", "commune", "active")
    list_filter = ("active", "wilaya")
    search_fields = ("name", "address")
