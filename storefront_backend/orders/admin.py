# orders/admin.py

from django.contrib import admin

from orders.models import Order, OrderItem


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = (
        "order_number",
        "payment_method",
        "status",
        "cod_status",
        "total",
        "created_at",
    )
    readonly_fields = (
        "order_number",
        "total_cents",
        "created_at",
        "updated_at",
        "shipped_at",
        "delivered_at",
    )
    search_fields = ("order_number", "customer_email", "customer_last_name")
    list_filter = ("payment_method", "status", "cod_status", "created_at")
    inlines = [OrderItemInline]
