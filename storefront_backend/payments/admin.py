# payments/admin.py

from django.contrib import admin

from payments.models import Payment


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ("transaction_id", "order", "provider", "amount", "status", "paid_at")
    readonly_fields = ("transaction_id", "provider_payload", "created_at", "paid_at")
    search_fields = ("transaction_id", "order__order_number")
    list_filter = ("status", "provider")
