# payments/urls.py

from django.urls import path

from payments.views import PaymentConfirmView

app_name = "payments"

urlpatterns = [
    path("confirm/", PaymentConfirmView.as_view(), name="payment-confirm"),
]
