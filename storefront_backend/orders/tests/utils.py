# orders/tests/utils.py

"""
Shared fixtures for order/shipping/payment tests.
"""

from __future__ import annotations

from decimal import Decimal

from django.contrib.auth import get_user_model

from orders.models import Order, OrderItem
from shipping.models import ShippingParcel

User = get_user_model()

COURIER_TEST_SETTINGS = {
    "YALIDINE": {
        "API_BASE": "https://courier.test/v1/",
        "API_ID": "test-id",
        "API_TOKEN": "test-token",
        "FROM_WILAYA_NAME": "Alger",
        "AUTO_CREATE_ENABLED": False,
        "WEBHOOK_SECRET": "",
        "POLL_DELAY_SECONDS": 0,
        "PAGE_THROTTLE_SECONDS": 0,
        "MAX_RETRIES": 2,
        "BASE_BACKOFF_SECONDS": 0,
        "REQUEST_TIMEOUT": 5,
    }
}


def courier_settings(**overrides) -> dict:
    return {"YALIDINE": {**COURIER_TEST_SETTINGS["YALIDINE"], **overrides}}


def make_user(role: str = "admin", email: str | None = None):
    return User.objects.create_user(
        email=email or f"{role}@example.com",
        password="pass",
        role=role,
        first_name=role.title(),
        last_name="User",
    )


def make_order(
    *,
    payment_method: str = Order.PAYMENT_COD,
    status: str = Order.STATUS_PENDING,
    cod_status: str = Order.COD_PENDING,
    total: Decimal = Decimal("2500.00"),
    quantities=(2, 1),
    user=None,
) -> Order:
    order = Order.objects.create(
        user=user,
        customer_first_name="Amina",
        customer_last_name="Benali",
        customer_email="amina@example.com",
        customer_phone="0550000000",
        payment_method=payment_method,
        status=status,
        cod_status=cod_status,
        total=total,
        address="12 Rue Didouche Mourad",
        city="Alger Centre",
        state="Alger",
        postal_code="16000",
    )
    for index, quantity in enumerate(quantities):
        OrderItem.objects.create(
            order=order,
            product_name=f"Product {index + 1}",
            sku=f"SKU-{index + 1}",
            unit_price=Decimal("500.00"),
            quantity=quantity,
        )
    return order


def make_parcel(order: Order, *, tracking=None, status: str = "", **fields) -> ShippingParcel:
    defaults = {
        "courier_order_id": order.order_number,
        "firstname": order.customer_first_name,
        "familyname": order.customer_last_name,
        "contact_phone": order.customer_phone,
        "address": order.address,
        "to_wilaya_name": "Alger",
        "to_commune_name": "Alger Centre",
        "product_list": "Product 1 x2, Product 2 x1",
        "price": order.total,
        "weight": Decimal("3.50"),
        "height": 30,
        "width": 20,
        "length": 10,
        "do_insurance": False,
    }
    defaults.update(fields)
    return ShippingParcel.objects.create(order=order, tracking=tracking, status=status, **defaults)
