from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from orders.models import Order
from orders.tests.utils import make_order, make_parcel, make_user


class AdminOrderListTests(TestCase):
    """
    GET /api/orders/admin/

    GUARANTEES:
    - back-office roles with orders.view can list
    - customers cannot
    - list is filterable by payment method / lifecycle fields / tracking
    - status in the payload is the effective lifecycle value
    """

    def setUp(self):
        self.client = APIClient()
        self.url = reverse("orders:admin-order-list")

        self.cod = make_order(cod_status=Order.COD_DISPATCHED)
        make_parcel(self.cod, tracking="YAL-LIST-1")
        self.card = make_order(payment_method=Order.PAYMENT_CARD, status=Order.STATUS_CONFIRMED)

    def _results(self, res):
        return res.data["results"] if isinstance(res.data, dict) else res.data

    def test_manager_can_list(self):
        self.client.force_authenticate(user=make_user("manager"))
        res = self.client.get(self.url)

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(len(self._results(res)), 2)

    def test_customer_forbidden(self):
        self.client.force_authenticate(user=make_user("customer"))
        res = self.client.get(self.url)
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

    def test_filter_by_payment_method(self):
        self.client.force_authenticate(user=make_user("admin"))
        res = self.client.get(self.url, {"payment_method": Order.PAYMENT_COD})

        rows = self._results(res)
        self.assertEqual([r["order_number"] for r in rows], [self.cod.order_number])
        self.assertEqual(rows[0]["status"], Order.COD_DISPATCHED)
        self.assertEqual(rows[0]["parcel"]["tracking"], "YAL-LIST-1")

    def test_filter_by_tracking(self):
        self.client.force_authenticate(user=make_user("admin"))
        res = self.client.get(self.url, {"has_tracking": "false"})

        rows = self._results(res)
        self.assertEqual([r["order_number"] for r in rows], [self.card.order_number])
        self.assertIsNone(rows[0]["parcel"])
