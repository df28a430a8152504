import uuid
from unittest import mock

from django.test import TestCase, override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from orders.models import Order
from orders.tests.utils import courier_settings, make_order, make_parcel, make_user
from shipping.services.courier_client import CourierResult

CLIENT_PATH = "shipping.services.status_checker.YalidineClient"


@override_settings(SHIPPING=courier_settings(), CRON_SECRET="s3cret")
class CronStatusCheckViewTests(TestCase):
    """
    GUARANTEES:
    - Bearer CRON_SECRET required when configured
    - GET and POST both run the batch and return its summary
    """

    def setUp(self):
        self.client = APIClient()
        self.url = reverse("shipping:cron-status-check")
        self.order = make_order(cod_status=Order.COD_DISPATCHED)
        make_parcel(self.order, tracking="YAL-1")

    def test_missing_or_bad_secret_is_401(self):
        self.assertEqual(self.client.get(self.url).status_code, status.HTTP_401_UNAUTHORIZED)

        res = self.client.get(self.url, HTTP_AUTHORIZATION="Bearer nope")
        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(res.data["error"]["code"], "UNAUTHORIZED")

    def test_runs_batch(self):
        with mock.patch(CLIENT_PATH) as client_cls:
            client_cls.return_value.get_parcel.return_value = CourierResult(
                ok=True, data={"status": "Livré"}
            )
            res = self.client.post(self.url, HTTP_AUTHORIZATION="Bearer s3cret")

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertTrue(res.data["ok"])
        self.assertEqual(
            res.data["results"],
            {"checked": 1, "updated": 1, "delivered": 1, "errors_count": 0, "errors": []},
        )
        self.assertIn("timestamp", res.data)

        self.order.refresh_from_db()
        self.assertEqual(self.order.cod_status, Order.COD_DELIVERED)

    @override_settings(CRON_SECRET="")
    def test_unset_secret_runs_openly(self):
        with mock.patch(CLIENT_PATH) as client_cls:
            client_cls.return_value.get_parcel.return_value = CourierResult(
                ok=True, data={"status": "en transit"}
            )
            res = self.client.get(self.url)

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["results"]["delivered"], 0)


@override_settings(SHIPPING=courier_settings())
class AdminStatusCheckViewTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.client.force_authenticate(user=make_user("admin"))
        self.url = reverse("shipping:admin-status-check")
        self.order = make_order(cod_status=Order.COD_DISPATCHED)
        make_parcel(self.order, tracking="YAL-9")

    def test_requires_capability(self):
        manager = APIClient()
        manager.force_authenticate(user=make_user("manager"))
        self.assertEqual(manager.get(self.url).status_code, status.HTTP_403_FORBIDDEN)

    def test_stats(self):
        res = self.client.get(self.url)

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["stats"]["total_tracked"], 1)
        self.assertEqual(res.data["stats"]["pending_orders"], 1)

        res = self.client.post(self.url, {"action": "stats"}, format="json")
        self.assertEqual(res.data["stats"]["delivered_today"], 0)

    def test_check_single(self):
        with mock.patch(CLIENT_PATH) as client_cls:
            client_cls.return_value.get_parcel.return_value = CourierResult(
                ok=True, data={"status": "delivered"}
            )
            res = self.client.post(
                self.url, {"action": "check-single", "order_id": str(self.order.id)}, format="json"
            )

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertTrue(res.data["ok"])
        self.assertTrue(res.data["delivered"])
        self.assertEqual(res.data["tracking"], "YAL-9")
        client_cls.return_value.get_parcel.assert_called_once_with("YAL-9")

    def test_check_single_validation(self):
        res = self.client.post(self.url, {"action": "check-single"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("order_id", res.data)

        res = self.client.post(
            self.url, {"action": "check-single", "order_id": str(uuid.uuid4())}, format="json"
        )
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)

        untracked = make_order()
        make_parcel(untracked)
        res = self.client.post(
            self.url, {"action": "check-single", "order_id": str(untracked.id)}, format="json"
        )
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["error"]["code"], "NO_TRACKING")

    def test_unknown_action_is_400(self):
        res = self.client.post(self.url, {"action": "reboot"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_check_all(self):
        with mock.patch(CLIENT_PATH) as client_cls:
            client_cls.return_value.get_parcel.return_value = CourierResult(
                ok=False, error="HTTP 500: boom"
            )
            res = self.client.post(self.url, {"action": "check-all"}, format="json")

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["results"]["errors_count"], 1)
        self.assertIn(self.order.order_number, res.data["results"]["errors"][0])
