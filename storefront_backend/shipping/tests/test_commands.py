import json
import tempfile
from io import StringIO
from pathlib import Path
from unittest import mock

from django.core.management import CommandError, call_command
from django.test import TestCase, override_settings

from orders.models import Order
from orders.tests.utils import courier_settings, make_order, make_parcel
from shipping.models import Wilaya
from shipping.services.courier_client import CourierResult
from shipping.services.exceptions import CourierHTTPError


@override_settings(SHIPPING=courier_settings())
class CheckParcelStatusesCommandTests(TestCase):
    CLIENT_PATH = "shipping.services.status_checker.YalidineClient"

    def setUp(self):
        self.order = make_order(cod_status=Order.COD_DISPATCHED)
        make_parcel(self.order, tracking="YAL-1")

    def test_runs_checker(self):
        out = StringIO()
        with mock.patch(self.CLIENT_PATH) as client_cls:
            client_cls.return_value.get_parcel.return_value = CourierResult(
                ok=True, data={"status": "remis"}
            )
            call_command("check_parcel_statuses", stdout=out)

        self.assertIn("Checked 1 | updated 1 | delivered 1", out.getvalue())
        self.order.refresh_from_db()
        self.assertEqual(self.order.cod_status, Order.COD_DELIVERED)

    def test_strict_fails_on_errors(self):
        with mock.patch(self.CLIENT_PATH) as client_cls:
            client_cls.return_value.get_parcel.return_value = CourierResult(ok=False, error="down")
            with self.assertRaises(CommandError):
                call_command("check_parcel_statuses", "--strict", stdout=StringIO(), stderr=StringIO())

    def test_stats_only(self):
        out = StringIO()
        with mock.patch(self.CLIENT_PATH) as client_cls:
            call_command("check_parcel_statuses", "--stats", stdout=out)

        client_cls.assert_not_called()
        self.assertIn("total_tracked: 1", out.getvalue())


@override_settings(SHIPPING=courier_settings())
class SyncCourierLocationsCommandTests(TestCase):
    CLIENT_PATH = "shipping.services.location_sync.YalidineClient"

    def _client(self, client_cls):
        client = client_cls.return_value
        client.fetch_wilayas.return_value = [{"id": 16, "name": "Alger"}]
        client.fetch_communes.return_value = [{"id": 1601, "name": "Alger Centre", "wilaya_id": 16}]
        client.fetch_centers.return_value = []
        return client

    def test_sync_and_snapshot(self):
        out = StringIO()
        with tempfile.TemporaryDirectory() as tmp, mock.patch(self.CLIENT_PATH) as client_cls:
            self._client(client_cls)
            target = Path(tmp) / "locations.json"
            call_command("sync_courier_locations", "--snapshot", str(target), stdout=out)
            snapshot = json.loads(target.read_text(encoding="utf-8"))

        self.assertIn("Synced 1 wilayas, 1 communes", out.getvalue())
        self.assertTrue(Wilaya.objects.filter(id=16, active=True).exists())
        self.assertEqual(snapshot["wilayas"][0]["name"], "Alger")

    def test_courier_failure_is_command_error(self):
        with mock.patch(self.CLIENT_PATH) as client_cls:
            client_cls.return_value.fetch_wilayas.side_effect = CourierHTTPError(401, "bad token")
            with self.assertRaises(CommandError):
                call_command("sync_courier_locations", stdout=StringIO())
