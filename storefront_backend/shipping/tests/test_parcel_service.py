from decimal import Decimal
from unittest import mock

from django.test import TestCase, override_settings

from orders.models import Order
from orders.tests.utils import courier_settings, make_order, make_parcel
from shipping.models import Commune, ShippingParcel, Wilaya
from shipping.services.courier_client import CourierResult
from shipping.services.exceptions import (
    CourierError,
    ParcelAlreadyCreatedError,
    ParcelError,
    ParcelNotFoundError,
)
from shipping.services.parcel_service import (
    build_parcel_payload,
    create_parcel_for_order,
    delete_parcel_locally,
    process_parcel_creation_intent,
    update_parcel_for_order,
)

CREATED = CourierResult(
    ok=True,
    data={"tracking": "YAL-100", "label_url": "https://labels.test/100", "status": "Created"},
    raw=[{"tracking": "YAL-100"}],
)


def _courier(**results):
    client = mock.Mock()
    for name, value in results.items():
        getattr(client, name).return_value = value
    return client


@override_settings(SHIPPING=courier_settings(FROM_WILAYA_NAME="Blida"))
class BuildPayloadTests(TestCase):
    def test_standard_profile(self):
        parcel = make_parcel(make_order(), price=Decimal("2500.00"))

        payload = build_parcel_payload(parcel, from_wilaya_name="Blida")

        self.assertEqual(payload["price"], 2500.0)
        self.assertEqual(payload["weight"], 1)
        self.assertIsNone(payload["height"])
        self.assertTrue(payload["do_insurance"])
        self.assertEqual(payload["from_wilaya_name"], "Blida")
        self.assertNotIn("stopdesk_id", payload)
        self.assertNotIn("from_address", payload)

    def test_stop_desk_and_parcel_origin(self):
        parcel = make_parcel(
            make_order(),
            is_stopdesk=True,
            stopdesk_id=160101,
            from_wilaya_name="Oran",
            from_address="Zone industrielle",
        )

        payload = build_parcel_payload(parcel, from_wilaya_name="Blida")

        self.assertEqual(payload["stopdesk_id"], 160101)
        self.assertEqual(payload["from_wilaya_name"], "Oran")
        self.assertEqual(payload["from_address"], "Zone industrielle")


class ParcelCreationIntentTests(TestCase):
    """
    GUARANTEES:
    - flag off: no courier call at all
    - flag on: tracking/label stored once
    - failures and crashes are swallowed (logged), tracking stays empty
    """

    def setUp(self):
        self.order = make_order(cod_status=Order.COD_SUBMITTED)
        self.parcel = make_parcel(self.order)

    def _process(self, client, cod_status=Order.COD_SUBMITTED):
        return process_parcel_creation_intent(
            order_id=self.order.id, cod_status=cod_status, client=client
        )

    @override_settings(SHIPPING=courier_settings(AUTO_CREATE_ENABLED=False))
    def test_flag_off_skips_courier(self):
        client = _courier(create_parcel=CREATED)

        self.assertIsNone(self._process(client))
        client.create_parcel.assert_not_called()

    @override_settings(SHIPPING=courier_settings(AUTO_CREATE_ENABLED=True))
    def test_flag_on_stores_tracking(self):
        client = _courier(create_parcel=CREATED)

        parcel = self._process(client)

        self.parcel.refresh_from_db()
        self.assertIsNotNone(parcel)
        self.assertEqual(self.parcel.tracking, "YAL-100")
        self.assertEqual(self.parcel.label_url, "https://labels.test/100")
        self.assertEqual(self.parcel.status, "created")
        self.assertEqual(self.parcel.last_payload["request"]["order_id"], self.order.order_number)
        self.assertEqual(self.parcel.last_payload["request"]["from_wilaya_name"], "Alger")
        client.create_parcel.assert_called_once()

    @override_settings(SHIPPING=courier_settings(AUTO_CREATE_ENABLED="true"))
    def test_flag_accepts_string_values(self):
        client = _courier(create_parcel=CREATED)
        self.assertIsNotNone(self._process(client))

    @override_settings(SHIPPING=courier_settings(AUTO_CREATE_ENABLED=True))
    def test_courier_failure_is_swallowed(self):
        client = _courier(create_parcel=CourierResult(ok=False, error="Commune inconnue"))

        self.assertIsNone(self._process(client))
        self.parcel.refresh_from_db()
        self.assertIsNone(self.parcel.tracking)

    @override_settings(SHIPPING=courier_settings(AUTO_CREATE_ENABLED=True))
    def test_crash_is_swallowed(self):
        client = mock.Mock()
        client.create_parcel.side_effect = RuntimeError("boom")

        with self.assertLogs("shipping.services.parcel_service", level="ERROR"):
            self.assertIsNone(self._process(client))

    @override_settings(SHIPPING=courier_settings(AUTO_CREATE_ENABLED=True))
    def test_ineligible_intent_is_skipped(self):
        client = _courier(create_parcel=CREATED)

        self.assertIsNone(self._process(client, cod_status=Order.COD_CANCELLED))

        self.parcel.tracking = "YAL-OLD"
        self.parcel.save()
        self.assertIsNone(self._process(client))

        client.create_parcel.assert_not_called()


@override_settings(SHIPPING=courier_settings())
class ManualParcelOperationTests(TestCase):
    def test_create_moves_pending_to_submitted(self):
        order = make_order(cod_status=Order.COD_PENDING)
        make_parcel(order)

        parcel = create_parcel_for_order(order, client=_courier(create_parcel=CREATED))

        order.refresh_from_db()
        self.assertEqual(parcel.tracking, "YAL-100")
        self.assertEqual(order.cod_status, Order.COD_SUBMITTED)

    def test_create_keeps_later_cod_status(self):
        order = make_order(cod_status=Order.COD_DISPATCHED)
        make_parcel(order)

        create_parcel_for_order(order, client=_courier(create_parcel=CREATED))

        order.refresh_from_db()
        self.assertEqual(order.cod_status, Order.COD_DISPATCHED)

    def test_create_rejections(self):
        card = make_order(payment_method=Order.PAYMENT_CARD)
        make_parcel(card)
        with self.assertRaises(ParcelError):
            create_parcel_for_order(card, client=_courier())

        with self.assertRaises(ParcelNotFoundError):
            create_parcel_for_order(make_order(), client=_courier())

        tracked = make_order()
        make_parcel(tracked, tracking="YAL-1")
        with self.assertRaises(ParcelAlreadyCreatedError):
            create_parcel_for_order(tracked, client=_courier())

        failing = make_order()
        make_parcel(failing)
        with self.assertRaises(CourierError):
            create_parcel_for_order(
                failing, client=_courier(create_parcel=CourierResult(ok=False, error="down"))
            )

    def test_update_uses_synced_location_names(self):
        wilaya = Wilaya.objects.create(id=16, name="Alger", slug="alger")
        Commune.objects.create(id=1601, wilaya=wilaya, name="Alger Centre", slug="alger-centre-16")

        order = make_order()
        make_parcel(order, tracking="YAL-5", to_wilaya_name="ALGER", to_commune_name="alger centre")
        client = _courier(update_parcel=CourierResult(ok=True, data={"status": "Updated"}, raw={}))

        parcel = update_parcel_for_order(order, client=client)

        tracking, sent = client.update_parcel.call_args[0]
        self.assertEqual(tracking, "YAL-5")
        self.assertEqual(sent["to_wilaya_name"], "Alger")
        self.assertEqual(sent["to_commune_name"], "Alger Centre")
        self.assertNotIn("height", sent)
        self.assertNotIn("has_receipt", sent)
        self.assertEqual(parcel.status, "updated")
        self.assertEqual(parcel.last_payload["action"], "updated")

    def test_update_requires_tracking(self):
        order = make_order()
        make_parcel(order)
        with self.assertRaises(ParcelError):
            update_parcel_for_order(order, client=_courier())

    def test_local_delete_cancels_submitted_order(self):
        order = make_order(cod_status=Order.COD_SUBMITTED)
        make_parcel(order, tracking="YAL-7", label_url="https://labels.test/7")
        client = _courier()

        previous = delete_parcel_locally(order, client=client)

        order.refresh_from_db()
        parcel = ShippingParcel.objects.get(order=order)
        self.assertEqual(previous, "YAL-7")
        self.assertIsNone(parcel.tracking)
        self.assertIsNone(parcel.label_url)
        self.assertEqual(parcel.status, "cancelled")
        self.assertEqual(parcel.last_payload["previous_tracking"], "YAL-7")
        self.assertEqual(order.cod_status, Order.COD_CANCELLED)
        client.delete_parcel.assert_not_called()

    def test_remote_delete_failure_leaves_parcel(self):
        order = make_order(cod_status=Order.COD_DISPATCHED)
        make_parcel(order, tracking="YAL-8")
        client = _courier(delete_parcel=CourierResult(ok=False, error="HTTP 404: not found"))

        with self.assertRaises(CourierError):
            delete_parcel_locally(order, client=client, remote=True)

        order.refresh_from_db()
        self.assertEqual(ShippingParcel.objects.get(order=order).tracking, "YAL-8")
        self.assertEqual(order.cod_status, Order.COD_DISPATCHED)
