import hashlib
import hmac
import json
import uuid
from decimal import Decimal

from django.test import SimpleTestCase, TestCase, override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from orders.models import Order
from orders.tests.utils import make_order
from payments.models import Payment
from payments.services.confirmation import amounts_match, confirm_payment
from payments.services.exceptions import (
    AmountMismatchError,
    DuplicatePaymentError,
    InvalidOrderStateError,
    PaymentOrderNotFoundError,
)

PAYMENTS_SETTINGS = {"WEBHOOK_SECRET": "", "AMOUNT_EPSILON": "0.01"}


class AmountsMatchTests(SimpleTestCase):
    def test_epsilon(self):
        eps = Decimal("0.01")
        self.assertTrue(amounts_match(Decimal("1500.00"), "1500.01", epsilon=eps))
        self.assertTrue(amounts_match("1500", 1500.0, epsilon=eps))
        self.assertFalse(amounts_match(Decimal("1500.00"), "1500.02", epsilon=eps))
        self.assertFalse(amounts_match(Decimal("1500.00"), "1499.00", epsilon=eps))

    def test_invalid_amount(self):
        with self.assertRaises(ValueError):
            amounts_match("1500", "abc")


@override_settings(PAYMENTS=PAYMENTS_SETTINGS)
class ConfirmPaymentTests(TestCase):
    """
    GUARANTEES:
    - matching amount on a PENDING non-COD order -> payment SUCCEEDED, order CONFIRMED
    - mismatch / wrong state write nothing
    - same transaction replayed for the same order is a no-op
    """

    def setUp(self):
        self.order = make_order(payment_method=Order.PAYMENT_CARD, total=Decimal("1500.00"))

    def _confirm(self, amount="1500.00", transaction_id="txn-1", order_id=None):
        return confirm_payment(
            order_id=order_id or self.order.id,
            transaction_id=transaction_id,
            provider="chargily",
            amount=amount,
        )

    def test_confirms_order(self):
        payment = self._confirm()

        self.order.refresh_from_db()
        self.assertEqual(payment.status, Payment.STATUS_SUCCEEDED)
        self.assertEqual(payment.amount, Decimal("1500.00"))
        self.assertIsNotNone(payment.paid_at)
        self.assertEqual(self.order.status, Order.STATUS_CONFIRMED)

    def test_mismatch_writes_nothing(self):
        with self.assertRaises(AmountMismatchError) as ctx:
            self._confirm(amount="1400.00")

        self.assertEqual(ctx.exception.expected, Decimal("1500.00"))
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.STATUS_PENDING)
        self.assertFalse(Payment.objects.exists())

    def test_within_epsilon(self):
        self._confirm(amount="1500.01")
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.STATUS_CONFIRMED)

    def test_non_pending_order_rejected(self):
        self.order.status = Order.STATUS_CANCELLED
        self.order.save()

        with self.assertRaises(InvalidOrderStateError):
            self._confirm()

    def test_cod_order_rejected(self):
        cod = make_order(payment_method=Order.PAYMENT_COD, total=Decimal("1500.00"))
        with self.assertRaises(InvalidOrderStateError):
            self._confirm(order_id=cod.id)

    def test_replay_is_idempotent(self):
        first = self._confirm()
        second = self._confirm()

        self.assertEqual(first.pk, second.pk)
        self.assertEqual(Payment.objects.count(), 1)

    def test_transaction_bound_to_other_order(self):
        self._confirm()
        other = make_order(payment_method=Order.PAYMENT_CARD, total=Decimal("1500.00"))

        with self.assertRaises(DuplicatePaymentError):
            self._confirm(order_id=other.id)

    def test_unknown_order(self):
        with self.assertRaises(PaymentOrderNotFoundError):
            self._confirm(order_id=uuid.uuid4())


@override_settings(PAYMENTS={**PAYMENTS_SETTINGS, "WEBHOOK_SECRET": "paysecret"})
class PaymentConfirmViewTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.url = reverse("payments:payment-confirm")
        self.order = make_order(payment_method=Order.PAYMENT_CARD, total=Decimal("1500.00"))

    def _post(self, body: dict, *, secret="paysecret"):
        raw = json.dumps(body).encode("utf-8")
        signature = hmac.new(secret.encode("utf-8"), raw, hashlib.sha256).hexdigest()
        return self.client.post(
            self.url, data=raw, content_type="application/json", HTTP_X_PAYMENT_SIGNATURE=signature
        )

    def _body(self, **overrides):
        body = {
            "order_id": str(self.order.id),
            "transaction_id": "txn-9",
            "provider": "chargily",
            "amount": "1500.00",
        }
        body.update(overrides)
        return body

    def test_confirm(self):
        res = self._post(self._body())

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["status"], Payment.STATUS_SUCCEEDED)
        self.assertEqual(res.data["order_id"], str(self.order.id))

    def test_bad_signature(self):
        res = self._post(self._body(), secret="wrong")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["error"]["code"], "INVALID_SIGNATURE")

    def test_amount_mismatch(self):
        res = self._post(self._body(amount="10.00"))
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["error"]["code"], "AMOUNT_MISMATCH")

    def test_not_payable(self):
        self.order.status = Order.STATUS_SHIPPED
        self.order.save()

        res = self._post(self._body())
        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(res.data["error"]["code"], "INVALID_ORDER_STATE")

    def test_unknown_order(self):
        res = self._post(self._body(order_id=str(uuid.uuid4())))
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)

    def test_validation(self):
        res = self._post({"order_id": "nope"})
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("transaction_id", res.data)
