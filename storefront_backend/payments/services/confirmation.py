# payments/services/confirmation.py

"""
PAYMENT CONFIRMATION

Finalizes a provider payment against a non-COD order:
- order must still be PENDING
- |order.total - reported amount| must be within PAYMENTS["AMOUNT_EPSILON"]
- on success: Payment SUCCEEDED + order CONFIRMED, in one transaction

A mismatch is a hard error: nothing is written.
Replaying the same transaction_id for the same order returns the
existing payment.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from orders.models import Order
from orders.services.lifecycle import (
    KIND_STANDARD,
    OrderLifecycle,
    apply_lifecycle,
    lifecycle_of,
)
from payments.models import Payment
from payments.services.exceptions import (
    AmountMismatchError,
    DuplicatePaymentError,
    InvalidOrderStateError,
    PaymentOrderNotFoundError,
    PaymentSignatureError,
)

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")
DEFAULT_EPSILON = Decimal("0.01")


def _payments_cfg() -> dict:
    cfg = getattr(settings, "PAYMENTS", {}) or {}
    return cfg if isinstance(cfg, dict) else {}


def _money(value) -> Decimal:
    try:
        return Decimal(str(value)).quantize(TWOPLACES, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise ValueError(f"Invalid amount: {value!r}") from exc


def amount_epsilon() -> Decimal:
    try:
        return Decimal(str(_payments_cfg().get("AMOUNT_EPSILON", DEFAULT_EPSILON)))
    except InvalidOperation:
        return DEFAULT_EPSILON


def amounts_match(expected, received, *, epsilon: Decimal | None = None) -> bool:
    epsilon = amount_epsilon() if epsilon is None else epsilon
    return abs(_money(expected) - _money(received)) <= epsilon


def verify_payment_signature(raw_body: bytes, signature: str | None) -> None:
    secret = (_payments_cfg().get("WEBHOOK_SECRET") or "").strip()
    if not secret:
        return
    if not signature:
        raise PaymentSignatureError("Missing signature")

    computed = hmac.new(secret.encode("utf-8"), raw_body, hashlib.sha256).hexdigest()
    if not hmac.compare_digest(computed, signature.strip().lower()):
        raise PaymentSignatureError("Invalid signature")


def confirm_payment(*, order_id, transaction_id: str, provider: str, amount, payload=None) -> Payment:
    received = _money(amount)

    with transaction.atomic():
        order = Order.objects.select_for_update().filter(id=order_id).first()
        if order is None:
            raise PaymentOrderNotFoundError(f"Order {order_id} not found")

        existing = Payment.objects.filter(transaction_id=transaction_id).first()
        if existing is not None:
            if existing.order_id != order.id:
                raise DuplicatePaymentError(
                    f"Transaction {transaction_id} already belongs to another order"
                )
            if existing.status == Payment.STATUS_SUCCEEDED:
                logger.info(
                    "Duplicate payment confirmation ignored",
                    extra={"transaction_id": transaction_id},
                )
                return existing

        lifecycle = lifecycle_of(order)
        if lifecycle.kind != KIND_STANDARD:
            raise InvalidOrderStateError("Cash-on-delivery orders are settled by the courier")
        if lifecycle.value != Order.STATUS_PENDING:
            raise InvalidOrderStateError(
                f"Order {order.order_number} is {lifecycle.value}, expected PENDING"
            )

        if not amounts_match(order.total, received):
            logger.error(
                "Payment amount mismatch",
                extra={
                    "order_number": order.order_number,
                    "expected": str(order.total),
                    "received": str(received),
                },
            )
            raise AmountMismatchError(expected=_money(order.total), received=received)

        payment = existing or Payment(order=order, transaction_id=transaction_id)
        payment.provider = provider
        payment.amount = received
        payment.status = Payment.STATUS_SUCCEEDED
        payment.paid_at = timezone.now()
        payment.provider_payload = payload or {}
        payment.save()

        apply_lifecycle(order, OrderLifecycle(kind=KIND_STANDARD, value=Order.STATUS_CONFIRMED))

    logger.info(
        "Payment confirmed",
        extra={
            "order_number": order.order_number,
            "transaction_id": transaction_id,
            "amount": str(received),
        },
    )
    return payment
