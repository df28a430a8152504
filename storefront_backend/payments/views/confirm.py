# payments/views/confirm.py
"""
PAYMENT CONFIRMATION CALLBACK

POST /api/payments/confirm/
Headers: X-Payment-Signature = HMAC-SHA256(raw body, PAYMENT_WEBHOOK_SECRET)

Body:
{
  "order_id": "<uuid>",
  "transaction_id": "...",
  "provider": "...",
  "amount": "1500.00"
}
"""

from __future__ import annotations

import logging

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import serializers, status
from rest_framework.parsers import JSONParser
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.throttling import AnonRateThrottle
from rest_framework.views import APIView

from backend.errors import error_response, internal_error_response
from payments.services.confirmation import confirm_payment, verify_payment_signature
from payments.services.exceptions import (
    AmountMismatchError,
    DuplicatePaymentError,
    InvalidOrderStateError,
    PaymentOrderNotFoundError,
    PaymentSignatureError,
)

logger = logging.getLogger(__name__)


class WebhookThrottle(AnonRateThrottle):
    scope = "webhook"


class PaymentConfirmSerializer(serializers.Serializer):
    order_id = serializers.UUIDField()
    transaction_id = serializers.CharField(max_length=128)
    provider = serializers.CharField(max_length=40)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)


class PaymentConfirmView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    parser_classes = [JSONParser]
    throttle_classes = [WebhookThrottle]

    @extend_schema(
        tags=["Payments"],
        request=PaymentConfirmSerializer,
        responses={
            200: OpenApiResponse(description="Payment confirmed"),
            400: OpenApiResponse(description="Invalid signature / amount mismatch"),
            404: OpenApiResponse(description="Order not found"),
            409: OpenApiResponse(description="Order not payable"),
        },
    )
    def post(self, request, *args, **kwargs):
        raw_body = getattr(request, "body", b"") or b""

        try:
            verify_payment_signature(raw_body, request.headers.get("X-Payment-Signature"))
        except PaymentSignatureError as exc:
            logger.warning("Invalid payment signature", extra={"reason": str(exc)})
            return error_response(
                code="INVALID_SIGNATURE",
                message=str(exc),
                http_status=status.HTTP_400_BAD_REQUEST,
            )

        body = PaymentConfirmSerializer(data=request.data)
        body.is_valid(raise_exception=True)
        data = body.validated_data

        try:
            payment = confirm_payment(
                order_id=data["order_id"],
                transaction_id=data["transaction_id"],
                provider=data["provider"],
                amount=data["amount"],
                payload=request.data,
            )

        except PaymentOrderNotFoundError:
            return error_response(
                code="ORDER_NOT_FOUND",
                message="Order not found",
                http_status=status.HTTP_404_NOT_FOUND,
            )

        except AmountMismatchError as exc:
            return error_response(
                code="AMOUNT_MISMATCH",
                message=str(exc),
                http_status=status.HTTP_400_BAD_REQUEST,
            )

        except (InvalidOrderStateError, DuplicatePaymentError) as exc:
            return error_response(
                code="INVALID_ORDER_STATE",
                message=str(exc),
                http_status=status.HTTP_409_CONFLICT,
            )

        except Exception:
            logger.exception(
                "Payment confirmation failed",
                extra={"transaction_id": data.get("transaction_id")},
            )
            return internal_error_response()

        return Response(
            {
                "ok": True,
                "payment_id": str(payment.id),
                "status": payment.status,
                "order_id": str(payment.order_id),
            },
            status=status.HTTP_200_OK,
        )
