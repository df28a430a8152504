# shipping/views/webhook.py
"""
YALIDINE WEBHOOK

POST /api/shipping/webhooks/yalidine/
GET  /api/shipping/webhooks/yalidine/?subscribe&crc_token=...  (subscription check)

Security:
- X-Yalidine-Signature = HMAC-SHA256(raw body, YALIDINE_WEBHOOK_SECRET)
  checked whenever a secret is configured
- events are idempotent by event_id
"""

from __future__ import annotations

import json
import logging

from django.http import HttpResponse
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.throttling import AnonRateThrottle
from rest_framework.views import APIView

from backend.errors import error_response, internal_error_response
from shipping.services.config import get_courier_settings
from shipping.services.exceptions import WebhookSignatureError
from shipping.services.webhook import process_webhook_batch, verify_signature

logger = logging.getLogger(__name__)


class WebhookThrottle(AnonRateThrottle):
    scope = "webhook"


class YalidineWebhookView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = [WebhookThrottle]

    def get(self, request, *args, **kwargs):
        crc = request.query_params.get("crc_token")
        if "subscribe" in request.query_params and crc:
            return HttpResponse(crc, content_type="text/plain", status=200)
        return Response({"ok": True})

    def post(self, request, *args, **kwargs):
        raw_body = getattr(request, "body", b"") or b""
        signature = request.headers.get("X-Yalidine-Signature")

        try:
            verify_signature(raw_body, signature, get_courier_settings().webhook_secret)
        except WebhookSignatureError as exc:
            logger.warning("Invalid courier webhook signature", extra={"reason": str(exc)})
            return error_response(
                code="INVALID_SIGNATURE",
                message=str(exc),
                http_status=status.HTTP_400_BAD_REQUEST,
            )

        try:
            payload = json.loads(raw_body.decode("utf-8") or "{}")
        except ValueError:
            return error_response(
                code="INVALID_PAYLOAD",
                message="Invalid JSON payload",
                http_status=status.HTTP_400_BAD_REQUEST,
            )

        if not isinstance(payload, dict) or not payload.get("type") or not isinstance(
            payload.get("events"), list
        ):
            return error_response(
                code="INVALID_PAYLOAD",
                message="Expected {type, events[]}",
                http_status=status.HTTP_400_BAD_REQUEST,
            )

        try:
            result = process_webhook_batch(payload)
        except Exception:
            logger.exception("Courier webhook processing failed")
            return internal_error_response()

        logger.info(
            "Courier webhook processed",
            extra={
                "type": result.type,
                "received": result.received,
                "applied": result.applied,
                "duplicates": result.duplicates,
            },
        )
        return Response(
            {
                "ok": True,
                "type": result.type,
                "received": result.received,
                "stored": result.stored,
                "duplicates": result.duplicates,
                "applied": result.applied,
            },
            status=status.HTTP_200_OK,
        )
