# shipping/views/status_check.py
"""
COURIER STATUS CHECK TRIGGERS

- /api/shipping/cron/status-check/    scheduler (Bearer CRON_SECRET)
- /api/shipping/admin/status-check/   back office (check-all | check-single | stats)

Both run the same StatusChecker; the cron endpoint is idempotent and safe
to call on any schedule.
"""

from __future__ import annotations

import hmac
import logging

from django.conf import settings
from django.utils import timezone
from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from backend.errors import error_response, internal_error_response
from orders.models import Order
from permissions.roles import CAP_SHIPPING_STATUS_CHECK, HasCapability
from shipping.serializers import StatusCheckCommandSerializer
from shipping.serializers.status_check import (
    ACTION_CHECK_ALL,
    ACTION_CHECK_SINGLE,
)
from shipping.services.status_checker import StatusChecker, get_status_check_stats

logger = logging.getLogger(__name__)


def _run_check_all() -> dict:
    result = StatusChecker().check_all_pending_orders()
    return {
        "ok": True,
        "message": (
            f"Status check completed: {result.checked} checked, "
            f"{result.updated} updated, {result.delivered} delivered"
        ),
        "results": result.as_summary(),
        "timestamp": timezone.now(),
    }


# ==================================================
# CRON
# ==================================================


class CronStatusCheckView(APIView):
    """
    GET|POST /api/shipping/cron/status-check/
    """

    permission_classes = [AllowAny]
    authentication_classes = []

    def _authorized(self, request) -> bool:
        secret = (getattr(settings, "CRON_SECRET", "") or "").strip()
        if not secret:
            logger.warning("CRON_SECRET not configured, running unauthenticated status check")
            return True

        header = request.headers.get("Authorization", "")
        return hmac.compare_digest(header, f"Bearer {secret}")

    @extend_schema(
        tags=["Shipping"],
        request=None,
        responses={
            200: OpenApiResponse(description="Status check summary"),
            401: OpenApiResponse(description="Bad cron secret"),
        },
    )
    def get(self, request, *args, **kwargs):
        if not self._authorized(request):
            return error_response(
                code="UNAUTHORIZED",
                message="Unauthorized",
                http_status=status.HTTP_401_UNAUTHORIZED,
            )

        try:
            return Response(_run_check_all(), status=status.HTTP_200_OK)
        except Exception:
            logger.exception("Cron status check failed")
            return internal_error_response()

    @extend_schema(tags=["Shipping"], request=None)
    def post(self, request, *args, **kwargs):
        return self.get(request, *args, **kwargs)


# ==================================================
# ADMIN
# ==================================================


class AdminStatusCheckView(APIView):
    """
    GET  /api/shipping/admin/status-check/   -> stats
    POST /api/shipping/admin/status-check/   -> {"action": ..., "order_id": ...}
    """

    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_SHIPPING_STATUS_CHECK

    @extend_schema(tags=["Shipping"], responses={200: OpenApiResponse(description="Stats")})
    def get(self, request, *args, **kwargs):
        return Response({"ok": True, "stats": get_status_check_stats()})

    @extend_schema(
        tags=["Shipping"],
        request=StatusCheckCommandSerializer,
        responses={
            200: OpenApiResponse(description="Check result or stats"),
            400: OpenApiResponse(description="Validation error"),
            404: OpenApiResponse(description="Order not found"),
        },
    )
    def post(self, request, *args, **kwargs):
        command = StatusCheckCommandSerializer(data=request.data)
        command.is_valid(raise_exception=True)
        action = command.validated_data["action"]

        try:
            if action == ACTION_CHECK_ALL:
                return Response(_run_check_all(), status=status.HTTP_200_OK)

            if action == ACTION_CHECK_SINGLE:
                return self._check_single(command.validated_data["order_id"])

            return Response({"ok": True, "stats": get_status_check_stats()})

        except Exception:
            logger.exception("Admin status check failed", extra={"action": action})
            return internal_error_response()

    def _check_single(self, order_id):
        order = Order.objects.select_related("parcel").filter(id=order_id).first()
        if order is None:
            return error_response(
                code="ORDER_NOT_FOUND",
                message="Order not found",
                http_status=status.HTTP_404_NOT_FOUND,
            )

        parcel = getattr(order, "parcel", None)
        if parcel is None or not parcel.tracking:
            return error_response(
                code="NO_TRACKING",
                message="Order has no courier tracking number",
                http_status=status.HTTP_400_BAD_REQUEST,
            )

        outcome = StatusChecker().check_order_status(order.id, parcel.tracking)
        return Response(
            {
                "ok": outcome.error is None,
                "order_number": order.order_number,
                "tracking": parcel.tracking,
                "updated": outcome.updated,
                "delivered": outcome.delivered,
                "status": outcome.status,
                "error": outcome.error,
            },
            status=status.HTTP_200_OK,
        )
