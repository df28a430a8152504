# orders/views/order_status.py
"""
ADMIN ORDER STATUS UPDATE

PATCH /api/orders/admin/<order_id>/status/
Body: {"status": "CONFIRMED"}

Rules:
- 401 unauthenticated, 403 without orders.manage (admin / super_admin)
- 400 unrecognized status, or a COD-only status on a non-COD order
- 404 unknown order
- COD orders: the requested status is mapped onto cod_status
- parcel creation is a post-commit side effect and never fails this request
"""

from __future__ import annotations

import logging

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import serializers, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from backend.errors import error_response, internal_error_response
from orders.serializers import OrderAdminSerializer, OrderStatusCommandSerializer
from orders.services.exceptions import InvalidStatusError, OrderNotFoundError
from orders.services.status_update import update_order_status
from permissions.roles import CAP_ORDERS_MANAGE, HasCapability

logger = logging.getLogger(__name__)


class AdminOrderStatusView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_ORDERS_MANAGE

    @extend_schema(
        tags=["Orders"],
        request=OrderStatusCommandSerializer,
        responses={
            200: OrderAdminSerializer,
            400: OpenApiResponse(description="Invalid status"),
            401: OpenApiResponse(description="Not authenticated"),
            403: OpenApiResponse(description="Admin role required"),
            404: OpenApiResponse(description="Order not found"),
        },
    )
    def patch(self, request, order_id):
        command = OrderStatusCommandSerializer(data=request.data)
        command.is_valid(raise_exception=True)
        requested = command.validated_data["status"]

        try:
            result = update_order_status(
                order_id=order_id,
                requested_status=requested,
                actor=request.user,
            )

        except OrderNotFoundError:
            return error_response(
                code="ORDER_NOT_FOUND",
                message="Order not found",
                http_status=status.HTTP_404_NOT_FOUND,
            )

        except InvalidStatusError as exc:
            raise serializers.ValidationError({exc.field: [str(exc)]})

        except Exception:
            logger.exception(
                "Order status update failed",
                extra={"order_id": str(order_id), "requested": requested},
            )
            return internal_error_response()

        return Response(OrderAdminSerializer(result.order).data, status=status.HTTP_200_OK)
