# shipping/views/parcel_admin.py
"""
ADMIN PARCEL ENDPOINTS (COD ORDERS)

/api/shipping/admin/orders/<order_id>/parcel/
- POST   create the courier parcel now (manual, ignores the auto-create flag)
- PATCH  push the saved parcel data to the courier
- DELETE clear tracking locally (?remote=true also deletes at the courier)
"""

from __future__ import annotations

import logging

from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from backend.errors import error_response, internal_error_response
from orders.models import Order
from permissions.roles import CAP_SHIPPING_MANAGE, HasCapability
from shipping.serializers import ParcelSerializer
from shipping.services.exceptions import (
    CourierError,
    ParcelAlreadyCreatedError,
    ParcelError,
)
from shipping.services.parcel_service import (
    create_parcel_for_order,
    delete_parcel_locally,
    update_parcel_for_order,
)

logger = logging.getLogger(__name__)


class AdminParcelView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_SHIPPING_MANAGE

    def _get_order(self, order_id):
        return Order.objects.select_related("parcel").filter(id=order_id).first()

    def _not_found(self):
        return error_response(
            code="ORDER_NOT_FOUND",
            message="Order not found",
            http_status=status.HTTP_404_NOT_FOUND,
        )

    def _run(self, order_id, operation):
        order = self._get_order(order_id)
        if order is None:
            return None, self._not_found()

        try:
            return operation(order), None
        except ParcelAlreadyCreatedError as exc:
            return None, error_response(
                code="PARCEL_ALREADY_CREATED",
                message=str(exc),
                http_status=status.HTTP_409_CONFLICT,
            )
        except ParcelError as exc:
            return None, error_response(
                code="PARCEL_NOT_ALLOWED",
                message=str(exc),
                http_status=status.HTTP_400_BAD_REQUEST,
            )
        except CourierError as exc:
            logger.warning(
                "Courier rejected parcel operation",
                extra={"order_id": str(order_id), "error": str(exc)},
            )
            return None, error_response(
                code="COURIER_ERROR",
                message=str(exc),
                http_status=status.HTTP_502_BAD_GATEWAY,
            )
        except Exception:
            logger.exception("Parcel operation failed", extra={"order_id": str(order_id)})
            return None, internal_error_response()

    @extend_schema(
        tags=["Shipping"],
        request=None,
        responses={
            201: ParcelSerializer,
            400: OpenApiResponse(description="Not a COD order / no parcel data"),
            404: OpenApiResponse(description="Order not found"),
            409: OpenApiResponse(description="Parcel already created"),
            502: OpenApiResponse(description="Courier error"),
        },
    )
    def post(self, request, order_id):
        parcel, error = self._run(order_id, lambda order: create_parcel_for_order(order))
        if error is not None:
            return error
        return Response(ParcelSerializer(parcel).data, status=status.HTTP_201_CREATED)

    @extend_schema(tags=["Shipping"], request=None, responses={200: ParcelSerializer})
    def patch(self, request, order_id):
        parcel, error = self._run(order_id, lambda order: update_parcel_for_order(order))
        if error is not None:
            return error
        return Response(ParcelSerializer(parcel).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["Shipping"],
        parameters=[
            OpenApiParameter(
                name="remote",
                type=bool,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Also delete the parcel at the courier.",
            )
        ],
        responses={200: OpenApiResponse(description="Tracking cleared")},
    )
    def delete(self, request, order_id):
        remote = str(request.query_params.get("remote", "")).lower() in {"1", "true", "yes"}
        previous, error = self._run(
            order_id, lambda order: delete_parcel_locally(order, remote=remote)
        )
        if error is not None:
            return error
        return Response(
            {
                "ok": True,
                "message": "Courier parcel deleted",
                "deleted_tracking": previous,
            },
            status=status.HTTP_200_OK,
        )
