"""
PATH: orders/views/admin.py

ADMIN ORDER ENDPOINTS

POST /api/orders/complete/                               (bank transfer confirm etc.)
PUT  /api/orders/<uuid>/expected-completion-date/
PUT  /api/orders/bulk-update-expected-completion-date/

All admin-only. Completion goes through the shared completion routine, so a
manually confirmed order behaves exactly like a provider-confirmed one.
"""

from __future__ import annotations

import logging

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.parsers import JSONParser
from rest_framework.response import Response
from rest_framework.views import APIView

from backend.api_errors import error_response
from orders.models import Order
from orders.serializers.order import (
    BulkExpectedDateInputSerializer,
    CompleteOrderInputSerializer,
    ExpectedDateInputSerializer,
)
from orders.services.completion import complete_order_after_payment
from orders.services.exceptions import OrderNotFoundError, OrderValidationError
from orders.services.order_admin import bulk_set_expected_completion_date, set_expected_completion_date
from users.permissions import IsAdminRole

logger = logging.getLogger(__name__)


class CompleteOrderView(APIView):
    permission_classes = [IsAdminRole]
    parser_classes = [JSONParser]

    @extend_schema(
        tags=["Orders Admin"],
        request=CompleteOrderInputSerializer,
        responses={
            200: OpenApiResponse(description="{success, message, orderId}"),
            404: OpenApiResponse(description="Order not found"),
        },
        description="Mark an order paid (e.g. bank transfer received).",
    )
    def post(self, request):
        serializer = CompleteOrderInputSerializer(data=request.data)
        if not serializer.is_valid():
            return error_response(
                "orderId and paymentMethod are required",
                status.HTTP_400_BAD_REQUEST,
                details=serializer.errors,
            )
        data = serializer.validated_data
        order_id = data["orderId"]

        order = Order.objects.filter(id=order_id).only("id", "status", "payment_status").first()
        if order is None:
            return error_response("Order not found", status.HTTP_404_NOT_FOUND)

        if order.is_paid:
            return Response(
                {"success": True, "message": "Order already completed", "orderId": str(order_id)},
                status=status.HTTP_200_OK,
            )

        try:
            complete_order_after_payment(
                order_id,
                data["paymentMethod"],
                transaction_id=data.get("transactionId") or None,
                payment_confirmed_at=data.get("paymentConfirmedAt"),
                payment_provider=data.get("paymentProvider") or "manual",
                depositor_name=data.get("depositorName") or None,
                metadata={**(data.get("metadata") or {}), "confirmedBy": str(request.user.pk)},
            )
        except OrderNotFoundError:
            return error_response("Order not found", status.HTTP_404_NOT_FOUND)

        logger.info("Order completed by admin", extra={"order_id": str(order_id), "admin_id": str(request.user.pk)})
        return Response(
            {"success": True, "message": "Order completed", "orderId": str(order_id)},
            status=status.HTTP_200_OK,
        )


class ExpectedCompletionDateView(APIView):
    permission_classes = [IsAdminRole]
    parser_classes = [JSONParser]

    @extend_schema(
        tags=["Orders Admin"],
        request=ExpectedDateInputSerializer,
        responses={200: OpenApiResponse(description="{success, orderId, expected_completion_date}")},
        description="Set a preorder's expected completion date (YYYY-MM-DD).",
    )
    def put(self, request, order_id):
        serializer = ExpectedDateInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            order = set_expected_completion_date(
                order_id=order_id,
                value=serializer.validated_data.get("expected_completion_date"),
            )
        except OrderValidationError as exc:
            return error_response(str(exc), status.HTTP_400_BAD_REQUEST)
        except OrderNotFoundError:
            return error_response("Order not found", status.HTTP_404_NOT_FOUND)

        return Response(
            {
                "success": True,
                "orderId": str(order.id),
                "expected_completion_date": order.expected_completion_date.isoformat(),
            },
            status=status.HTTP_200_OK,
        )


class BulkExpectedCompletionDateView(APIView):
    permission_classes = [IsAdminRole]
    parser_classes = [JSONParser]

    @extend_schema(
        tags=["Orders Admin"],
        request=BulkExpectedDateInputSerializer,
        responses={200: OpenApiResponse(description="Updated / skipped order ids")},
        description="Set the expected completion date on many orders; non-preorder orders are skipped.",
    )
    def put(self, request):
        serializer = BulkExpectedDateInputSerializer(data=request.data)
        if not serializer.is_valid():
            return error_response(
                "orderIds must be a non-empty list",
                status.HTTP_400_BAD_REQUEST,
                details=serializer.errors,
            )
        data = serializer.validated_data

        try:
            result = bulk_set_expected_completion_date(
                order_ids=data["orderIds"],
                value=data.get("expected_completion_date"),
            )
        except OrderValidationError as exc:
            return error_response(str(exc), status.HTTP_400_BAD_REQUEST)
        except OrderNotFoundError as exc:
            return error_response(str(exc), status.HTTP_404_NOT_FOUND)

        return Response(
            {"success": True, "message": "Expected completion date updated", **result},
            status=status.HTTP_200_OK,
        )
