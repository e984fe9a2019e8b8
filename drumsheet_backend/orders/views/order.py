"""
PATH: orders/views/order.py

CUSTOMER ORDER ENDPOINTS

POST /api/orders/create/         -> pending sheet-purchase order
GET  /api/orders/                -> my order history
GET  /api/orders/<uuid>/         -> my order (with items)
POST /api/orders/update-note/    -> record a payment failure / cancel reason
"""

from __future__ import annotations

import logging

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import generics, status
from rest_framework.parsers import JSONParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import UserRateThrottle
from rest_framework.views import APIView

from backend.api_errors import error_response
from orders.models import Order
from orders.serializers import OrderDetailSerializer, OrderSerializer
from orders.serializers.order import CreateOrderInputSerializer, UpdateNoteInputSerializer
from orders.services.exceptions import OrderNotFoundError, OrderValidationError
from orders.services.order_admin import append_payment_note
from orders.services.order_service import create_order

logger = logging.getLogger(__name__)


class OrderWriteThrottle(UserRateThrottle):
    scope = "public_write"


class CreateOrderView(APIView):
    permission_classes = [IsAuthenticated]
    parser_classes = [JSONParser]
    throttle_classes = [OrderWriteThrottle]

    @extend_schema(
        tags=["Orders"],
        request=CreateOrderInputSerializer,
        responses={
            200: OpenApiResponse(description="{success, orderId, orderNumber}"),
            400: OpenApiResponse(description="Missing / invalid items or amount"),
        },
        description="Create a pending order for the given sheets.",
    )
    def post(self, request):
        serializer = CreateOrderInputSerializer(data=request.data)
        if not serializer.is_valid():
            return error_response(
                "Missing required parameters",
                status.HTTP_400_BAD_REQUEST,
                details=serializer.errors,
            )

        data = serializer.validated_data
        items = [
            {"sheet_id": item["sheetId"], "title": item.get("title") or "", "price": item.get("price")}
            for item in data["items"]
        ]

        try:
            order = create_order(
                user=request.user,
                items=items,
                amount=data["amount"],
                description=data.get("description") or "",
            )
        except OrderValidationError as exc:
            return error_response(str(exc), status.HTTP_400_BAD_REQUEST)

        return Response(
            {"success": True, "orderId": str(order.id), "orderNumber": order.order_number},
            status=status.HTTP_200_OK,
        )


@extend_schema(tags=["Orders"])
class OrderHistoryView(generics.ListAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = OrderSerializer
    filterset_fields = ["status", "payment_status", "order_type"]

    def get_queryset(self):
        return Order.objects.filter(user=self.request.user).order_by("-created_at")


@extend_schema(tags=["Orders"])
class OrderDetailView(generics.RetrieveAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = OrderDetailSerializer
    lookup_url_kwarg = "order_id"

    def get_queryset(self):
        qs = Order.objects.prefetch_related("items__drum_sheet")
        if getattr(self.request.user, "is_admin", False):
            return qs
        return qs.filter(user=self.request.user)


class UpdatePaymentNoteView(APIView):
    permission_classes = [IsAuthenticated]
    parser_classes = [JSONParser]
    throttle_classes = [OrderWriteThrottle]

    @extend_schema(
        tags=["Orders"],
        request=UpdateNoteInputSerializer,
        responses={200: OpenApiResponse(description="{success}"), 404: OpenApiResponse(description="Not found")},
        description="Append a payment note (cancel / error reason) to an order.",
    )
    def post(self, request):
        serializer = UpdateNoteInputSerializer(data=request.data)
        if not serializer.is_valid():
            return error_response("orderId is required", status.HTTP_400_BAD_REQUEST, details=serializer.errors)

        data = serializer.validated_data
        owned = Order.objects.filter(id=data["orderId"])
        if not getattr(request.user, "is_admin", False):
            owned = owned.filter(user=request.user)
        if not owned.exists():
            return error_response("Order not found", status.HTTP_404_NOT_FOUND)

        try:
            append_payment_note(order_id=data["orderId"], note=data.get("note"), note_type=data.get("noteType"))
        except OrderNotFoundError:
            return error_response("Order not found", status.HTTP_404_NOT_FOUND)

        return Response({"success": True}, status=status.HTTP_200_OK)
