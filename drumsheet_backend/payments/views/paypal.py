# payments/views/paypal.py
from __future__ import annotations

import logging

from django.utils import timezone
from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.parsers import JSONParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from backend.api_errors import error_response
from orders.models import PaymentTransaction
from orders.services.completion import complete_order_after_payment
from payments.serializers import PayPalCaptureInputSerializer, PayPalCreateOrderInputSerializer
from payments.services import paypal
from payments.services.exceptions import PaymentConfigurationError, PaymentProviderError
from payments.views.common import PaymentWriteThrottle, owned_order, provider_error_response

logger = logging.getLogger(__name__)

CAPTURE_COMPLETED = "COMPLETED"


def _captured_reference(capture: dict) -> str:
    units = capture.get("purchase_units") or []
    if not units or not isinstance(units[0], dict):
        return ""
    return str(units[0].get("reference_id") or "")


class PayPalCreateOrderView(APIView):
    permission_classes = [IsAuthenticated]
    parser_classes = [JSONParser]
    throttle_classes = [PaymentWriteThrottle]

    @extend_schema(
        tags=["Payments"],
        request=PayPalCreateOrderInputSerializer,
        responses={200: OpenApiResponse(description="{success, orderID}")},
        description="Create a PayPal order (USD) for a pending order.",
    )
    def post(self, request):
        serializer = PayPalCreateOrderInputSerializer(data=request.data)
        if not serializer.is_valid():
            return error_response("Missing required fields", status.HTTP_400_BAD_REQUEST, details=serializer.errors)
        data = serializer.validated_data

        order = owned_order(request, data["orderId"])
        if order is None:
            return error_response("Order not found", status.HTTP_404_NOT_FOUND)
        if order.is_paid:
            return error_response("Order already paid", status.HTTP_409_CONFLICT)

        locale = data.get("locale") or None
        try:
            result = paypal.create_order(
                order_id=str(order.id),
                amount_krw=order.total_amount,
                items=data.get("items") or [],
                locale=locale,
            )
        except (PaymentConfigurationError, PaymentProviderError) as exc:
            logger.warning("PayPal order creation failed", extra={"order_id": str(order.id), "error": str(exc)})
            return provider_error_response(exc)

        PaymentTransaction.objects.create(
            order=order,
            user=order.user,
            provider="paypal",
            payment_method="paypal",
            amount=paypal.usd_amount_for(order.total_amount, locale),
            currency="USD",
            status=PaymentTransaction.STATUS_PENDING,
            pg_transaction_id=str(result.get("id") or ""),
            raw_response=result,
        )

        return Response({"success": True, "orderID": result.get("id")}, status=status.HTTP_200_OK)


class PayPalCaptureOrderView(APIView):
    permission_classes = [IsAuthenticated]
    parser_classes = [JSONParser]
    throttle_classes = [PaymentWriteThrottle]

    @extend_schema(
        tags=["Payments"],
        request=PayPalCaptureInputSerializer,
        responses={
            200: OpenApiResponse(description="{success, captureId, status}"),
            400: OpenApiResponse(description="PayPal order was not issued for this order"),
            409: OpenApiResponse(description="Capture did not complete"),
            502: OpenApiResponse(description="PayPal rejected the capture"),
        },
        description="Capture an approved PayPal order and complete the store order.",
    )
    def post(self, request):
        serializer = PayPalCaptureInputSerializer(data=request.data)
        if not serializer.is_valid():
            return error_response("Missing required fields", status.HTTP_400_BAD_REQUEST, details=serializer.errors)
        data = serializer.validated_data

        order = owned_order(request, data["orderId"])
        if order is None:
            return error_response("Order not found", status.HTTP_404_NOT_FOUND)

        paypal_order_id = data["orderID"].strip()
        issued = PaymentTransaction.objects.filter(
            order=order, provider="paypal", pg_transaction_id=paypal_order_id
        ).exists()
        if not issued:
            logger.warning(
                "PayPal order not issued for this order",
                extra={"order_id": str(order.id), "paypal_order_id": paypal_order_id},
            )
            return error_response("PayPal order does not match this order", status.HTTP_400_BAD_REQUEST)

        try:
            capture = paypal.capture_order(paypal_order_id)
        except (PaymentConfigurationError, PaymentProviderError) as exc:
            logger.warning("PayPal capture failed", extra={"order_id": str(order.id), "error": str(exc)})
            return provider_error_response(exc)

        reference = _captured_reference(capture)
        if reference and reference != str(order.id):
            logger.error(
                "PayPal capture reference mismatch",
                extra={"order_id": str(order.id), "reference_id": reference},
            )
            return error_response("PayPal order does not match this order", status.HTTP_400_BAD_REQUEST)

        capture_status = str(capture.get("status") or "")
        if capture_status != CAPTURE_COMPLETED:
            logger.warning(
                "PayPal capture not completed",
                extra={"order_id": str(order.id), "capture_status": capture_status},
            )
            return error_response(
                "PayPal capture is not completed",
                status.HTTP_409_CONFLICT,
                captureStatus=capture_status,
            )

        complete_order_after_payment(
            order.id,
            "paypal",
            transaction_id=paypal_order_id,
            payment_confirmed_at=timezone.now(),
            payment_provider="paypal",
            raw_response=capture,
        )

        return Response(
            {"success": True, "captureId": capture.get("id"), "status": capture.get("status")},
            status=status.HTTP_200_OK,
        )
