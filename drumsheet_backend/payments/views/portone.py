"""
PATH: payments/views/portone.py

PORTONE CONFIRMATION + KAKAOPAY PREPARE

POST /api/payments/portone/verify/      {paymentId, orderId?}
POST /api/payments/kakaopay/prepare/    {orderId, orderName, userEmail?}

Verify never trusts the browser: the payment is re-read from PortOne.
- order lookup: transaction_id == paymentId, then id == orderId
- missing order: created lazily from the PortOne payment metadata
- PAID                    -> amount check -> shared completion
- VIRTUAL_ACCOUNT_ISSUED  -> awaiting_deposit + account details
- anything else           -> 400
"""

from __future__ import annotations

import logging
import time
import uuid

from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone
from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.parsers import JSONParser
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from backend.api_errors import error_response
from orders.models import Order, PaymentTransaction
from orders.serializers import OrderSerializer
from orders.services.completion import complete_order_after_payment
from payments.serializers import KakaoPayPrepareInputSerializer, PortOneVerifyInputSerializer
from payments.services import portone
from payments.services.exceptions import PaymentConfigurationError, PaymentProviderError
from payments.views.common import PaymentAnonThrottle, PaymentWriteThrottle, owned_order, provider_error_response

logger = logging.getLogger(__name__)

PROVIDER_PORTONE = "portone"


def _as_uuid(value):
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        return None


def _find_order(payment_id: str, order_id: str):
    order = Order.objects.filter(transaction_id=payment_id).first()
    if order is None and _as_uuid(order_id):
        order = Order.objects.filter(id=_as_uuid(order_id)).first()
    return order


class LazyOrderError(Exception):
    pass


def _create_order_from_payment(payment: dict, payment_id: str, order_id: str) -> Order:
    metadata = payment.get("metadata") or {}
    client_order_id = metadata.get("clientOrderId") or metadata.get("supabaseOrderId") or order_id
    customer_id = (
        (payment.get("customer") or {}).get("customerId")
        or metadata.get("userId")
        or metadata.get("customerId")
    )

    if not client_order_id:
        raise LazyOrderError("Order not found and cannot create order: missing clientOrderId in metadata")
    if not customer_id:
        raise LazyOrderError("Order not found and cannot create order: missing customerId")

    user = get_user_model().objects.filter(pk=_as_uuid(customer_id)).first() if _as_uuid(customer_id) else None
    if user is None:
        raise LazyOrderError("Order not found and cannot create order: unknown customer")

    order_metadata = {
        "type": Order.METADATA_SHEET_PURCHASE,
        "description": payment.get("order_name") or "PortOne payment",
        "created_from": "portone_verify_lazy_creation",
        "portone_payment_id": payment_id,
        "portone_metadata": metadata,
    }

    final_id = _as_uuid(client_order_id)
    if final_id is None:
        final_id = uuid.uuid4()
        order_metadata["original_client_order_id"] = str(client_order_id)
        order_metadata["uuid_converted"] = True
        logger.warning(
            "Non-UUID client order id replaced",
            extra={"original": str(client_order_id), "order_id": str(final_id)},
        )

    amount = payment.get("amount") or {}
    amount_krw = int(portone.amount_in_krw(amount.get("total"), amount.get("currency")).to_integral_value())

    order = Order.objects.create(
        id=final_id,
        user=user,
        total_amount=max(0, amount_krw),
        status=Order.STATUS_PENDING,
        payment_status=Order.PAYMENT_PENDING,
        order_type=Order.TYPE_PRODUCT,
        transaction_id=payment_id,
        metadata=order_metadata,
    )
    logger.info(
        "Order created from PortOne payment",
        extra={"order_id": str(order.id), "payment_id": payment_id},
    )
    return order


@transaction.atomic
def _mark_awaiting_deposit(order: Order, payment: dict, payment_id: str) -> Order:
    order = Order.objects.select_for_update().get(id=order.id)
    va_info = payment.get("virtual_account")

    order.transaction_id = payment_id
    order.payment_provider = PROVIDER_PORTONE
    order.payment_status = Order.PAYMENT_AWAITING_DEPOSIT
    order.status = Order.STATUS_PENDING
    order.raw_status = "awaiting_deposit"
    if not order.payment_method:
        order.payment_method = "virtual_account"
    if va_info:
        order.virtual_account_info = va_info
    order.metadata = {
        **(order.metadata or {}),
        "portone_status": payment.get("status"),
        "portone_payment_id": payment_id,
    }
    order.save()
    return order


class PortOneVerifyView(APIView):
    permission_classes = [AllowAny]
    parser_classes = [JSONParser]
    throttle_classes = [PaymentAnonThrottle]

    @extend_schema(
        tags=["Payments"],
        request=PortOneVerifyInputSerializer,
        responses={
            200: OpenApiResponse(description="{success, data: {order, status, paymentId, virtualAccountInfo}}"),
            400: OpenApiResponse(description="Unpaid status or amount mismatch"),
            404: OpenApiResponse(description="Order missing and not creatable"),
            502: OpenApiResponse(description="PortOne unavailable"),
        },
        description="Confirm a PortOne payment (card, virtual account, KakaoPay) against the PortOne API.",
    )
    def post(self, request):
        serializer = PortOneVerifyInputSerializer(data=request.data)
        if not serializer.is_valid():
            return error_response("paymentId is required", status.HTTP_400_BAD_REQUEST, details=serializer.errors)

        payment_id = serializer.validated_data["paymentId"].strip()
        order_id = (serializer.validated_data.get("orderId") or "").strip()

        try:
            payment = portone.get_payment(payment_id)
        except (PaymentConfigurationError, PaymentProviderError) as exc:
            logger.warning("PortOne lookup failed", extra={"payment_id": payment_id, "error": str(exc)})
            return provider_error_response(exc)

        order = _find_order(payment_id, order_id)
        if order is None:
            try:
                order = _create_order_from_payment(payment, payment_id, order_id)
            except LazyOrderError as exc:
                logger.error("PortOne order could not be resolved", extra={"payment_id": payment_id})
                return error_response(str(exc), status.HTTP_404_NOT_FOUND)

        payment_status = payment.get("status")
        amount = payment.get("amount") or {}
        va_info = payment.get("virtual_account")

        if payment_status == portone.STATUS_PAID:
            if not portone.compare_amounts(amount.get("total"), amount.get("currency"), order.total_amount):
                logger.warning(
                    "PortOne amount mismatch",
                    extra={
                        "order_id": str(order.id),
                        "paid": amount.get("total"),
                        "currency": amount.get("currency"),
                        "expected": order.total_amount,
                    },
                )
                return error_response(
                    "Payment amount does not match order total",
                    status.HTTP_400_BAD_REQUEST,
                    details={"paid": amount, "expected": order.total_amount},
                )

            result = complete_order_after_payment(
                order.id,
                order.payment_method or "card",
                transaction_id=payment_id,
                payment_confirmed_at=timezone.now(),
                payment_provider=PROVIDER_PORTONE,
                metadata={"portone_status": payment_status, "portone_payment_id": payment_id},
                raw_response=payment.get("raw"),
            )
            order = result.order

        elif payment_status == portone.STATUS_VIRTUAL_ACCOUNT_ISSUED:
            if not order.is_paid:
                order = _mark_awaiting_deposit(order, payment, payment_id)

        else:
            logger.warning(
                "PortOne payment not paid",
                extra={"payment_id": payment_id, "status": payment_status},
            )
            return error_response(f"Payment status is {payment_status}", status.HTTP_400_BAD_REQUEST)

        return Response(
            {
                "success": True,
                "data": {
                    "order": OrderSerializer(order).data,
                    "status": payment_status,
                    "paymentId": payment_id,
                    "virtualAccountInfo": va_info,
                },
            },
            status=status.HTTP_200_OK,
        )


class KakaoPayPrepareView(APIView):
    permission_classes = [IsAuthenticated]
    parser_classes = [JSONParser]
    throttle_classes = [PaymentWriteThrottle]

    @extend_schema(
        tags=["Payments"],
        request=KakaoPayPrepareInputSerializer,
        responses={200: OpenApiResponse(description="{success, paymentId, request}")},
        description="Build the PortOne browser request for a KakaoPay payment.",
    )
    def post(self, request):
        serializer = KakaoPayPrepareInputSerializer(data=request.data)
        if not serializer.is_valid():
            return error_response("Missing required fields", status.HTTP_400_BAD_REQUEST, details=serializer.errors)
        data = serializer.validated_data

        order = owned_order(request, data["orderId"])
        if order is None:
            return error_response("Order not found", status.HTTP_404_NOT_FOUND)
        if order.is_paid:
            return error_response("Order already paid", status.HTTP_409_CONFLICT)

        payment_id = f"kakaopay-{order.order_number}-{int(time.time() * 1000)}"
        customer = {"email": data.get("userEmail") or order.user.email, "customerId": str(order.user_id)}

        try:
            payload = portone.kakaopay_request(
                payment_id=payment_id,
                order_name=data["orderName"],
                amount_krw=order.total_amount,
                customer=customer,
            )
        except PaymentConfigurationError as exc:
            return provider_error_response(exc)

        with transaction.atomic():
            Order.objects.filter(id=order.id).update(
                transaction_id=payment_id,
                payment_method="kakaopay",
                payment_provider=PROVIDER_PORTONE,
                updated_at=timezone.now(),
            )
            PaymentTransaction.objects.create(
                order=order,
                user=order.user,
                provider="kakaopay",
                payment_method="kakaopay",
                amount=order.total_amount,
                currency="KRW",
                status=PaymentTransaction.STATUS_PENDING,
                pg_transaction_id=payment_id,
                raw_request=payload,
            )

        logger.info("KakaoPay payment prepared", extra={"order_id": str(order.id), "payment_id": payment_id})
        return Response({"success": True, "paymentId": payment_id, "request": payload}, status=status.HTTP_200_OK)
