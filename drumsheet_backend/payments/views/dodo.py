"""
PATH: payments/views/dodo.py

DODO PAYMENTS

POST /api/payments/dodo/create/          hosted payment link
POST /api/payments/dodo/create-session/  hosted checkout session
POST /api/webhook/dodo-payments/         provider webhook (signed)

Webhook rules:
- signature checked on the raw body before anything is parsed (401)
- body must be a JSON object (400)
- payment.succeeded -> shared completion ("dodo")
- payment.failed    -> payment_status failed (paid orders untouched)
- refund.succeeded  -> status / payment_status refunded
- every other event is acknowledged with 200
"""

from __future__ import annotations

import json
import logging
import uuid

from django.db import transaction
from django.utils import timezone
from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.parsers import JSONParser
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from backend.api_errors import error_response
from orders.models import Order, PaymentTransaction, Purchase
from orders.services.completion import complete_order_after_payment
from payments.serializers import DodoCreateInputSerializer
from payments.services import dodo
from payments.services.exceptions import (
    PaymentConfigurationError,
    PaymentProviderError,
    WebhookVerificationError,
)
from payments.views.common import PaymentWriteThrottle, WebhookThrottle, owned_order, provider_error_response

logger = logging.getLogger(__name__)

EVENT_PAYMENT_SUCCEEDED = "payment.succeeded"
EVENT_PAYMENT_FAILED = "payment.failed"
EVENT_REFUND_SUCCEEDED = "refund.succeeded"


def _order_name(order: Order, given: str) -> str:
    return (given or "").strip() or (order.metadata or {}).get("description") or order.order_number


class _DodoCreateBase(APIView):
    permission_classes = [IsAuthenticated]
    parser_classes = [JSONParser]
    throttle_classes = [PaymentWriteThrottle]

    def _load(self, request):
        serializer = DodoCreateInputSerializer(data=request.data)
        if not serializer.is_valid():
            return None, None, error_response(
                "Missing required fields", status.HTTP_400_BAD_REQUEST, details=serializer.errors
            )
        data = serializer.validated_data
        order = owned_order(request, data["orderId"])
        if order is None:
            return None, None, error_response("Order not found", status.HTTP_404_NOT_FOUND)
        if order.is_paid:
            return None, None, error_response("Order already paid", status.HTTP_409_CONFLICT)
        return order, data, None

    def _log_attempt(self, order: Order, provider_id: str, raw) -> None:
        PaymentTransaction.objects.create(
            order=order,
            user=order.user,
            provider="dodo",
            payment_method="dodo",
            amount=order.total_amount,
            currency="KRW",
            status=PaymentTransaction.STATUS_PENDING,
            pg_transaction_id=provider_id,
            raw_response=raw,
        )


class DodoCreatePaymentView(_DodoCreateBase):
    @extend_schema(
        tags=["Payments"],
        request=DodoCreateInputSerializer,
        responses={200: OpenApiResponse(description="{success, payment_url, payment_id, data}")},
        description="Create a Dodo Payments payment link for a pending order.",
    )
    def post(self, request):
        order, data, error = self._load(request)
        if error is not None:
            return error

        try:
            result = dodo.create_payment(
                order_id=str(order.id),
                amount=order.total_amount,
                order_name=_order_name(order, data.get("orderName")),
                customer_email=data.get("customerEmail") or order.user.email,
                customer_name=data.get("customerName") or getattr(order.user, "name", ""),
                return_base_url=request.headers.get("Origin") or "",
            )
        except (PaymentConfigurationError, PaymentProviderError) as exc:
            logger.warning("Dodo payment creation failed", extra={"order_id": str(order.id), "error": str(exc)})
            return provider_error_response(exc)

        payment_url = result.get("payment_url") or result.get("checkout_url")
        if not payment_url:
            logger.error("Dodo response without payment url", extra={"order_id": str(order.id)})
            return error_response("Payment URL missing from provider response", status.HTTP_502_BAD_GATEWAY)

        payment_id = str(result.get("id") or result.get("payment_id") or "")
        self._log_attempt(order, payment_id, result)

        return Response(
            {"success": True, "payment_url": payment_url, "payment_id": payment_id, "data": result},
            status=status.HTTP_200_OK,
        )


class DodoCreateSessionView(_DodoCreateBase):
    @extend_schema(
        tags=["Payments"],
        request=DodoCreateInputSerializer,
        responses={200: OpenApiResponse(description="{success, sessionId, payment_url}")},
        description="Create a Dodo Payments checkout session for a pending order.",
    )
    def post(self, request):
        order, data, error = self._load(request)
        if error is not None:
            return error

        try:
            result = dodo.create_checkout_session(
                order_id=str(order.id),
                amount=order.total_amount,
                order_name=_order_name(order, data.get("orderName")),
                customer_email=data.get("customerEmail") or order.user.email,
                customer_name=data.get("customerName") or getattr(order.user, "name", ""),
            )
        except (PaymentConfigurationError, PaymentProviderError) as exc:
            logger.warning("Dodo session creation failed", extra={"order_id": str(order.id), "error": str(exc)})
            return provider_error_response(exc)

        self._log_attempt(order, str(result.get("id") or ""), result)
        return Response(
            {"success": True, "sessionId": result.get("id"), "payment_url": result.get("payment_url")},
            status=status.HTTP_200_OK,
        )


# ---------------------------------------------------------------------
# Webhook
# ---------------------------------------------------------------------

def _event_order_id(data: dict):
    metadata = data.get("metadata") or {}
    raw = metadata.get("orderId") or metadata.get("order_id") or data.get("order_id")
    try:
        return uuid.UUID(str(raw)) if raw else None
    except ValueError:
        return None


@transaction.atomic
def _set_order_state(order_id, *, payment_status: str, order_status: str | None, payload: dict) -> bool:
    order = Order.objects.select_for_update().filter(id=order_id).first()
    if order is None:
        return False

    if payment_status == Order.PAYMENT_FAILED and order.is_paid:
        logger.info("Failure event for paid order ignored", extra={"order_id": str(order.id)})
        return True

    order.payment_status = payment_status
    if order_status:
        order.status = order_status
    order.raw_status = payload.get("type") or ""
    order.metadata = {**(order.metadata or {}), "dodoLastEvent": payload.get("type")}
    order.save(update_fields=["payment_status", "status", "raw_status", "metadata", "updated_at"])

    if payment_status == Order.PAYMENT_REFUNDED:
        revoked, _ = Purchase.objects.filter(order=order).delete()
        logger.info("Entitlements revoked after refund", extra={"order_id": str(order.id), "revoked": revoked})

    tx_status = (
        PaymentTransaction.STATUS_REFUNDED
        if payment_status == Order.PAYMENT_REFUNDED
        else PaymentTransaction.STATUS_FAILED
    )
    PaymentTransaction.objects.filter(order=order, provider="dodo").update(
        status=tx_status, raw_response=payload, updated_at=timezone.now()
    )
    return True


class DodoWebhookView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    parser_classes = [JSONParser]
    throttle_classes = [WebhookThrottle]

    @extend_schema(exclude=True)
    def post(self, request, *args, **kwargs):
        raw_body = request.body or b""

        try:
            dodo.verify_webhook_signature(
                body=raw_body,
                webhook_id=request.headers.get("webhook-id"),
                timestamp=request.headers.get("webhook-timestamp"),
                signature_header=request.headers.get("webhook-signature"),
            )
        except WebhookVerificationError as exc:
            logger.warning("Invalid Dodo webhook signature", extra={"reason": str(exc)})
            return error_response("Invalid signature", status.HTTP_401_UNAUTHORIZED)
        except PaymentConfigurationError as exc:
            logger.error("Dodo webhook secret missing")
            return provider_error_response(exc)

        try:
            payload = json.loads(raw_body.decode("utf-8"))
        except (UnicodeDecodeError, ValueError):
            logger.warning("Dodo webhook with invalid JSON")
            return error_response("Invalid payload", status.HTTP_400_BAD_REQUEST)
        if not isinstance(payload, dict):
            return error_response("Invalid payload", status.HTTP_400_BAD_REQUEST)

        event_type = str(payload.get("type") or "")
        data = payload.get("data") or {}
        order_id = _event_order_id(data)
        logger.info("Dodo webhook received", extra={"type": event_type, "order_id": str(order_id or "")})

        if event_type not in (EVENT_PAYMENT_SUCCEEDED, EVENT_PAYMENT_FAILED, EVENT_REFUND_SUCCEEDED):
            logger.info("Unhandled Dodo event", extra={"type": event_type})
            return Response({"received": True}, status=status.HTTP_200_OK)

        if order_id is None:
            logger.warning("Dodo event without order id", extra={"type": event_type})
            return Response({"received": True, "detail": "No order id"}, status=status.HTTP_200_OK)

        if event_type == EVENT_PAYMENT_SUCCEEDED:
            if not Order.objects.filter(id=order_id).exists():
                logger.warning("Dodo event for unknown order", extra={"order_id": str(order_id)})
                return Response({"received": True, "detail": "Unknown order"}, status=status.HTTP_200_OK)
            complete_order_after_payment(
                order_id,
                "dodo",
                transaction_id=str(data.get("payment_id") or data.get("id") or ""),
                payment_confirmed_at=data.get("created_at") or timezone.now(),
                payment_provider="dodo",
                raw_response=payload,
            )

        elif event_type == EVENT_PAYMENT_FAILED:
            found = _set_order_state(
                order_id, payment_status=Order.PAYMENT_FAILED, order_status=None, payload=payload
            )
            if not found:
                logger.warning("Dodo event for unknown order", extra={"order_id": str(order_id)})

        else:
            found = _set_order_state(
                order_id,
                payment_status=Order.PAYMENT_REFUNDED,
                order_status=Order.STATUS_REFUNDED,
                payload=payload,
            )
            if not found:
                logger.warning("Dodo event for unknown order", extra={"order_id": str(order_id)})

        return Response({"received": True}, status=status.HTTP_200_OK)
