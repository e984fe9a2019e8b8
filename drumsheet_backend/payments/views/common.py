# payments/views/common.py
from __future__ import annotations

from rest_framework import status
from rest_framework.throttling import AnonRateThrottle, UserRateThrottle

from backend.api_errors import error_response
from orders.models import Order
from payments.services.exceptions import PaymentConfigurationError, PaymentProviderError


class PaymentWriteThrottle(UserRateThrottle):
    scope = "public_write"


class PaymentAnonThrottle(AnonRateThrottle):
    scope = "public_write"


class WebhookThrottle(AnonRateThrottle):
    scope = "webhook"


def owned_order(request, order_id):
    """
    Order visible to the caller (admins see every order), or None.
    """
    qs = Order.objects.filter(id=order_id)
    if not getattr(request.user, "is_admin", False):
        qs = qs.filter(user=request.user)
    return qs.first()


def provider_error_response(exc: Exception):
    if isinstance(exc, PaymentConfigurationError):
        return error_response(str(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)
    if isinstance(exc, PaymentProviderError):
        return error_response(str(exc), status.HTTP_502_BAD_GATEWAY)
    raise exc
