"""
PATH: payments/services/dodo.py

DODO PAYMENTS

- create_payment():          hosted payment link (/v1/payments)
- create_checkout_session(): hosted checkout (/checkout-sessions/create)
- verify_webhook_signature(): Standard Webhooks verification

Webhook signature:
    signed content = "{webhook-id}.{webhook-timestamp}.{raw body}"
    key            = base64 part of the "whsec_..." secret
    header         = space separated "v1,<base64 hmac-sha256>" entries
Timestamps older or newer than five minutes are rejected.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import logging
import time

from payments.services.config import DODO_DEFAULT_API_URL, get_app_url, get_setting, require_setting
from payments.services.exceptions import PaymentConfigurationError, WebhookVerificationError
from payments.services.http import request_json

logger = logging.getLogger(__name__)

PROVIDER = "Dodo Payments"
SOURCE_TAG = "copydrum"
WEBHOOK_TOLERANCE_SECONDS = 5 * 60
SECRET_PREFIX = "whsec_"


def _api_url() -> str:
    return get_setting("DODO", "API_URL", "DODO_PAYMENTS_API_URL", default=DODO_DEFAULT_API_URL).rstrip("/")


def _auth_headers() -> dict:
    secret = require_setting("DODO", "SECRET_KEY", "DODO_PAYMENTS_SECRET_KEY", label="Dodo Payments")
    return {"Authorization": f"Bearer {secret}"}


def create_payment(
    *,
    order_id: str,
    amount,
    order_name: str,
    customer_email: str = "",
    customer_name: str = "",
    return_base_url: str = "",
) -> dict:
    headers = _auth_headers()
    base = (return_base_url or get_app_url()).rstrip("/")
    payload = {
        "amount": amount,
        "currency": "KRW",
        "order_id": str(order_id),
        "order_name": order_name,
        "customer_email": customer_email,
        "customer_name": customer_name,
        "success_url": f"{base}/payment/success?orderId={order_id}",
        "cancel_url": f"{base}/payments/{order_id}",
        "metadata": {"source": SOURCE_TAG, "order_id": str(order_id)},
    }
    return request_json("POST", f"{_api_url()}/v1/payments", provider=PROVIDER, body=payload, headers=headers)


def create_checkout_session(
    *,
    order_id: str,
    amount,
    order_name: str,
    customer_email: str = "",
    customer_name: str = "",
) -> dict:
    headers = _auth_headers()
    app_url = get_app_url()
    payload = {
        "payment_link_id": None,
        "success_url": f"{app_url}/payment/success?orderId={order_id}",
        "cancel_url": f"{app_url}/payment/cancel?orderId={order_id}",
        "metadata": {"orderId": str(order_id), "source": f"{SOURCE_TAG}_checkout"},
        "product_cart": [
            {"product_name": order_name, "quantity": 1, "unit_price": amount, "currency": "KRW"},
        ],
        "customer": {"email": customer_email, "name": customer_name},
    }
    return request_json(
        "POST", f"{_api_url()}/checkout-sessions/create", provider=PROVIDER, body=payload, headers=headers
    )


# ---------------------------------------------------------------------
# Webhook verification
# ---------------------------------------------------------------------

def _secret_bytes(secret: str) -> bytes:
    raw = (secret or "").strip()
    if raw.startswith(SECRET_PREFIX):
        raw = raw[len(SECRET_PREFIX):]
    try:
        return base64.b64decode(raw, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise PaymentConfigurationError("Dodo webhook secret is not valid base64") from exc


def sign_webhook(*, secret: str, webhook_id: str, timestamp: str, body: bytes) -> str:
    signed = f"{webhook_id}.{timestamp}.".encode("utf-8") + (body or b"")
    digest = hmac.new(_secret_bytes(secret), signed, hashlib.sha256).digest()
    return "v1," + base64.b64encode(digest).decode("ascii")


def verify_webhook_signature(
    *,
    body: bytes,
    webhook_id: str | None,
    timestamp: str | None,
    signature_header: str | None,
    secret: str | None = None,
    now: float | None = None,
) -> None:
    """
    Raises WebhookVerificationError unless one v1 signature matches.
    """
    secret = secret or require_setting("DODO", "WEBHOOK_SECRET", "DODO_WEBHOOK_SECRET", label="Dodo webhook")

    if not webhook_id or not timestamp or not signature_header:
        raise WebhookVerificationError("Missing webhook headers")

    try:
        sent_at = int(timestamp)
    except (TypeError, ValueError) as exc:
        raise WebhookVerificationError("Invalid webhook timestamp") from exc

    current = int(now if now is not None else time.time())
    if abs(current - sent_at) > WEBHOOK_TOLERANCE_SECONDS:
        raise WebhookVerificationError("Webhook timestamp outside tolerance")

    expected = sign_webhook(secret=secret, webhook_id=webhook_id, timestamp=timestamp, body=body).split(",", 1)[1]

    for candidate in signature_header.split():
        version, _, value = candidate.partition(",")
        if version == "v1" and hmac.compare_digest(value, expected):
            return

    raise WebhookVerificationError("No matching webhook signature")
