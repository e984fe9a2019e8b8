# payments/services/paypal.py
from __future__ import annotations

import base64
import logging
from decimal import Decimal
from urllib.parse import quote

from payments.services.config import PAYPAL_DEFAULT_API_URL, get_app_url, get_setting, require_setting
from payments.services.currency import CURRENCY_USD, to_payment_amount
from payments.services.exceptions import PaymentProviderError
from payments.services.http import request_json

logger = logging.getLogger(__name__)

PROVIDER = "PayPal"


def _api_url() -> str:
    return get_setting("PAYPAL", "API_URL", "PAYPAL_API_URL", default=PAYPAL_DEFAULT_API_URL).rstrip("/")


def get_access_token() -> str:
    client_id = require_setting("PAYPAL", "CLIENT_ID", "PAYPAL_CLIENT_ID", label="PayPal")
    client_secret = require_setting("PAYPAL", "CLIENT_SECRET", "PAYPAL_CLIENT_SECRET", label="PayPal")
    basic = base64.b64encode(f"{client_id}:{client_secret}".encode("utf-8")).decode("ascii")

    parsed = request_json(
        "POST",
        f"{_api_url()}/v1/oauth2/token",
        provider=PROVIDER,
        form="grant_type=client_credentials",
        headers={"Authorization": f"Basic {basic}"},
    )
    token = parsed.get("access_token")
    if not token:
        raise PaymentProviderError("PayPal returned no access token", payload=parsed)
    return str(token)


def usd_amount_for(amount_krw, locale=None) -> Decimal:
    return to_payment_amount(amount_krw, CURRENCY_USD, locale)


def create_order(*, order_id: str, amount_krw, items: list | None = None, locale=None) -> dict:
    value = f"{usd_amount_for(amount_krw, locale):.2f}"
    app_url = get_app_url()
    ref = quote(str(order_id), safe="")

    payload = {
        "intent": "CAPTURE",
        "purchase_units": [
            {
                "reference_id": str(order_id),
                "amount": {
                    "currency_code": CURRENCY_USD,
                    "value": value,
                    "breakdown": {"item_total": {"currency_code": CURRENCY_USD, "value": value}},
                },
                "items": items or [],
            }
        ],
        "application_context": {
            "return_url": f"{app_url}/payments/paypal/return?orderId={ref}",
            "cancel_url": f"{app_url}/payments/paypal/cancel?orderId={ref}",
        },
    }

    token = get_access_token()
    parsed = request_json(
        "POST",
        f"{_api_url()}/v2/checkout/orders",
        provider=PROVIDER,
        body=payload,
        headers={"Authorization": f"Bearer {token}"},
    )
    logger.info("PayPal order created", extra={"order_id": str(order_id), "paypal_order_id": parsed.get("id")})
    return parsed


def capture_order(paypal_order_id: str) -> dict:
    token = get_access_token()
    parsed = request_json(
        "POST",
        f"{_api_url()}/v2/checkout/orders/{quote(str(paypal_order_id), safe='')}/capture",
        provider=PROVIDER,
        body={},
        headers={"Authorization": f"Bearer {token}"},
    )
    logger.info(
        "PayPal order captured",
        extra={"paypal_order_id": paypal_order_id, "status": parsed.get("status")},
    )
    return parsed
