"""
PATH: payments/services/portone.py

PORTONE V2 SERVER API

- get_access_token(): exchange the API secret for a bearer token
- get_payment(): fetch a payment and normalise its first transaction
- compare_amounts(): paid amount vs order KRW total (1% tolerance)

Only the lookups needed to confirm a browser-side payment live here;
the browser SDK performs the payment request itself.
"""

from __future__ import annotations

import logging
import re
from decimal import Decimal
from urllib.parse import quote

from payments.services.config import PORTONE_DEFAULT_API_URL, get_setting, require_setting
from payments.services.exceptions import PaymentProviderError
from payments.services.http import request_json

logger = logging.getLogger(__name__)

PROVIDER = "PortOne"

STATUS_PAID = "PAID"
STATUS_VIRTUAL_ACCOUNT_ISSUED = "VIRTUAL_ACCOUNT_ISSUED"

# Fixed verification rates (not the storefront display rates).
USD_CENTS_TO_KRW = Decimal("13")  # 1 USD = 1300 KRW, amounts arrive in cents
JPY_TO_KRW = Decimal("10")
AMOUNT_TOLERANCE = Decimal("0.01")

_QUOTES_AND_SPACE = re.compile(r"[\s\"']")


def _api_url() -> str:
    return get_setting("PORTONE", "API_URL", "PORTONE_API_URL", default=PORTONE_DEFAULT_API_URL).rstrip("/")


def get_api_secret() -> str:
    return require_setting("PORTONE", "API_SECRET", "PORTONE_API_SECRET", label="PortOne API secret")


def get_access_token(api_secret: str | None = None) -> str:
    secret = _QUOTES_AND_SPACE.sub("", api_secret if api_secret is not None else get_api_secret())
    parsed = request_json(
        "POST",
        f"{_api_url()}/login/api-secret",
        provider=PROVIDER,
        body={"apiSecret": secret},
    )
    token = parsed.get("accessToken")
    if not token:
        raise PaymentProviderError("PortOne login returned no access token", payload=parsed)
    return str(token)


def _first(mapping: dict, *keys):
    for key in keys:
        value = mapping.get(key)
        if value:
            return value
    return None


def _find_virtual_account(payment: dict, tx: dict):
    detail = tx.get("payment_method_detail") or tx.get("paymentMethodDetail") or {}
    return (
        _first(detail, "virtual_account", "virtualAccount")
        or _first(tx, "virtual_account", "virtualAccount")
        or _first(payment, "virtual_account", "virtualAccount")
    )


def normalize_virtual_account(va) -> dict | None:
    if not va:
        return None
    return {
        "bankName": _first(va, "bankName", "bank_name", "bank", "bankCode", "bank_code"),
        "accountNumber": _first(va, "accountNumber", "account_number"),
        "accountHolder": _first(va, "accountHolder", "account_holder", "remittee_name"),
        "expiresAt": _first(va, "expiresAt", "expires_at", "expired_at", "valid_until"),
    }


def get_payment(payment_id: str, *, api_secret: str | None = None) -> dict:
    """
    Returns:
        {id, transaction_id, status, amount: {total, currency}, order_name,
         metadata, customer, virtual_account}
    """
    token = get_access_token(api_secret)
    raw = request_json(
        "GET",
        f"{_api_url()}/v2/payments/{quote(str(payment_id), safe='')}",
        provider=PROVIDER,
        headers={"Authorization": f"Bearer {token}"},
    )

    payment = raw.get("payment") or {}
    transactions = payment.get("transactions") or []
    if not transactions:
        logger.error("Unexpected PortOne payment structure", extra={"payment_id": payment_id})
        raise PaymentProviderError("Invalid payment data structure from PortOne", payload=raw)

    tx = transactions[0]
    amount = tx.get("amount") or {}
    if not isinstance(amount, dict):
        amount = {"total": amount}

    return {
        "id": payment.get("id") or payment_id,
        "transaction_id": tx.get("id") or "",
        "status": str(tx.get("status") or "").upper(),
        "amount": {
            "total": amount.get("total") or 0,
            "currency": amount.get("currency") or "CURRENCY_KRW",
        },
        "order_name": payment.get("order_name") or payment.get("orderName") or "",
        "metadata": tx.get("metadata") or payment.get("metadata") or {},
        "customer": payment.get("customer") or {},
        "virtual_account": normalize_virtual_account(_find_virtual_account(payment, tx)),
        "raw": raw,
    }


def amount_in_krw(amount, currency: str) -> Decimal:
    value = Decimal(str(amount or 0))
    code = str(currency or "").upper()
    if code in ("CURRENCY_USD", "USD"):
        return value * USD_CENTS_TO_KRW
    if code in ("CURRENCY_JPY", "JPY"):
        return value * JPY_TO_KRW
    return value


def compare_amounts(amount, currency: str, order_amount_krw) -> bool:
    paid = amount_in_krw(amount, currency)
    expected = Decimal(str(order_amount_krw or 0))
    return abs(paid - expected) <= expected * AMOUNT_TOLERANCE


def kakaopay_request(*, payment_id: str, order_name: str, amount_krw: int, customer: dict | None = None) -> dict:
    """
    Browser SDK payload for a KakaoPay easy-pay request.
    """
    store_id = require_setting("PORTONE", "STORE_ID", "PORTONE_STORE_ID", label="PortOne store id")
    channel_key = require_setting(
        "PORTONE", "CHANNEL_KEY_KAKAOPAY", "PORTONE_CHANNEL_KEY_KAKAOPAY", label="KakaoPay channel key"
    )
    payload = {
        "storeId": store_id,
        "channelKey": channel_key,
        "paymentId": payment_id,
        "orderName": order_name,
        "totalAmount": int(amount_krw),
        "currency": "CURRENCY_KRW",
        "payMethod": "EASY_PAY",
    }
    if customer:
        payload["customer"] = customer
    return payload
