"""
PATH: payments/services/currency.py

SITE CURRENCY (locale -> KRW / USD / EUR)

Catalog prices are stored as integer KRW. Foreign storefronts show, and
charge, a converted amount:

- KRW (ko): unchanged
- EUR (de fr it es): 1000 KRW = 1 EUR
- USD standard (en ja zh-CN zh-TW ar nl pl): 1000 KRW = 1 USD
- USD discount (vi th id hi pt tr ru uk): 1500 KRW = 1 USD

Unknown or missing locales fall back to KRW.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

CURRENCY_KRW = "KRW"
CURRENCY_USD = "USD"
CURRENCY_EUR = "EUR"

TWOPLACES = Decimal("0.01")

USD_DISCOUNT_LOCALES = frozenset({"vi", "th", "id", "hi", "pt", "tr", "ru", "uk"})

LOCALE_TO_CURRENCY = {
    "ko": CURRENCY_KRW,
    "de": CURRENCY_EUR,
    "fr": CURRENCY_EUR,
    "it": CURRENCY_EUR,
    "es": CURRENCY_EUR,
    "en": CURRENCY_USD,
    "ja": CURRENCY_USD,
    "zh-CN": CURRENCY_USD,
    "zh-TW": CURRENCY_USD,
    "ar": CURRENCY_USD,
    "nl": CURRENCY_USD,
    "pl": CURRENCY_USD,
    **{code: CURRENCY_USD for code in USD_DISCOUNT_LOCALES},
}

KRW_PER_EUR = Decimal("1000")
KRW_PER_USD = Decimal("1000")
KRW_PER_USD_DISCOUNT = Decimal("1500")


def _primary_subtag(locale) -> str:
    return str(locale or "").strip().split("-")[0]


def get_site_currency(locale=None) -> str:
    raw = str(locale or "").strip()
    if not raw:
        return CURRENCY_KRW

    primary = _primary_subtag(raw)
    if primary in LOCALE_TO_CURRENCY:
        return LOCALE_TO_CURRENCY[primary]

    # Region-qualified keys (zh-CN / zh-TW) only match the full tag.
    return LOCALE_TO_CURRENCY.get(raw, CURRENCY_KRW)


def is_discount_locale(locale) -> bool:
    return _primary_subtag(locale) in USD_DISCOUNT_LOCALES


def convert_from_krw(krw, currency: str, locale=None) -> Decimal:
    """
    Convert a KRW amount into the site currency (unrounded Decimal).
    """
    amount = Decimal(str(krw or 0))

    if currency == CURRENCY_EUR:
        return amount / KRW_PER_EUR

    if currency == CURRENCY_USD:
        rate = KRW_PER_USD_DISCOUNT if is_discount_locale(locale) else KRW_PER_USD
        return amount / rate

    return amount


def format_currency(amount, currency: str) -> str:
    value = Decimal(str(amount or 0))

    if currency == CURRENCY_USD:
        return f"${value.quantize(TWOPLACES, rounding=ROUND_HALF_UP)}"

    if currency == CURRENCY_EUR:
        return f"€{value.quantize(TWOPLACES, rounding=ROUND_HALF_UP)}"

    whole = int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    return f"{whole:,}원"


def to_payment_amount(krw, currency: str, locale=None) -> Decimal:
    """
    Provider-facing amount: converted and rounded to cents (KRW stays whole).
    """
    converted = convert_from_krw(krw, currency, locale)
    if currency == CURRENCY_KRW:
        return converted.quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return converted.quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def display_price(krw, locale=None) -> dict:
    """
    Convenience bundle used by catalog / cart serializers.
    """
    currency = get_site_currency(locale)
    converted = to_payment_amount(krw, currency, locale)
    return {
        "currency": currency,
        "amount": converted,
        "formatted": format_currency(converted, currency),
    }
