"""
PATH: cart/services/cart_service.py

CART OPERATIONS

Purpose:
- Add sheets / collections with server-owned price snapshots
- Build the checkout summary (site currency + offered payment methods)
- Turn the cart into a pending order

Rules:
- Sheets the user already owns are never re-added (and are flagged in the
  summary if they were added before the purchase landed).
- Adding the same sheet twice is a no-op.
"""

from __future__ import annotations

import logging

from django.db import transaction

from cart.models import Cart, CartItem
from catalog.models import Collection, DrumSheet
from catalog.services.bundles import allocate_bundle_prices
from orders.models import Order, Purchase
from orders.services.order_service import create_order
from payments.services.currency import (
    CURRENCY_KRW,
    format_currency,
    get_site_currency,
    to_payment_amount,
)

logger = logging.getLogger(__name__)

KRW_PAYMENT_METHODS = ["card", "kakaopay", "virtual_account", "points"]
GLOBAL_PAYMENT_METHODS = ["paypal", "dodo", "points"]


class CartError(Exception):
    """Base error for cart operations."""


class EmptyCartError(CartError):
    pass


class AlreadyOwnedError(CartError):
    pass


def get_cart(user) -> Cart:
    cart, _ = Cart.objects.get_or_create(user=user)
    return cart


def owned_sheet_ids(user) -> set:
    return set(
        Purchase.objects.filter(user=user, order__payment_status=Order.PAYMENT_PAID).values_list(
            "drum_sheet_id", flat=True
        )
    )


def payment_methods_for(currency: str) -> list:
    if currency == CURRENCY_KRW:
        return list(KRW_PAYMENT_METHODS)
    return list(GLOBAL_PAYMENT_METHODS)


@transaction.atomic
def add_sheet(*, user, sheet: DrumSheet) -> CartItem:
    if sheet.id in owned_sheet_ids(user):
        raise AlreadyOwnedError("You already own this sheet")

    cart = get_cart(user)
    item, created = CartItem.objects.get_or_create(
        cart=cart,
        drum_sheet=sheet,
        defaults={"price": int(sheet.price or 0)},
    )
    if created:
        logger.info("Sheet added to cart", extra={"user_id": str(user.pk), "sheet_id": str(sheet.id)})
    return item


@transaction.atomic
def add_collection(*, user, collection: Collection) -> list:
    """
    Adds every active member sheet the user does not own yet, priced at its
    share of the bundle. Returns the newly added CartItems.
    """
    sheets = list(collection.sheets.filter(is_active=True).order_by("artist", "title", "id"))
    allocations = allocate_bundle_prices(sheets, collection.sale_price)
    owned = owned_sheet_ids(user)
    cart = get_cart(user)

    added = []
    for sheet in sheets:
        if sheet.id in owned:
            continue
        item, created = CartItem.objects.update_or_create(
            cart=cart,
            drum_sheet=sheet,
            defaults={"price": allocations[sheet.id], "collection": collection},
        )
        if created:
            added.append(item)

    logger.info(
        "Collection added to cart",
        extra={"user_id": str(user.pk), "collection_id": str(collection.id), "added": len(added)},
    )
    return added


def remove_item(*, user, item_id) -> int:
    removed, _ = CartItem.objects.filter(cart__user=user, id=item_id).delete()
    return removed


def clear_cart(*, user) -> None:
    CartItem.objects.filter(cart__user=user).delete()


def build_checkout_summary(*, user, locale=None) -> dict:
    cart = get_cart(user)
    owned = owned_sheet_ids(user)
    currency = get_site_currency(locale)

    items = []
    total_krw = 0
    for item in cart.items.select_related("drum_sheet").order_by("added_at"):
        sheet = item.drum_sheet
        already_purchased = sheet.id in owned
        if not already_purchased:
            total_krw += int(item.price or 0)
        items.append(
            {
                "id": str(item.id),
                "sheet_id": str(sheet.id),
                "title": sheet.title,
                "artist": sheet.artist,
                "sales_type": sheet.sales_type,
                "price": int(item.price or 0),
                "already_purchased": already_purchased,
            }
        )

    converted = to_payment_amount(total_krw, currency, locale)
    return {
        "items": items,
        "total_krw": total_krw,
        "currency": currency,
        "total": converted,
        "formatted_total": format_currency(converted, currency),
        "payment_methods": payment_methods_for(currency),
    }


def checkout_cart(*, user, description: str = ""):
    """
    Pending order for every cart sheet not already owned.
    """
    cart = get_cart(user)
    owned = owned_sheet_ids(user)

    lines = [
        item
        for item in cart.items.select_related("drum_sheet").order_by("added_at")
        if item.drum_sheet_id not in owned
    ]
    if not lines:
        raise EmptyCartError("Cart is empty")

    items = [
        {"sheet_id": line.drum_sheet_id, "title": line.drum_sheet.title, "price": line.price}
        for line in lines
    ]
    amount = sum(int(line.price or 0) for line in lines)
    description = description or (
        lines[0].drum_sheet.title if len(lines) == 1 else f"{lines[0].drum_sheet.title} +{len(lines) - 1}"
    )
    return create_order(user=user, items=items, amount=amount, description=description)
