"""
PATH: orders/services/order_service.py

ORDER CREATION

Purpose:
- Create pending sheet-purchase orders (cart checkout, collection buy-now)
- Create pending cash-charge orders (points top-up through a provider)

Rules:
- Order + items are written in one transaction (no orphan orders)
- Item prices are clamped: max(0, round(price))
- Missing titles fall back to the sheet's title, then a placeholder
"""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.db import transaction

from catalog.models import DrumSheet
from orders.models import Order, OrderItem
from orders.services.exceptions import OrderValidationError

logger = logging.getLogger(__name__)

UNKNOWN_TITLE = "Untitled sheet"


def normalize_amount(value) -> int:
    """
    max(0, round(value)) with half-up rounding; junk becomes 0.
    """
    if value is None or value == "":
        return 0
    try:
        rounded = Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError, TypeError):
        logger.warning("Invalid amount value encountered", extra={"value": value})
        return 0
    return max(0, int(rounded))


def _resolve_sheets(items) -> dict:
    sheet_ids = set()
    for item in items:
        sheet_id = str(item.get("sheet_id") or "").strip()
        if not sheet_id:
            raise OrderValidationError("Every item needs a sheet_id")
        sheet_ids.add(sheet_id)

    sheets = {str(s.id): s for s in DrumSheet.objects.filter(id__in=sheet_ids)}
    missing = sheet_ids - set(sheets)
    if missing:
        raise OrderValidationError(f"Unknown sheet(s): {', '.join(sorted(missing))}")
    return sheets


@transaction.atomic
def create_order(*, user, items, amount, description: str = "") -> Order:
    """
    items: [{"sheet_id": <uuid>, "title": str?, "price": number}]
    """
    items = list(items or [])
    if not items:
        raise OrderValidationError("At least one item is required")

    total = normalize_amount(amount)
    if total <= 0:
        raise OrderValidationError("amount must be greater than zero")

    sheets = _resolve_sheets(items)

    order = Order.objects.create(
        user=user,
        total_amount=total,
        status=Order.STATUS_PENDING,
        payment_status=Order.PAYMENT_PENDING,
        order_type=Order.TYPE_PRODUCT,
        metadata={"type": Order.METADATA_SHEET_PURCHASE, "description": description or ""},
    )

    OrderItem.objects.bulk_create(
        [
            OrderItem(
                order=order,
                drum_sheet=sheets[str(item["sheet_id"]).strip()],
                sheet_title=(
                    (item.get("title") or "").strip()
                    or sheets[str(item["sheet_id"]).strip()].title
                    or UNKNOWN_TITLE
                ),
                price=normalize_amount(item.get("price")),
            )
            for item in items
        ]
    )

    logger.info(
        "Order created",
        extra={"order_id": str(order.id), "order_number": order.order_number, "items": len(items)},
    )
    return order


def create_cash_charge_order(*, user, amount, bonus_amount=0, payment_method: str = "") -> Order:
    total = normalize_amount(amount)
    if total <= 0:
        raise OrderValidationError("amount must be greater than zero")

    order = Order.objects.create(
        user=user,
        total_amount=total,
        status=Order.STATUS_PENDING,
        payment_status=Order.PAYMENT_PENDING,
        payment_method=payment_method or "",
        order_type=Order.TYPE_CASH,
        metadata={
            "type": Order.METADATA_CASH_CHARGE,
            "bonusAmount": normalize_amount(bonus_amount),
        },
    )

    logger.info(
        "Cash charge order created",
        extra={"order_id": str(order.id), "amount": total, "bonus_amount": bonus_amount},
    )
    return order
