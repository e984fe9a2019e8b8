"""
PATH: orders/services/completion.py

SHARED ORDER COMPLETION (every payment method ends here)

Callers: PortOne verify (card / virtual account / KakaoPay), PayPal capture,
Dodo webhook, points payment, admin bank-transfer confirmation.

Flow:
1) Load order (missing -> OrderNotFoundError)
2) Already paid / completed -> return untouched (idempotent)
3) Cash charge (no items): credits += total + bonusAmount, ledger "charge"
4) Sheet purchase: Purchase rows (skip existing), preorder deadlines,
   expected completion date for preorder orders
5) Order -> completed / paid with provider details
6) PaymentTransaction rows -> paid            (best effort)
7) Purchased sheets removed from buyer's cart (best effort)

Steps 1-5 run in one transaction with the order row locked, so a webhook
racing a client-side verify completes the order exactly once.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import timedelta

from django.conf import settings
from django.db import DatabaseError, transaction
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from cart.models import CartItem
from catalog.models import DrumSheet
from orders.models import Order, PaymentTransaction, Purchase
from orders.services.business_days import calculate_expected_completion_date
from orders.services.exceptions import OrderNotFoundError
from wallet.models import CashTransaction
from wallet.services.ledger import apply_credit_change

logger = logging.getLogger(__name__)


@dataclass
class CompletionResult:
    order: Order
    already_completed: bool = False
    is_cash_charge: bool = False
    is_sheet_purchase: bool = False


def _as_datetime(value):
    if not value:
        return timezone.now()
    if isinstance(value, str):
        parsed = parse_datetime(value.replace("Z", "+00:00"))
        if parsed is None:
            logger.warning("Unparseable payment_confirmed_at; using now", extra={"value": value})
            return timezone.now()
        value = parsed
    if timezone.is_naive(value):
        value = timezone.make_aware(value)
    return value


def resolve_transaction_id(order: Order, transaction_id: str | None) -> str:
    given = (transaction_id or "").strip()
    if given:
        return given
    existing = (order.transaction_id or "").strip()
    if existing:
        return existing
    return f"manual-{int(time.time() * 1000)}"


def _credit_cash_charge(order: Order, payment_method: str) -> None:
    meta = order.metadata or {}
    charge_amount = max(0, int(order.total_amount or 0))
    try:
        bonus_amount = max(0, int(meta.get("bonusAmount") or 0))
    except (TypeError, ValueError):
        bonus_amount = 0

    apply_credit_change(
        user=order.user,
        amount=charge_amount,
        bonus_amount=bonus_amount,
        transaction_type=CashTransaction.TYPE_CHARGE,
        description=f"Payment completed: {payment_method}",
        order=order,
        created_by=order.user,
    )


def _grant_purchases(order: Order, items) -> None:
    if not getattr(settings, "PURCHASE_LOG_ENABLED", True):
        logger.info("Purchase log disabled; skipping entitlement rows", extra={"order_id": str(order.id)})
        return

    existing = set(Purchase.objects.filter(order=order).values_list("drum_sheet_id", flat=True))
    rows = []
    for item in items:
        if item.drum_sheet_id in existing:
            continue
        existing.add(item.drum_sheet_id)
        rows.append(
            Purchase(
                user=order.user,
                drum_sheet_id=item.drum_sheet_id,
                order=order,
                price_paid=int(item.price or 0),
            )
        )

    if rows:
        Purchase.objects.bulk_create(rows)
    logger.info("Purchases recorded", extra={"order_id": str(order.id), "count": len(rows)})


def _stamp_preorder_deadlines(sheet_ids, now) -> None:
    days = int(getattr(settings, "PREORDER_DEADLINE_DAYS", 3))
    updated = DrumSheet.objects.filter(
        id__in=sheet_ids,
        sales_type=DrumSheet.SALES_TYPE_PREORDER,
        preorder_deadline__isnull=True,
    ).update(preorder_deadline=now + timedelta(days=days))
    if updated:
        logger.info("Preorder deadlines set", extra={"sheets": updated, "days": days})


def _has_preorder_items(sheet_ids) -> bool:
    return DrumSheet.objects.filter(id__in=sheet_ids, sales_type=DrumSheet.SALES_TYPE_PREORDER).exists()


def _mark_payment_transactions_paid(order: Order, transaction_id: str, raw_response) -> None:
    try:
        updates = {
            "status": PaymentTransaction.STATUS_PAID,
            "pg_transaction_id": transaction_id,
            "updated_at": timezone.now(),
        }
        if raw_response is not None:
            updates["raw_response"] = raw_response
        with transaction.atomic():
            PaymentTransaction.objects.filter(order=order).update(**updates)
    except DatabaseError:
        logger.warning("Payment log update failed", extra={"order_id": str(order.id)}, exc_info=True)


def _clear_purchased_from_cart(order: Order, sheet_ids) -> None:
    try:
        with transaction.atomic():
            removed, _ = CartItem.objects.filter(cart__user=order.user, drum_sheet_id__in=sheet_ids).delete()
        if removed:
            logger.info("Cart cleaned after payment", extra={"order_id": str(order.id), "removed": removed})
    except DatabaseError:
        logger.warning("Cart cleanup failed", extra={"order_id": str(order.id)}, exc_info=True)


def complete_order_after_payment(
    order_id,
    payment_method: str,
    *,
    transaction_id: str | None = None,
    payment_confirmed_at=None,
    depositor_name: str | None = None,
    metadata: dict | None = None,
    payment_provider: str | None = None,
    raw_response=None,
) -> CompletionResult:
    confirmed_at = _as_datetime(payment_confirmed_at)

    with transaction.atomic():
        order = (
            Order.objects.select_for_update(of=("self",))
            .select_related("user")
            .filter(id=order_id)
            .first()
        )
        if order is None:
            raise OrderNotFoundError(f"Order not found: {order_id}")

        if order.is_paid:
            logger.info("Order already completed; skipping", extra={"order_id": str(order.id)})
            return CompletionResult(order=order, already_completed=True)

        items = list(order.items.all())
        sheet_ids = sorted({item.drum_sheet_id for item in items}, key=str)

        is_cash_charge = order.metadata_type == Order.METADATA_CASH_CHARGE and not items
        is_sheet_purchase = bool(items)

        if is_cash_charge:
            _credit_cash_charge(order, payment_method)

        if is_sheet_purchase:
            _grant_purchases(order, items)
            _stamp_preorder_deadlines(sheet_ids, timezone.now())
            if not order.expected_completion_date and _has_preorder_items(sheet_ids):
                order.expected_completion_date = calculate_expected_completion_date(confirmed_at)

        final_transaction_id = resolve_transaction_id(order, transaction_id)

        order.status = Order.STATUS_COMPLETED
        order.payment_status = Order.PAYMENT_PAID
        order.payment_method = payment_method
        order.raw_status = "payment_confirmed"
        order.payment_confirmed_at = confirmed_at
        order.transaction_id = final_transaction_id
        if payment_provider:
            order.payment_provider = payment_provider
        order.metadata = {
            **(order.metadata or {}),
            **(metadata or {}),
            "completedBy": payment_provider or "manual",
            "completedAt": confirmed_at.isoformat(),
        }
        if depositor_name:
            order.depositor_name = depositor_name

        order.save()

    _mark_payment_transactions_paid(order, final_transaction_id, raw_response)
    if is_sheet_purchase:
        _clear_purchased_from_cart(order, sheet_ids)

    logger.info(
        "Order completed",
        extra={
            "order_id": str(order.id),
            "payment_method": payment_method,
            "is_cash_charge": is_cash_charge,
            "is_sheet_purchase": is_sheet_purchase,
        },
    )
    return CompletionResult(
        order=order,
        is_cash_charge=is_cash_charge,
        is_sheet_purchase=is_sheet_purchase,
    )
