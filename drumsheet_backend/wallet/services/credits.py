"""
PATH: wallet/services/credits.py

POINTS WALLET SERVICES

- get_balance()            current credits (0 when no profile yet)
- charge_credits()         +amount (+bonus), ledger "charge"
- process_cash_purchase()  buy sheets straight from the balance
- pay_order_with_points()  settle an existing pending order with points

Every balance change happens inside transaction.atomic together with the
ledger row and (where relevant) the order / purchase writes: either all of
it lands or none of it does.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass

from django.db import transaction
from django.utils import timezone

from catalog.models import DrumSheet
from orders.models import Order, OrderItem, Purchase
from orders.services.business_days import calculate_expected_completion_date
from orders.services.completion import complete_order_after_payment
from orders.services.exceptions import OrderNotFoundError, OrderValidationError
from orders.services.order_service import UNKNOWN_TITLE, normalize_amount
from users.models import Profile
from wallet.models import CashTransaction
from wallet.services.exceptions import (
    InsufficientCreditError,
    InvalidCreditAmountError,
    PointsPaymentError,
)
from wallet.services.ledger import apply_credit_change, lock_profile

logger = logging.getLogger(__name__)

REASON_INSUFFICIENT_CREDIT = "INSUFFICIENT_CREDIT"


def get_balance(user) -> int:
    profile = Profile.objects.filter(user=user).only("credits").first()
    return int(profile.credits) if profile else 0


@transaction.atomic
def charge_credits(*, user, amount, bonus=0, order=None, description: str = "") -> CashTransaction:
    amount = normalize_amount(amount)
    if amount <= 0:
        raise InvalidCreditAmountError("Charge amount must be greater than zero")

    return apply_credit_change(
        user=user,
        amount=amount,
        bonus_amount=normalize_amount(bonus),
        transaction_type=CashTransaction.TYPE_CHARGE,
        description=description or "Points charge",
        order=order,
    )


# ---------------------------------------------------------------------
# CASH PURCHASE (buy now with points)
# ---------------------------------------------------------------------

@dataclass
class CashPurchaseResult:
    success: bool
    new_credits: int = 0
    order_id: str | None = None
    reason: str | None = None
    current_credits: int = 0

    def as_dict(self) -> dict:
        if self.success:
            return {"success": True, "newCredits": self.new_credits, "orderId": self.order_id}
        return {
            "success": False,
            "reason": self.reason,
            "currentCredits": self.current_credits,
        }


def process_cash_purchase(
    *,
    user,
    total_price,
    description: str,
    items=None,
    sheet_id=None,
    payment_method: str = "cash",
) -> CashPurchaseResult:
    """
    items: [{"sheet_id": <uuid>, "title": str?, "price": number}]
    """
    items = list(items or [])
    total = normalize_amount(total_price)

    try:
        with transaction.atomic():
            profile = lock_profile(user)
            current = int(profile.credits or 0)
            if total > current:
                raise InsufficientCreditError(current_credits=current, required=total)

            now = timezone.now()
            sheets = {
                s.id: s
                for s in DrumSheet.objects.filter(id__in=[i["sheet_id"] for i in items])
            }
            has_preorder = any(s.is_preorder for s in sheets.values())

            order = Order.objects.create(
                user=user,
                total_amount=total,
                status=Order.STATUS_COMPLETED,
                payment_status=Order.PAYMENT_PAID,
                payment_method=payment_method,
                payment_confirmed_at=now,
                raw_status="payment_confirmed",
                order_type=Order.TYPE_PRODUCT,
                expected_completion_date=calculate_expected_completion_date(now) if has_preorder else None,
                metadata={"type": Order.METADATA_SHEET_PURCHASE, "description": description},
            )

            order_items = []
            for item in items:
                sheet = sheets.get(_as_uuid(item["sheet_id"]))
                if sheet is None:
                    raise OrderValidationError(f"Unknown sheet: {item['sheet_id']}")
                order_items.append(
                    OrderItem(
                        order=order,
                        drum_sheet=sheet,
                        sheet_title=(item.get("title") or "").strip() or sheet.title or UNKNOWN_TITLE,
                        price=normalize_amount(item.get("price")),
                    )
                )
            OrderItem.objects.bulk_create(order_items)
            Purchase.objects.bulk_create(
                [
                    Purchase(user=user, drum_sheet=oi.drum_sheet, order=order, price_paid=oi.price)
                    for oi in order_items
                ]
            )

            new_credits = current
            if total > 0:
                inferred = sheet_id or (order_items[0].drum_sheet_id if len(order_items) == 1 else None)
                tx = apply_credit_change(
                    user=user,
                    amount=-total,
                    transaction_type=CashTransaction.TYPE_USE,
                    description=description,
                    sheet=DrumSheet.objects.filter(id=inferred).first() if inferred else None,
                    order=order,
                    profile=profile,
                )
                new_credits = tx.balance_after
    except InsufficientCreditError as exc:
        logger.info(
            "Cash purchase rejected: insufficient credit",
            extra={"user_id": str(user.pk), "required": total, "current": exc.current_credits},
        )
        return CashPurchaseResult(
            success=False,
            reason=REASON_INSUFFICIENT_CREDIT,
            current_credits=exc.current_credits,
        )

    logger.info(
        "Cash purchase completed",
        extra={"user_id": str(user.pk), "order_id": str(order.id), "total": total},
    )
    return CashPurchaseResult(success=True, new_credits=new_credits, order_id=str(order.id))


def _as_uuid(value):
    return value if isinstance(value, uuid.UUID) else uuid.UUID(str(value))


# ---------------------------------------------------------------------
# POINTS PAYMENT (existing order)
# ---------------------------------------------------------------------

@dataclass
class PointsPaymentResult:
    remaining_points: int
    already_completed: bool = False


def pay_order_with_points(*, order_id, user, amount, points_to_use) -> PointsPaymentResult:
    amount = normalize_amount(amount)
    points_to_use = normalize_amount(points_to_use)

    if amount <= 0 or points_to_use <= 0:
        raise PointsPaymentError("Missing required fields")

    with transaction.atomic():
        order = Order.objects.select_for_update().filter(id=order_id, user=user).first()
        if order is None:
            raise OrderNotFoundError(f"Order not found: {order_id}")

        profile = lock_profile(user)

        if order.is_paid:
            logger.info("Points payment on completed order ignored", extra={"order_id": str(order.id)})
            return PointsPaymentResult(remaining_points=int(profile.credits), already_completed=True)

        if int(profile.credits) < points_to_use:
            raise InsufficientCreditError(current_credits=profile.credits, required=points_to_use)

        if points_to_use < amount:
            raise PointsPaymentError("Points amount is less than order amount")

        if amount < int(order.total_amount or 0):
            raise PointsPaymentError("Amount does not cover the order total")

        tx = apply_credit_change(
            user=user,
            amount=-points_to_use,
            transaction_type=CashTransaction.TYPE_USE,
            description=f"Points payment for order {order.order_number}",
            order=order,
            profile=profile,
        )

        complete_order_after_payment(
            order.id,
            "points",
            payment_provider="points",
            metadata={"pointsUsed": points_to_use},
        )

    logger.info(
        "Order paid with points",
        extra={"order_id": str(order.id), "points": points_to_use, "remaining": tx.balance_after},
    )
    return PointsPaymentResult(remaining_points=tx.balance_after)
