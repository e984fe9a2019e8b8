"""
PATH: orders/services/order_admin.py

ORDER BOOKKEEPING (notes + preorder dates)

- append_payment_note(): payment failure / cancel reasons. Full history in
  metadata.payment_notes; latest one flattened into payment_note.
- set_expected_completion_date(): single order (admin).
- bulk_set_expected_completion_date(): only orders that contain PREORDER
  sheets are touched; the rest are reported as skipped.
"""

from __future__ import annotations

import logging
import re
from datetime import date

from django.db import transaction
from django.utils import timezone

from catalog.models import DrumSheet
from orders.models import Order
from orders.services.exceptions import OrderNotFoundError, OrderValidationError

logger = logging.getLogger(__name__)

YMD_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

DEFAULT_NOTE_TYPE = "unknown"
DEFAULT_NOTE_MESSAGE = "No reason given"


def parse_ymd(value) -> date:
    raw = str(value or "").strip()
    if not raw:
        raise OrderValidationError("expected_completion_date is required")
    if not YMD_RE.match(raw):
        raise OrderValidationError("Invalid date format (YYYY-MM-DD required)")
    try:
        return date.fromisoformat(raw)
    except ValueError as exc:
        raise OrderValidationError("Invalid date format (YYYY-MM-DD required)") from exc


@transaction.atomic
def append_payment_note(*, order_id, note: str | None, note_type: str | None) -> Order:
    order = Order.objects.select_for_update().filter(id=order_id).first()
    if order is None:
        raise OrderNotFoundError(f"Order not found: {order_id}")

    timestamp = timezone.now().isoformat()
    note_type = (note_type or "").strip() or DEFAULT_NOTE_TYPE
    message = (note or "").strip() or DEFAULT_NOTE_MESSAGE

    metadata = dict(order.metadata or {})
    notes = list(metadata.get("payment_notes") or [])
    notes.append({"type": note_type, "message": message, "timestamp": timestamp})
    metadata["payment_notes"] = notes

    order.metadata = metadata
    order.payment_note = f"[{note_type}] {message} ({timestamp})"
    order.save(update_fields=["metadata", "payment_note", "updated_at"])

    logger.info("Payment note recorded", extra={"order_id": str(order.id), "note_type": note_type})
    return order


def set_expected_completion_date(*, order_id, value) -> Order:
    completion_date = parse_ymd(value)

    order = Order.objects.filter(id=order_id).first()
    if order is None:
        raise OrderNotFoundError(f"Order not found: {order_id}")

    order.expected_completion_date = completion_date
    order.save(update_fields=["expected_completion_date", "updated_at"])
    return order


def bulk_set_expected_completion_date(*, order_ids, value) -> dict:
    order_ids = [str(i) for i in (order_ids or [])]
    if not order_ids:
        raise OrderValidationError("orderIds must be a non-empty list")

    completion_date = parse_ymd(value)

    found = list(Order.objects.filter(id__in=order_ids).values_list("id", flat=True))
    if not found:
        raise OrderNotFoundError("None of the selected orders exist")

    preorder_ids = {
        str(i)
        for i in Order.objects.filter(
            id__in=found,
            items__drum_sheet__sales_type=DrumSheet.SALES_TYPE_PREORDER,
        )
        .values_list("id", flat=True)
        .distinct()
    }

    if not preorder_ids:
        raise OrderValidationError(
            "None of the selected orders contain preorder sheets"
        )

    updated = Order.objects.filter(id__in=preorder_ids).update(
        expected_completion_date=completion_date,
        updated_at=timezone.now(),
    )

    updated_ids = [i for i in order_ids if i in preorder_ids]
    skipped_ids = [i for i in order_ids if i not in preorder_ids]

    logger.info(
        "Expected completion date bulk update",
        extra={"updated": updated, "skipped": len(skipped_ids), "date": completion_date.isoformat()},
    )
    return {
        "updatedCount": updated,
        "skippedCount": len(skipped_ids),
        "updatedOrderIds": updated_ids,
        "skippedOrderIds": skipped_ids,
        "expected_completion_date": completion_date.isoformat(),
    }
