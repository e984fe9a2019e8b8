"""
PATH: catalog/services/preorder_fulfillment.py

PREORDER -> INSTANT FULFILMENT

When an admin uploads the PDF for a PREORDER sheet:
1) the sheet flips to INSTANT (same save as the pdf_url update)
2) paid orders containing the sheet are marked completed
3) each distinct buyer is emailed that the sheet is ready

Steps 2-3 never fail the admin update: errors are logged and swallowed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from smtplib import SMTPException

from django.conf import settings
from django.core.mail import send_mail
from django.db import DatabaseError

from catalog.models import DrumSheet
from orders.models import Order, OrderItem

logger = logging.getLogger(__name__)


@dataclass
class FulfillmentResult:
    order_ids: list = field(default_factory=list)
    emailed: list = field(default_factory=list)
    failed_emails: list = field(default_factory=list)


def becomes_fulfilled(sheet: DrumSheet, new_pdf_url) -> bool:
    """
    True when this update delivers the first file for a preorder sheet.
    """
    return (
        sheet.sales_type == DrumSheet.SALES_TYPE_PREORDER
        and not sheet.has_file
        and bool((new_pdf_url or "").strip())
    )


def _completion_email(sheet: DrumSheet) -> tuple:
    subject = f"[CopyDrum] Your drum sheet for {sheet.title} is ready!"
    body = (
        "Hello from CopyDrum.\n\n"
        f"The transcription of {sheet.artist} - {sheet.title} you pre-ordered is complete.\n\n"
        "You can download it right away from My Page:\n"
        f"{settings.APP_URL}/mypage\n\n"
        "Thank you,\n"
        "The CopyDrum team"
    )
    return subject, body


def notify_preorder_buyers(sheet: DrumSheet) -> FulfillmentResult:
    result = FulfillmentResult()

    try:
        items = (
            OrderItem.objects.filter(drum_sheet=sheet, order__payment_status=Order.PAYMENT_PAID)
            .select_related("order__user")
        )
        orders = {item.order_id: item.order for item in items}
        result.order_ids = [str(order_id) for order_id in orders]

        Order.objects.filter(id__in=list(orders)).exclude(status=Order.STATUS_COMPLETED).update(
            status=Order.STATUS_COMPLETED
        )
    except DatabaseError:
        logger.error("Preorder fulfilment lookup failed", extra={"sheet_id": str(sheet.id)}, exc_info=True)
        return result

    emails = sorted({(o.user.email or "").strip() for o in orders.values()} - {""})
    subject, body = _completion_email(sheet)

    for email in emails:
        try:
            send_mail(subject, body, settings.DEFAULT_FROM_EMAIL, [email], fail_silently=False)
            result.emailed.append(email)
        except (SMTPException, OSError):
            logger.warning(
                "Preorder completion email failed",
                extra={"sheet_id": str(sheet.id), "email": email},
                exc_info=True,
            )
            result.failed_emails.append(email)

    logger.info(
        "Preorder fulfilled",
        extra={"sheet_id": str(sheet.id), "orders": len(result.order_ids), "emailed": len(result.emailed)},
    )
    return result
