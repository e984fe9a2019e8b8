# orders/models/order.py

import secrets
import string
import uuid

from django.conf import settings
from django.db import models
from django.utils import timezone

_ORDER_SUFFIX_ALPHABET = string.ascii_uppercase + string.digits


def generate_order_number(now=None) -> str:
    """
    ORDER-YYYYMMDD-XXXXXX (UTC date, 6 random base36 chars).
    """
    now = now or timezone.now()
    suffix = "".join(secrets.choice(_ORDER_SUFFIX_ALPHABET) for _ in range(6))
    return f"ORDER-{now.strftime('%Y%m%d')}-{suffix}"


class Order(models.Model):
    """
    Storefront order.

    Lifecycle:
    - created pending/pending (sheet purchase or cash charge)
    - virtual account issued -> payment_status awaiting_deposit
    - any provider success -> complete_order_after_payment() -> completed/paid

    Two independent axes are kept on purpose:
    - status: order fulfilment state
    - payment_status: money state reported by the provider
    """

    STATUS_PENDING = "pending"
    STATUS_COMPLETED = "completed"
    STATUS_CANCELLED = "cancelled"
    STATUS_REFUNDED = "refunded"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_COMPLETED, "Completed"),
        (STATUS_CANCELLED, "Cancelled"),
        (STATUS_REFUNDED, "Refunded"),
    ]

    PAYMENT_PENDING = "pending"
    PAYMENT_AWAITING_DEPOSIT = "awaiting_deposit"
    PAYMENT_PAID = "paid"
    PAYMENT_FAILED = "failed"
    PAYMENT_CANCELLED = "cancelled"
    PAYMENT_REFUNDED = "refunded"

    PAYMENT_STATUS_CHOICES = [
        (PAYMENT_PENDING, "Pending"),
        (PAYMENT_AWAITING_DEPOSIT, "Awaiting Deposit"),
        (PAYMENT_PAID, "Paid"),
        (PAYMENT_FAILED, "Failed"),
        (PAYMENT_CANCELLED, "Cancelled"),
        (PAYMENT_REFUNDED, "Refunded"),
    ]

    TYPE_PRODUCT = "product"
    TYPE_CASH = "cash"

    ORDER_TYPE_CHOICES = [
        (TYPE_PRODUCT, "Sheet purchase"),
        (TYPE_CASH, "Cash charge"),
    ]

    METADATA_SHEET_PURCHASE = "sheet_purchase"
    METADATA_CASH_CHARGE = "cash_charge"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    order_number = models.CharField(max_length=32, unique=True, blank=True)

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="orders",
    )

    total_amount = models.PositiveIntegerField(default=0)

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING)
    payment_status = models.CharField(
        max_length=20,
        choices=PAYMENT_STATUS_CHOICES,
        default=PAYMENT_PENDING,
    )

    payment_method = models.CharField(max_length=30, blank=True, default="")
    payment_provider = models.CharField(max_length=30, blank=True, default="")
    transaction_id = models.CharField(max_length=128, blank=True, default="", db_index=True)
    raw_status = models.CharField(max_length=50, blank=True, default="")
    payment_confirmed_at = models.DateTimeField(null=True, blank=True)
    depositor_name = models.CharField(max_length=100, blank=True, default="")

    order_type = models.CharField(max_length=20, choices=ORDER_TYPE_CHOICES, default=TYPE_PRODUCT)

    expected_completion_date = models.DateField(null=True, blank=True)
    payment_note = models.TextField(blank=True, default="")

    virtual_account_info = models.JSONField(null=True, blank=True)
    metadata = models.JSONField(default=dict, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "created_at"], name="orders_order_user_created_idx"),
            models.Index(fields=["payment_status"], name="orders_order_pay_status_idx"),
            models.Index(fields=["status"], name="orders_order_status_idx"),
        ]

    def save(self, *args, **kwargs):
        if not self.order_number:
            self.order_number = generate_order_number()
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.order_number} | {self.total_amount} | {self.status}/{self.payment_status}"

    @property
    def is_paid(self) -> bool:
        return self.payment_status == self.PAYMENT_PAID or self.status == self.STATUS_COMPLETED

    @property
    def metadata_type(self) -> str:
        meta = self.metadata or {}
        return str(meta.get("type") or meta.get("purpose") or "")
