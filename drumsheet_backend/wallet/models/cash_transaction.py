"""
PATH: wallet/models/cash_transaction.py

POINTS LEDGER (append-only)

Every change to Profile.credits writes exactly one row here:
- amount is signed (+ charge / refund / positive adjust, - use)
- bonus_amount is the promotional top-up granted with a charge
- balance_after equals Profile.credits right after the change
"""

from django.conf import settings
from django.db import models


class CashTransaction(models.Model):
    TYPE_CHARGE = "charge"
    TYPE_USE = "use"
    TYPE_REFUND = "refund"
    TYPE_ADMIN_ADJUST = "admin_adjust"

    TYPE_CHOICES = [
        (TYPE_CHARGE, "Charge"),
        (TYPE_USE, "Use"),
        (TYPE_REFUND, "Refund"),
        (TYPE_ADMIN_ADJUST, "Admin adjustment"),
    ]

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="cash_transactions",
    )

    transaction_type = models.CharField(max_length=20, choices=TYPE_CHOICES)
    amount = models.IntegerField()
    bonus_amount = models.PositiveIntegerField(default=0)
    balance_after = models.PositiveIntegerField()
    description = models.CharField(max_length=255, blank=True, default="")

    sheet = models.ForeignKey(
        "catalog.DrumSheet",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="cash_transactions",
    )
    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="cash_transactions",
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["user", "created_at"], name="wallet_cashtx_user_created_idx"),
        ]

    def __str__(self):
        return f"{self.user_id} {self.transaction_type} {self.amount:+d} -> {self.balance_after}"
