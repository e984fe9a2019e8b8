# orders/models/purchase.py

from django.conf import settings
from django.db import models


class Purchase(models.Model):
    """
    Download entitlement: one row per (order, sheet) once the order is paid.
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="purchases",
    )
    drum_sheet = models.ForeignKey(
        "catalog.DrumSheet",
        on_delete=models.PROTECT,
        related_name="purchases",
    )
    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="purchases",
        null=True,
        blank=True,
    )

    price_paid = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["order", "drum_sheet"],
                name="unique_purchase_per_order_sheet",
            ),
        ]
        indexes = [
            models.Index(fields=["user", "drum_sheet"], name="orders_purchase_user_sheet_idx"),
        ]

    def __str__(self):
        return f"{self.user_id} -> {self.drum_sheet_id}"
