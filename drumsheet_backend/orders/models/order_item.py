# orders/models/order_item.py

from django.db import models


class OrderItem(models.Model):
    """
    One sheet in an order.

    sheet_title and price are snapshots taken at order creation.
    """

    order = models.ForeignKey("orders.Order", on_delete=models.CASCADE, related_name="items")
    drum_sheet = models.ForeignKey(
        "catalog.DrumSheet",
        on_delete=models.PROTECT,
        related_name="order_items",
    )

    sheet_title = models.CharField(max_length=255, blank=True, default="")
    price = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "id"]

    def __str__(self):
        return f"{self.sheet_title} @ {self.price}"
