# cart/models/cart_item.py

"""
CART ITEM

Rules:
- One sheet per cart (DB constraint).
- price is a KRW snapshot taken when the sheet was added; for sheets added
  through a collection it is the sheet's share of the bundle price.
"""

import uuid

from django.db import models

from .cart import Cart


class CartItem(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    cart = models.ForeignKey(Cart, on_delete=models.CASCADE, related_name="items")
    drum_sheet = models.ForeignKey(
        "catalog.DrumSheet",
        on_delete=models.CASCADE,
        related_name="cart_items",
    )
    collection = models.ForeignKey(
        "catalog.Collection",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="cart_items",
    )

    price = models.PositiveIntegerField(default=0)

    added_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["added_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["cart", "drum_sheet"],
                name="unique_sheet_per_cart",
            )
        ]

    def __str__(self):
        return f"{self.drum_sheet_id} @ {self.price}"
