"""
PATH: cart/models/cart.py

CART MODEL

Purpose:
- One persistent storefront cart per user.
- Derive total + item count from CartItems.

Rules:
- Items are sheets (no quantities: a PDF is bought once).
- Purchased sheets are removed after payment (best effort).
"""

import uuid

from django.conf import settings
from django.db import models
from django.db.models import Sum


class Cart(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="cart",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    @property
    def item_count(self) -> int:
        return self.items.count()

    @property
    def total_amount(self) -> int:
        total = self.items.aggregate(total=Sum("price")).get("total")
        return int(total or 0)

    def __str__(self):
        return f"Cart {self.id} | {self.user}"
