# catalog/models/collection.py

"""
Sheet bundles sold at a discount ("collections").

original_price is the sum of member prices at curation time; sale_price is
what the bundle costs. Adding a collection to the cart spreads sale_price
across the member sheets the buyer does not already own.
"""

import uuid

from django.db import models
from django.utils.text import slugify

from .drum_sheet import DrumSheet


class Collection(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    title = models.CharField(max_length=255)
    slug = models.SlugField(max_length=300, unique=True, allow_unicode=True, blank=True)
    description = models.TextField(blank=True, default="")
    thumbnail_url = models.URLField(max_length=500, blank=True, default="")

    original_price = models.PositiveIntegerField(default=0)
    sale_price = models.PositiveIntegerField(default=0)

    sheets = models.ManyToManyField(DrumSheet, related_name="collections", blank=True)

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return self.title

    @property
    def discount_amount(self) -> int:
        return max(0, int(self.original_price or 0) - int(self.sale_price or 0))

    @property
    def discount_percent(self) -> int:
        original = int(self.original_price or 0)
        if original <= 0:
            return 0
        return round(self.discount_amount * 100 / original)

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = slugify(self.title, allow_unicode=True) or str(self.id)
        super().save(*args, **kwargs)
