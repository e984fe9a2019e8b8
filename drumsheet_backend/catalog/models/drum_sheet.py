"""
PATH: catalog/models/drum_sheet.py

DRUM SHEET (sellable PDF)

Sales types:
- INSTANT: the PDF exists; buyers can download right after payment.
- PREORDER: transcription is pending; buyers get the file once an admin
  uploads it (pdf_url set -> sheet flips to INSTANT, buyers are emailed).

Money:
- price is integer KRW. 0 means a free sheet.
"""

from __future__ import annotations

import uuid

from django.db import models
from django.utils.text import slugify

from .category import Category


def build_sheet_slug(artist: str, title: str) -> str:
    base = slugify(f"{artist or ''} {title or ''}".strip(), allow_unicode=True)
    return base or "sheet"


class DrumSheet(models.Model):
    SALES_TYPE_INSTANT = "INSTANT"
    SALES_TYPE_PREORDER = "PREORDER"

    SALES_TYPE_CHOICES = [
        (SALES_TYPE_INSTANT, "Instant download"),
        (SALES_TYPE_PREORDER, "Preorder"),
    ]

    DIFFICULTY_CHOICES = [
        ("beginner", "Beginner"),
        ("intermediate", "Intermediate"),
        ("advanced", "Advanced"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    category = models.ForeignKey(
        Category,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="sheets",
    )

    title = models.CharField(max_length=255, db_index=True)
    artist = models.CharField(max_length=255, db_index=True)
    slug = models.SlugField(max_length=300, unique=True, allow_unicode=True, blank=True)

    price = models.PositiveIntegerField(default=0)
    sales_type = models.CharField(
        max_length=16,
        choices=SALES_TYPE_CHOICES,
        default=SALES_TYPE_INSTANT,
    )

    pdf_url = models.URLField(max_length=500, blank=True, default="")
    preview_image_url = models.URLField(max_length=500, blank=True, default="")
    youtube_url = models.URLField(max_length=500, blank=True, default="")
    difficulty = models.CharField(max_length=20, choices=DIFFICULTY_CHOICES, blank=True, default="")
    page_count = models.PositiveIntegerField(null=True, blank=True)

    preorder_deadline = models.DateTimeField(null=True, blank=True)

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["sales_type"], name="catalog_sheet_sales_type_idx"),
            models.Index(fields=["is_active", "price"], name="catalog_sheet_active_price_idx"),
        ]

    def __str__(self):
        return f"{self.artist} - {self.title}"

    @property
    def is_preorder(self) -> bool:
        return self.sales_type == self.SALES_TYPE_PREORDER

    @property
    def is_free(self) -> bool:
        return int(self.price or 0) == 0

    @property
    def has_file(self) -> bool:
        return bool((self.pdf_url or "").strip())

    def _unique_slug(self) -> str:
        base = build_sheet_slug(self.artist, self.title)
        candidate = base
        i = 1
        while DrumSheet.objects.filter(slug=candidate).exclude(pk=self.pk).exists():
            i += 1
            candidate = f"{base}-{i}"
        return candidate

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = self._unique_slug()
        super().save(*args, **kwargs)
