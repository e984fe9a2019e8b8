import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Category",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=100, unique=True)),
                ("slug", models.SlugField(allow_unicode=True, blank=True, max_length=120, unique=True)),
                ("sort_order", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "verbose_name_plural": "categories",
                "ordering": ["sort_order", "name"],
            },
        ),
        migrations.CreateModel(
            name="DrumSheet",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("title", models.CharField(db_index=True, max_length=255)),
                ("artist", models.CharField(db_index=True, max_length=255)),
                ("slug", models.SlugField(allow_unicode=True, blank=True, max_length=300, unique=True)),
                ("price", models.PositiveIntegerField(default=0)),
                (
                    "sales_type",
                    models.CharField(
                        choices=[("INSTANT", "Instant download"), ("PREORDER", "Preorder")],
                        default="INSTANT",
                        max_length=16,
                    ),
                ),
                ("pdf_url", models.URLField(blank=True, default="", max_length=500)),
                ("preview_image_url", models.URLField(blank=True, default="", max_length=500)),
                ("youtube_url", models.URLField(blank=True, default="", max_length=500)),
                (
                    "difficulty",
                    models.CharField(
                        blank=True,
                        choices=[("beginner", "Beginner"), ("intermediate", "Intermediate"), ("advanced", "Advanced")],
                        default="",
                        max_length=20,
                    ),
                ),
                ("page_count", models.PositiveIntegerField(blank=True, null=True)),
                ("preorder_deadline", models.DateTimeField(blank=True, null=True)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "category",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="sheets",
                        to="catalog.category",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["sales_type"], name="catalog_sheet_sales_type_idx"),
                    models.Index(fields=["is_active", "price"], name="catalog_sheet_active_price_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Collection",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("title", models.CharField(max_length=255)),
                ("slug", models.SlugField(allow_unicode=True, blank=True, max_length=300, unique=True)),
                ("description", models.TextField(blank=True, default="")),
                ("thumbnail_url", models.URLField(blank=True, default="", max_length=500)),
                ("original_price", models.PositiveIntegerField(default=0)),
                ("sale_price", models.PositiveIntegerField(default=0)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "sheets",
                    models.ManyToManyField(blank=True, related_name="collections", to="catalog.drumsheet"),
                ),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
    ]
