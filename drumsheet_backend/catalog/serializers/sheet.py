# catalog/serializers/sheet.py

from rest_framework import serializers

from catalog.models import Category, DrumSheet
from payments.services.currency import display_price


def _request_locale(context) -> str:
    request = context.get("request")
    if request is None:
        return context.get("locale") or ""
    return (request.query_params.get("locale") or "").strip()


class CategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = ["id", "name", "slug"]


class DrumSheetSerializer(serializers.ModelSerializer):
    """
    Public list row.

    Rules:
    - price stays KRW (source of truth)
    - display_price / currency follow ?locale=
    - pdf_url is never exposed here (downloads go through orders)
    """

    category = CategorySerializer(read_only=True)
    currency = serializers.SerializerMethodField()
    display_price = serializers.SerializerMethodField()

    class Meta:
        model = DrumSheet
        fields = [
            "id",
            "title",
            "artist",
            "slug",
            "category",
            "price",
            "currency",
            "display_price",
            "sales_type",
            "difficulty",
            "preview_image_url",
            "is_active",
            "created_at",
        ]

    def get_currency(self, obj) -> str:
        return display_price(obj.price, _request_locale(self.context))["currency"]

    def get_display_price(self, obj) -> str:
        return display_price(obj.price, _request_locale(self.context))["formatted"]


class DrumSheetDetailSerializer(DrumSheetSerializer):
    has_file = serializers.BooleanField(read_only=True)

    class Meta(DrumSheetSerializer.Meta):
        fields = DrumSheetSerializer.Meta.fields + [
            "youtube_url",
            "page_count",
            "preorder_deadline",
            "has_file",
        ]


class AdminSheetUpdateSerializer(serializers.ModelSerializer):
    category_id = serializers.PrimaryKeyRelatedField(
        source="category",
        queryset=Category.objects.all(),
        required=False,
        allow_null=True,
    )

    class Meta:
        model = DrumSheet
        fields = [
            "title",
            "artist",
            "category_id",
            "price",
            "sales_type",
            "pdf_url",
            "preview_image_url",
            "youtube_url",
            "difficulty",
            "page_count",
            "preorder_deadline",
            "is_active",
        ]
