# catalog/serializers/collection.py

from rest_framework import serializers

from catalog.models import Collection
from payments.services.currency import display_price

from .sheet import DrumSheetSerializer, _request_locale


class CollectionSerializer(serializers.ModelSerializer):
    sheet_count = serializers.SerializerMethodField()
    discount_percent = serializers.IntegerField(read_only=True)
    display_sale_price = serializers.SerializerMethodField()

    class Meta:
        model = Collection
        fields = [
            "id",
            "title",
            "slug",
            "description",
            "thumbnail_url",
            "original_price",
            "sale_price",
            "discount_percent",
            "display_sale_price",
            "sheet_count",
        ]

    def get_sheet_count(self, obj) -> int:
        return obj.sheets.filter(is_active=True).count()

    def get_display_sale_price(self, obj) -> str:
        return display_price(obj.sale_price, _request_locale(self.context))["formatted"]


class CollectionDetailSerializer(CollectionSerializer):
    sheets = serializers.SerializerMethodField()
    discount_amount = serializers.IntegerField(read_only=True)

    class Meta(CollectionSerializer.Meta):
        fields = CollectionSerializer.Meta.fields + ["discount_amount", "sheets"]

    def get_sheets(self, obj):
        qs = obj.sheets.filter(is_active=True).select_related("category").order_by("artist", "title")
        return DrumSheetSerializer(qs, many=True, context=self.context).data
