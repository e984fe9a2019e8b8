# cart/serializers/cart.py

from rest_framework import serializers

from cart.models import Cart, CartItem


class CartItemSerializer(serializers.ModelSerializer):
    sheet_id = serializers.UUIDField(source="drum_sheet.id", read_only=True)
    title = serializers.CharField(source="drum_sheet.title", read_only=True)
    artist = serializers.CharField(source="drum_sheet.artist", read_only=True)
    slug = serializers.CharField(source="drum_sheet.slug", read_only=True)
    sales_type = serializers.CharField(source="drum_sheet.sales_type", read_only=True)
    collection_id = serializers.UUIDField(read_only=True, allow_null=True)

    class Meta:
        model = CartItem
        fields = [
            "id",
            "sheet_id",
            "title",
            "artist",
            "slug",
            "sales_type",
            "collection_id",
            "price",
            "added_at",
        ]
        read_only_fields = fields


class CartSerializer(serializers.ModelSerializer):
    items = serializers.SerializerMethodField()
    item_count = serializers.IntegerField(read_only=True)
    total_amount = serializers.IntegerField(read_only=True)

    class Meta:
        model = Cart
        fields = [
            "id",
            "items",
            "item_count",
            "total_amount",
            "updated_at",
        ]
        read_only_fields = fields

    def get_items(self, obj):
        qs = obj.items.select_related("drum_sheet").order_by("added_at")
        return CartItemSerializer(qs, many=True).data
