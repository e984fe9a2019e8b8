# orders/serializers/order.py

from rest_framework import serializers

from orders.models import Order, OrderItem, Purchase


class OrderItemSerializer(serializers.ModelSerializer):
    sheet_id = serializers.UUIDField(source="drum_sheet_id", read_only=True)
    artist = serializers.CharField(source="drum_sheet.artist", read_only=True)
    sales_type = serializers.CharField(source="drum_sheet.sales_type", read_only=True)

    class Meta:
        model = OrderItem
        fields = ["id", "sheet_id", "sheet_title", "artist", "sales_type", "price"]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "total_amount",
            "status",
            "payment_status",
            "payment_method",
            "order_type",
            "expected_completion_date",
            "payment_confirmed_at",
            "created_at",
        ]
        read_only_fields = fields


class OrderDetailSerializer(OrderSerializer):
    items = OrderItemSerializer(many=True, read_only=True)

    class Meta(OrderSerializer.Meta):
        fields = OrderSerializer.Meta.fields + [
            "transaction_id",
            "depositor_name",
            "virtual_account_info",
            "payment_note",
            "items",
        ]
        read_only_fields = fields


class PurchaseSerializer(serializers.ModelSerializer):
    sheet_id = serializers.UUIDField(source="drum_sheet_id", read_only=True)
    title = serializers.CharField(source="drum_sheet.title", read_only=True)
    artist = serializers.CharField(source="drum_sheet.artist", read_only=True)
    slug = serializers.CharField(source="drum_sheet.slug", read_only=True)
    sales_type = serializers.CharField(source="drum_sheet.sales_type", read_only=True)
    downloadable = serializers.BooleanField(source="drum_sheet.has_file", read_only=True)
    order_number = serializers.CharField(source="order.order_number", read_only=True, default=None)
    expected_completion_date = serializers.DateField(
        source="order.expected_completion_date", read_only=True, default=None
    )

    class Meta:
        model = Purchase
        fields = [
            "id",
            "sheet_id",
            "title",
            "artist",
            "slug",
            "sales_type",
            "downloadable",
            "price_paid",
            "order_number",
            "expected_completion_date",
            "created_at",
        ]
        read_only_fields = fields


# =====================================================
# INPUT SERIALIZERS
# =====================================================

class CreateOrderItemInputSerializer(serializers.Serializer):
    sheetId = serializers.UUIDField()
    title = serializers.CharField(required=False, allow_blank=True, default="")
    price = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, default=0)


class CreateOrderInputSerializer(serializers.Serializer):
    items = CreateOrderItemInputSerializer(many=True, allow_empty=False)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    description = serializers.CharField(required=False, allow_blank=True, default="")


class CompleteOrderInputSerializer(serializers.Serializer):
    orderId = serializers.UUIDField()
    paymentMethod = serializers.CharField(max_length=30)
    transactionId = serializers.CharField(required=False, allow_blank=True, default="")
    paymentConfirmedAt = serializers.DateTimeField(required=False, allow_null=True, default=None)
    paymentProvider = serializers.CharField(required=False, allow_blank=True, default="")
    depositorName = serializers.CharField(required=False, allow_blank=True, default="")
    metadata = serializers.DictField(required=False, default=dict)


class ExpectedDateInputSerializer(serializers.Serializer):
    expected_completion_date = serializers.CharField(required=False, allow_blank=True, default="")


class BulkExpectedDateInputSerializer(serializers.Serializer):
    orderIds = serializers.ListField(child=serializers.UUIDField(), allow_empty=False)
    expected_completion_date = serializers.CharField(required=False, allow_blank=True, default="")


class UpdateNoteInputSerializer(serializers.Serializer):
    orderId = serializers.UUIDField()
    note = serializers.CharField(required=False, allow_blank=True, default="")
    noteType = serializers.CharField(required=False, allow_blank=True, default="")
