# wallet/serializers.py

from rest_framework import serializers

from wallet.models import CashTransaction


class CashTransactionSerializer(serializers.ModelSerializer):
    sheet_title = serializers.CharField(source="sheet.title", read_only=True, default=None)
    order_number = serializers.CharField(source="order.order_number", read_only=True, default=None)

    class Meta:
        model = CashTransaction
        fields = [
            "id",
            "transaction_type",
            "amount",
            "bonus_amount",
            "balance_after",
            "description",
            "sheet_title",
            "order_number",
            "created_at",
        ]
        read_only_fields = fields


class ChargeInputSerializer(serializers.Serializer):
    amount = serializers.IntegerField(min_value=1000)
    paymentMethod = serializers.CharField(required=False, allow_blank=True, default="")
    bonusAmount = serializers.IntegerField(required=False, min_value=0, default=0)


class PointsPayInputSerializer(serializers.Serializer):
    orderId = serializers.UUIDField()
    amount = serializers.IntegerField()
    pointsToUse = serializers.IntegerField()


class CashPurchaseItemInputSerializer(serializers.Serializer):
    sheetId = serializers.UUIDField()
    title = serializers.CharField(required=False, allow_blank=True, default="")
    price = serializers.IntegerField(min_value=0)


class CashPurchaseInputSerializer(serializers.Serializer):
    items = CashPurchaseItemInputSerializer(many=True, allow_empty=False)
    description = serializers.CharField(required=False, allow_blank=True, default="")
