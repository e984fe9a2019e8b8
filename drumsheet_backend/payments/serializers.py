# payments/serializers.py

from rest_framework import serializers


class PortOneVerifyInputSerializer(serializers.Serializer):
    paymentId = serializers.CharField(max_length=128)
    orderId = serializers.CharField(max_length=64, required=False, allow_blank=True, default="")


class KakaoPayPrepareInputSerializer(serializers.Serializer):
    orderId = serializers.UUIDField()
    orderName = serializers.CharField(max_length=255)
    userEmail = serializers.EmailField(required=False, allow_blank=True, default="")


class PayPalCreateOrderInputSerializer(serializers.Serializer):
    orderId = serializers.UUIDField()
    items = serializers.ListField(child=serializers.DictField(), required=False, default=list)
    locale = serializers.CharField(max_length=10, required=False, allow_blank=True, default="")


class PayPalCaptureInputSerializer(serializers.Serializer):
    orderID = serializers.CharField(max_length=64)
    orderId = serializers.UUIDField()


class DodoCreateInputSerializer(serializers.Serializer):
    orderId = serializers.UUIDField()
    orderName = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    customerEmail = serializers.EmailField(required=False, allow_blank=True, default="")
    customerName = serializers.CharField(max_length=150, required=False, allow_blank=True, default="")
