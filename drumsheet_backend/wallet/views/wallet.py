"""
PATH: wallet/views/wallet.py

POINTS WALLET ENDPOINTS

GET  /api/wallet/                 balance
GET  /api/wallet/transactions/    ledger history
POST /api/wallet/charge/          pending cash-charge order (paid via a provider)
POST /api/wallet/purchase/        buy sheets straight from the balance
POST /api/payments/points/pay/    settle a pending order with points

Money rules:
- Prices for cash purchases come from the catalog, never the client.
- Bonus on a charge is admin-only (customers always get 0).
"""

from __future__ import annotations

import logging
from collections import Counter

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import generics, status
from rest_framework.parsers import JSONParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import UserRateThrottle
from rest_framework.views import APIView

from backend.api_errors import error_response
from cart.services.cart_service import owned_sheet_ids
from catalog.models import DrumSheet
from orders.services.exceptions import OrderNotFoundError, OrderValidationError
from orders.services.order_service import create_cash_charge_order
from wallet.models import CashTransaction
from wallet.serializers import (
    CashPurchaseInputSerializer,
    CashTransactionSerializer,
    ChargeInputSerializer,
    PointsPayInputSerializer,
)
from wallet.services.credits import get_balance, pay_order_with_points, process_cash_purchase
from wallet.services.exceptions import InsufficientCreditError, PointsPaymentError

logger = logging.getLogger(__name__)


class WalletWriteThrottle(UserRateThrottle):
    scope = "public_write"


class WalletBalanceView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["Wallet"], responses={200: OpenApiResponse(description="{success, credits}")})
    def get(self, request):
        return Response({"success": True, "credits": get_balance(request.user)}, status=status.HTTP_200_OK)


@extend_schema(tags=["Wallet"])
class WalletTransactionListView(generics.ListAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = CashTransactionSerializer
    filterset_fields = ["transaction_type"]

    def get_queryset(self):
        return CashTransaction.objects.filter(user=self.request.user).select_related("sheet", "order")


class ChargeOrderView(APIView):
    permission_classes = [IsAuthenticated]
    parser_classes = [JSONParser]
    throttle_classes = [WalletWriteThrottle]

    @extend_schema(
        tags=["Wallet"],
        request=ChargeInputSerializer,
        responses={201: OpenApiResponse(description="{success, orderId, orderNumber, amount}")},
        description="Create a pending points top-up order; pay it through any provider.",
    )
    def post(self, request):
        serializer = ChargeInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        bonus = data.get("bonusAmount") or 0
        if bonus and not getattr(request.user, "is_admin", False):
            bonus = 0

        try:
            order = create_cash_charge_order(
                user=request.user,
                amount=data["amount"],
                bonus_amount=bonus,
                payment_method=data.get("paymentMethod") or "",
            )
        except OrderValidationError as exc:
            return error_response(str(exc), status.HTTP_400_BAD_REQUEST)

        return Response(
            {
                "success": True,
                "orderId": str(order.id),
                "orderNumber": order.order_number,
                "amount": order.total_amount,
            },
            status=status.HTTP_201_CREATED,
        )


class PointsPayView(APIView):
    permission_classes = [IsAuthenticated]
    parser_classes = [JSONParser]
    throttle_classes = [WalletWriteThrottle]

    @extend_schema(
        tags=["Payments"],
        request=PointsPayInputSerializer,
        responses={
            200: OpenApiResponse(description="{success, remainingPoints}"),
            400: OpenApiResponse(description="Insufficient points / amount mismatch"),
            404: OpenApiResponse(description="Order not found"),
        },
        description="Pay a pending order with points.",
    )
    def post(self, request):
        serializer = PointsPayInputSerializer(data=request.data)
        if not serializer.is_valid():
            return error_response("Missing required fields", status.HTTP_400_BAD_REQUEST, details=serializer.errors)
        data = serializer.validated_data

        try:
            result = pay_order_with_points(
                order_id=data["orderId"],
                user=request.user,
                amount=data["amount"],
                points_to_use=data["pointsToUse"],
            )
        except OrderNotFoundError:
            return error_response("Order not found", status.HTTP_404_NOT_FOUND)
        except InsufficientCreditError:
            return error_response("Insufficient points", status.HTTP_400_BAD_REQUEST)
        except PointsPaymentError as exc:
            return error_response(str(exc), status.HTTP_400_BAD_REQUEST)

        body = {"success": True, "remainingPoints": result.remaining_points}
        if result.already_completed:
            body["message"] = "Order already completed"
        return Response(body, status=status.HTTP_200_OK)


class CashPurchaseView(APIView):
    permission_classes = [IsAuthenticated]
    parser_classes = [JSONParser]
    throttle_classes = [WalletWriteThrottle]

    @extend_schema(
        tags=["Wallet"],
        request=CashPurchaseInputSerializer,
        responses={
            200: OpenApiResponse(description="{success, newCredits, orderId}"),
            400: OpenApiResponse(description="{success:false, reason: INSUFFICIENT_CREDIT, currentCredits}"),
            409: OpenApiResponse(description="A requested sheet is already owned"),
        },
        description="Buy sheets directly with the points balance.",
    )
    def post(self, request):
        serializer = CashPurchaseInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        sheet_ids = [item["sheetId"] for item in data["items"]]
        duplicates = sorted(str(i) for i, count in Counter(sheet_ids).items() if count > 1)
        if duplicates:
            return error_response(
                "Duplicate sheet(s)", status.HTTP_400_BAD_REQUEST, details={"sheetIds": duplicates}
            )

        sheets = {s.id: s for s in DrumSheet.objects.filter(id__in=sheet_ids, is_active=True)}
        missing = [str(i) for i in sheet_ids if i not in sheets]
        if missing:
            return error_response("Unknown sheet(s)", status.HTTP_400_BAD_REQUEST, details={"sheetIds": missing})

        already_owned = owned_sheet_ids(request.user)
        owned = [str(i) for i in sheet_ids if i in already_owned]
        if owned:
            return error_response(
                "You already own this sheet", status.HTTP_409_CONFLICT, details={"sheetIds": owned}
            )

        items = [
            {"sheet_id": sid, "title": sheets[sid].title, "price": sheets[sid].price}
            for sid in sheet_ids
        ]
        total = sum(int(item["price"]) for item in items)
        description = data.get("description") or (
            items[0]["title"] if len(items) == 1 else f"{items[0]['title']} +{len(items) - 1}"
        )

        result = process_cash_purchase(
            user=request.user,
            total_price=total,
            description=description,
            items=items,
        )

        if not result.success:
            return Response(result.as_dict(), status=status.HTTP_400_BAD_REQUEST)
        return Response(result.as_dict(), status=status.HTTP_200_OK)
