# cart/views/api.py

"""
CART API VIEWS

Purpose:
- Per-user cart lifecycle (add sheet / add collection / remove / clear)
- Checkout summary in the storefront currency
- Checkout: cart -> pending order (payment happens in the payments app)

Hard rules:
- Money is server-owned: price is snapshotted from the sheet (or bundle
  allocation) on add.
- Sheets already owned are never charged again.
"""

from __future__ import annotations

from django.shortcuts import get_object_or_404
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import serializers, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from backend.api_errors import error_response
from cart.serializers import CartSerializer
from cart.services.cart_service import (
    AlreadyOwnedError,
    EmptyCartError,
    add_collection,
    add_sheet,
    build_checkout_summary,
    checkout_cart,
    clear_cart,
    get_cart,
    remove_item,
)
from catalog.models import Collection, DrumSheet
from orders.services.exceptions import OrderValidationError


# =====================================================
# SWAGGER INPUT SERIALIZERS
# =====================================================

class AddCartItemInputSerializer(serializers.Serializer):
    sheet_id = serializers.UUIDField()


class AddCartCollectionInputSerializer(serializers.Serializer):
    collection_id = serializers.UUIDField()


class CheckoutCartInputSerializer(serializers.Serializer):
    description = serializers.CharField(required=False, allow_blank=True, default="")


# =====================================================
# CART API VIEWS
# =====================================================

class ActiveCartView(APIView):
    permission_classes = [IsAuthenticated]
    serializer_class = CartSerializer

    @extend_schema(
        tags=["Cart"],
        responses={200: CartSerializer},
        description="Get (or create) the authenticated user's cart",
    )
    def get(self, request):
        cart = get_cart(request.user)
        return Response(CartSerializer(cart).data, status=status.HTTP_200_OK)


class AddCartItemView(APIView):
    permission_classes = [IsAuthenticated]
    serializer_class = CartSerializer

    @extend_schema(
        tags=["Cart"],
        request=AddCartItemInputSerializer,
        responses={200: CartSerializer},
        description="Add a sheet to the cart (no-op if already present)",
    )
    def post(self, request):
        serializer = AddCartItemInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        sheet = get_object_or_404(DrumSheet, id=serializer.validated_data["sheet_id"], is_active=True)

        try:
            add_sheet(user=request.user, sheet=sheet)
        except AlreadyOwnedError as exc:
            return error_response(str(exc), status.HTTP_409_CONFLICT)

        return Response(CartSerializer(get_cart(request.user)).data, status=status.HTTP_200_OK)


class AddCartCollectionView(APIView):
    permission_classes = [IsAuthenticated]
    serializer_class = CartSerializer

    @extend_schema(
        tags=["Cart"],
        request=AddCartCollectionInputSerializer,
        responses={200: CartSerializer},
        description="Add every not-yet-owned sheet of a collection at its bundle share",
    )
    def post(self, request):
        serializer = AddCartCollectionInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        collection = get_object_or_404(
            Collection, id=serializer.validated_data["collection_id"], is_active=True
        )
        add_collection(user=request.user, collection=collection)

        return Response(CartSerializer(get_cart(request.user)).data, status=status.HTTP_200_OK)


class RemoveCartItemView(APIView):
    permission_classes = [IsAuthenticated]
    serializer_class = CartSerializer

    @extend_schema(tags=["Cart"], responses={200: CartSerializer}, description="Remove one cart item")
    def delete(self, request, item_id):
        if not remove_item(user=request.user, item_id=item_id):
            return error_response("Cart item not found", status.HTTP_404_NOT_FOUND)
        return Response(CartSerializer(get_cart(request.user)).data, status=status.HTTP_200_OK)


class ClearCartView(APIView):
    permission_classes = [IsAuthenticated]
    serializer_class = CartSerializer

    @extend_schema(tags=["Cart"], responses={200: CartSerializer}, description="Remove all cart items")
    def delete(self, request):
        clear_cart(user=request.user)
        return Response(CartSerializer(get_cart(request.user)).data, status=status.HTTP_200_OK)


class CheckoutSummaryView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        tags=["Cart"],
        parameters=[
            OpenApiParameter(
                name="locale",
                type=str,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Storefront locale; selects currency and payment methods",
            ),
        ],
        responses={200: dict},
        description="Checkout summary: KRW total, converted total, offered payment methods",
    )
    def get(self, request):
        locale = (request.query_params.get("locale") or "").strip()
        summary = build_checkout_summary(user=request.user, locale=locale)
        summary["total"] = str(summary["total"])
        return Response({"success": True, **summary}, status=status.HTTP_200_OK)


class CheckoutCartView(APIView):
    """
    Cart -> pending order. The client then pays it through one of the
    payment endpoints (or points).
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        tags=["Cart"],
        request=CheckoutCartInputSerializer,
        responses={201: dict},
        description="Create a pending order from the cart",
    )
    def post(self, request):
        serializer = CheckoutCartInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            order = checkout_cart(
                user=request.user,
                description=serializer.validated_data.get("description") or "",
            )
        except EmptyCartError as exc:
            return error_response(str(exc), status.HTTP_400_BAD_REQUEST)
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
