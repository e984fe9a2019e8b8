"""
PATH: orders/views/purchase.py

DOWNLOAD ENTITLEMENTS

GET /api/orders/purchases/                          -> my purchased sheets
GET /api/orders/purchases/<sheet_uuid>/download/    -> file link

Download rules:
- Only sheets the caller owns through a paid order (or free sheets)
- Sheet has a file         -> 200 {url}
- PREORDER without a file  -> 409 with the order's expected completion date
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import generics, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from backend.api_errors import error_response
from catalog.models import DrumSheet
from orders.models import Order, Purchase
from orders.serializers import PurchaseSerializer
from orders.services.business_days import format_date_korean, format_date_ymd


@extend_schema(tags=["Orders"])
class PurchaseListView(generics.ListAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = PurchaseSerializer

    def get_queryset(self):
        return (
            Purchase.objects.filter(user=self.request.user, order__payment_status=Order.PAYMENT_PAID)
            .select_related("drum_sheet", "order")
            .order_by("-created_at")
        )


class PurchaseDownloadView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        tags=["Orders"],
        responses={
            200: OpenApiResponse(description="{success, url, title, artist}"),
            403: OpenApiResponse(description="Sheet not purchased"),
            409: OpenApiResponse(description="Preorder not transcribed yet"),
        },
        description="Resolve the download link of an owned sheet.",
    )
    def get(self, request, sheet_id):
        sheet = DrumSheet.objects.filter(id=sheet_id).first()
        if sheet is None:
            return error_response("Sheet not found", status.HTTP_404_NOT_FOUND)

        purchase = (
            Purchase.objects.filter(user=request.user, drum_sheet=sheet, order__payment_status=Order.PAYMENT_PAID)
            .select_related("order")
            .order_by("-created_at")
            .first()
        )

        if purchase is None and not sheet.is_free:
            return error_response("You have not purchased this sheet", status.HTTP_403_FORBIDDEN)

        if not sheet.has_file:
            if sheet.is_preorder:
                expected = getattr(getattr(purchase, "order", None), "expected_completion_date", None)
                return error_response(
                    "This preorder sheet is still being transcribed",
                    status.HTTP_409_CONFLICT,
                    expected_completion_date=format_date_ymd(expected) if expected else None,
                    expected_completion_date_display=format_date_korean(expected) if expected else None,
                )
            return error_response("File is not available", status.HTTP_404_NOT_FOUND)

        return Response(
            {
                "success": True,
                "url": sheet.pdf_url,
                "title": sheet.title,
                "artist": sheet.artist,
            },
            status=status.HTTP_200_OK,
        )
