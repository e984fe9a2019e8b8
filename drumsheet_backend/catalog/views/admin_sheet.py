"""
PATH: catalog/views/admin_sheet.py

ADMIN SHEET UPDATE

PATCH /api/catalog/admin/sheets/<uuid>/

Rules:
- Admin only
- Partial update of catalog fields
- First PDF for a PREORDER sheet -> sales_type INSTANT + buyers notified
"""

from __future__ import annotations

import logging

from django.db import transaction
from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.parsers import JSONParser
from rest_framework.response import Response
from rest_framework.views import APIView

from backend.api_errors import error_response
from catalog.models import DrumSheet
from catalog.serializers import AdminSheetUpdateSerializer, DrumSheetDetailSerializer
from catalog.services.preorder_fulfillment import becomes_fulfilled, notify_preorder_buyers
from users.permissions import IsAdminRole

logger = logging.getLogger(__name__)


class AdminSheetUpdateView(APIView):
    permission_classes = [IsAdminRole]
    parser_classes = [JSONParser]
    serializer_class = AdminSheetUpdateSerializer

    @extend_schema(
        tags=["Catalog Admin"],
        request=AdminSheetUpdateSerializer,
        responses={
            200: DrumSheetDetailSerializer,
            404: OpenApiResponse(description="Sheet not found"),
        },
        description="Update a sheet; uploading the first PDF of a preorder completes it.",
    )
    def patch(self, request, sheet_id):
        sheet = DrumSheet.objects.filter(id=sheet_id).first()
        if sheet is None:
            return error_response("Sheet not found", status.HTTP_404_NOT_FOUND)

        serializer = AdminSheetUpdateSerializer(sheet, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        fulfilled = becomes_fulfilled(sheet, serializer.validated_data.get("pdf_url"))

        with transaction.atomic():
            if fulfilled:
                logger.info("Preorder switching to instant", extra={"sheet_id": str(sheet.id)})
                sheet = serializer.save(sales_type=DrumSheet.SALES_TYPE_INSTANT)
            else:
                sheet = serializer.save()

        payload = {
            "success": True,
            "data": DrumSheetDetailSerializer(sheet, context={"request": request}).data,
            "preorder_completed": fulfilled,
        }

        if fulfilled:
            result = notify_preorder_buyers(sheet)
            payload["notified_orders"] = len(result.order_ids)
            payload["emailed"] = len(result.emailed)

        return Response(payload, status=status.HTTP_200_OK)
