"""
PATH: catalog/views/sheet.py

PUBLIC CATALOG

GET /api/catalog/sheets/?category=&sales_type=&q=&free=&locale=
GET /api/catalog/sheets/<slug-or-id>/
GET /api/catalog/categories/

Rules:
- AllowAny (storefront browsing does not require login)
- Only active sheets are visible
- Prices are KRW; display_price follows ?locale=
"""

from __future__ import annotations

import uuid

from django.db.models import Q
from django.shortcuts import get_object_or_404
from drf_spectacular.utils import OpenApiParameter, extend_schema, extend_schema_view
from rest_framework import viewsets
from rest_framework.permissions import AllowAny
from rest_framework.throttling import AnonRateThrottle

from catalog.filters import DrumSheetFilter
from catalog.models import Category, DrumSheet
from catalog.serializers import CategorySerializer, DrumSheetDetailSerializer, DrumSheetSerializer


class PublicCatalogThrottle(AnonRateThrottle):
    scope = "public_catalog"


LOCALE_PARAM = OpenApiParameter(
    name="locale",
    type=str,
    location=OpenApiParameter.QUERY,
    required=False,
    description="Storefront locale (ko, en, ja, de, vi, ...). Drives display currency.",
)


@extend_schema_view(
    list=extend_schema(tags=["Catalog"], parameters=[LOCALE_PARAM]),
    retrieve=extend_schema(tags=["Catalog"], parameters=[LOCALE_PARAM]),
)
class DrumSheetViewSet(viewsets.ReadOnlyModelViewSet):
    permission_classes = [AllowAny]
    throttle_classes = [PublicCatalogThrottle]
    filterset_class = DrumSheetFilter
    lookup_url_kwarg = "ident"
    lookup_value_regex = "[^/]+"

    def get_queryset(self):
        return DrumSheet.objects.filter(is_active=True).select_related("category")

    def get_serializer_class(self):
        if self.action == "retrieve":
            return DrumSheetDetailSerializer
        return DrumSheetSerializer

    def get_object(self):
        ident = str(self.kwargs[self.lookup_url_kwarg]).strip()

        lookup = Q(slug=ident)
        try:
            lookup |= Q(id=uuid.UUID(ident))
        except ValueError:
            pass

        obj = get_object_or_404(self.get_queryset(), lookup)
        self.check_object_permissions(self.request, obj)
        return obj


@extend_schema_view(list=extend_schema(tags=["Catalog"]))
class CategoryViewSet(viewsets.ReadOnlyModelViewSet):
    permission_classes = [AllowAny]
    throttle_classes = [PublicCatalogThrottle]
    serializer_class = CategorySerializer
    pagination_class = None
    queryset = Category.objects.all()
    lookup_field = "slug"
