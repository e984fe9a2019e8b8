# catalog/views/collection.py

from django.db.models import Prefetch
from drf_spectacular.utils import extend_schema, extend_schema_view
from rest_framework import viewsets
from rest_framework.permissions import AllowAny

from catalog.models import Collection, DrumSheet
from catalog.serializers import CollectionDetailSerializer, CollectionSerializer

from .sheet import LOCALE_PARAM, PublicCatalogThrottle


@extend_schema_view(
    list=extend_schema(tags=["Catalog"], parameters=[LOCALE_PARAM]),
    retrieve=extend_schema(tags=["Catalog"], parameters=[LOCALE_PARAM]),
)
class CollectionViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Public bundles.

    - list: active collections with bundle price + discount %
    - retrieve (by slug): member sheets included
    """

    permission_classes = [AllowAny]
    throttle_classes = [PublicCatalogThrottle]
    lookup_field = "slug"
    lookup_value_regex = "[^/]+"

    def get_queryset(self):
        return Collection.objects.filter(is_active=True).prefetch_related(
            Prefetch("sheets", queryset=DrumSheet.objects.select_related("category"))
        )

    def get_serializer_class(self):
        if self.action == "retrieve":
            return CollectionDetailSerializer
        return CollectionSerializer
