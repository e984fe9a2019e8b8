# catalog/urls.py

"""
CATALOG URLS (/api/catalog/)

- sheets/, sheets/<slug-or-id>/
- categories/
- collections/, collections/<slug>/
- admin/sheets/<uuid>/  (PATCH, admin)
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from catalog.views import AdminSheetUpdateView, CategoryViewSet, CollectionViewSet, DrumSheetViewSet

router = DefaultRouter()

router.register(r"sheets", DrumSheetViewSet, basename="sheets")
router.register(r"categories", CategoryViewSet, basename="categories")
router.register(r"collections", CollectionViewSet, basename="collections")

urlpatterns = [
    path("admin/sheets/<uuid:sheet_id>/", AdminSheetUpdateView.as_view(), name="admin-sheet-update"),
    path("", include(router.urls)),
]
