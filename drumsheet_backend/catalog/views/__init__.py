from .admin_sheet import AdminSheetUpdateView
from .collection import CollectionViewSet
from .sheet import CategoryViewSet, DrumSheetViewSet

__all__ = [
    "DrumSheetViewSet",
    "CategoryViewSet",
    "CollectionViewSet",
    "AdminSheetUpdateView",
]
