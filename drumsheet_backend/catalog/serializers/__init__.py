from .collection import CollectionDetailSerializer, CollectionSerializer
from .sheet import (
    AdminSheetUpdateSerializer,
    CategorySerializer,
    DrumSheetDetailSerializer,
    DrumSheetSerializer,
)

__all__ = [
    "CategorySerializer",
    "DrumSheetSerializer",
    "DrumSheetDetailSerializer",
    "AdminSheetUpdateSerializer",
    "CollectionSerializer",
    "CollectionDetailSerializer",
]
