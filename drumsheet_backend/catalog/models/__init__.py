from .category import Category
from .collection import Collection
from .drum_sheet import DrumSheet

__all__ = [
    "Category",
    "DrumSheet",
    "Collection",
]
