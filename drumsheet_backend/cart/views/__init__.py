from .api import (
    ActiveCartView,
    AddCartCollectionView,
    AddCartItemView,
    CheckoutCartView,
    CheckoutSummaryView,
    ClearCartView,
    RemoveCartItemView,
)

__all__ = [
    "ActiveCartView",
    "AddCartItemView",
    "AddCartCollectionView",
    "RemoveCartItemView",
    "ClearCartView",
    "CheckoutSummaryView",
    "CheckoutCartView",
]
