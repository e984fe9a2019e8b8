from .order import (
    OrderDetailSerializer,
    OrderItemSerializer,
    OrderSerializer,
    PurchaseSerializer,
)

__all__ = [
    "OrderSerializer",
    "OrderDetailSerializer",
    "OrderItemSerializer",
    "PurchaseSerializer",
]
