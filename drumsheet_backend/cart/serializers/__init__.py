from .cart import CartItemSerializer, CartSerializer

__all__ = ["CartSerializer", "CartItemSerializer"]
