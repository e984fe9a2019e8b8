# cart/urls.py

from django.urls import path

from cart.views import (
    ActiveCartView,
    AddCartCollectionView,
    AddCartItemView,
    CheckoutCartView,
    CheckoutSummaryView,
    ClearCartView,
    RemoveCartItemView,
)

urlpatterns = [
    path("", ActiveCartView.as_view(), name="cart-active"),
    path("items/", AddCartItemView.as_view(), name="cart-add-item"),
    path("items/<uuid:item_id>/", RemoveCartItemView.as_view(), name="cart-remove-item"),
    path("collections/", AddCartCollectionView.as_view(), name="cart-add-collection"),
    path("clear/", ClearCartView.as_view(), name="cart-clear"),
    path("summary/", CheckoutSummaryView.as_view(), name="cart-summary"),
    path("checkout/", CheckoutCartView.as_view(), name="cart-checkout"),
]
