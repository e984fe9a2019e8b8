# orders/urls.py

from django.urls import path

from orders.views import (
    BulkExpectedCompletionDateView,
    CompleteOrderView,
    CreateOrderView,
    ExpectedCompletionDateView,
    OrderDetailView,
    OrderHistoryView,
    PurchaseDownloadView,
    PurchaseListView,
    UpdatePaymentNoteView,
)

urlpatterns = [
    # ---------------- CUSTOMER ----------------
    path("", OrderHistoryView.as_view(), name="order-history"),
    path("create/", CreateOrderView.as_view(), name="order-create"),
    path("update-note/", UpdatePaymentNoteView.as_view(), name="order-update-note"),
    path("purchases/", PurchaseListView.as_view(), name="purchase-list"),
    path(
        "purchases/<uuid:sheet_id>/download/",
        PurchaseDownloadView.as_view(),
        name="purchase-download",
    ),
    # ---------------- ADMIN ----------------
    path("complete/", CompleteOrderView.as_view(), name="order-complete"),
    path(
        "bulk-update-expected-completion-date/",
        BulkExpectedCompletionDateView.as_view(),
        name="order-bulk-expected-date",
    ),
    path(
        "<uuid:order_id>/expected-completion-date/",
        ExpectedCompletionDateView.as_view(),
        name="order-expected-date",
    ),
    path("<uuid:order_id>/", OrderDetailView.as_view(), name="order-detail"),
]
