from .admin import BulkExpectedCompletionDateView, CompleteOrderView, ExpectedCompletionDateView
from .order import CreateOrderView, OrderDetailView, OrderHistoryView, UpdatePaymentNoteView
from .purchase import PurchaseDownloadView, PurchaseListView

__all__ = [
    "CreateOrderView",
    "OrderHistoryView",
    "OrderDetailView",
    "UpdatePaymentNoteView",
    "CompleteOrderView",
    "ExpectedCompletionDateView",
    "BulkExpectedCompletionDateView",
    "PurchaseListView",
    "PurchaseDownloadView",
]
