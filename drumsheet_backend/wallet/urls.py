# wallet/urls.py

from django.urls import path

from wallet.views import CashPurchaseView, ChargeOrderView, WalletBalanceView, WalletTransactionListView

urlpatterns = [
    path("", WalletBalanceView.as_view(), name="wallet-balance"),
    path("transactions/", WalletTransactionListView.as_view(), name="wallet-transactions"),
    path("charge/", ChargeOrderView.as_view(), name="wallet-charge"),
    path("purchase/", CashPurchaseView.as_view(), name="wallet-purchase"),
]
