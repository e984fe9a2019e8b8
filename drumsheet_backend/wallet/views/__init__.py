from .wallet import (
    CashPurchaseView,
    ChargeOrderView,
    PointsPayView,
    WalletBalanceView,
    WalletTransactionListView,
)

__all__ = [
    "WalletBalanceView",
    "WalletTransactionListView",
    "ChargeOrderView",
    "PointsPayView",
    "CashPurchaseView",
]
