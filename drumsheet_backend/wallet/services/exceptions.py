# wallet/services/exceptions.py


class WalletError(Exception):
    """Base error for points wallet services."""


class InsufficientCreditError(WalletError):
    def __init__(self, *, current_credits: int, required: int):
        self.current_credits = int(current_credits)
        self.required = int(required)
        super().__init__(
            f"Insufficient points: have {self.current_credits}, need {self.required}"
        )


class InvalidCreditAmountError(WalletError):
    """Zero / negative amounts where a positive one is required."""


class PointsPaymentError(WalletError):
    """Points payment request rejected before any balance change."""
