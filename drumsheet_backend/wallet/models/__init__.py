from .cash_transaction import CashTransaction

__all__ = ["CashTransaction"]
