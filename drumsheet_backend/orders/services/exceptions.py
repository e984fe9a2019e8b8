# orders/services/exceptions.py


class OrderServiceError(Exception):
    """Base error for order creation / completion services."""


class OrderValidationError(OrderServiceError):
    """Caller supplied an unusable order payload (empty items, bad amount, bad date)."""


class OrderNotFoundError(OrderServiceError):
    """Order id does not resolve to a row."""
