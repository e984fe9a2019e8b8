from .order import Order, generate_order_number
from .order_item import OrderItem
from .payment_transaction import PaymentTransaction
from .purchase import Purchase

__all__ = [
    "Order",
    "OrderItem",
    "Purchase",
    "PaymentTransaction",
    "generate_order_number",
]
