from .dodo import DodoCreatePaymentView, DodoCreateSessionView, DodoWebhookView
from .paypal import PayPalCaptureOrderView, PayPalCreateOrderView
from .portone import KakaoPayPrepareView, PortOneVerifyView

__all__ = [
    "PortOneVerifyView",
    "KakaoPayPrepareView",
    "PayPalCreateOrderView",
    "PayPalCaptureOrderView",
    "DodoCreatePaymentView",
    "DodoCreateSessionView",
    "DodoWebhookView",
]
