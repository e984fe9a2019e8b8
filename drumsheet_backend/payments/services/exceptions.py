# payments/services/exceptions.py


class PaymentError(Exception):
    """Base error for payment provider adapters."""


class PaymentConfigurationError(PaymentError):
    """Provider credentials are missing from settings and environment."""


class PaymentProviderError(PaymentError):
    """Provider rejected the request or answered with something unusable."""

    def __init__(self, message: str, *, status_code: int | None = None, payload=None):
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload


class WebhookVerificationError(PaymentError):
    """Webhook headers or signature failed verification."""
