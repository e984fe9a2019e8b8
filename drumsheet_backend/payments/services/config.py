# payments/services/config.py
"""
Provider credential resolvers.

Priority:
1) settings.PAYMENTS[<PROVIDER>][<KEY>]
2) the raw environment variable, for deployments where the PAYMENTS
   mapping is not populated
"""

from __future__ import annotations

import os

from django.conf import settings

from payments.services.exceptions import PaymentConfigurationError

PORTONE_DEFAULT_API_URL = "https://api.portone.io"
PAYPAL_DEFAULT_API_URL = "https://api-m.sandbox.paypal.com"
DODO_DEFAULT_API_URL = "https://api.dodopayments.com"


def _provider_cfg(provider: str) -> dict:
    payments = getattr(settings, "PAYMENTS", {}) or {}
    cfg = payments.get(provider) if isinstance(payments, dict) else None
    return cfg if isinstance(cfg, dict) else {}


def get_setting(provider: str, key: str, env_name: str, *, default: str = "") -> str:
    value = str(_provider_cfg(provider).get(key) or "").strip()
    if not value:
        value = (os.environ.get(env_name) or "").strip()
    return value or default


def require_setting(provider: str, key: str, env_name: str, *, label: str) -> str:
    value = get_setting(provider, key, env_name)
    if not value:
        raise PaymentConfigurationError(f"{label} not configured")
    return value


def get_app_url() -> str:
    return str(getattr(settings, "APP_URL", "") or "").rstrip("/")
