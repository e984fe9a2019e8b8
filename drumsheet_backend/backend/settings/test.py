# backend/settings/test.py
"""
PATH: backend/settings/test.py

TEST SETTINGS

- In-memory SQLite (fast, isolated)
- Fast password hasher
- Throttling off (tests hammer the same endpoints)
- Outbound email captured in django.core.mail.outbox
- Payment credentials are dummies; HTTP calls are patched in tests
"""

from __future__ import annotations

from .base import *  # noqa: F403
from .base import PAYMENTS, REST_FRAMEWORK

DEBUG = False

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"

# Views pin their own scoped throttles; lift every rate out of reach.
REST_FRAMEWORK = {
    **REST_FRAMEWORK,
    "DEFAULT_THROTTLE_CLASSES": (),
    "DEFAULT_THROTTLE_RATES": {
        scope: "100000/min" for scope in REST_FRAMEWORK["DEFAULT_THROTTLE_RATES"]
    },
}

APP_URL = "http://testserver"
PREORDER_DEADLINE_DAYS = 3

PAYMENTS = {
    "PORTONE": {
        **PAYMENTS["PORTONE"],
        "API_SECRET": "test-portone-secret",
        "STORE_ID": "store-test",
        "CHANNEL_KEY_INICIS": "channel-inicis-test",
        "CHANNEL_KEY_KAKAOPAY": "channel-kakaopay-test",
    },
    "PAYPAL": {
        **PAYMENTS["PAYPAL"],
        "CLIENT_ID": "paypal-client",
        "CLIENT_SECRET": "paypal-secret",
    },
    "DODO": {
        **PAYMENTS["DODO"],
        "SECRET_KEY": "dodo-secret",
        # base64("dodo-webhook-test-secret")
        "WEBHOOK_SECRET": "whsec_ZG9kby13ZWJob29rLXRlc3Qtc2VjcmV0",
    },
}

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "handlers": {"null": {"class": "logging.NullHandler"}},
    "root": {"handlers": ["null"], "level": "CRITICAL"},
}
