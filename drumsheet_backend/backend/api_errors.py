"""
PATH: backend/api_errors.py

API ERROR ENVELOPE

Every failing response leaves the API in one shape:

    {"success": false, "error": "<message>", "details": {...}?}

- Views build it with error_response().
- DRF raises (validation, auth, 404, throttling) are reshaped by
  api_exception_handler(), wired through REST_FRAMEWORK["EXCEPTION_HANDLER"].
"""

from __future__ import annotations

import logging

from rest_framework import exceptions
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


def error_response(message: str, http_status: int, *, details=None, **extra):
    body = {"success": False, "error": message}
    if details is not None:
        body["details"] = details
    body.update(extra)
    return Response(body, status=http_status)


def _first_message(detail) -> str:
    if isinstance(detail, dict):
        for value in detail.values():
            return _first_message(value)
        return "Invalid request"
    if isinstance(detail, (list, tuple)):
        return _first_message(detail[0]) if detail else "Invalid request"
    return str(detail)


def api_exception_handler(exc, context):
    response = exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(exc, exceptions.ValidationError):
        body = {
            "success": False,
            "error": _first_message(exc.detail),
            "details": response.data,
        }
    else:
        detail = response.data.get("detail") if isinstance(response.data, dict) else response.data
        body = {"success": False, "error": _first_message(detail)}

    if response.status_code >= 500:
        logger.error("Unhandled API error", extra={"view": str(context.get("view"))})

    response.data = body
    return response
