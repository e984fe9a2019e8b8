# payments/services/http.py
from __future__ import annotations

import json
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from payments.services.exceptions import PaymentProviderError

DEFAULT_TIMEOUT = 25


def _safe_preview(text: str, limit: int = 800) -> str:
    text = (text or "").strip()
    if len(text) <= limit:
        return text
    return text[:limit] + " ...(truncated)"


def _parse_json_or_text(raw: str) -> dict[str, Any]:
    raw = raw or ""
    try:
        parsed = json.loads(raw)
    except ValueError:
        return {"kind": "text", "raw": raw}
    if isinstance(parsed, dict):
        return {"kind": "json", "json": parsed, "raw": raw}
    return {"kind": "json_non_object", "json": parsed, "raw": raw}


def _provider_message(payload: dict, fallback: str) -> str:
    message = payload.get("message") or payload.get("error_description") or payload.get("error")
    if isinstance(message, dict):
        message = message.get("message")
    return str(message or fallback)


def request_json(
    method: str,
    url: str,
    *,
    provider: str,
    body: dict | None = None,
    form: str | None = None,
    headers: dict | None = None,
    timeout: int = DEFAULT_TIMEOUT,
) -> dict[str, Any]:
    """
    Send one JSON (or form-encoded) request and return the decoded object.

    Any non-2xx answer, transport failure or non-object body raises
    PaymentProviderError carrying the provider's own message when it sent one.
    """
    data = None
    req_headers = {"Accept": "application/json"}
    if body is not None:
        data = json.dumps(body, ensure_ascii=False).encode("utf-8")
        req_headers["Content-Type"] = "application/json"
    elif form is not None:
        data = form.encode("utf-8")
        req_headers["Content-Type"] = "application/x-www-form-urlencoded"
    req_headers.update(headers or {})

    req = Request(url, data=data, headers=req_headers, method=method)

    try:
        with urlopen(req, timeout=timeout) as resp:
            raw = resp.read().decode("utf-8", errors="replace")
    except HTTPError as e:
        try:
            raw = e.read().decode("utf-8", errors="replace")
        except OSError:
            raw = ""
        parsed = _parse_json_or_text(raw)
        if parsed["kind"] == "json":
            msg = _provider_message(parsed["json"], f"{provider} rejected request")
            raise PaymentProviderError(
                f"{provider} HTTPError: {e.code} {msg}",
                status_code=e.code,
                payload=parsed["json"],
            ) from e
        preview = _safe_preview(parsed.get("raw") or str(e))
        raise PaymentProviderError(f"{provider} HTTPError: {e.code} {preview}", status_code=e.code) from e
    except URLError as e:
        raise PaymentProviderError(f"{provider} URLError: {e}") from e

    parsed = _parse_json_or_text(raw)
    if parsed["kind"] != "json":
        raise PaymentProviderError(f"{provider} returned non-JSON: {_safe_preview(parsed.get('raw') or '')}")

    return parsed["json"]
