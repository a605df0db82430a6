from __future__ import annotations

from typing import Any

from openrouter_proxy.infrastructure.data_models import ErrorEnvelope

DEFAULT_ERROR_MESSAGE = "Internal server error"
DEFAULT_ERROR_STATUS = 500


def _upstream_error_details(response: Any) -> dict[str, Any]:
    """Return the `error` object from an upstream error body, or an empty dict."""
    try:
        body = response.json()
    except ValueError:
        return {}
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        return body["error"]
    return {}


def error_from_exception(exc: Exception) -> tuple[int, ErrorEnvelope]:
    """
    Translate a failed upstream call into an HTTP status and an ErrorEnvelope.

    Upstream error bodies take precedence over the exception message, and the upstream
    status is reused when there is one. Everything else is reported as a 500.
    """
    # requests.Response is falsy for error statuses, so compare with None
    response = getattr(exc, "response", None)
    status_code = getattr(response, "status_code", None) if response is not None else None
    details = _upstream_error_details(response) if response is not None else {}

    message = details.get("message") or str(exc) or DEFAULT_ERROR_MESSAGE
    code = details.get("code") or status_code or DEFAULT_ERROR_STATUS
    return status_code or DEFAULT_ERROR_STATUS, ErrorEnvelope(message=str(message), code=code)


def not_found_error(path: str) -> ErrorEnvelope:
    return ErrorEnvelope(message=f"Endpoint {path} not found", code=404)


def invalid_body_error(exc: Exception) -> ErrorEnvelope:
    return ErrorEnvelope(message=f"Invalid JSON body: {exc}", code=400)
