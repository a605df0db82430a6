import json
import logging
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

import requests

from openrouter_proxy.app.config import SERVICE_NAME, ProxySettings
from openrouter_proxy.infrastructure.data_models import (
    BufferedUpstreamResponse,
    ChatRequest,
    ErrorEnvelope,
    StreamingUpstreamResponse,
)
from openrouter_proxy.services.response_helpers import (
    error_from_exception,
    invalid_body_error,
    not_found_error,
)
from openrouter_proxy.services.translation_service import (
    build_upstream_request,
    fallback_model_list,
    transform_model_catalog,
)
from openrouter_proxy.services.upstream_service import (
    fetch_model_catalog,
    forward_chat_completion,
)

EVENT_STREAM_HEADERS = {
    "Content-Type": "text/event-stream",
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}


@dataclass(frozen=True)
class ProxyContext:
    """Everything a handler needs, built once at startup."""

    settings: ProxySettings
    session: requests.Session
    logger: logging.Logger


def create_response(
    status_code: int,
    body: dict[str, Any] | Iterator[bytes],
    headers: dict[str, str] | None = None,
) -> dict[str, Any]:
    """
    Create a standard HTTP response.

    A dict body is sent as JSON; an iterator body is relayed as a byte stream.
    """
    return {
        "statusCode": status_code,
        "body": body,
        "headers": headers or {"Content-Type": "application/json"},
    }


def create_error_response(status_code: int, envelope: ErrorEnvelope) -> dict[str, Any]:
    return create_response(status_code, envelope.to_dict())


def health(context: ProxyContext) -> dict[str, Any]:
    return create_response(
        200,
        {
            "status": "ok",
            "service": SERVICE_NAME,
            "api_connected": context.settings.api_connected,
        },
    )


def list_models(context: ProxyContext) -> dict[str, Any]:
    """
    List models in OpenAI format.

    Any upstream failure falls back to the mapped model names, so this always answers 200.
    """
    try:
        catalog = fetch_model_catalog(context.session, context.settings)
        models = transform_model_catalog(catalog)
    except Exception as e:
        context.logger.error(f"Error fetching models: {e}")
        models = fallback_model_list(context.settings.model_mapping)

    return create_response(200, {"object": "list", "data": models})


def chat_completions(context: ProxyContext, raw_body: bytes) -> dict[str, Any]:
    """
    Forward a chat completion to OpenRouter.

    Buffered responses have their `model` reset to the caller's model id. Streaming
    responses are relayed byte for byte.
    """
    try:
        body = json.loads(raw_body) if raw_body else {}
    except ValueError as e:
        context.logger.error(f"Invalid request body: {e}")
        return create_error_response(400, invalid_body_error(e))

    chat_request = ChatRequest.from_body(body)
    payload = build_upstream_request(chat_request, context.settings.model_mapping)
    context.logger.debug(f"Forwarding model {chat_request.model!r} as {payload.get('model')!r}")

    try:
        result = forward_chat_completion(
            context.session, context.settings, payload, context.logger
        )
    except Exception as e:
        context.logger.error(f"Proxy error: {e}")
        status_code, envelope = error_from_exception(e)
        return create_error_response(status_code, envelope)

    if isinstance(result, StreamingUpstreamResponse):
        return create_response(result.status_code, result.chunks, dict(EVENT_STREAM_HEADERS))

    assert isinstance(result, BufferedUpstreamResponse)
    return create_response(result.status_code, {**result.body, "model": chat_request.model})


def not_found(path: str) -> dict[str, Any]:
    return create_error_response(404, not_found_error(path))
