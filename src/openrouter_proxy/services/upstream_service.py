from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import Any

import requests

from openrouter_proxy.app.config import ProxySettings
from openrouter_proxy.infrastructure.data_models import (
    BufferedUpstreamResponse,
    StreamingUpstreamResponse,
    UpstreamResult,
)


def create_upstream_session(settings: ProxySettings) -> requests.Session:
    """
    Create a requests session for calls to the OpenRouter API.

    The session carries the bearer credential for every call. Pooled connections are
    shared between requests; nothing else on the session is mutated after creation.

    Returns:
        requests.Session: A configured requests session ready for API calls
    """
    session = requests.Session()
    session.headers.update({"Authorization": f"Bearer {settings.openrouter_api_key}"})
    return session


def chat_headers(settings: ProxySettings) -> dict[str, str]:
    """Headers OpenRouter uses to identify the calling application."""
    return {
        "Content-Type": "application/json",
        "HTTP-Referer": settings.app_url,
        "X-Title": settings.app_name,
    }


def fetch_model_catalog(session: requests.Session, settings: ProxySettings) -> Any:
    """
    Fetch the upstream model catalog.

    Raises:
        requests.RequestException: On transport errors, non-2xx status or a non-JSON body
    """
    response = session.get(f"{settings.api_base}/models")
    response.raise_for_status()
    return response.json()


def forward_chat_completion(
    session: requests.Session,
    settings: ProxySettings,
    payload: dict[str, Any],
    logger: logging.Logger,
) -> UpstreamResult:
    """
    Send a chat-completion request upstream.

    A streaming payload returns a StreamingUpstreamResponse whose chunks are the raw
    upstream bytes. Otherwise the decoded JSON body is returned in a
    BufferedUpstreamResponse.

    Raises:
        requests.HTTPError: If the upstream answers with a non-2xx status
        requests.RequestException: On transport errors or a non-JSON buffered body
        ValueError: If the buffered body is JSON but not an object
    """
    wants_stream = bool(payload.get("stream"))
    response = session.post(
        f"{settings.api_base}/chat/completions",
        json=payload,
        headers=chat_headers(settings),
        stream=wants_stream,
    )

    if wants_stream:
        try:
            response.raise_for_status()
        except requests.HTTPError:
            # Load the error body before the connection is released
            _ = response.content
            response.close()
            raise
        return StreamingUpstreamResponse(
            status_code=response.status_code,
            chunks=relay_chunks(response, logger),
        )

    response.raise_for_status()
    body = response.json()
    if not isinstance(body, dict):
        raise ValueError("Upstream returned a non-object chat completion")
    return BufferedUpstreamResponse(status_code=response.status_code, body=body)


def relay_chunks(response: requests.Response, logger: logging.Logger) -> Iterator[bytes]:
    """Yield upstream bytes as they arrive. A broken stream ends the relay."""
    try:
        for chunk in response.iter_content(chunk_size=None):
            if chunk:
                yield chunk
    except requests.RequestException as e:
        logger.error(f"Stream error: {e}")
    finally:
        response.close()
