import time
from typing import Any

from openrouter_proxy.infrastructure.data_models import GENERATION_FIELDS, ChatRequest, ModelMapping

FALLBACK_OWNER = "openrouter"
PROXY_OWNER = "openrouter-proxy"


def build_upstream_request(chat_request: ChatRequest, mapping: ModelMapping) -> dict[str, Any]:
    """
    Build the OpenRouter request body from an OpenAI-style chat request.

    Field names are kept as-is. Absent fields are left out, except `stream`, which
    defaults to False.
    """
    payload: dict[str, Any] = {
        "model": mapping.resolve(chat_request.model),
        "messages": chat_request.messages,
    }
    for name in GENERATION_FIELDS:
        payload[name] = getattr(chat_request, name)

    payload = {key: value for key, value in payload.items() if value is not None}
    payload["stream"] = chat_request.stream or False
    return payload


def owner_from_model_id(model_id: str) -> str:
    # "anthropic/claude-3" -> "anthropic"
    return model_id.split("/")[0] or FALLBACK_OWNER


def model_entry(model_id: str, owned_by: str, created: int | None = None) -> dict[str, Any]:
    return {
        "id": model_id,
        "object": "model",
        "created": created if created is not None else int(time.time()),
        "owned_by": owned_by,
    }


def transform_model_catalog(catalog: Any) -> list[dict[str, Any]]:
    """
    Convert an OpenRouter `/models` response into OpenAI model entries.

    Raises:
        ValueError: If the catalog does not carry a list of models with string ids.
    """
    if not isinstance(catalog, dict) or not isinstance(catalog.get("data"), list):
        raise ValueError("Model catalog is missing a 'data' list")

    created = int(time.time())
    models = []
    for entry in catalog["data"]:
        model_id = entry.get("id") if isinstance(entry, dict) else None
        if not isinstance(model_id, str):
            raise ValueError(f"Model catalog entry has no string id: {entry!r}")
        models.append(model_entry(model_id, owner_from_model_id(model_id), created))
    return models


def fallback_model_list(mapping: ModelMapping) -> list[dict[str, Any]]:
    """List the mapped OpenAI model names when the upstream catalog is unavailable."""
    created = int(time.time())
    return [model_entry(model_id, PROXY_OWNER, created) for model_id in mapping.keys()]
