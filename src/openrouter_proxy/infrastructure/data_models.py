"""
Shared data models.
"""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

ERROR_TYPE = "invalid_request_error"

# Generation parameters copied verbatim from the inbound request
GENERATION_FIELDS = (
    "temperature",
    "max_tokens",
    "top_p",
    "frequency_penalty",
    "presence_penalty",
)


@dataclass(frozen=True)
class ChatRequest:
    """Chat-completion fields the relay forwards. No shape validation is applied."""

    model: Any = None
    messages: Any = None
    temperature: Any = None
    max_tokens: Any = None
    top_p: Any = None
    frequency_penalty: Any = None
    presence_penalty: Any = None
    stream: Any = None

    @classmethod
    def from_body(cls, body: Any) -> "ChatRequest":
        if not isinstance(body, dict):
            body = {}
        return cls(
            model=body.get("model"),
            messages=body.get("messages"),
            stream=body.get("stream"),
            **{name: body.get(name) for name in GENERATION_FIELDS},
        )

    @property
    def wants_stream(self) -> bool:
        return bool(self.stream)


@dataclass(frozen=True)
class ModelMapping:
    """Read-only lookup from caller model ids to upstream model ids."""

    table: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "table", MappingProxyType(dict(self.table)))

    def resolve(self, model: Any) -> Any:
        """Return the mapped id, or the original id when it is not in the table."""
        if isinstance(model, str) and model in self.table:
            return self.table[model]
        return model

    def keys(self) -> list[str]:
        return list(self.table)


@dataclass(frozen=True)
class ErrorEnvelope:
    message: str
    code: int | str
    type: str = ERROR_TYPE

    def to_dict(self) -> dict[str, Any]:
        return {"error": {"message": self.message, "type": self.type, "code": self.code}}


@dataclass(frozen=True)
class BufferedUpstreamResponse:
    status_code: int
    body: dict[str, Any]


@dataclass(frozen=True)
class StreamingUpstreamResponse:
    status_code: int
    chunks: Iterator[bytes]


UpstreamResult = BufferedUpstreamResponse | StreamingUpstreamResponse
