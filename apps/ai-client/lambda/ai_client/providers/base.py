"""Provider interfaces and shared native message types."""

import json
from dataclasses import dataclass
from typing import Any, Protocol

from ai_client.config import EnvConfig
from ai_client.constants import DEFAULT_MAX_TOKENS, DEFAULT_TEMPERATURE, ProviderId
from ai_client.schemas import InvocationOptions


@dataclass(frozen=True)
class GenericChatMessages:
    messages: list[dict[str, str]]


@dataclass(frozen=True)
class AnthropicMessages:
    system: str
    messages: list[dict[str, str]]


NativeMessages = GenericChatMessages | AnthropicMessages


@dataclass(frozen=True)
class GenerationParams:
    model: str
    max_tokens: int
    temperature: float


class ChatProvider(Protocol):
    provider_id: ProviderId

    def invoke(self, messages: Any, options: InvocationOptions | None = None) -> str:
        """Send provider-native messages and return the completion text."""
        ...


def resolve_generation_params(
    options: InvocationOptions | None, config: EnvConfig, *, default_model: str
) -> GenerationParams:
    """Resolve call parameters: invocation options, then configuration, then defaults."""
    options = options or InvocationOptions()
    return GenerationParams(
        model=_first_set(options.model, config.model, default_model),
        max_tokens=_first_set(options.max_tokens, config.max_tokens, DEFAULT_MAX_TOKENS),
        temperature=_first_set(options.temperature, config.temperature, DEFAULT_TEMPERATURE),
    )


def describe_error_body(body: Any) -> str:
    if body is None:
        return "<empty body>"
    if isinstance(body, str):
        return body
    try:
        return json.dumps(body, default=str)
    except (TypeError, ValueError):
        return str(body)


def _first_set(*values: Any) -> Any:
    for value in values:
        if value is not None:
            return value
    return None
