"""Anthropic Messages API provider."""

import logging
import time
from typing import Any

import anthropic
import httpx
from langsmith import traceable

from ai_client.config import EnvConfig
from ai_client.constants import (
    ANTHROPIC_API_KEY_ENV,
    ANTHROPIC_MESSAGES_PATH,
    DEFAULT_ANTHROPIC_MODEL,
    ProviderId,
)
from ai_client.errors import ConfigError, MalformedResponseError, TransportError
from ai_client.infra.runtime import create_anthropic_client
from ai_client.schemas import InvocationOptions

from .base import AnthropicMessages, describe_error_body, resolve_generation_params

logger = logging.getLogger(__name__)


@traceable(run_type="llm", name="anthropic.messages.create")
def _post_messages(client: anthropic.Anthropic, payload: dict[str, Any]) -> httpx.Response:
    return client.post(ANTHROPIC_MESSAGES_PATH, cast_to=httpx.Response, body=payload)


class AnthropicChatProvider:
    provider_id = ProviderId.ANTHROPIC

    def __init__(self, config: EnvConfig, http_client: httpx.Client | None = None) -> None:
        if not config.anthropic_api_key:
            raise ConfigError(
                f"{ANTHROPIC_API_KEY_ENV} environment variable is required for using Anthropic API.",
                setting=ANTHROPIC_API_KEY_ENV,
            )
        self._config = config
        self._client = create_anthropic_client(config, http_client=http_client)

    def invoke(self, messages: AnthropicMessages, options: InvocationOptions | None = None) -> str:
        params = resolve_generation_params(
            options, self._config, default_model=DEFAULT_ANTHROPIC_MODEL
        )
        payload: dict[str, Any] = {
            "model": params.model,
            "max_tokens": params.max_tokens,
            "temperature": params.temperature,
            "messages": messages.messages,
        }
        if messages.system:
            payload["system"] = messages.system
        logger.debug("Calling Anthropic API", extra={"model": params.model})

        start = time.time()
        try:
            response = _post_messages(self._client, payload)
        except anthropic.APIStatusError as e:
            raise TransportError(
                f"API error ({e.status_code}): {describe_error_body(e.body)}",
                provider=self.provider_id,
                reason="http_status",
                status_code=e.status_code,
                body=e.body,
                model=params.model,
            ) from e
        except anthropic.APIConnectionError as e:
            raise TransportError(
                "Network error: No response received from the Anthropic API.",
                provider=self.provider_id,
                reason="connection",
                model=params.model,
            ) from e
        except Exception as e:
            raise TransportError(
                f"Error setting up request: {e}",
                provider=self.provider_id,
                reason="request",
                model=params.model,
            ) from e
        duration_ms = int((time.time() - start) * 1000)

        text = self._extract_text(response)
        logger.info(
            "Completion generated",
            extra={
                "provider": self.provider_id.value,
                "model": params.model,
                "duration_ms": duration_ms,
                "response_length": len(text),
            },
        )
        return text

    def _extract_text(self, response: httpx.Response) -> str:
        try:
            data = response.json()
        except ValueError as e:
            raise MalformedResponseError(
                "Unexpected API response format: body is not JSON",
                provider=self.provider_id,
                payload=response.text,
            ) from e

        try:
            text = data["content"][0]["text"]
        except (KeyError, IndexError, TypeError) as e:
            raise MalformedResponseError(
                "Unexpected API response format: missing content[0].text",
                provider=self.provider_id,
                payload=data,
            ) from e

        if not isinstance(text, str):
            raise MalformedResponseError(
                "Unexpected API response format: content[0].text is not a string",
                provider=self.provider_id,
                payload=data,
            )
        return text
