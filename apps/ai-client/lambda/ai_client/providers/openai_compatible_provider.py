"""OpenAI-compatible chat completions provider (OpenAI, Ollama, LM Studio, vLLM, ...)."""

import logging
import time
from typing import Any

import httpx
import openai
from langsmith import traceable

from ai_client.config import EnvConfig
from ai_client.constants import (
    DEFAULT_OPENAI_COMPATIBLE_MODEL,
    OPENAI_API_BASE_URL_ENV,
    OPENAI_COMPATIBLE_CHAT_PATH,
    ProviderId,
)
from ai_client.errors import ConfigError, MalformedResponseError, TransportError
from ai_client.infra.runtime import create_openai_compatible_client
from ai_client.schemas import InvocationOptions

from .base import GenericChatMessages, describe_error_body, resolve_generation_params

logger = logging.getLogger(__name__)


@traceable(run_type="llm", name="openai_compatible.chat.completions")
def _post_chat_completions(client: openai.OpenAI, payload: dict[str, Any]) -> httpx.Response:
    return client.post(OPENAI_COMPATIBLE_CHAT_PATH, cast_to=httpx.Response, body=payload)


class OpenAICompatibleChatProvider:
    provider_id = ProviderId.OPENAI_COMPATIBLE

    def __init__(self, config: EnvConfig, http_client: httpx.Client | None = None) -> None:
        if not config.openai_base_url:
            raise ConfigError(
                f"{OPENAI_API_BASE_URL_ENV} environment variable is missing. Set it to use "
                "OpenAI compatible API (e.g., http://localhost:11434/v1).",
                setting=OPENAI_API_BASE_URL_ENV,
            )
        self._config = config
        self._client = create_openai_compatible_client(config, http_client=http_client)

    def invoke(
        self, messages: GenericChatMessages, options: InvocationOptions | None = None
    ) -> str:
        params = resolve_generation_params(
            options, self._config, default_model=DEFAULT_OPENAI_COMPATIBLE_MODEL
        )
        payload = {
            "model": params.model,
            "messages": messages.messages,
            "max_tokens": params.max_tokens,
            "temperature": params.temperature,
        }
        logger.debug("Calling OpenAI compatible API", extra={"model": params.model})

        start = time.time()
        try:
            response = _post_chat_completions(self._client, payload)
        except openai.APIStatusError as e:
            raise TransportError(
                f"API error ({e.status_code}): {describe_error_body(e.body)}",
                provider=self.provider_id,
                reason="http_status",
                status_code=e.status_code,
                body=e.body,
                model=params.model,
            ) from e
        except openai.APIConnectionError as e:
            raise TransportError(
                "Network error: No response received. Check your "
                f"{OPENAI_API_BASE_URL_ENV} ({self._config.openai_base_url}).",
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

        content = self._extract_content(response)
        logger.info(
            "Completion generated",
            extra={
                "provider": self.provider_id.value,
                "model": params.model,
                "duration_ms": duration_ms,
                "response_length": len(content),
            },
        )
        return content

    def _extract_content(self, response: httpx.Response) -> str:
        try:
            data = response.json()
        except ValueError as e:
            raise MalformedResponseError(
                "Unexpected API response format: body is not JSON",
                provider=self.provider_id,
                payload=response.text,
            ) from e

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise MalformedResponseError(
                "Unexpected API response format: missing choices[0].message.content",
                provider=self.provider_id,
                payload=data,
            ) from e

        if not isinstance(content, str) or not content.strip():
            raise MalformedResponseError(
                "Unexpected API response format: empty completion content",
                provider=self.provider_id,
                payload=data,
            )
        return content.strip()
