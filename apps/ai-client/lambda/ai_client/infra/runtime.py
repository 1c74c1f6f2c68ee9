"""Runtime infrastructure helpers for SDK clients, credentials, and tracing."""

import dataclasses
import logging
import os
from functools import lru_cache
from typing import Any

import boto3
import httpx
from anthropic import Anthropic
from langsmith.run_trees import get_cached_client
from openai import OpenAI, Omit

from ai_client.config import EnvConfig
from ai_client.constants import LANGSMITH_PROJECT, OPENAI_COMPATIBLE_KEYLESS_PLACEHOLDER

logger = logging.getLogger(__name__)


def create_openai_compatible_client(
    config: EnvConfig, http_client: httpx.Client | None = None
) -> OpenAI:
    """Create an OpenAI SDK client pointed at the configured compatible endpoint.

    Local servers such as Ollama accept unauthenticated requests, so without a key
    the Authorization header is dropped instead of sent with a dummy token.
    """
    default_headers: dict[str, Any] = {}
    if not config.openai_api_key:
        default_headers["Authorization"] = Omit()

    return OpenAI(
        api_key=config.openai_api_key or OPENAI_COMPATIBLE_KEYLESS_PLACEHOLDER,
        base_url=config.openai_base_url,
        max_retries=0,
        default_headers=default_headers or None,
        http_client=http_client,
    )


def create_anthropic_client(config: EnvConfig, http_client: httpx.Client | None = None) -> Anthropic:
    default_headers = {"anthropic-beta": config.anthropic_beta} if config.anthropic_beta else None
    return Anthropic(
        api_key=config.anthropic_api_key,
        base_url=config.anthropic_base_url,
        max_retries=0,
        default_headers=default_headers,
        http_client=http_client,
    )


def _get_secure_parameter(ssm_client: Any, parameter_name: str) -> str:
    result = ssm_client.get_parameter(Name=parameter_name, WithDecryption=True)
    value = result["Parameter"].get("Value")
    if not value:
        raise RuntimeError(f"SSM parameter {parameter_name} has no value")
    return value


@lru_cache(maxsize=16)
def get_ssm_parameter(region: str, parameter_name: str) -> str:
    ssm_client = boto3.client("ssm", region_name=region)
    return _get_secure_parameter(ssm_client, parameter_name)


def _get_optional_ssm_parameter(region: str, parameter_name: str) -> str | None:
    try:
        return get_ssm_parameter(region, parameter_name)
    except Exception:
        logger.warning(
            "Optional SSM parameter is unavailable; disabling dependent feature",
            extra={"parameter_name": parameter_name},
            exc_info=True,
        )
        return None


def with_ssm_credentials(config: EnvConfig) -> EnvConfig:
    """Fill API keys missing from the environment from SSM Parameter Store."""
    updates: dict[str, str] = {}
    if not config.openai_api_key and config.openai_api_key_parameter:
        updates["openai_api_key"] = get_ssm_parameter(
            config.aws_region, config.openai_api_key_parameter
        )
    if not config.anthropic_api_key and config.anthropic_api_key_parameter:
        updates["anthropic_api_key"] = get_ssm_parameter(
            config.aws_region, config.anthropic_api_key_parameter
        )
    return dataclasses.replace(config, **updates) if updates else config


def _configure_langsmith(langsmith_api_key: str | None) -> None:
    if not langsmith_api_key:
        os.environ.pop("LANGSMITH_TRACING", None)
        logger.info("LangSmith tracing disabled because API key is unavailable")
        return

    os.environ["LANGSMITH_TRACING"] = "true"
    os.environ["LANGSMITH_API_KEY"] = langsmith_api_key
    os.environ.setdefault("LANGSMITH_PROJECT", LANGSMITH_PROJECT)


def ensure_langsmith_configured(config: EnvConfig) -> None:
    api_key = os.environ.get("LANGSMITH_API_KEY")
    if not api_key and config.langsmith_api_key_parameter:
        api_key = _get_optional_ssm_parameter(config.aws_region, config.langsmith_api_key_parameter)
    _configure_langsmith(api_key)


def flush_langsmith_traces() -> None:
    if os.environ.get("LANGSMITH_TRACING", "").lower() != "true":
        return
    if not os.environ.get("LANGSMITH_API_KEY"):
        return
    try:
        get_cached_client().flush()
    except Exception:
        logger.warning("Failed to flush LangSmith traces", exc_info=True)
