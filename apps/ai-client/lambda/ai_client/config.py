"""Process-wide configuration read from the environment."""

import os
from collections.abc import Mapping
from dataclasses import dataclass

from dotenv import load_dotenv

from .constants import (
    AI_PROVIDER_ENV,
    ANTHROPIC_API_KEY_ENV,
    ANTHROPIC_API_KEY_PARAMETER_NAME_ENV,
    ANTHROPIC_BASE_URL_ENV,
    ANTHROPIC_BETA_ENV,
    AWS_REGION_ENV,
    DEFAULT_ANTHROPIC_BETA,
    DEFAULT_AWS_REGION,
    LANGSMITH_API_KEY_PARAMETER_NAME_ENV,
    MAX_TOKENS_ENV,
    MODEL_ENV,
    OPENAI_API_BASE_URL_ENV,
    OPENAI_API_KEY_ENV,
    OPENAI_API_KEY_PARAMETER_NAME_ENV,
    TEMPERATURE_ENV,
)
from .errors import ConfigError


@dataclass(frozen=True)
class EnvConfig:
    openai_base_url: str | None = None
    openai_api_key: str | None = None
    anthropic_api_key: str | None = None
    anthropic_base_url: str | None = None
    anthropic_beta: str | None = DEFAULT_ANTHROPIC_BETA
    model: str | None = None
    max_tokens: int | None = None
    temperature: float | None = None
    provider: str | None = None
    openai_api_key_parameter: str | None = None
    anthropic_api_key_parameter: str | None = None
    langsmith_api_key_parameter: str | None = None
    aws_region: str = DEFAULT_AWS_REGION

    @classmethod
    def from_env(cls, environ: Mapping[str, str]) -> "EnvConfig":
        beta = environ.get(ANTHROPIC_BETA_ENV)
        return cls(
            openai_base_url=_optional(environ, OPENAI_API_BASE_URL_ENV),
            openai_api_key=_optional(environ, OPENAI_API_KEY_ENV),
            anthropic_api_key=_optional(environ, ANTHROPIC_API_KEY_ENV),
            anthropic_base_url=_optional(environ, ANTHROPIC_BASE_URL_ENV),
            # An explicitly empty ANTHROPIC_BETA disables the header.
            anthropic_beta=DEFAULT_ANTHROPIC_BETA if beta is None else (beta.strip() or None),
            model=_optional(environ, MODEL_ENV),
            max_tokens=_optional_int(environ, MAX_TOKENS_ENV),
            temperature=_optional_float(environ, TEMPERATURE_ENV),
            provider=_optional(environ, AI_PROVIDER_ENV),
            openai_api_key_parameter=_optional(environ, OPENAI_API_KEY_PARAMETER_NAME_ENV),
            anthropic_api_key_parameter=_optional(environ, ANTHROPIC_API_KEY_PARAMETER_NAME_ENV),
            langsmith_api_key_parameter=_optional(environ, LANGSMITH_API_KEY_PARAMETER_NAME_ENV),
            aws_region=_optional(environ, AWS_REGION_ENV) or DEFAULT_AWS_REGION,
        )


def load_env_config() -> EnvConfig:
    """Read configuration fresh from the process environment (and a local .env file)."""
    load_dotenv(override=False)
    return EnvConfig.from_env(os.environ)


def _optional(environ: Mapping[str, str], name: str) -> str | None:
    value = environ.get(name)
    if value is None:
        return None
    value = value.strip()
    return value or None


def _optional_int(environ: Mapping[str, str], name: str) -> int | None:
    value = _optional(environ, name)
    if value is None:
        return None
    try:
        parsed = int(value)
    except ValueError as e:
        raise ConfigError(f"{name} must be an integer, got {value!r}", setting=name) from e
    if parsed < 1:
        raise ConfigError(f"{name} must be positive, got {parsed}", setting=name)
    return parsed


def _optional_float(environ: Mapping[str, str], name: str) -> float | None:
    value = _optional(environ, name)
    if value is None:
        return None
    try:
        return float(value)
    except ValueError as e:
        raise ConfigError(f"{name} must be a number, got {value!r}", setting=name) from e
