"""Shared constants and literal types for the AI client."""

from enum import StrEnum


class ProviderId(StrEnum):
    ANTHROPIC = "anthropic"
    OPENAI_COMPATIBLE = "openai_compatible"


# Environment variable names
OPENAI_API_BASE_URL_ENV = "OPENAI_API_BASE_URL"
OPENAI_API_KEY_ENV = "OPENAI_API_KEY"
ANTHROPIC_API_KEY_ENV = "ANTHROPIC_API_KEY"
ANTHROPIC_BASE_URL_ENV = "ANTHROPIC_BASE_URL"
ANTHROPIC_BETA_ENV = "ANTHROPIC_BETA"
MODEL_ENV = "MODEL"
MAX_TOKENS_ENV = "MAX_TOKENS"
TEMPERATURE_ENV = "TEMPERATURE"
AI_PROVIDER_ENV = "AI_PROVIDER"
OPENAI_API_KEY_PARAMETER_NAME_ENV = "OPENAI_API_KEY_PARAMETER_NAME"
ANTHROPIC_API_KEY_PARAMETER_NAME_ENV = "ANTHROPIC_API_KEY_PARAMETER_NAME"
LANGSMITH_API_KEY_PARAMETER_NAME_ENV = "LANGSMITH_API_KEY_PARAMETER_NAME"
AWS_REGION_ENV = "AWS_REGION"

CREDENTIAL_SETTINGS = frozenset({OPENAI_API_KEY_ENV, ANTHROPIC_API_KEY_ENV})

DEFAULT_AWS_REGION = "ap-northeast-1"
LANGSMITH_PROJECT = "ai-unified-client"

DEFAULT_MAX_TOKENS = 64_000
DEFAULT_TEMPERATURE = 0.2
DEFAULT_ANTHROPIC_MODEL = "claude-3-7-sonnet-20250219"
DEFAULT_OPENAI_COMPATIBLE_MODEL = "gpt-4.1-mini"
DEFAULT_ANTHROPIC_BETA = "output-128k-2025-02-19"

OPENAI_COMPATIBLE_CHAT_PATH = "/chat/completions"
ANTHROPIC_MESSAGES_PATH = "/v1/messages"
# Placeholder handed to the SDK when a local endpoint needs no key; the header itself is omitted.
OPENAI_COMPATIBLE_KEYLESS_PLACEHOLDER = "not-needed"

ANTHROPIC_USER_ROLE = "human"
ANTHROPIC_SYSTEM_SEPARATOR = "\n\n"
