"""Choose the upstream provider for a single invocation."""

import logging

from .config import EnvConfig
from .constants import ProviderId

logger = logging.getLogger(__name__)


def select_provider(explicit_override: str | None, config: EnvConfig) -> ProviderId | str:
    """Pick the provider to call.

    Precedence: explicit override, pinned ``AI_PROVIDER``, a configured
    OpenAI-compatible base URL, an Anthropic API key. A configured local or
    alternate endpoint beats a cloud key, so users can redirect traffic without
    unsetting other variables. With nothing configured this warns and falls back
    to the OpenAI-compatible provider, whose client then reports the missing
    base URL.

    Unknown provider names are returned as-is for the caller to reject.
    """
    if explicit_override:
        provider = _coerce(explicit_override)
        logger.info("Using requested AI provider", extra={"provider": str(provider)})
        return provider
    if config.provider:
        provider = _coerce(config.provider)
        logger.info("Using configured AI provider", extra={"provider": str(provider)})
        return provider

    if config.openai_base_url:
        logger.info("Using OpenAI compatible API", extra={"base_url": config.openai_base_url})
        return ProviderId.OPENAI_COMPATIBLE

    if config.anthropic_api_key:
        logger.info("Using Anthropic API")
        return ProviderId.ANTHROPIC

    logger.warning("No AI provider configuration found. Defaulting to OpenAI compatible API.")
    return ProviderId.OPENAI_COMPATIBLE


def _coerce(value: str) -> ProviderId | str:
    normalized = value.strip().lower()
    try:
        return ProviderId(normalized)
    except ValueError:
        return value
