"""Heuristic classification of provider failures into a closed error taxonomy."""

import logging

import anthropic
import httpx
import openai

from .config import EnvConfig
from .constants import (
    ANTHROPIC_API_KEY_ENV,
    CREDENTIAL_SETTINGS,
    OPENAI_API_KEY_ENV,
    ProviderId,
)
from .errors import (
    ClassifiedError,
    ConfigError,
    ErrorKind,
    MalformedResponseError,
    TransportError,
    UnsupportedProviderError,
)

logger = logging.getLogger(__name__)

_MODEL_NOT_AVAILABLE_PATTERNS: tuple[str, ...] = (
    "model not found",
    "model_not_found",
    "unknown model",
    "unsupported model",
    "invalid model",
    "no such model",
    "model is not available",
)
_UNAUTHORIZED_PATTERNS: tuple[str, ...] = (
    "401",
    "403",
    "unauthorized",
    "forbidden",
    "invalid api key",
    "authentication",
)
_RATE_LIMIT_PATTERNS: tuple[str, ...] = (
    "429",
    "rate limit",
    "too many requests",
)
_NETWORK_PATTERNS: tuple[str, ...] = (
    "network error",
    "connection error",
    "connection refused",
    "connection reset",
    "timed out",
    "could not resolve host",
)
_CONNECTION_ERROR_TYPES = (
    openai.APIConnectionError,
    anthropic.APIConnectionError,
    httpx.TransportError,
    ConnectionError,
)
_STATUS_ERROR_TYPES = (openai.APIStatusError, anthropic.APIStatusError)


def classify_error(
    error: BaseException,
    *,
    provider: str | None,
    config: EnvConfig | None = None,
    model: str | None = None,
) -> ClassifiedError:
    """Map a raw failure onto one ErrorKind with a user-facing message.

    Classification inspects exception types, HTTP status codes and message text,
    in that order. It never raises: anything it cannot place becomes
    ``ErrorKind.UNKNOWN`` with the original error kept as ``cause``.
    """
    try:
        if isinstance(error, ClassifiedError):
            return error
        config = config or EnvConfig()
        if isinstance(error, TransportError) and error.model:
            model = error.model
        model = model or config.model
        kind = _classify_kind(error, model)
        return ClassifiedError(
            kind,
            _build_message(kind, error, provider=provider, config=config, model=model),
            cause=error,
            provider=provider,
        )
    except Exception:
        logger.warning("Error classification failed; falling back to unknown", exc_info=True)
        return ClassifiedError(
            ErrorKind.UNKNOWN,
            f"Error communicating with AI service: {_describe(error)}",
            cause=error,
            provider=provider,
        )


def _classify_kind(error: BaseException, model: str | None) -> ErrorKind:
    if isinstance(error, ConfigError):
        if error.setting in CREDENTIAL_SETTINGS:
            return ErrorKind.UNAUTHORIZED
        return ErrorKind.CONFIG_MISSING
    if isinstance(error, UnsupportedProviderError):
        return ErrorKind.UNSUPPORTED_PROVIDER
    if isinstance(error, MalformedResponseError):
        return ErrorKind.MALFORMED_RESPONSE

    status = _status_code(error)
    if status in (401, 403):
        return ErrorKind.UNAUTHORIZED
    if status == 429:
        return ErrorKind.RATE_LIMITED
    if _is_connection_failure(error):
        return ErrorKind.NETWORK_UNREACHABLE

    text = _describe(error).lower()
    if model and model.lower() in text:
        return ErrorKind.MODEL_UNAVAILABLE
    if _first_match(text, _MODEL_NOT_AVAILABLE_PATTERNS):
        return ErrorKind.MODEL_UNAVAILABLE

    # A status code is more reliable than message text, so text heuristics only
    # apply to failures that never got one.
    if status is None:
        if _first_match(text, _UNAUTHORIZED_PATTERNS):
            return ErrorKind.UNAUTHORIZED
        if _first_match(text, _RATE_LIMIT_PATTERNS):
            return ErrorKind.RATE_LIMITED
        if _first_match(text, _NETWORK_PATTERNS):
            return ErrorKind.NETWORK_UNREACHABLE
    return ErrorKind.UNKNOWN


def _build_message(
    kind: ErrorKind,
    error: BaseException,
    *,
    provider: str | None,
    config: EnvConfig,
    model: str | None,
) -> str:
    detail = _describe(error)
    is_anthropic = provider == ProviderId.ANTHROPIC

    if kind == ErrorKind.CONFIG_MISSING:
        return f"Configuration error: {detail}"
    if kind == ErrorKind.UNAUTHORIZED:
        key_env = ANTHROPIC_API_KEY_ENV if is_anthropic else OPENAI_API_KEY_ENV
        return (
            "Authentication error: The API key provided is invalid or missing. "
            f"Please check your {key_env}."
        )
    if kind == ErrorKind.RATE_LIMITED:
        return f"Rate limit error: The AI service is throttling requests. {detail}"
    if kind == ErrorKind.MODEL_UNAVAILABLE:
        return (
            f"Model error: The requested model '{model}' may not be available. "
            "Please check that you have the correct model name."
        )
    if kind == ErrorKind.NETWORK_UNREACHABLE:
        if is_anthropic:
            return (
                "Connection error: Unable to reach the Anthropic API. "
                "Please check your network connection."
            )
        return (
            f"Connection error: Unable to reach the AI service at {config.openai_base_url}. "
            "Please check that your server is running and the URL is correct."
        )
    if kind == ErrorKind.MALFORMED_RESPONSE:
        return f"Malformed response: {detail}"
    if kind == ErrorKind.UNSUPPORTED_PROVIDER:
        return detail
    if is_anthropic:
        return f"Anthropic API error: {detail}"
    return f"Error communicating with AI service: {detail}"


def _status_code(error: BaseException) -> int | None:
    if isinstance(error, TransportError):
        return error.status_code
    if isinstance(error, _STATUS_ERROR_TYPES):
        return error.status_code
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code
    return None


def _is_connection_failure(error: BaseException) -> bool:
    if isinstance(error, TransportError):
        return error.reason == "connection"
    return isinstance(error, _CONNECTION_ERROR_TYPES)


def _describe(error: BaseException) -> str:
    try:
        return str(error) or type(error).__name__
    except Exception:
        return type(error).__name__


def _first_match(haystack: str, patterns: tuple[str, ...]) -> str | None:
    for pattern in patterns:
        if pattern in haystack:
            return pattern
    return None
