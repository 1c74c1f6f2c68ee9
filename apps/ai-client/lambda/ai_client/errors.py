"""Domain-level exceptions for the AI client."""

from enum import StrEnum
from typing import Any, Literal

TransportFailure = Literal["http_status", "connection", "request"]


class ErrorKind(StrEnum):
    CONFIG_MISSING = "config_missing"
    UNAUTHORIZED = "unauthorized"
    RATE_LIMITED = "rate_limited"
    MODEL_UNAVAILABLE = "model_unavailable"
    NETWORK_UNREACHABLE = "network_unreachable"
    MALFORMED_RESPONSE = "malformed_response"
    UNSUPPORTED_PROVIDER = "unsupported_provider"
    UNKNOWN = "unknown"


class AIClientError(RuntimeError):
    """Base class for every error raised by the AI client."""


class ConfigError(AIClientError):
    """Raised when a required setting is absent or cannot be parsed."""

    def __init__(self, message: str, *, setting: str | None = None) -> None:
        super().__init__(message)
        self.setting = setting


class UnsupportedProviderError(AIClientError):
    def __init__(self, provider: str) -> None:
        super().__init__(f"Unsupported AI provider: {provider}")
        self.provider = provider


class MalformedResponseError(AIClientError):
    """Raised when a provider answers 2xx but the body lacks the expected shape."""

    def __init__(self, message: str, *, provider: str, payload: Any = None) -> None:
        super().__init__(message)
        self.provider = provider
        self.payload = payload


class TransportError(AIClientError):
    """Raised by provider clients for any failure on the way to or from the remote API."""

    def __init__(
        self,
        message: str,
        *,
        provider: str,
        reason: TransportFailure,
        status_code: int | None = None,
        body: Any = None,
        model: str | None = None,
    ) -> None:
        super().__init__(message)
        self.provider = provider
        self.reason = reason
        self.status_code = status_code
        self.body = body
        self.model = model


class ClassifiedError(AIClientError):
    """The single error type callers of the invoker observe."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        *,
        cause: BaseException | None,
        provider: str | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.cause = cause
        self.provider = provider

    def __repr__(self) -> str:
        return f"ClassifiedError(kind={self.kind.value!r}, message={self.message!r})"
