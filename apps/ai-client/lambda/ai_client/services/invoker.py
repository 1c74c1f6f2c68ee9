"""Application service that turns any accepted prompt into text from the selected provider."""

import logging
from collections.abc import Callable, Mapping
from typing import Any

from ai_client.config import EnvConfig, load_env_config
from ai_client.constants import ProviderId
from ai_client.error_classifier import classify_error
from ai_client.errors import ClassifiedError, UnsupportedProviderError
from ai_client.message_mappers import to_provider_shape
from ai_client.provider_selector import select_provider
from ai_client.providers.anthropic_provider import AnthropicChatProvider
from ai_client.providers.base import ChatProvider
from ai_client.providers.openai_compatible_provider import OpenAICompatibleChatProvider
from ai_client.schemas import InvocationOptions

logger = logging.getLogger(__name__)

ProviderFactory = Callable[[EnvConfig], ChatProvider]

DEFAULT_PROVIDER_FACTORIES: Mapping[str, ProviderFactory] = {
    ProviderId.OPENAI_COMPATIBLE: OpenAICompatibleChatProvider,
    ProviderId.ANTHROPIC: AnthropicChatProvider,
}


def create_provider(
    provider_id: ProviderId | str,
    config: EnvConfig,
    factories: Mapping[str, ProviderFactory] | None = None,
) -> ChatProvider:
    factories = DEFAULT_PROVIDER_FACTORIES if factories is None else factories
    factory = factories.get(provider_id)
    if factory is None:
        raise UnsupportedProviderError(str(provider_id))
    return factory(config)


class UnifiedInvoker:
    """Select a provider, normalize the prompt, call the provider, classify failures.

    A fixed ``config`` is used for every call when given; otherwise configuration is
    re-read through ``config_loader`` at the start of each call so environment
    changes apply without a restart. Callers only ever see ``ClassifiedError``.
    No retries happen here.
    """

    def __init__(
        self,
        config: EnvConfig | None = None,
        *,
        config_loader: Callable[[], EnvConfig] = load_env_config,
        provider_factories: Mapping[str, ProviderFactory] | None = None,
    ) -> None:
        self._config = config
        self._config_loader = config_loader
        self._provider_factories = (
            DEFAULT_PROVIDER_FACTORIES if provider_factories is None else provider_factories
        )

    def invoke(
        self,
        prompt: Any,
        options: InvocationOptions | Mapping[str, Any] | None = None,
    ) -> str:
        provider_id: ProviderId | str | None = None
        config: EnvConfig | None = None
        resolved_options: InvocationOptions | None = None
        try:
            resolved_options = _coerce_options(options)
            config = self._load_config()
            provider_id = select_provider(resolved_options.provider, config)
            native_messages = to_provider_shape(prompt, provider_id)
            provider = create_provider(provider_id, config, self._provider_factories)
            return provider.invoke(native_messages, resolved_options)
        except ClassifiedError:
            raise
        except Exception as e:
            model = resolved_options.model if resolved_options else None
            raise self._classify(e, provider_id, config, model) from e

    def create_client(self, provider: str | None = None) -> ChatProvider:
        """Build the client ``invoke`` would use for ``provider`` without calling it."""
        provider_id: ProviderId | str | None = None
        config: EnvConfig | None = None
        try:
            config = self._load_config()
            provider_id = select_provider(provider, config)
            return create_provider(provider_id, config, self._provider_factories)
        except ClassifiedError:
            raise
        except Exception as e:
            raise self._classify(e, provider_id, config, None) from e

    def _load_config(self) -> EnvConfig:
        if self._config is not None:
            return self._config
        return self._config_loader()

    def _classify(
        self,
        error: Exception,
        provider_id: ProviderId | str | None,
        config: EnvConfig | None,
        model: str | None,
    ) -> ClassifiedError:
        provider = str(provider_id) if provider_id is not None else None
        classified = classify_error(error, provider=provider, config=config, model=model)
        logger.error(
            classified.message,
            extra={"error_kind": classified.kind.value, "provider": provider},
        )
        return classified


def invoke_ai_model(
    prompt: Any, options: InvocationOptions | Mapping[str, Any] | None = None
) -> str:
    """Invoke the configured provider with configuration read from the environment."""
    return UnifiedInvoker().invoke(prompt, options)


def _coerce_options(options: InvocationOptions | Mapping[str, Any] | None) -> InvocationOptions:
    if options is None:
        return InvocationOptions()
    if isinstance(options, InvocationOptions):
        return options
    return InvocationOptions.model_validate(dict(options))
