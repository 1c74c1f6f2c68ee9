"""Conversion helpers between caller prompt shapes and provider-specific message formats."""

import json
import logging
from collections.abc import Mapping, Sequence
from typing import Any

from .constants import ANTHROPIC_SYSTEM_SEPARATOR, ANTHROPIC_USER_ROLE, ProviderId
from .errors import UnsupportedProviderError
from .providers.base import AnthropicMessages, GenericChatMessages, NativeMessages
from .schemas import (
    AlternatingTurnsPrompt,
    FallbackPrompt,
    Message,
    MessageListPrompt,
    PromptVariant,
    Role,
    StructuredPrompt,
    TextPrompt,
)

logger = logging.getLogger(__name__)

_ROLE_ALIASES: dict[str, Role] = {
    "system": Role.SYSTEM,
    "developer": Role.SYSTEM,
    "user": Role.USER,
    "human": Role.USER,
    "assistant": Role.ASSISTANT,
    "ai": Role.ASSISTANT,
    "model": Role.ASSISTANT,
}
_VARIANT_TYPES = (
    TextPrompt,
    MessageListPrompt,
    AlternatingTurnsPrompt,
    StructuredPrompt,
    FallbackPrompt,
)
# "turns" wins when a caller sends both.
_TURN_FIELDS = ("turns", "messages")


def to_provider_shape(prompt: Any, target: ProviderId | str) -> NativeMessages:
    """Normalize any accepted prompt shape into the target provider's native messages."""
    messages = to_neutral_messages(detect_prompt_shape(prompt))
    if target == ProviderId.OPENAI_COMPATIBLE:
        return build_openai_compatible_messages(messages)
    if target == ProviderId.ANTHROPIC:
        return build_anthropic_messages(messages)
    raise UnsupportedProviderError(str(target))


def detect_prompt_shape(prompt: Any) -> PromptVariant:
    """Classify an untyped prompt into exactly one tagged variant.

    Predicates run in a fixed order and the first match wins:

    1. bare string -> single user turn
    2. sequence whose first item carries ``role`` and ``content`` -> neutral messages
    3. sequence of bare strings -> alternating user/assistant turns
    4. mapping with ``system`` and/or ``turns``/``messages`` -> structured prompt
    5. single mapping with ``role`` and ``content`` -> one-message list
    6. anything else -> stringified into one user turn

    Already-tagged variants are returned unchanged. Never raises on an
    unrecognized shape.
    """
    if isinstance(prompt, _VARIANT_TYPES):
        return prompt
    if isinstance(prompt, str):
        return TextPrompt(text=prompt)
    if isinstance(prompt, Message):
        return MessageListPrompt(messages=[prompt])
    if _is_sequence(prompt):
        items = list(prompt)
        if items and _is_message_like(items[0]):
            return MessageListPrompt(messages=_parse_turns(items))
        if all(isinstance(item, str) for item in items):
            return AlternatingTurnsPrompt(turns=items)
    if isinstance(prompt, Mapping):
        if "system" in prompt or any(field in prompt for field in _TURN_FIELDS):
            return StructuredPrompt(
                system=_coerce_content(prompt.get("system")) or None,
                turns=_parse_inner_turns(prompt),
            )
        if _is_message_like(prompt):
            return MessageListPrompt(messages=_parse_turns([prompt]))
    return FallbackPrompt(text=_stringify(prompt))


def to_neutral_messages(variant: PromptVariant) -> list[Message]:
    """Flatten a tagged variant into ordered neutral messages, dropping empty turns."""
    if isinstance(variant, TextPrompt | FallbackPrompt):
        messages = [Message(role=Role.USER, content=variant.text)]
    elif isinstance(variant, MessageListPrompt):
        messages = list(variant.messages)
    elif isinstance(variant, AlternatingTurnsPrompt):
        messages = [
            Message(role=_alternating_role(index), content=turn)
            for index, turn in enumerate(variant.turns)
        ]
    else:
        messages = []
        if variant.system:
            messages.append(Message(role=Role.SYSTEM, content=variant.system))
        messages.extend(variant.turns)

    return [message for message in messages if message.content.strip()]


def build_openai_compatible_messages(messages: list[Message]) -> GenericChatMessages:
    return GenericChatMessages(
        messages=[{"role": message.role.value, "content": message.content} for message in messages]
    )


def build_anthropic_messages(messages: list[Message]) -> AnthropicMessages:
    """Lift system messages into the dedicated system field and map the remaining roles."""
    system_parts: list[str] = []
    turns: list[dict[str, str]] = []
    for message in messages:
        if message.role == Role.SYSTEM:
            system_parts.append(message.content)
        elif message.role == Role.USER:
            turns.append({"role": ANTHROPIC_USER_ROLE, "content": message.content})
        else:
            turns.append({"role": "assistant", "content": message.content})

    return AnthropicMessages(system=ANTHROPIC_SYSTEM_SEPARATOR.join(system_parts), messages=turns)


def parse_role(value: Any) -> Role:
    if isinstance(value, Role):
        return value
    key = str(value).strip().lower()
    role = _ROLE_ALIASES.get(key)
    if role is None:
        logger.warning("Unknown message role; treating it as user", extra={"role": key})
        return Role.USER
    return role


def _parse_inner_turns(prompt: Mapping[str, Any]) -> list[Message]:
    field = next((name for name in _TURN_FIELDS if name in prompt), None)
    inner = prompt.get(field) if field else None
    if inner is None:
        return []
    if isinstance(inner, str):
        return [Message(role=Role.USER, content=inner)]
    if _is_sequence(inner):
        return _parse_turns(list(inner))
    return [Message(role=Role.USER, content=_stringify(inner))]


def _parse_turns(items: list[Any]) -> list[Message]:
    messages: list[Message] = []
    for index, item in enumerate(items):
        if isinstance(item, Message):
            messages.append(item)
        elif isinstance(item, Mapping):
            messages.append(
                Message(
                    role=parse_role(item.get("role", Role.USER)),
                    content=_coerce_content(item.get("content")),
                )
            )
        elif isinstance(item, str):
            messages.append(Message(role=_alternating_role(index), content=item))
        else:
            messages.append(Message(role=Role.USER, content=_stringify(item)))
    return messages


def _alternating_role(index: int) -> Role:
    return Role.USER if index % 2 == 0 else Role.ASSISTANT


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, str | bytes | bytearray)


def _is_message_like(value: Any) -> bool:
    if isinstance(value, Message):
        return True
    return isinstance(value, Mapping) and "role" in value and "content" in value


def _coerce_content(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return _stringify(value)


def _stringify(value: Any) -> str:
    try:
        return json.dumps(value, default=str, ensure_ascii=False)
    except (TypeError, ValueError):
        return str(value)
