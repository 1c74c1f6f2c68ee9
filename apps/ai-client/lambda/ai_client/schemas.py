"""Pydantic schemas for prompts, invocation options and the HTTP API."""

from enum import StrEnum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class Role(StrEnum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class Message(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: Role
    content: str


class TextPrompt(BaseModel):
    """A single user turn."""

    kind: Literal["text"] = "text"
    text: str


class MessageListPrompt(BaseModel):
    """An ordered conversation already in neutral form."""

    kind: Literal["messages"] = "messages"
    messages: list[Message] = Field(default_factory=list)


class AlternatingTurnsPrompt(BaseModel):
    """Bare strings; even positions are user turns, odd positions assistant turns."""

    kind: Literal["alternating"] = "alternating"
    turns: list[str] = Field(default_factory=list)


class StructuredPrompt(BaseModel):
    kind: Literal["structured"] = "structured"
    system: str | None = None
    turns: list[Message] = Field(default_factory=list)


class FallbackPrompt(BaseModel):
    """Unrecognized input, already stringified into one user turn."""

    kind: Literal["fallback"] = "fallback"
    text: str


PromptVariant = Annotated[
    TextPrompt | MessageListPrompt | AlternatingTurnsPrompt | StructuredPrompt | FallbackPrompt,
    Field(discriminator="kind"),
]


class InvocationOptions(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    provider: str | None = None
    model: str | None = None
    max_tokens: int | None = Field(default=None, alias="maxTokens", ge=1)
    temperature: float | None = Field(default=None, ge=0, le=2)


class InvokeRequest(InvocationOptions):
    prompt: Any


class InvokeResponse(BaseModel):
    text: str
