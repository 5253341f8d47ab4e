"""core.types

Shared DTOs and enums used throughout *flashcard_ai*.

These models describe a single completion exchange with the gateway. None of
them outlive the call that created them; nothing here is cached or persisted.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

# ---------------------------------------------------------------------------
# Chat roles (OpenAI-style, as accepted by the gateway)
# ---------------------------------------------------------------------------


class Role(StrEnum):
    system = 'system'
    user = 'user'
    assistant = 'assistant'


# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------


class ChatMessage(BaseModel):
    """Single chat message. Content is sent verbatim."""

    role: Role
    content: str

    model_config = ConfigDict(frozen=True)


# ---------------------------------------------------------------------------
# Structured output descriptor
# ---------------------------------------------------------------------------


class JsonSchemaSpec(BaseModel):
    name: str
    strict: bool | None = None
    # ``schema`` would shadow a BaseModel attribute, hence the alias
    schema_: dict[str, Any] = Field(..., alias='schema')

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class JsonSchemaFormat(BaseModel):
    """``response_format`` asking the gateway to constrain the reply to a JSON shape."""

    type: Literal['json_schema'] = 'json_schema'
    json_schema: JsonSchemaSpec

    model_config = ConfigDict(frozen=True)


# ---------------------------------------------------------------------------
# Request
# ---------------------------------------------------------------------------


class CompletionRequest(BaseModel):
    """Everything the caller may put into a ``/chat/completions`` call.

    Emptiness of ``model``/``messages`` is checked by the client rather than
    here, so that it surfaces as :class:`~flashcard_ai.core.exceptions.RequestValidationError`.
    """

    model: str
    messages: list[ChatMessage]
    response_format: JsonSchemaFormat | None = None
    temperature: float | None = None
    max_tokens: int | None = None
    top_p: float | None = None
    frequency_penalty: float | None = None
    presence_penalty: float | None = None

    model_config = ConfigDict(frozen=True)

    def to_payload(self) -> dict[str, Any]:
        """Serialise into the outbound JSON body.

        Optional fields left unset are omitted entirely, never sent as ``null``.
        """
        return self.model_dump(mode='json', by_alias=True, exclude_none=True)


# ---------------------------------------------------------------------------
# Response
# ---------------------------------------------------------------------------


class ResponseMessage(BaseModel):
    role: str | None = None
    # only choices[0] is required to carry text, see validate_completion_shape
    content: str | None = None

    model_config = ConfigDict(extra='allow')


class CompletionChoice(BaseModel):
    index: int | None = None
    message: ResponseMessage | None = None
    finish_reason: str | None = None

    model_config = ConfigDict(extra='allow')


class CompletionUsage(BaseModel):
    prompt_tokens: int | None = None
    completion_tokens: int | None = None
    total_tokens: int | None = None

    model_config = ConfigDict(extra='allow')


class CompletionResponse(BaseModel):
    """Validated gateway reply.

    ``choices`` is guaranteed non-empty and ``choices[0].message.content`` is
    guaranteed to be text. Unknown keys are kept, and the untouched body is
    available as :attr:`raw`.
    """

    id: str | None = None
    object: str | None = None
    created: int | None = None
    model: str | None = None
    choices: list[CompletionChoice] = Field(..., min_length=1)
    usage: CompletionUsage | None = None

    model_config = ConfigDict(extra='allow')

    _raw: dict[str, Any] = PrivateAttr(default_factory=dict)

    @classmethod
    def from_body(cls, body: dict[str, Any]) -> CompletionResponse:
        response = cls.model_validate(body)
        response._raw = body
        return response

    @property
    def raw(self) -> dict[str, Any]:
        return self._raw

    @property
    def content(self) -> str:
        """Text of the first choice, the part callers usually parse further."""
        message = self.choices[0].message
        return message.content if message is not None and message.content is not None else ''


class ApiErrorPayload(BaseModel):
    """Gateway error envelope. It may show up even inside an HTTP 200 body."""

    message: str | None = None
    type: str | None = None
    code: int | str | None = None
    param: str | None = None

    model_config = ConfigDict(extra='allow')
