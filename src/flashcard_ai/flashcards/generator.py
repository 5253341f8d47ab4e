"""flashcards.generator

AI-assisted flashcard generation on top of a completion client.

The client only guarantees that ``choices[0].message.content`` is text; this
module owns the inner payload: a JSON array of ``{front, back}`` objects.
"""

from __future__ import annotations

import json
import logging
import re
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from flashcard_ai.core.exceptions import ParsingError, RequestValidationError
from flashcard_ai.core.model_id import get_default_model, parse_model_id
from flashcard_ai.core.types import ChatMessage, CompletionRequest, Role

if TYPE_CHECKING:
    from flashcard_ai.core.abc import AbstractCompletionClient

logger = logging.getLogger(__name__)

MAX_INPUT_CHARS = 10_000
MAX_FRONT_CHARS = 200
MAX_BACK_CHARS = 500

SYSTEM_PROMPT = (
    'You are an expert educator who writes concise, accurate study flashcards. '
    'Read the text supplied by the user and produce flashcards covering its key facts and concepts. '
    'Respond with a JSON array only, no commentary and no code fences. '
    'Each element must be an object with exactly two string keys: '
    f'"front" (a question or prompt, at most {MAX_FRONT_CHARS} characters) and '
    f'"back" (the answer, at most {MAX_BACK_CHARS} characters).'
)

_CODE_FENCE_REGEX: re.Pattern[str] = re.compile(r'^```(?:json)?\s*(?P<body>.*?)\s*```$', re.DOTALL)


class FlashcardParseError(ParsingError):
    """Model output is not a usable list of flashcards."""

    def to_json(self) -> dict[str, str]:
        return {'error': 'The AI generated a response in an incorrect format. Please try again.'}


class FlashcardGenerateCommand(BaseModel):
    """What the end user submits on the generation screen."""

    input: str = Field(..., min_length=1, max_length=MAX_INPUT_CHARS)
    model: str | None = None
    temperature: float | None = Field(default=None, ge=0.0, le=2.0)


class FlashcardProposal(BaseModel):
    """One generated card, not yet accepted or persisted."""

    front: str = Field(..., min_length=1, max_length=MAX_FRONT_CHARS)
    back: str = Field(..., min_length=1, max_length=MAX_BACK_CHARS)

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)


_PROPOSALS = TypeAdapter(list[FlashcardProposal])


def build_generation_request(command: FlashcardGenerateCommand) -> CompletionRequest:
    model = command.model or get_default_model().id
    try:
        parse_model_id(model)
    except ValueError as exc:
        raise RequestValidationError(str(exc)) from exc

    return CompletionRequest(
        model=model,
        messages=[
            ChatMessage(role=Role.system, content=SYSTEM_PROMPT),
            ChatMessage(role=Role.user, content=command.input),
        ],
        temperature=command.temperature,
    )


def parse_flashcards(content: str) -> list[FlashcardProposal]:
    """Parse model output into proposals.

    Accepts the bare JSON array, or the same array wrapped in a ```json fence.
    """
    text = content.strip()
    if (m := _CODE_FENCE_REGEX.match(text)) is not None:
        text = m.group('body')

    try:
        data = json.loads(text)
    except ValueError as exc:
        raise FlashcardParseError(f'Failed to parse AI-generated flashcards: {exc}') from exc

    try:
        proposals = _PROPOSALS.validate_python(data)
    except ValidationError as exc:
        raise FlashcardParseError(
            f'Failed to parse AI-generated flashcards: {exc.error_count()} invalid field(s)',
        ) from exc

    if not proposals:
        raise FlashcardParseError('Failed to parse AI-generated flashcards: no flashcards in response')
    return proposals


async def generate_flashcards(
    client: AbstractCompletionClient,
    command: FlashcardGenerateCommand,
) -> list[FlashcardProposal]:
    """Ask the model for flashcards about ``command.input``."""
    request = build_generation_request(command)
    logger.info('Generating flashcards with %s from %d characters of input', request.model, len(command.input))

    response = await client.get_chat_completion(request)
    proposals = parse_flashcards(response.content)

    logger.info('Model %s proposed %d flashcards', response.model or request.model, len(proposals))
    return proposals
