"""flashcards.extract

Pulls structured details about a person out of free text, using the gateway's
``json_schema`` response format so the model answers with a single object.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field, ValidationError

from flashcard_ai.core.exceptions import ParsingError
from flashcard_ai.core.types import ChatMessage, CompletionRequest, JsonSchemaFormat, JsonSchemaSpec, Role

if TYPE_CHECKING:
    from flashcard_ai.core.abc import AbstractCompletionClient

logger = logging.getLogger(__name__)

DEFAULT_EXTRACT_MODEL = 'openai/gpt-4o'
SCHEMA_NAME = 'personInfoExtractor'

SYSTEM_PROMPT = (
    'Extract person information from the provided text. '
    'Return only the structured data according to the provided schema.'
)

PERSON_INFO_SCHEMA: dict[str, Any] = {
    'type': 'object',
    'properties': {
        'name': {'type': 'string', 'description': 'Full name of the person'},
        'email': {'type': 'string', 'format': 'email', 'description': 'Email address of the person'},
        'phone': {'type': 'string', 'description': 'Phone number of the person'},
        'age': {'type': 'integer', 'description': 'Age of the person in years'},
        'location': {'type': 'string', 'description': 'Location/city where the person lives or works'},
        'occupation': {'type': 'string', 'description': 'Job or profession of the person'},
    },
    'required': ['name'],
}


class ExtractInfoRequest(BaseModel):
    text: str = Field(..., min_length=1)
    model: str = DEFAULT_EXTRACT_MODEL
    # low temperature keeps extraction deterministic
    temperature: float = 0.2


class PersonInfo(BaseModel):
    name: str
    email: str | None = None
    phone: str | None = None
    age: int | None = None
    location: str | None = None
    occupation: str | None = None


def build_extract_request(extract: ExtractInfoRequest) -> CompletionRequest:
    return CompletionRequest(
        model=extract.model,
        messages=[
            ChatMessage(role=Role.system, content=SYSTEM_PROMPT),
            ChatMessage(role=Role.user, content=extract.text),
        ],
        temperature=extract.temperature,
        response_format=JsonSchemaFormat(
            json_schema=JsonSchemaSpec(name=SCHEMA_NAME, strict=True, schema=PERSON_INFO_SCHEMA),
        ),
    )


async def extract_person_info(client: AbstractCompletionClient, extract: ExtractInfoRequest) -> PersonInfo:
    """Ask the model for a :class:`PersonInfo` describing whoever `extract.text` is about."""
    response = await client.get_chat_completion(build_extract_request(extract))
    if not response.content:
        raise ParsingError('No response generated')

    try:
        return PersonInfo.model_validate_json(response.content)
    except ValidationError as exc:
        logger.warning('Structured extraction reply did not match the schema: %d error(s)', exc.error_count())
        raise ParsingError('Failed to parse structured data response') from exc
