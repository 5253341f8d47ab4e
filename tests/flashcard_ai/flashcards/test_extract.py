from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx
import pytest
from pydantic import ValidationError

from flashcard_ai.core.exceptions import ParsingError
from flashcard_ai.flashcards.extract import (
    PERSON_INFO_SCHEMA,
    SYSTEM_PROMPT,
    ExtractInfoRequest,
    PersonInfo,
    build_extract_request,
    extract_person_info,
)

if TYPE_CHECKING:
    from collections.abc import Callable

TEXT = 'My name is Jane Smith, I am 32 years old and work as a software engineer in Berlin.'


def _completion(content: str) -> httpx.Response:
    return httpx.Response(200, json={'model': 'openai/gpt-4o', 'choices': [{'message': {'content': content}}]})


def test_extract_request_defaults() -> None:
    payload = build_extract_request(ExtractInfoRequest(text=TEXT)).to_payload()
    assert payload['model'] == 'openai/gpt-4o'
    assert payload['temperature'] == 0.2  # noqa: PLR2004
    assert payload['messages'] == [
        {'role': 'system', 'content': SYSTEM_PROMPT},
        {'role': 'user', 'content': TEXT},
    ]
    assert payload['response_format'] == {
        'type': 'json_schema',
        'json_schema': {'name': 'personInfoExtractor', 'strict': True, 'schema': PERSON_INFO_SCHEMA},
    }


def test_extract_request_requires_text() -> None:
    with pytest.raises(ValidationError):
        ExtractInfoRequest(text='')


@pytest.mark.asyncio
async def test_extract_person_info(scripted_client: Callable[..., Any]) -> None:
    content = '{"name": "Jane Smith", "age": 32, "location": "Berlin", "occupation": "software engineer"}'
    client = scripted_client([_completion(content)])

    info = await extract_person_info(client, ExtractInfoRequest(text=TEXT, model='anthropic/claude-3-haiku'))

    assert info == PersonInfo(name='Jane Smith', age=32, location='Berlin', occupation='software engineer')
    (payload,) = client.payloads
    assert payload['model'] == 'anthropic/claude-3-haiku'
    assert payload['response_format']['json_schema']['strict'] is True


@pytest.mark.asyncio
async def test_extract_rejects_empty_content(scripted_client: Callable[..., Any]) -> None:
    client = scripted_client([_completion('')])
    with pytest.raises(ParsingError, match='No response generated'):
        await extract_person_info(client, ExtractInfoRequest(text=TEXT))


@pytest.mark.parametrize('content', ['not json', '{"age": 32}', '[{"name": "Jane"}]'])
@pytest.mark.asyncio
async def test_extract_rejects_unparseable_content(scripted_client: Callable[..., Any], content: str) -> None:
    client = scripted_client([_completion(content)])
    with pytest.raises(ParsingError, match='Failed to parse structured data response'):
        await extract_person_info(client, ExtractInfoRequest(text=TEXT))
