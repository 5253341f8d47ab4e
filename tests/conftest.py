from __future__ import annotations

import asyncio
import json
from typing import TYPE_CHECKING, Any

import httpx
import pytest

from flashcard_ai.adapters.openrouter_adapter import OpenRouterClient
from flashcard_ai.core.abc import AbstractCompletionClient

if TYPE_CHECKING:
    from collections.abc import Callable

TEST_API_KEY = 'sk-or-test-0123456789'
TEST_BASE_URL = 'https://gateway.test/api/v1'


class ScriptedClient(AbstractCompletionClient):
    """Replays a fixed list of outcomes; the last one repeats forever."""

    def __init__(self, outcomes: list[httpx.Response | BaseException], **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._outcomes = list(outcomes)
        self.payloads: list[dict[str, Any]] = []

    async def _send(self, payload: dict[str, Any]) -> httpx.Response:
        self.payloads.append(payload)
        outcome = self._outcomes.pop(0) if len(self._outcomes) > 1 else self._outcomes[0]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


@pytest.fixture
def sleeps(monkeypatch: pytest.MonkeyPatch) -> list[float]:
    """Stub out back-off waits and record the requested delays."""
    delays: list[float] = []

    async def _fake_sleep(delay: float, *_: object, **__: object) -> None:
        delays.append(delay)

    monkeypatch.setattr(asyncio, 'sleep', _fake_sleep)
    return delays


@pytest.fixture
def scripted_client() -> Callable[..., ScriptedClient]:
    return ScriptedClient


@pytest.fixture
def completion_body() -> dict[str, Any]:
    return {
        'id': 'r1',
        'model': 'm1',
        'choices': [
            {
                'index': 0,
                'message': {'role': 'assistant', 'content': '[{"front":"Q","back":"A"}]'},
                'finish_reason': 'stop',
            },
        ],
        'usage': {'prompt_tokens': 10, 'completion_tokens': 5, 'total_tokens': 15},
    }


class Gateway:
    """Fake gateway behind ``httpx.MockTransport`` that records every request."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._responses: list[httpx.Response | Exception] = []

    def reply(self, *responses: httpx.Response | Exception) -> None:
        self._responses = list(responses)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        outcome = self._responses.pop(0) if len(self._responses) > 1 else self._responses[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def sent_json(self, index: int = -1) -> dict[str, Any]:
        return json.loads(self.requests[index].content)

    def client(self, **kwargs: Any) -> OpenRouterClient:
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(self.handler))
        return OpenRouterClient(TEST_API_KEY, base_url=TEST_BASE_URL, http_client=http_client, **kwargs)


@pytest.fixture
def gateway() -> Gateway:
    return Gateway()
