"""adapters.openrouter_adapter

Concrete client that bridges :class:`flashcard_ai.core.abc.AbstractCompletionClient`
with the **OpenRouter** ``/chat/completions`` endpoint.

The gateway speaks the OpenAI wire format, so the transport is *openai==1.x*
(`AsyncOpenAI`) pointed at the gateway base URL. The SDK is used strictly as a
transport: its own retries are disabled and raw responses are handed to
:mod:`flashcard_ai.core.classification`, because the gateway may put an error
envelope inside a 200 body that the SDK would not detect.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, ClassVar

import httpx
import openai

from flashcard_ai.core.abc import AbstractCompletionClient
from flashcard_ai.core.config import (
    DEFAULT_BASE_URL,
    DEFAULT_REFERER_URL,
    DEFAULT_TITLE,
    ClientConfig,
)
from flashcard_ai.core.exceptions import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Mapping

    from flashcard_ai.core.retry import RetryStrategy

logger = logging.getLogger(__name__)

#: Per-attempt HTTP timeout handed to the SDK (seconds).
DEFAULT_REQUEST_TIMEOUT_SEC = 60.0


# ---------------------------------------------------------------------------
# Client implementation
# ---------------------------------------------------------------------------


class OpenRouterClient(AbstractCompletionClient):
    """Chat completion client for the OpenRouter gateway."""

    transport_errors: ClassVar[tuple[type[BaseException], ...]] = (openai.APIConnectionError, httpx.TransportError)

    def __init__(
        self,
        api_key: str | None,
        *,
        base_url: str = DEFAULT_BASE_URL,
        referer_url: str = DEFAULT_REFERER_URL,
        title: str = DEFAULT_TITLE,
        timeout_sec: float | None = None,
        request_timeout_sec: float = DEFAULT_REQUEST_TIMEOUT_SEC,
        retry_strategy: RetryStrategy | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        if not api_key:
            raise ConfigurationError('OpenRouter API key is not configured.')
        super().__init__(retry_strategy=retry_strategy, timeout_sec=timeout_sec)

        self._base_url = base_url
        self._referer_url = referer_url
        self._title = title
        self._client = openai.AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            default_headers={'HTTP-Referer': referer_url, 'X-Title': title},
            timeout=request_timeout_sec,
            max_retries=0,  # retrying is AbstractCompletionClient's job
            http_client=http_client,
        )
        logger.debug('OpenRouterClient ready: base_url=%s referer=%s title=%s', base_url, referer_url, title)

    @classmethod
    def from_config(cls, config: ClientConfig, **kwargs: Any) -> OpenRouterClient:
        """Build a client from a :class:`ClientConfig`; `kwargs` go to ``__init__``."""
        return cls(
            config.api_key.get_secret_value(),
            base_url=config.base_url,
            referer_url=config.referer_url,
            title=config.title,
            timeout_sec=config.timeout_sec,
            **kwargs,
        )

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def _send(self, payload: dict[str, Any]) -> httpx.Response:
        try:
            raw = await self._client.chat.completions.with_raw_response.create(**payload)
        except openai.APIStatusError as exc:
            # Non-2xx answers are classified upstream, not here
            response = exc.response
        else:
            response = raw.http_response

        logger.debug(
            'POST %s -> %d, request headers: %s',
            response.request.url,
            response.status_code,
            redact_headers(response.request.headers),
        )
        return response

    async def aclose(self) -> None:
        await self._client.close()

    def __repr__(self) -> str:  # pragma: no cover - cosmetic
        return f'<{self.__class__.__name__} base_url={self._base_url!r} title={self._title!r}>'


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def redact_headers(headers: Mapping[str, str]) -> dict[str, str]:
    """Copy of `headers` that is safe to log."""
    redacted = {}
    for key, value in headers.items():
        if key.lower() == 'authorization':
            redacted[key] = 'Bearer [REDACTED]'
        elif key.lower() == 'cookie':
            redacted[key] = '[REDACTED]'
        else:
            redacted[key] = value
    return redacted
