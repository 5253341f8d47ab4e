"""core.abc

Abstract base class that *all* gateway clients must implement.

Design goals
============
1. **Single public entry point** - callers use `get_chat_completion()` with a
    `CompletionRequest` and get back a validated `CompletionResponse` or one
    typed error from `core.exceptions`.
2. **Built-in retry** - transport failures and 5xx answers are retried through
    `with_retry()` so every concrete client inherits the same back-off.
3. **Transport only in subclasses** - concrete clients implement `_send()` and
    nothing else; validation and classification live here and in
    `core.classification`.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from http import HTTPStatus
from typing import TYPE_CHECKING, Any, ClassVar

from pydantic import ValidationError

from flashcard_ai.core.classification import classify_response
from flashcard_ai.core.exceptions import NetworkError, RequestValidationError
from flashcard_ai.core.retry import RetryStrategy, with_retry
from flashcard_ai.core.types import CompletionRequest

if TYPE_CHECKING:
    from collections.abc import Mapping

    import httpx

    from flashcard_ai.core.types import CompletionResponse

logger = logging.getLogger(__name__)


def is_server_error(response: httpx.Response) -> bool:
    return HTTPStatus.INTERNAL_SERVER_ERROR <= response.status_code < 600  # noqa: PLR2004


class AbstractCompletionClient(ABC):
    """Gateway-independent chat completion client."""

    #: Exceptions raised by `_send()` that mean "the request never got an answer".
    transport_errors: ClassVar[tuple[type[BaseException], ...]] = (ConnectionError,)

    # ---------------------------------------------------------------------
    # Construction
    # ---------------------------------------------------------------------

    def __init__(
        self,
        *,
        retry_strategy: RetryStrategy | None = None,
        timeout_sec: float | None = None,
    ) -> None:
        """Store the retry policy and the optional bound on a whole call."""
        self._retry_strategy: RetryStrategy = retry_strategy or RetryStrategy(
            max_retries=3,
            base_backoff_sec=1.0,
            jitter=True,
        )
        self._timeout_sec: float | None = timeout_sec

    # ------------------------------------------------------------------
    # Public async API
    # ------------------------------------------------------------------

    async def get_chat_completion(
        self,
        request: CompletionRequest | Mapping[str, Any],
    ) -> CompletionResponse:
        """Send `request` and return the validated response.

        Subclasses **must not** override this - override `_send()` instead.

        Raises
        ------
        RequestValidationError
            `model` or `messages` is empty; nothing was sent.
        NetworkError
            The transport kept failing, or `timeout_sec` elapsed.
        ApiError
            Or one of its subclasses, as decided by `classify_response()`.
        ParsingError
            The body is not a well-formed completion.

        """
        completion_request = _validate_request(request)
        payload = completion_request.to_payload()
        logger.debug(
            'Sending completion request: model=%s messages=%d response_format=%s',
            completion_request.model,
            len(completion_request.messages),
            'defined' if completion_request.response_format else 'undefined',
        )

        try:
            async with asyncio.timeout(self._timeout_sec):
                response = await self._send_with_retry(payload)
        except self.transport_errors as exc:
            logger.warning('Transport failed after %d attempts: %s', self._retry_strategy.max_attempts, exc)
            raise NetworkError(f'Network error while connecting to the gateway: {exc}') from exc
        except TimeoutError as exc:
            logger.warning('Completion call exceeded %.1fs', self._timeout_sec)
            raise NetworkError(f'Completion call timed out after {self._timeout_sec}s') from exc

        return classify_response(response)

    async def _send_with_retry(self, payload: dict[str, Any]) -> httpx.Response:
        @with_retry(self._retry_strategy, retry_on=self.transport_errors, retry_if=is_server_error)
        async def _call() -> httpx.Response:  # fresh retry counter per call
            return await self._send(payload)

        return await _call()

    # ------------------------------------------------------------------
    # Methods to implement in concrete clients
    # ------------------------------------------------------------------

    @abstractmethod
    async def _send(self, payload: dict[str, Any]) -> httpx.Response:
        """POST `payload` to the gateway once and return whatever came back.

        Must return non-2xx responses rather than raising; raise only one of
        `transport_errors` when no response was received.
        """

    async def aclose(self) -> None:
        """Release transport resources. No-op by default."""

    async def __aenter__(self) -> AbstractCompletionClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Helper - string representation
    # ------------------------------------------------------------------

    def __repr__(self) -> str:  # pragma: no cover - cosmetic
        return f'<{self.__class__.__name__} retries={self._retry_strategy.max_retries}>'


def _validate_request(request: CompletionRequest | Mapping[str, Any]) -> CompletionRequest:
    if not isinstance(request, CompletionRequest):
        try:
            request = CompletionRequest.model_validate(dict(request))
        except ValidationError as exc:
            raise RequestValidationError(f'Invalid completion request: {exc.error_count()} invalid field(s)') from exc

    if not request.model:
        raise RequestValidationError('Model is required')
    if not request.messages:
        raise RequestValidationError('At least one message is required')
    return request
