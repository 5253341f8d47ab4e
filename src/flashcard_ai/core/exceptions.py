"""core.exceptions

Centralised exception hierarchy for *flashcard_ai*.

Every failure of a completion call surfaces as exactly one of these classes.
Each error carries an `http_status` and a `to_json()` body so that the HTTP
layer can translate it into a response *without* scattering status-code logic
through route handlers. Bodies are written for end users: authentication
problems never reveal anything about the credential.
"""

from __future__ import annotations

import re
from http import HTTPStatus
from typing import Any

_TOKEN_COUNTS_REGEX: re.Pattern[str] = re.compile(r'(\d+) tokens, but can only afford (\d+)')


# ---------------------------------------------------------------------------
# Base class
# ---------------------------------------------------------------------------


class FlashcardAIError(Exception):
    """Base class for all *flashcard_ai* domain errors."""

    #: Status the HTTP layer should answer with, unless overridden.
    http_status: HTTPStatus = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.__class__.__name__)

    @property
    def message(self) -> str:
        return str(self)

    def to_json(self) -> dict[str, Any]:
        return {'error': {'type': self.__class__.__name__, 'message': str(self)}}


# ---------------------------------------------------------------------------
# Local failures (no network activity happened)
# ---------------------------------------------------------------------------


class ConfigurationError(FlashcardAIError):
    """Raised at construction when a required setting (the API key) is missing."""

    def to_json(self) -> dict[str, Any]:
        return {'error': 'Internal configuration error'}


class RequestValidationError(FlashcardAIError):
    """Raised before any network call when the request is malformed."""

    http_status = HTTPStatus.BAD_REQUEST

    def to_json(self) -> dict[str, Any]:
        return {'error': str(self)}


# ---------------------------------------------------------------------------
# Gateway-signalled errors
# ---------------------------------------------------------------------------


class ApiError(FlashcardAIError):
    """Generic gateway error; `status` is what the gateway reported."""

    default_status: int = HTTPStatus.BAD_REQUEST

    def __init__(self, message: str | None = None, status: int | None = None) -> None:
        super().__init__(message)
        self.status: int = int(status if status is not None else self.default_status)
        self.http_status = HTTPStatus.BAD_GATEWAY if self.status >= 500 else HTTPStatus.INTERNAL_SERVER_ERROR  # noqa: PLR2004

    def to_json(self) -> dict[str, Any]:
        return {'error': f'AI service error ({self.status}): {self}'}


class AuthenticationError(ApiError):
    """Gateway rejected the credential. Details never reach end users."""

    default_status = HTTPStatus.UNAUTHORIZED

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message, HTTPStatus.UNAUTHORIZED)
        self.http_status = HTTPStatus.INTERNAL_SERVER_ERROR

    def to_json(self) -> dict[str, Any]:
        return {'error': 'Authentication error with AI service. Please contact support.'}


class BadRequestError(ApiError):
    """Gateway rejected the request as malformed (4xx, not auth, not rate limit)."""

    default_status = HTTPStatus.BAD_REQUEST

    def __init__(self, message: str | None = None, status: int | None = None) -> None:
        super().__init__(message, status)
        self.http_status = HTTPStatus.BAD_REQUEST

    def to_json(self) -> dict[str, Any]:
        return {'error': f'Invalid request to AI service: {self}'}


class RateLimitError(ApiError):
    """Gateway throttled the caller or the account ran out of credits.

    Credit exhaustion is a variant of this error (``credit_limit=True``) rather
    than its own kind. For that variant the gateway's text is kept verbatim in
    `gateway_message`, and the requested/available token counts are parsed from
    it when present.
    """

    default_status = HTTPStatus.TOO_MANY_REQUESTS

    def __init__(
        self,
        message: str | None = None,
        *,
        credit_limit: bool = False,
        gateway_message: str | None = None,
    ) -> None:
        super().__init__(message, HTTPStatus.TOO_MANY_REQUESTS)
        self.credit_limit: bool = credit_limit
        self.gateway_message: str | None = gateway_message
        self.requested_tokens, self.available_tokens = parse_token_counts(gateway_message or str(self))
        self.http_status = HTTPStatus.PAYMENT_REQUIRED if credit_limit else HTTPStatus.TOO_MANY_REQUESTS

    def to_json(self) -> dict[str, Any]:
        if not self.credit_limit:
            return {
                'error': 'AI service rate limit exceeded.',
                'message': 'The service is currently receiving too many requests. Please try again later.',
                'code': 'RATE_LIMIT_EXCEEDED',
            }
        if self.requested_tokens is not None:
            details = (
                f'You requested {self.requested_tokens} tokens, but only have {self.available_tokens} available.'
            )
        else:
            details = 'Insufficient tokens for this operation.'
        return {
            'error': 'OpenRouter credit limit exceeded.',
            'message': str(self),
            'details': details,
            'code': 'CREDIT_LIMIT_EXCEEDED',
            'requestedTokens': self.requested_tokens,
            'availableTokens': self.available_tokens,
        }


class ServerError(ApiError):
    """Gateway kept answering 5xx after the retry budget was spent."""

    default_status = HTTPStatus.INTERNAL_SERVER_ERROR


# ---------------------------------------------------------------------------
# Transport / payload errors
# ---------------------------------------------------------------------------


class NetworkError(FlashcardAIError):
    """Transport failure (DNS, connection reset, timeout) after all retries."""

    http_status = HTTPStatus.SERVICE_UNAVAILABLE

    def to_json(self) -> dict[str, Any]:
        return {'error': 'Network error while connecting to AI service. Please try again.'}


class ParsingError(FlashcardAIError):
    """Response body is not JSON, or does not have the completion shape."""

    def to_json(self) -> dict[str, Any]:
        return {'error': f'Failed to parse AI response: {self}'}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def parse_token_counts(message: str | None) -> tuple[int | None, int | None]:
    """Extract ``(requested, available)`` from a credit-limit message.

    >>> parse_token_counts('You requested 5000 tokens, but can only afford 1200')
    (5000, 1200)
    """
    if not message or (m := _TOKEN_COUNTS_REGEX.search(message)) is None:
        return None, None
    return int(m.group(1)), int(m.group(2))


def error_response(exc: FlashcardAIError) -> tuple[HTTPStatus, dict[str, Any]]:
    """Return the ``(status, body)`` pair an HTTP handler should answer with."""
    return exc.http_status, exc.to_json()
