from __future__ import annotations

from http import HTTPStatus

import pytest

from flashcard_ai.core.exceptions import (
    ApiError,
    AuthenticationError,
    BadRequestError,
    ConfigurationError,
    FlashcardAIError,
    NetworkError,
    ParsingError,
    RateLimitError,
    RequestValidationError,
    ServerError,
    error_response,
    parse_token_counts,
)


@pytest.mark.parametrize(
    ('exc', 'status'),
    [
        (AuthenticationError('Authentication error: invalid API key sk-or-123'), HTTPStatus.INTERNAL_SERVER_ERROR),
        (BadRequestError('bad'), HTTPStatus.BAD_REQUEST),
        (RateLimitError('Rate limit exceeded'), HTTPStatus.TOO_MANY_REQUESTS),
        (RateLimitError('Credit limit exceeded: x', credit_limit=True), HTTPStatus.PAYMENT_REQUIRED),
        (NetworkError('down'), HTTPStatus.SERVICE_UNAVAILABLE),
        (ParsingError('garbled'), HTTPStatus.INTERNAL_SERVER_ERROR),
        (ApiError('upstream', 503), HTTPStatus.BAD_GATEWAY),
        (ApiError('weird', 418), HTTPStatus.INTERNAL_SERVER_ERROR),
        (ServerError('Gateway server error', 500), HTTPStatus.BAD_GATEWAY),
        (RequestValidationError('Model is required'), HTTPStatus.BAD_REQUEST),
        (ConfigurationError('missing key'), HTTPStatus.INTERNAL_SERVER_ERROR),
    ],
)
def test_http_status_mapping(exc: FlashcardAIError, status: HTTPStatus) -> None:
    assert error_response(exc)[0] == status


def test_authentication_body_hides_details() -> None:
    _, body = error_response(AuthenticationError('Authentication error: invalid API key sk-or-123'))
    assert 'sk-or-123' not in str(body)
    assert 'API key' not in str(body)


def test_credit_limit_body_exposes_token_counts() -> None:
    gateway_message = 'This request requires more credits. You requested 5000 tokens, but can only afford 1200'
    exc = RateLimitError(f'Credit limit exceeded: {gateway_message}', credit_limit=True, gateway_message=gateway_message)
    status, body = error_response(exc)

    assert status == HTTPStatus.PAYMENT_REQUIRED
    assert body['code'] == 'CREDIT_LIMIT_EXCEEDED'
    assert body['requestedTokens'] == 5000  # noqa: PLR2004
    assert body['availableTokens'] == 1200  # noqa: PLR2004
    assert gateway_message in body['message']
    assert body['details'] == 'You requested 5000 tokens, but only have 1200 available.'


def test_credit_limit_body_without_counts() -> None:
    _, body = error_response(RateLimitError('Credit limit exceeded: add more credits', credit_limit=True))
    assert body['requestedTokens'] is None
    assert body['details'] == 'Insufficient tokens for this operation.'


def test_plain_rate_limit_body() -> None:
    _, body = error_response(RateLimitError('Rate limit exceeded'))
    assert body['code'] == 'RATE_LIMIT_EXCEEDED'


def test_api_error_body_includes_status() -> None:
    _, body = error_response(ApiError('Model does not exist', 404))
    assert body == {'error': 'AI service error (404): Model does not exist'}


def test_api_error_status_defaults() -> None:
    assert ApiError('x').status == 400  # noqa: PLR2004
    assert AuthenticationError('x').status == 401  # noqa: PLR2004
    assert RateLimitError('x').status == 429  # noqa: PLR2004
    assert ServerError('x').status == 500  # noqa: PLR2004


def test_specific_errors_are_api_errors() -> None:
    for cls in (AuthenticationError, BadRequestError, RateLimitError, ServerError):
        assert issubclass(cls, ApiError)
    assert not issubclass(NetworkError, ApiError)
    assert not issubclass(ParsingError, ApiError)


@pytest.mark.parametrize(
    ('message', 'expected'),
    [
        ('You requested 5000 tokens, but can only afford 1200', (5000, 1200)),
        ('no numbers here', (None, None)),
        (None, (None, None)),
    ],
)
def test_parse_token_counts(message: str | None, expected: tuple[int | None, int | None]) -> None:
    assert parse_token_counts(message) == expected


def test_default_message_is_class_name() -> None:
    assert str(NetworkError()) == 'NetworkError'
