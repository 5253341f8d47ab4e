"""core.classification

Turns a raw gateway response into either a validated
:class:`~flashcard_ai.core.types.CompletionResponse` or exactly one typed error.

The body is inspected regardless of HTTP status because the gateway sometimes
embeds an error envelope inside a 200 response. Which free-text messages count
as "credit exhausted" or "authentication" is decided by the two predicates
below and nowhere else.
"""

from __future__ import annotations

import json
import logging
from http import HTTPStatus
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from flashcard_ai.core.exceptions import (
    ApiError,
    AuthenticationError,
    BadRequestError,
    ParsingError,
    RateLimitError,
    ServerError,
)
from flashcard_ai.core.types import ApiErrorPayload, CompletionResponse

if TYPE_CHECKING:
    import httpx

logger = logging.getLogger(__name__)

# Matching is case-sensitive, mirroring the wording the gateway actually uses.
CREDIT_LIMIT_MARKERS: tuple[str, ...] = ('more credits', 'can only afford', 'token limit')
AUTH_MARKERS: tuple[str, ...] = ('API key', 'authentication', 'authorized')

_LOG_PREVIEW_CHARS = 500


# ---------------------------------------------------------------------------
# Message predicates
# ---------------------------------------------------------------------------


def is_credit_limit_message(message: str | None) -> bool:
    return bool(message) and any(marker in message for marker in CREDIT_LIMIT_MARKERS)


def is_auth_message(message: str | None) -> bool:
    return bool(message) and any(marker in message for marker in AUTH_MARKERS)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def classify_response(response: httpx.Response) -> CompletionResponse:
    """Validate `response` or raise the matching error."""
    status = response.status_code
    logger.debug('Gateway responded with status %d', status)

    try:
        body = response.json()
    except ValueError as exc:
        logger.warning('Gateway returned a non-JSON body (status %d)', status)
        _raise_for_status(status, body=None)
        raise ParsingError(f'Failed to parse API response: {exc}') from exc

    if logger.isEnabledFor(logging.DEBUG):
        logger.debug('Gateway body preview: %s', json.dumps(body)[:_LOG_PREVIEW_CHARS])

    # an empty envelope still counts as an error
    if isinstance(body, dict) and body.get('error') is not None:
        raise classify_error_envelope(body['error'])

    _raise_for_status(status, body)

    if not isinstance(body, dict):
        raise ParsingError('Invalid response structure: expected a JSON object')

    validate_completion_shape(body)
    try:
        return CompletionResponse.from_body(body)
    except ValidationError as exc:
        raise ParsingError(f'Invalid response structure: {exc.error_count()} invalid field(s)') from exc


def classify_error_envelope(error: Any) -> ApiError:
    """Map the gateway's ``error`` object onto the error taxonomy.

    Credit exhaustion wins over authentication, which wins over the generic
    :class:`ApiError`.
    """
    payload = _parse_error_payload(error)
    code = _coerce_code(payload.code)
    message = payload.message

    if code == HTTPStatus.PAYMENT_REQUIRED or is_credit_limit_message(message):
        logger.warning('Gateway reports credit limit exceeded: %s', message)
        return RateLimitError(f'Credit limit exceeded: {message}', credit_limit=True, gateway_message=message)

    if code == HTTPStatus.UNAUTHORIZED or payload.type == 'invalid_request_error' or is_auth_message(message):
        logger.warning('Gateway reports an authentication error')
        return AuthenticationError(f'Authentication error: {message}')

    logger.warning('Gateway reports an error (code=%s): %s', payload.code, message)
    return ApiError(message or 'Unknown API error', code or HTTPStatus.BAD_REQUEST)


def validate_completion_shape(body: dict[str, Any]) -> None:
    """Check the invariants callers rely on when they read ``choices[0]``."""
    choices = body.get('choices')
    if not isinstance(choices, list) or not choices:
        raise ParsingError('Invalid response structure: missing choices array')

    first_choice = choices[0]
    if not isinstance(first_choice, dict):
        raise ParsingError('Invalid response structure: first choice is invalid')

    message = first_choice.get('message')
    if not isinstance(message, dict):
        raise ParsingError('Invalid response structure: message is missing or invalid')

    if not isinstance(message.get('content'), str):
        raise ParsingError('Invalid response structure: content is not a string')


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _raise_for_status(status: int, body: Any) -> None:
    """Classify by HTTP status alone, for bodies without an error envelope."""
    if status == HTTPStatus.UNAUTHORIZED:
        raise AuthenticationError('Authentication failed: Invalid API key')
    if status == HTTPStatus.TOO_MANY_REQUESTS:
        raise RateLimitError('Rate limit exceeded')
    if status >= HTTPStatus.INTERNAL_SERVER_ERROR:
        raise ServerError('Gateway server error', status)
    if body is not None and status >= HTTPStatus.BAD_REQUEST:
        raise BadRequestError(f'Gateway rejected the request (status {status})', status)


def _parse_error_payload(error: Any) -> ApiErrorPayload:
    if not isinstance(error, dict):
        return ApiErrorPayload(message=str(error))
    try:
        return ApiErrorPayload.model_validate(error)
    except ValidationError:
        return ApiErrorPayload(message=json.dumps(error))


def _coerce_code(code: int | str | None) -> int | None:
    if isinstance(code, int) and not isinstance(code, bool):
        return code
    if isinstance(code, str) and code.isdigit():
        return int(code)
    return None
