"""flashcard_ai

Chat completion client for the flashcard app's AI features.
"""

from flashcard_ai.adapters.openrouter_adapter import OpenRouterClient
from flashcard_ai.core.abc import AbstractCompletionClient
from flashcard_ai.core.config import ClientConfig
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
)
from flashcard_ai.core.retry import RetryStrategy
from flashcard_ai.core.types import (
    ChatMessage,
    CompletionRequest,
    CompletionResponse,
    JsonSchemaFormat,
    Role,
)

__all__ = [
    'AbstractCompletionClient',
    'ApiError',
    'AuthenticationError',
    'BadRequestError',
    'ChatMessage',
    'ClientConfig',
    'CompletionRequest',
    'CompletionResponse',
    'ConfigurationError',
    'FlashcardAIError',
    'JsonSchemaFormat',
    'NetworkError',
    'OpenRouterClient',
    'ParsingError',
    'RateLimitError',
    'RequestValidationError',
    'RetryStrategy',
    'Role',
    'ServerError',
    'error_response',
]
