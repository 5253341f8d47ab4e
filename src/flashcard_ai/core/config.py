"""core.config

Client configuration value-object.

Configuration is always explicit: a client is built from a `ClientConfig`
(or plain keyword arguments) and keeps it for its whole lifetime. Reading the
process environment happens only when a caller asks for it through
`ClientConfig.from_env()`; there is no fallback credential.
"""

from __future__ import annotations

import os

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

from flashcard_ai.core.exceptions import ConfigurationError

DEFAULT_BASE_URL = 'https://openrouter.ai/api/v1'
DEFAULT_REFERER_URL = 'http://localhost:3000'
DEFAULT_TITLE = '10x App'


class ClientConfig(BaseModel):
    """Settings for one gateway client instance."""

    api_key: SecretStr
    base_url: str = Field(default=DEFAULT_BASE_URL, description='Gateway root; /chat/completions is appended')
    referer_url: str = Field(default=DEFAULT_REFERER_URL, description='Sent as HTTP-Referer on every call')
    title: str = Field(default=DEFAULT_TITLE, description='Sent as X-Title on every call')
    timeout_sec: float | None = Field(default=None, gt=0, description='Bound on one whole call, retries included')

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    @field_validator('api_key', mode='before')
    @classmethod
    def _require_api_key(cls, v: object) -> object:
        if v is None or (isinstance(v, str) and not v.strip()):
            raise ConfigurationError('OpenRouter API key is not configured.')
        return v

    @classmethod
    def from_env(cls, env_file: str | None = None) -> ClientConfig:
        """Build a config from ``OPENROUTER_*``/``APP_*`` variables (and `.env`).

        Raises
        ------
        ConfigurationError
            If ``OPENROUTER_API_KEY`` is unset or empty.

        """
        load_dotenv(env_file)
        api_key = os.getenv('OPENROUTER_API_KEY')
        if not api_key:
            raise ConfigurationError(
                'OpenRouter API key is not configured. Please add OPENROUTER_API_KEY to your .env file.',
            )
        return cls(
            api_key=api_key,
            base_url=os.getenv('OPENROUTER_BASE_URL') or DEFAULT_BASE_URL,
            referer_url=os.getenv('APP_URL') or DEFAULT_REFERER_URL,
            title=os.getenv('APP_TITLE') or DEFAULT_TITLE,
        )
