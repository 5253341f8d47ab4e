"""core.model_id

Utility for validating and parsing gateway model identifiers of the canonical form

    "<vendor>/<model_name>"        e.g. "openai/gpt-4o"

plus the catalog of models offered for flashcard generation.

This module is intentionally free of external dependencies (apart from Pydantic)
so that it can live in the **core** domain layer and be imported by any other
layer without causing circular-import issues.
"""

from __future__ import annotations

import re
from typing import Literal

from pydantic import BaseModel, Field, field_validator

# ---------------------------------------------------------------------------
# Regular-expression helpers
# ---------------------------------------------------------------------------

_MODEL_ID_REGEX: re.Pattern[str] = re.compile(
    r'^(?P<vendor>[a-z0-9_.-]+)/(?P<model>[a-z0-9_.:-]+)$',
    re.IGNORECASE,
)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


class ModelId(BaseModel):
    """Value-object representing a model identifier.

    * `vendor` … upstream model vendor (e.g. ``anthropic``)
    * `model` … concrete model name, optionally with a variant (e.g. ``llama-3-8b-instruct:free``)

    The *raw* string is preserved for logging/debugging purposes.
    """

    vendor: str = Field(..., pattern=r'^[a-z0-9_.-]+$', description='vendor slug')
    model: str = Field(..., pattern=r'^[a-z0-9_.:-]+$', description='model name')
    raw: str = Field(..., description='original, unmodified identifier')

    model_config = {
        'frozen': True,  # hashable / usable as dict key
        'str_strip_whitespace': True,
    }
    # --------------------------- Validators ---------------------------

    @field_validator('vendor', 'model', mode='before')
    @classmethod
    def _to_lower(cls, v: str) -> str:
        """Force lower-case for case-insensitive matching."""
        return v.lower()

    # --------------------------- Constructors -------------------------

    @classmethod
    def parse(cls, raw: str) -> ModelId:
        """Parse and validate a *raw* identifier string.

        >>> ModelId.parse("openai/gpt-4o")
        ModelId(vendor='openai', model='gpt-4o', raw='openai/gpt-4o')
        """
        if (m := _MODEL_ID_REGEX.match(raw.strip())) is None:
            raise ValueError(f"Invalid model id. Expected '<vendor>/<model>', got: {raw}")
        return cls(vendor=m.group('vendor'), model=m.group('model'), raw=raw)

    # --------------------------- Dunder helpers -----------------------

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f'{self.vendor}/{self.model}'


# Convenience alias so callers don't need to import the class explicitly
parse_model_id = ModelId.parse


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


class AIModel(BaseModel):
    """A model offered in the UI."""

    id: str
    name: str
    description: str
    cost_tier: Literal['low', 'medium', 'high']
    is_recommended: bool = False

    model_config = {'frozen': True}


AVAILABLE_MODELS: tuple[AIModel, ...] = (
    AIModel(
        id='openai/gpt-4o',
        name='GPT-4o',
        description='Powerful for understanding context and generating structured content. '
        'Good balance of quality and speed.',
        cost_tier='medium',
        is_recommended=True,
    ),
    AIModel(
        id='openai/gpt-3.5-turbo',
        name='GPT-3.5 Turbo',
        description='Fast and economical. Good for simpler content but may be less precise for complex topics.',
        cost_tier='low',
    ),
    AIModel(
        id='anthropic/claude-3-opus',
        name='Claude 3 Opus',
        description='Excellent at following detailed instructions and formatting. '
        'High-quality outputs but more expensive.',
        cost_tier='high',
    ),
    AIModel(
        id='anthropic/claude-3-sonnet',
        name='Claude 3 Sonnet',
        description='Good balance of quality and cost. Strong at structured content like flashcards.',
        cost_tier='medium',
    ),
    AIModel(
        id='google/gemini-1.5-pro',
        name='Gemini 1.5 Pro',
        description='Good at understanding concepts and generating structured content.',
        cost_tier='medium',
    ),
)


def get_default_model() -> AIModel:
    """Return the recommended model, or the first one if none is flagged."""
    return next((m for m in AVAILABLE_MODELS if m.is_recommended), AVAILABLE_MODELS[0])


def get_model_by_id(model_id: str) -> AIModel | None:
    return next((m for m in AVAILABLE_MODELS if m.id == model_id), None)
