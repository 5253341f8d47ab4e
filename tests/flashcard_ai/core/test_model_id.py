from __future__ import annotations

import pytest

from flashcard_ai.core.model_id import (
    AVAILABLE_MODELS,
    ModelId,
    get_default_model,
    get_model_by_id,
    parse_model_id,
)


def test_valid_parse_and_str() -> None:
    mid: ModelId = ModelId.parse('OpenAI/GPT-4o')
    assert mid.vendor == 'openai'
    assert mid.model == 'gpt-4o'
    assert mid.raw == 'OpenAI/GPT-4o'
    assert str(mid) == 'openai/gpt-4o'


def test_parse_variant_suffix() -> None:
    mid = ModelId.parse('meta-llama/llama-3-8b-instruct:free')
    assert mid.vendor == 'meta-llama'
    assert mid.model == 'llama-3-8b-instruct:free'


@pytest.mark.parametrize('bad_id', ['openai', 'openai:gpt-4o', '/', 'openai/', '/gpt-4o', 'a/b/c'])
def test_invalid_parse(bad_id: str) -> None:
    with pytest.raises(ValueError):  # noqa: PT011
        ModelId.parse(bad_id)


def test_function_alias() -> None:
    assert isinstance(parse_model_id('anthropic/claude-3-sonnet'), ModelId)


def test_catalog_ids_are_valid_model_ids() -> None:
    for model in AVAILABLE_MODELS:
        parse_model_id(model.id)


def test_default_model_is_the_recommended_one() -> None:
    default = get_default_model()
    assert default.is_recommended
    assert default.id == 'openai/gpt-4o'


def test_get_model_by_id() -> None:
    model = get_model_by_id('google/gemini-1.5-pro')
    assert model is not None
    assert model.cost_tier == 'medium'
    assert get_model_by_id('no/such-model') is None
