"""Tests for provider selection and Claude model fallback."""

from __future__ import annotations

import pytest  # type: ignore

import prooffolio.rank.llm_providers as providers
from prooffolio.config import CLAUDE_FALLBACK_MODELS, Settings
from prooffolio.errors import CapabilityError, ModelNotFoundError
from prooffolio.rank.llm_providers import (
    AnthropicProvider,
    PlaceholderProvider,
    get_default_provider,
    parse_json_object,
)


class StatusError(Exception):
    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


def _anthropic(models, outcomes):
    """An AnthropicProvider whose transport is replaced by ``outcomes``."""
    provider = AnthropicProvider.__new__(AnthropicProvider)
    provider.models = list(models)
    provider.max_tokens = 100
    provider.temperature = 0.0
    provider.tried = []

    def fake_create(model, system_prompt, payload):
        provider.tried.append(model)
        outcome = outcomes[model]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    provider._create = fake_create
    return provider


def test_parse_json_object() -> None:
    assert parse_json_object('```json\n{"a": 1}\n```') == {"a": 1}
    assert parse_json_object('```\n{"a": 1}```') == {"a": 1}
    assert parse_json_object('{"a": 1}') == {"a": 1}
    assert parse_json_object("[1]") is None
    assert parse_json_object("no") is None
    assert parse_json_object(None) is None


def test_model_not_found_advances_to_next_candidate() -> None:
    provider = _anthropic(
        ["m1", "m2", "m3"],
        {
            "m1": StatusError("model m1 missing", 404),
            "m2": Exception("Error code: 404 - {'type': 'not_found_error'}"),
            "m3": '{"ok": true}',
        },
    )
    assert provider.complete("sys", {}) == '{"ok": true}'
    assert provider.tried == ["m1", "m2", "m3"]


def test_exhausted_candidates_raise_model_not_found() -> None:
    provider = _anthropic(["m1", "m2"], {"m1": StatusError("gone", 404), "m2": StatusError("gone", 404)})
    with pytest.raises(ModelNotFoundError):
        provider.complete("sys", {})


def test_other_errors_are_not_retried() -> None:
    provider = _anthropic(["m1", "m2"], {"m1": StatusError("overloaded", 529), "m2": "{}"})
    with pytest.raises(CapabilityError) as excinfo:
        provider.complete("sys", {})
    assert not isinstance(excinfo.value, ModelNotFoundError)
    assert provider.tried == ["m1"]


def test_claude_models_have_no_repeats() -> None:
    settings = Settings(anthropic_model=CLAUDE_FALLBACK_MODELS[0])
    assert settings.claude_models == CLAUDE_FALLBACK_MODELS
    assert Settings().claude_models[0] == "claude-3-5-sonnet-20241022"


def test_placeholder_without_keys() -> None:
    provider = get_default_provider(Settings())
    assert isinstance(provider, PlaceholderProvider)
    assert not provider.configured
    with pytest.raises(CapabilityError):
        provider.complete("sys", {})


def test_explicit_placeholder_wins_over_keys() -> None:
    provider = get_default_provider(Settings(llm_provider="placeholder", anthropic_api_key="k"))
    assert isinstance(provider, PlaceholderProvider)


def test_resolution_order(monkeypatch: pytest.MonkeyPatch, fake_provider) -> None:
    built = []

    def fake_build(name, settings):
        built.append(name)
        provider = fake_provider()
        provider.name = name
        return provider

    monkeypatch.setattr(providers, "_build", fake_build)
    assert get_default_provider(Settings(openai_api_key="o", gemini_api_key="g")).name == "openai"
    assert get_default_provider(Settings(anthropic_api_key="a", openai_api_key="o")).name == "anthropic"
    assert get_default_provider(Settings(llm_provider="gemini", anthropic_api_key="a")).name == "gemini"


def test_failed_preference_falls_back_to_detection() -> None:
    provider = get_default_provider(Settings(llm_provider="nonexistent"))
    assert isinstance(provider, PlaceholderProvider)


def test_openai_empty_choices_is_a_capability_error(fake_provider) -> None:
    from types import SimpleNamespace

    from prooffolio.profile.extract import ExtractionResult, extract_from_paper
    from prooffolio.profile.schema import Chunk
    from prooffolio.rank.llm_providers import OpenAIProvider

    provider = OpenAIProvider.__new__(OpenAIProvider)
    provider.model = "gpt-4o-mini"
    provider.max_tokens = 100
    provider.temperature = 0.0
    completions = SimpleNamespace(create=lambda **kwargs: SimpleNamespace(choices=[]))
    provider.client = SimpleNamespace(chat=SimpleNamespace(completions=completions))

    with pytest.raises(CapabilityError):
        provider.complete("sys", {})
    chunks = [Chunk(artifact_id="p1", text="Implemented the tagger in Python.")]
    assert extract_from_paper(provider, "p1", chunks) == ExtractionResult()
