"""Tests for environment and YAML configuration."""

from __future__ import annotations

from pathlib import Path

import pytest  # type: ignore

from prooffolio.config import Settings

ENV_VARS = (
    "LLM_PROVIDER", "ANTHROPIC_API_KEY", "OPENAI_API_KEY", "GEMINI_API_KEY", "GOOGLE_API_KEY",
    "CLAUDE_MODEL", "OPENAI_MODEL", "GEMINI_MODEL", "GOOGLE_MODEL", "JOBS_PATH", "OUTPUTS_DIR", "SAVE_OUTPUTS",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    settings = Settings.from_env()
    assert settings.llm_provider is None
    assert settings.catalog_path == "jobs/jobs.json"
    assert settings.outputs_dir == "outputs"
    assert settings.save_outputs is False
    assert settings.max_chunks == 6
    assert settings.shortlist_min == 40


def test_environment_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LLM_PROVIDER", "openai")
    monkeypatch.setenv("GOOGLE_API_KEY", "g-key")
    monkeypatch.setenv("CLAUDE_MODEL", "claude-custom")
    monkeypatch.setenv("JOBS_PATH", "/data/jobs.json")
    monkeypatch.setenv("SAVE_OUTPUTS", "true")
    settings = Settings.from_env()
    assert settings.llm_provider == "openai"
    assert settings.gemini_api_key == "g-key"
    assert settings.claude_models[0] == "claude-custom"
    assert len(settings.claude_models) == 3
    assert settings.catalog_path == "/data/jobs.json"
    assert settings.save_outputs is True


@pytest.mark.parametrize("value", ["1", "yes", "True", "TRUE", ""])
def test_save_outputs_needs_literal_true(monkeypatch: pytest.MonkeyPatch, value: str) -> None:
    monkeypatch.setenv("SAVE_OUTPUTS", value)
    assert Settings.from_env().save_outputs is False


def test_yaml_overrides(tmp_path: Path) -> None:
    config = tmp_path / "settings.yaml"
    config.write_text("max_chunks: 4\nsemantic_head: 20\nteam: research\n", encoding="utf-8")
    settings = Settings.from_env(str(config))
    assert settings.max_chunks == 4
    assert settings.semantic_head == 20
    assert settings.extra == {"team": "research"}


def test_yaml_must_be_a_mapping(tmp_path: Path) -> None:
    config = tmp_path / "settings.yaml"
    config.write_text("- one\n- two\n", encoding="utf-8")
    settings = Settings.from_env(str(config))
    assert settings.max_chunks == 6
    assert settings.extra == {}
