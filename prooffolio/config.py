"""
Runtime configuration.

Settings are read from the process environment (a ``.env`` file is
loaded first via ``python-dotenv``) and may be overridden by an optional
YAML file.  Every knob used by the profile and ranking pipelines lives
on the :class:`Settings` dataclass so that tests can construct one
directly without touching the environment.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, fields
from typing import Dict, List, Optional

import yaml  # type: ignore
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_CLAUDE_MODEL = "claude-3-5-sonnet-20241022"
CLAUDE_FALLBACK_MODELS = ["claude-3-5-haiku-20241022", "claude-3-haiku-20240307"]


def _env_flag(name: str) -> bool:
    # Only the literal "true" enables a flag.
    return os.getenv(name) == "true"


@dataclass
class Settings:
    """Configuration for a Prooffolio process."""

    llm_provider: Optional[str] = None
    anthropic_api_key: Optional[str] = None
    openai_api_key: Optional[str] = None
    gemini_api_key: Optional[str] = None
    anthropic_model: str = DEFAULT_CLAUDE_MODEL
    openai_model: str = "gpt-4o-mini"
    gemini_model: str = "gemini-1.5-pro"
    max_tokens: int = 1900
    temperature: float = 0.0

    catalog_path: str = "jobs/jobs.json"
    outputs_dir: str = "outputs"
    save_outputs: bool = False

    # Chunking and profile budgets
    max_chunks: int = 6
    resume_char_budget: int = 3200
    paper_char_budget: int = 3600
    max_skills: int = 120
    max_tokens_per_set: int = 200
    extraction_concurrency: int = 4

    # Ranking budgets
    default_limit: int = 10
    shortlist_min: int = 40
    semantic_head: int = 60

    extra: Dict[str, object] = field(default_factory=dict)

    @property
    def claude_models(self) -> List[str]:
        """Anthropic model identifiers to try, in order, without repeats."""
        models: List[str] = []
        for model in [self.anthropic_model, *CLAUDE_FALLBACK_MODELS]:
            if model and model not in models:
                models.append(model)
        return models

    @classmethod
    def from_env(cls, config_path: Optional[str] = None) -> "Settings":
        """Build settings from the environment and an optional YAML file.

        Args:
            config_path: Optional path to a YAML file whose top-level keys
                match :class:`Settings` attribute names.  Unknown keys are
                kept in ``extra``.

        Returns:
            A populated :class:`Settings` instance.
        """
        load_dotenv(override=False)
        settings = cls(
            llm_provider=os.getenv("LLM_PROVIDER") or None,
            anthropic_api_key=os.getenv("ANTHROPIC_API_KEY") or None,
            openai_api_key=os.getenv("OPENAI_API_KEY") or None,
            gemini_api_key=os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY") or None,
            anthropic_model=os.getenv("CLAUDE_MODEL") or DEFAULT_CLAUDE_MODEL,
            openai_model=os.getenv("OPENAI_MODEL") or "gpt-4o-mini",
            gemini_model=os.getenv("GEMINI_MODEL") or os.getenv("GOOGLE_MODEL") or "gemini-1.5-pro",
            catalog_path=os.getenv("JOBS_PATH") or "jobs/jobs.json",
            outputs_dir=os.getenv("OUTPUTS_DIR") or "outputs",
            save_outputs=_env_flag("SAVE_OUTPUTS"),
        )
        if config_path:
            settings.apply_overrides(load_yaml_config(config_path))
        return settings

    def apply_overrides(self, overrides: Dict[str, object]) -> None:
        """Overlay a mapping of values onto this instance (shallow)."""
        known = {f.name for f in fields(self)}
        for key, value in (overrides or {}).items():
            if key in known and key != "extra":
                setattr(self, key, value)
            else:
                self.extra[key] = value


def load_yaml_config(config_path: str) -> Dict[str, object]:
    with open(config_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        logger.warning("Ignoring config %s: top level is not a mapping", config_path)
        return {}
    return data
