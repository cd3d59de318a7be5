"""
LLM provider abstractions.

The profile and ranking pipelines treat the language model as an
external text-completion capability: a request is a system instruction
plus a JSON payload, and the response is text that should contain a
single JSON object.  Concrete providers exist for Anthropic (Claude),
OpenAI and Gemini.  :class:`PlaceholderProvider` stands in when no
provider is configured; callers check :attr:`LLMProvider.configured`
and skip the call entirely in that case.

The Anthropic provider walks a short, fixed list of model identifiers:
a model-not-found error advances to the next candidate, any other error
is raised immediately.  No other retries are performed.
"""

from __future__ import annotations

import json
import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from ..config import Settings
from ..errors import CapabilityError, ModelNotFoundError

logger = logging.getLogger(__name__)

_FENCE_START = re.compile(r"^```[\w-]*\s*")
_FENCE_END = re.compile(r"\s*```$")


def parse_json_object(text: Optional[str]) -> Optional[Dict[str, Any]]:
    """Parse a model response into a dict.

    Markdown code fences are stripped first.  Returns ``None`` when the
    text is empty, not valid JSON, or not a JSON object.
    """
    raw = (text or "").strip()
    if raw.startswith("```"):
        raw = _FENCE_END.sub("", _FENCE_START.sub("", raw))
    if not raw:
        return None
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        return None
    return data if isinstance(data, dict) else None


class LLMProvider(ABC):
    """Abstract base class for LLM providers."""

    name = "llm"
    configured = True

    @abstractmethod
    def complete(self, system_prompt: str, payload: Dict[str, Any]) -> str:
        """Send one request and return the raw response text.

        Args:
            system_prompt: Schema and rules for the response.
            payload: JSON-serialisable user payload.

        Raises:
            CapabilityError: If the provider could not produce a response.
        """
        raise NotImplementedError


class PlaceholderProvider(LLMProvider):
    """Stand-in used when no LLM is configured.  Never called."""

    name = "placeholder"
    configured = False

    def complete(self, system_prompt: str, payload: Dict[str, Any]) -> str:
        raise CapabilityError("No LLM provider configured")


def _is_model_not_found(exc: Exception) -> bool:
    status = getattr(exc, "status_code", None)
    return status == 404 or "not_found_error" in str(exc).lower()


class AnthropicProvider(LLMProvider):
    """Provider for Anthropic Claude models with model fallback."""

    name = "anthropic"

    def __init__(self, api_key: Optional[str], models: List[str], max_tokens: int = 1900, temperature: float = 0.0) -> None:
        try:
            import anthropic  # type: ignore
        except ImportError as exc:
            raise RuntimeError(
                "anthropic package is required for AnthropicProvider. Install it via pip."
            ) from exc
        if not api_key:
            raise ValueError("ANTHROPIC_API_KEY not provided")
        if not models:
            raise ValueError("At least one Claude model identifier is required")
        self.client = anthropic.Anthropic(api_key=api_key)
        self.models = list(models)
        self.max_tokens = max_tokens
        self.temperature = temperature

    def _create(self, model: str, system_prompt: str, payload: Dict[str, Any]) -> str:
        message = self.client.messages.create(
            model=model,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
            system=system_prompt,
            messages=[{"role": "user", "content": json.dumps(payload)}],
        )
        blocks = getattr(message, "content", None) or []
        return getattr(blocks[0], "text", "") if blocks else ""

    def complete(self, system_prompt: str, payload: Dict[str, Any]) -> str:
        last_error: Optional[Exception] = None
        for model in self.models:
            try:
                return self._create(model, system_prompt, payload)
            except Exception as exc:  # noqa: BLE001
                if _is_model_not_found(exc):
                    logger.warning("Model %s not available, trying next candidate", model)
                    last_error = exc
                    continue
                raise CapabilityError(f"Anthropic request failed: {exc}") from exc
        raise ModelNotFoundError(
            f"No available Claude models from candidate list: {last_error}"
        ) from last_error


class OpenAIProvider(LLMProvider):
    """Provider that uses the OpenAI chat completions API."""

    name = "openai"

    def __init__(self, api_key: Optional[str], model: str = "gpt-4o-mini", max_tokens: int = 1900, temperature: float = 0.0) -> None:
        try:
            import openai  # type: ignore
        except ImportError as exc:
            raise RuntimeError(
                "openai package is required for OpenAIProvider. Install it via pip."
            ) from exc
        if not api_key:
            raise ValueError("OPENAI_API_KEY not provided")
        self.client = openai.OpenAI(api_key=api_key)
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature

    def complete(self, system_prompt: str, payload: Dict[str, Any]) -> str:
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": json.dumps(payload)},
                ],
            )
        except Exception as exc:  # noqa: BLE001
            if _is_model_not_found(exc):
                raise ModelNotFoundError(f"OpenAI model {self.model} not available") from exc
            raise CapabilityError(f"OpenAI request failed: {exc}") from exc
        choices = getattr(response, "choices", None) or []
        if not choices:
            raise CapabilityError("OpenAI response contained no choices")
        return choices[0].message.content or ""


class GeminiProvider(LLMProvider):
    """Provider that uses Google Generative AI (Gemini)."""

    name = "gemini"

    def __init__(self, api_key: Optional[str], model: str = "gemini-1.5-pro", max_tokens: int = 1900, temperature: float = 0.0) -> None:
        try:
            import google.generativeai as genai  # type: ignore
        except ImportError as exc:
            raise RuntimeError(
                "google-generativeai package is required for GeminiProvider. Install it via pip."
            ) from exc
        if not api_key:
            raise ValueError("GEMINI_API_KEY/GOOGLE_API_KEY not provided")
        self.genai = genai
        self.genai.configure(api_key=api_key)
        self.model_name = model
        self.generation_config = {"temperature": temperature, "max_output_tokens": max_tokens}

    def complete(self, system_prompt: str, payload: Dict[str, Any]) -> str:
        try:
            model = self.genai.GenerativeModel(self.model_name, system_instruction=system_prompt)
            response = model.generate_content(
                json.dumps(payload), generation_config=self.generation_config
            )
            return response.text or ""
        except Exception as exc:  # noqa: BLE001
            raise CapabilityError(f"Gemini request failed: {exc}") from exc


def _build(name: str, settings: Settings) -> LLMProvider:
    if name == "anthropic":
        return AnthropicProvider(
            settings.anthropic_api_key, settings.claude_models, settings.max_tokens, settings.temperature
        )
    if name == "openai":
        return OpenAIProvider(
            settings.openai_api_key, settings.openai_model, settings.max_tokens, settings.temperature
        )
    if name == "gemini":
        return GeminiProvider(
            settings.gemini_api_key, settings.gemini_model, settings.max_tokens, settings.temperature
        )
    raise ValueError(f"Unknown provider: {name}")


def get_default_provider(settings: Optional[Settings] = None) -> LLMProvider:
    """Return an LLMProvider instance based on configuration and API keys.

    The resolution order is:

    1. If ``settings.llm_provider`` is ``"anthropic"``, ``"openai"``,
       ``"gemini"`` or ``"placeholder"``, that provider is selected.  If
       it cannot be initialised a warning is logged and automatic
       detection is used instead.
    2. Otherwise the first provider with an API key wins, checked in
       the order Anthropic, OpenAI, Gemini.
    3. Otherwise :class:`PlaceholderProvider` is returned.
    """
    settings = settings or Settings.from_env()
    preferred = (settings.llm_provider or "").lower()
    if preferred == "placeholder":
        logger.info("LLM_PROVIDER=placeholder; using placeholder provider")
        return PlaceholderProvider()
    if preferred:
        try:
            return _build(preferred, settings)
        except Exception as exc:  # noqa: BLE001
            logger.warning("LLM_PROVIDER=%s but failed to initialise it: %s", preferred, exc)
    for name, key in (
        ("anthropic", settings.anthropic_api_key),
        ("openai", settings.openai_api_key),
        ("gemini", settings.gemini_api_key),
    ):
        if not key:
            continue
        try:
            return _build(name, settings)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Failed to initialise %s provider: %s", name, exc)
    logger.info("No LLM API keys found; using placeholder provider")
    return PlaceholderProvider()
