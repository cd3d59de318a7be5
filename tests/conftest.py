"""Shared fixtures: a scripted LLM provider and a small job catalog."""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Union

import pytest  # type: ignore

from prooffolio.rank.catalog import Job
from prooffolio.rank.llm_providers import LLMProvider

Reply = Union[str, Callable[[str, Dict[str, Any]], str]]


class FakeProvider(LLMProvider):
    """Returns canned text (or raises) and records every request."""

    name = "fake"

    def __init__(self, reply: Reply = "{}", error: Optional[Exception] = None) -> None:
        self.reply = reply
        self.error = error
        self.calls: List[tuple] = []

    def complete(self, system_prompt: str, payload: Dict[str, Any]) -> str:
        self.calls.append((system_prompt, payload))
        if self.error is not None:
            raise self.error
        if callable(self.reply):
            return self.reply(system_prompt, payload)
        return self.reply


@pytest.fixture
def fake_provider():
    return FakeProvider


@pytest.fixture
def jobs() -> List[Job]:
    return [
        Job(id="j1", title="Python Developer", company="Acme", description="python"),
        Job(id="j2", title="Climate Research Analyst", company="Greenline"),
        Job(id="j3", title="Sales Manager", company="Shopco"),
    ]
