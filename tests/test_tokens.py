"""Tests for tokenisation and token-set derivation."""

from __future__ import annotations

from prooffolio.profile.schema import Preferences, Profile, Project, Skill
from prooffolio.rank.tokens import (
    derive_preference_tokens,
    derive_skill_tokens,
    jaccard,
    tokenize,
    unique_tokens,
)


def test_tokenize_keeps_technical_symbols() -> None:
    assert tokenize("I love C++, C# and .NET!") == ["love", "c++", "c#", ".net"]
    assert tokenize("Built with scikit-learn.") == ["built", "scikit-learn"]


def test_tokenize_drops_noise() -> None:
    assert tokenize("... - + of the") == []
    assert tokenize("") == []
    assert tokenize(None) == []


def test_unique_tokens_dedups_and_caps() -> None:
    assert unique_tokens(["Python python", None, "SQL"]) == ["python", "sql"]
    assert unique_tokens(["a1 b2 c3 d4"], cap=2) == ["a1", "b2"]


def test_jaccard_properties() -> None:
    a, b = {"python", "nlp"}, {"nlp", "climate"}
    assert jaccard(set(), set()) == 0.0
    assert jaccard(a, a) == 1.0
    assert jaccard(a, b) == jaccard(b, a) == 1 / 3
    assert 0.0 <= jaccard(a, {"go"}) <= 1.0


def test_skill_and_preference_tokens_stay_separate() -> None:
    profile = Profile(
        about="Looking for climate work",
        preferences=Preferences(locations=["Boston"], work_modes=["remote"]),
        skills=[Skill("Python", "advanced")],
        projects=[Project("Flood model", tech_stack=["PyTorch"])],
        keywords=["forecasting"],
    )
    skills = derive_skill_tokens(profile)
    prefs = derive_preference_tokens(profile)
    assert {"python", "advanced", "flood", "model", "pytorch", "forecasting"} <= set(skills)
    assert {"looking", "climate", "work", "boston", "remote"} <= set(prefs)
    assert "python" not in prefs
    assert "boston" not in skills


def test_token_sets_are_capped() -> None:
    profile = Profile(skills=[Skill(f"tool{i}") for i in range(300)])
    assert len(derive_skill_tokens(profile)) == 200
    assert derive_preference_tokens(Profile()) == []
