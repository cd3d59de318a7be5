"""
Keyword and token derivation.

Pure functions turning a profile (or a job) into normalised token sets.
Two sets are derived from a profile and never merged before scoring:
skill tokens measure capability fit, preference tokens measure goal and
context fit.
"""

from __future__ import annotations

import re
from typing import AbstractSet, Iterable, List

from ..profile.schema import PREFERENCE_FIELDS, Profile

MAX_PROFILE_TOKENS = 200

STOP_WORDS = frozenset(
    "a an and the for to in of on with at as by or be is are am from that this "
    "it its we you they their our your i".split()
)

_NON_TOKEN = re.compile(r"[^a-z0-9+#.\- ]")
_HAS_ALNUM = re.compile(r"[a-z0-9]")


def tokenize(text: str) -> List[str]:
    """Lower-case ``text`` and split it into tokens.

    Letters, digits and ``+ # . -`` are kept so that terms like ``c++``,
    ``c#``, ``.net`` and ``scikit-learn`` survive.  Sentence-final dots
    are trimmed, stop words and punctuation-only tokens are dropped.
    Order is preserved and repeats are kept.
    """
    out: List[str] = []
    for raw in _NON_TOKEN.sub(" ", (text or "").lower()).split():
        token = raw.rstrip(".")
        if not token or token in STOP_WORDS or not _HAS_ALNUM.search(token):
            continue
        out.append(token)
    return out


def unique_tokens(parts: Iterable[object], cap: int | None = None) -> List[str]:
    """Tokenize every part, deduplicate in first-seen order and cap."""
    text = " ".join(str(p) for p in parts if p)
    tokens = list(dict.fromkeys(tokenize(text)))
    return tokens[:cap] if cap is not None else tokens


def derive_skill_tokens(profile: Profile, cap: int = MAX_PROFILE_TOKENS) -> List[str]:
    words: List[object] = []
    for skill in profile.skills:
        words.extend([skill.name, skill.level])
    for project in profile.projects:
        words.extend([project.title, project.summary])
        words.extend(project.methods)
        words.extend(project.tech_stack)
        words.extend(project.outcomes)
    for artifact in profile.artifacts:
        words.extend([artifact.title, artifact.type, artifact.text_excerpt])
    words.extend(profile.keywords)
    return unique_tokens(words, cap)


def derive_preference_tokens(profile: Profile, cap: int = MAX_PROFILE_TOKENS) -> List[str]:
    prefs = profile.preferences
    words: List[object] = [profile.about, *profile.interests, prefs.summary]
    for name in PREFERENCE_FIELDS:
        words.extend(getattr(prefs, name))
    return unique_tokens(words, cap)


def jaccard(a: AbstractSet[str], b: AbstractSet[str]) -> float:
    """Intersection over union; 0.0 when both sets are empty."""
    inter = len(a & b)
    union = len(a) + len(b) - inter
    return inter / union if union else 0.0
