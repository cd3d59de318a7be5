"""
Skill merging and list helpers.

:func:`merge_skills` folds the skills extracted from one artifact into
the running profile.  Skills are keyed by their trimmed, lower-cased
name; levels only ever move up (beginner < intermediate < advanced) and
evidence is deduplicated by ``(artifact_id, snippet)`` and capped at
three entries in encounter order.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, Iterable, List, Sequence

from .schema import SNIPPET_MAX_CHARS, EvidenceSnippet, Preferences, Skill, normalize_name

logger = logging.getLogger(__name__)

MAX_EVIDENCE = 3
MAX_SKILLS = 120


def merge_evidence(*groups: Iterable[EvidenceSnippet], cap: int = MAX_EVIDENCE) -> List[EvidenceSnippet]:
    """Concatenate evidence groups, dropping repeats, keeping at most ``cap``.

    Snippets are truncated before the identity check, so two quotes that
    differ only past the length limit count as one.
    """
    merged: List[EvidenceSnippet] = []
    seen = set()
    for group in groups:
        for ev in group:
            ev = EvidenceSnippet(ev.artifact_id, ev.snippet.strip()[:SNIPPET_MAX_CHARS])
            if not ev.snippet:
                continue
            if ev.key in seen:
                continue
            seen.add(ev.key)
            merged.append(ev)
            if len(merged) >= cap:
                return merged
    return merged


def merge_skills(base: Sequence[Skill], incoming: Sequence[Skill], max_skills: int = MAX_SKILLS) -> List[Skill]:
    """Merge ``incoming`` skills into ``base``.

    Args:
        base: The skills accumulated so far.
        incoming: Skills extracted from one more artifact.
        max_skills: Upper bound on the size of the result.

    Returns:
        A new list; neither input is modified.  Order is first
        appearance, and skills beyond ``max_skills`` are dropped.
    """
    by_key: Dict[str, Skill] = {}
    for skill in [*base, *incoming]:
        key = skill.key
        if not key:
            continue
        current = by_key.get(key)
        if current is None:
            by_key[key] = Skill(
                name=skill.name.strip(),
                level=skill.level,
                evidence=merge_evidence(skill.evidence),
            )
            continue
        if skill.rank > current.rank:
            current.level = skill.level
        current.evidence = merge_evidence(current.evidence, skill.evidence)
    merged = list(by_key.values())
    if len(merged) > max_skills:
        logger.info("Dropping %d skills over the cap of %d", len(merged) - max_skills, max_skills)
    return merged[:max_skills]


def uniq_strings(values: Iterable[object]) -> List[str]:
    """Deduplicate strings case-insensitively, keeping the first spelling."""
    out: List[str] = []
    seen = set()
    for value in values:
        text = str(value or "").strip()
        key = normalize_name(text)
        if not key or key in seen:
            continue
        seen.add(key)
        out.append(text)
    return out


def split_list(value: object) -> List[str]:
    """Parse a fill-in-the-box value into a list.

    Accepts a string delimited by commas or semicolons, or a list of
    such strings (repeated form fields).  Blank items are dropped.
    """
    if not value:
        return []
    if isinstance(value, (list, tuple)):
        return [item for v in value for item in split_list(v)]
    return [part.strip() for part in re.split(r"[;,]", str(value)) if part.strip()]


def apply_preference_overrides(
    preferences: Preferences,
    locations: Sequence[str] = (),
    work_modes: Sequence[str] = (),
) -> Preferences:
    """Merge explicit user preferences over inferred ones.

    Explicit values are union-merged after the inferred ones so both
    survive, deduplicated.  Work modes are lower-cased.  When no summary
    was inferred, a short one is synthesised from the explicit fields.
    """
    if locations:
        preferences.locations = uniq_strings([*preferences.locations, *locations])
    if work_modes:
        preferences.work_modes = uniq_strings(
            [*preferences.work_modes, *(normalize_name(m) for m in work_modes)]
        )
    if not preferences.summary:
        preferences.summary = summarize_preferences(preferences)
    return preferences


def summarize_preferences(preferences: Preferences) -> str:
    parts = []
    if preferences.work_modes:
        parts.append(f"{'/'.join(preferences.work_modes)} work mode")
    if preferences.locations:
        parts.append(f"in {', '.join(preferences.locations)}")
    return f"Prefers {' '.join(parts)}." if parts else ""
