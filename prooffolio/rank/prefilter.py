"""
Lexical prefiltering stage for ranking.

Scores every catalog job against the profile's skill and preference
tokens with Jaccard similarity and keeps the top ``top_n`` by the
composite ``0.7 * preference + 0.3 * skill``.  This stage is cheap and
deterministic; it bounds how many jobs reach the semantic reranker.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterable, List, Sequence

from .catalog import Job
from .tokens import jaccard, unique_tokens

logger = logging.getLogger(__name__)

PREFERENCE_WEIGHT = 0.7
SKILL_WEIGHT = 0.3


def to_percent(value: float) -> int:
    """Scale a 0-1 similarity to an integer 0-100, rounding halves up."""
    return int(math.floor(value * 100 + 0.5))


def blend(preference: float, skill: float) -> float:
    return PREFERENCE_WEIGHT * preference + SKILL_WEIGHT * skill


@dataclass
class Candidate:
    """A shortlisted job with its lexical baselines."""

    job: Job
    preference_similarity: float
    skill_similarity: float

    @property
    def composite(self) -> float:
        return blend(self.preference_similarity, self.skill_similarity)

    @property
    def baseline_preference(self) -> int:
        return to_percent(self.preference_similarity)

    @property
    def baseline_skill(self) -> int:
        return to_percent(self.skill_similarity)


def job_tokens(job: Job) -> List[str]:
    """Tokens for a job: title, company, location, description and keywords."""
    return unique_tokens([job.title, job.company, job.location, job.description, *job.keywords])


def prefilter_jobs(
    skill_tokens: Iterable[str],
    preference_tokens: Iterable[str],
    jobs: Sequence[Job],
    top_n: int = 40,
) -> List[Candidate]:
    """Return the ``top_n`` jobs by composite lexical score.

    Args:
        skill_tokens: Tokens derived from the profile's skills and work.
        preference_tokens: Tokens derived from stated preferences.
        jobs: The catalog, in catalog order.
        top_n: Shortlist size.

    Returns:
        Candidates sorted by descending composite score; ties keep
        catalog order.
    """
    skill_set = set(skill_tokens)
    pref_set = set(preference_tokens)
    scored = []
    for job in jobs:
        tokens = set(job_tokens(job))
        scored.append(
            Candidate(
                job=job,
                preference_similarity=jaccard(pref_set, tokens),
                skill_similarity=jaccard(skill_set, tokens),
            )
        )
    scored.sort(key=lambda c: c.composite, reverse=True)
    shortlist = scored[: max(0, top_n)]
    logger.info("Prefiltered %d -> %d jobs", len(jobs), len(shortlist))
    return shortlist
