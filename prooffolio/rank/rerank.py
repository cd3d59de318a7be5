"""
Semantic reranking stage with lexical fallback.

The shortlist from :mod:`prooffolio.rank.prefilter` is sent to the LLM
capability together with a compact view of the profile.  The model is
told to treat preferences as the primary signal and skills as the
secondary one, to start from the lexical baselines, and to blend
``overall ~ 0.7 * preference + 0.3 * skill`` (with up to +10 for an
exceptional skill fit).

Whatever path is taken the output has the same shape: a list of
:class:`~prooffolio.rank.catalog.RankedJob` with scores and reasons.

* No capability configured: the lexical baselines are returned directly.
* Capability configured but the response yields no usable match: the
  baselines are returned with a fixed ``"Baseline"`` reason.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Dict, List, Optional, Sequence

from ..errors import CapabilityError
from ..profile.schema import Profile
from .catalog import Job, RankedJob
from .llm_providers import LLMProvider, parse_json_object
from .prefilter import Candidate, blend
from .tokens import derive_preference_tokens

logger = logging.getLogger(__name__)

BASELINE_REASON = "Baseline"
PREFERENCE_BASELINE_REASON = "Keyword/interest overlap baseline"
NO_PREFERENCES_REASON = "No stated preferences; neutral"
SKILL_BASELINE_REASON = "Skill keyword overlap baseline"

DESCRIPTION_MAX_CHARS = 600
PROFILE_SKILLS_MAX = 30
PROFILE_PROJECTS_MAX = 15


def rerank_prompt(limit: int) -> str:
    return f"""You are a matching engine that prioritizes user preferences/goals first, then skills.
Return ONLY strict JSON:
{{
  "matches": [
    {{
      "job_id": "...",
      "scores": {{ "preference": 0-100, "skill": 0-100, "overall": 0-100 }},
      "reasons": {{ "preference": "<=140 chars", "skill": "<=140 chars" }}
    }}
  ]
}}
Rules:
- Use user "preferences" (summary, goals, interests, industries, locations, work_modes, company_size, constraints) as the PRIMARY signal.
- Use skills/projects/keywords as the SECONDARY signal.
- Start from provided baselines (baseline.preference & baseline.skill), then adjust with judgment.
- If the user has NO preferences, focus on skills (preference can be neutral or low).
- Overall should be ~ 0.7 * preference + 0.3 * skill. If a job has outstanding skill fit but weaker preference fit, you may raise overall by up to +10 to surface it lower in the list.
- Reasons must be concise and factual (mention specific prefs/skills that matched).
- Output at most {limit} items, ordered by overall descending."""


def _round(value: float) -> int:
    return int(math.floor(value + 0.5))


def blended_overall(preference: int, skill: int) -> int:
    return _round(blend(preference, skill))


def blended_baseline(candidates: Sequence[Candidate], reason: str = BASELINE_REASON) -> List[RankedJob]:
    """Baseline rows with the blended overall score and a fixed reason."""
    return [
        RankedJob(
            job=c.job,
            preference=c.baseline_preference,
            skill=c.baseline_skill,
            overall=blended_overall(c.baseline_preference, c.baseline_skill),
            preference_reason=reason,
            skill_reason=reason,
        )
        for c in candidates
    ]


def lexical_ranking(candidates: Sequence[Candidate], has_preferences: bool) -> List[RankedJob]:
    """Rows used when no capability is configured at all.

    ``overall`` is the preference baseline when the profile states any
    preferences, otherwise the skill baseline.
    """
    ranked = []
    for c in candidates:
        ranked.append(
            RankedJob(
                job=c.job,
                preference=c.baseline_preference,
                skill=c.baseline_skill,
                overall=c.baseline_preference if has_preferences else c.baseline_skill,
                preference_reason=PREFERENCE_BASELINE_REASON if has_preferences else NO_PREFERENCES_REASON,
                skill_reason=SKILL_BASELINE_REASON,
            )
        )
    return ranked


def _score(value: Any) -> Optional[float]:
    """Parse a score; ``None`` when missing or not numeric."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _clamp(value: float) -> int:
    return max(0, min(100, _round(value)))


def _reason(reasons: Any, key: str) -> str:
    if not isinstance(reasons, dict):
        return ""
    value = reasons.get(key)
    return str(value) if isinstance(value, (str, int, float)) else ""


def parse_matches(text: Optional[str], catalog_by_id: Dict[str, Job]) -> List[RankedJob]:
    """Turn a rerank response into ranked jobs.

    Unknown job ids and repeated ids are discarded, missing or
    non-numeric scores count as 0 and every score is clamped to
    ``[0, 100]``.
    """
    data = parse_json_object(text)
    if data is None:
        logger.warning("Rerank response is not a JSON object")
        return []
    matches = data.get("matches")
    if not isinstance(matches, list):
        return []
    out: List[RankedJob] = []
    seen = set()
    for match in matches:
        if not isinstance(match, dict):
            continue
        job_id = str(match.get("job_id") or "")
        job = catalog_by_id.get(job_id)
        if job is None:
            logger.warning("Discarding rerank match for unknown job id %r", job_id)
            continue
        if job_id in seen:
            continue
        seen.add(job_id)
        scores = match.get("scores") if isinstance(match.get("scores"), dict) else {}
        preference = _clamp(_score(scores.get("preference")) or 0.0)
        skill = _clamp(_score(scores.get("skill")) or 0.0)
        overall = _clamp(_score(scores.get("overall")) or 0.0)
        reasons = match.get("reasons")
        out.append(
            RankedJob(
                job=job,
                preference=preference,
                skill=skill,
                overall=overall,
                preference_reason=_reason(reasons, "preference"),
                skill_reason=_reason(reasons, "skill"),
            )
        )
    out.sort(key=lambda r: r.overall, reverse=True)
    return out


def profile_excerpt(profile: Profile) -> Dict[str, Any]:
    return {
        "preferences": profile.preferences.to_dict(),
        "interests": list(profile.interests),
        "about": profile.about,
        "skills": [s.to_dict() for s in profile.skills[:PROFILE_SKILLS_MAX]],
        "projects": [p.to_dict() for p in profile.projects[:PROFILE_PROJECTS_MAX]],
        "keywords": list(profile.keywords),
    }


def compact_candidates(candidates: Sequence[Candidate]) -> List[Dict[str, Any]]:
    return [
        {
            "id": c.job.id,
            "title": c.job.title,
            "company": c.job.company,
            "location": c.job.location,
            "keywords": list(c.job.keywords),
            "description": c.job.description[:DESCRIPTION_MAX_CHARS],
            "baseline": {"preference": c.baseline_preference, "skill": c.baseline_skill},
        }
        for c in candidates
    ]


def rerank_jobs(
    profile: Profile,
    candidates: Sequence[Candidate],
    catalog: Sequence[Job],
    provider: LLMProvider,
    limit: int = 10,
) -> List[RankedJob]:
    """Rerank the lexical shortlist and return at most ``limit`` jobs.

    Args:
        profile: The profile being matched.
        candidates: Lexical shortlist, best first.
        catalog: The full catalog; response ids are validated against it.
        provider: The LLM capability.
        limit: Maximum number of results.

    Returns:
        Ranked jobs ordered by ``overall`` descending (the fallback paths
        keep lexical order).
    """
    if not candidates or limit <= 0:
        return []
    if not provider.configured:
        has_preferences = bool(derive_preference_tokens(profile))
        return lexical_ranking(candidates[:limit], has_preferences)

    payload = {
        "profile": profile_excerpt(profile),
        "candidates": compact_candidates(candidates),
        "limit": limit,
    }
    ranked: List[RankedJob] = []
    try:
        text = provider.complete(rerank_prompt(limit), payload)
        ranked = parse_matches(text, {job.id: job for job in catalog})
    except CapabilityError as exc:
        logger.warning("Rerank request failed: %s", exc)
    if not ranked:
        logger.warning("No usable rerank matches; falling back to lexical baseline")
        return blended_baseline(candidates[:limit])
    return ranked[:limit]
