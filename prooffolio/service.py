"""
Application service: profile build and job recommendation.

This is the surface an HTTP or CLI front end calls.  It validates input,
runs the profile and ranking pipelines, and stores built profiles in a
:class:`~prooffolio.store.ProfileStore` keyed by session.  Input errors
raise :class:`~prooffolio.errors.InputError`; unexpected failures are
wrapped in :class:`~prooffolio.errors.ProoffolioError` with a message and
are never retried.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .config import Settings
from .errors import InputError, ProfileNotFoundError, ProoffolioError
from .profile.build import PreferenceOverrides, SourceDocument, build_profile
from .profile.merge import split_list
from .rank.catalog import Job, RankedJob, load_catalog
from .rank.llm_providers import LLMProvider, get_default_provider
from .rank.prefilter import prefilter_jobs
from .rank.rerank import blended_baseline, lexical_ranking, rerank_jobs
from .rank.tokens import derive_preference_tokens, derive_skill_tokens
from .store import DEFAULT_SESSION, ProfileStore

logger = logging.getLogger(__name__)

LIMIT_ALL = "all"
TERMS_SHOWN = 30


def parse_limit(value: Any, catalog_size: int, default: int = 10) -> Tuple[bool, int]:
    """Interpret a requested result count.

    Args:
        value: ``None``, an int, a numeric string or ``"all"``.
        catalog_size: Number of jobs in the catalog.
        default: Used for ``None`` and for non-positive or non-numeric values.

    Returns:
        ``(want_all, limit)`` with ``limit`` capped at the catalog size.
    """
    if isinstance(value, str) and value.strip().lower() == LIMIT_ALL:
        return True, catalog_size
    try:
        limit = int(value) if value is not None and not isinstance(value, bool) else default
    except (TypeError, ValueError):
        limit = default
    if limit <= 0:
        limit = default
    return False, min(limit, catalog_size)


class ProoffolioService:
    """Wires settings, the LLM provider, the catalog and the profile store."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        provider: Optional[LLMProvider] = None,
        catalog: Optional[Sequence[Job]] = None,
        store: Optional[ProfileStore] = None,
    ) -> None:
        self.settings = settings or Settings.from_env()
        self.provider = provider or get_default_provider(self.settings)
        self.catalog: List[Job] = list(catalog) if catalog is not None else load_catalog(self.settings.catalog_path)
        self.store = store or ProfileStore(self.settings.outputs_dir, self.settings.save_outputs)

    def build_profile(
        self,
        resume: Optional[SourceDocument] = None,
        papers: Sequence[SourceDocument] = (),
        about: str = "",
        pref_locations: Any = None,
        pref_work_modes: Any = None,
        session: str = DEFAULT_SESSION,
    ) -> Dict[str, Any]:
        """Build a profile from documents and store it for ``session``.

        ``pref_locations`` and ``pref_work_modes`` accept comma/semicolon
        delimited strings or lists of them.

        Raises:
            InputError: If no document was supplied.
            ProoffolioError: On any unexpected failure.
        """
        if resume is None and not papers:
            raise InputError("Please add a resume or at least one paper PDF.")
        overrides = PreferenceOverrides(
            locations=split_list(pref_locations),
            work_modes=split_list(pref_work_modes),
        )
        try:
            result = build_profile(
                resume, list(papers), self.provider, self.settings, about=about, overrides=overrides
            )
        except ProoffolioError:
            raise
        except Exception as exc:  # noqa: BLE001
            logger.exception("Process error: %s", exc)
            raise ProoffolioError(f"Processing failed: {exc}") from exc
        record = {"session_id": session, **result.profile.to_dict(), "counts": result.counts}
        self.store.save(record, session=session)
        return record

    def recommend(self, limit: Any = None, session: str = DEFAULT_SESSION) -> Dict[str, Any]:
        """Rank the catalog against the latest profile of ``session``.

        Raises:
            ProfileNotFoundError: If no profile has been built yet.
            ProoffolioError: On any unexpected failure.
        """
        profile = self.store.load_profile(session)
        if profile is None:
            raise ProfileNotFoundError("No profile found. Build a profile first.")
        if not self.catalog:
            return {"profile_terms": [], "preference_terms": [], "total_jobs": 0, "returned": 0, "matches": []}
        try:
            skill_tokens = derive_skill_tokens(profile, self.settings.max_tokens_per_set)
            pref_tokens = derive_preference_tokens(profile, self.settings.max_tokens_per_set)
            want_all, desired = parse_limit(limit, len(self.catalog), self.settings.default_limit)
            if want_all:
                ranked = self._rank_all(profile, skill_tokens, pref_tokens)
            else:
                top_n = max(self.settings.shortlist_min, desired * 2)
                shortlist = prefilter_jobs(skill_tokens, pref_tokens, self.catalog, top_n)
                ranked = rerank_jobs(profile, shortlist, self.catalog, self.provider, desired)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Recommend error: %s", exc)
            raise ProoffolioError(f"Recommendation failed: {exc}") from exc
        return {
            "profile_terms": skill_tokens[:TERMS_SHOWN],
            "preference_terms": pref_tokens[:TERMS_SHOWN],
            "total_jobs": len(self.catalog),
            "returned": len(ranked),
            "matches": [r.to_dict() for r in ranked],
        }

    def _rank_all(self, profile, skill_tokens: List[str], pref_tokens: List[str]) -> List[RankedJob]:
        shortlist = prefilter_jobs(skill_tokens, pref_tokens, self.catalog, len(self.catalog))
        if not self.provider.configured:
            return lexical_ranking(shortlist, has_preferences=bool(pref_tokens))
        head = shortlist[: min(self.settings.semantic_head, len(shortlist))]
        ranked = rerank_jobs(profile, head, self.catalog, self.provider, len(head))
        # Jobs the semantic stage did not return follow in lexical order.
        returned = {r.job.id for r in ranked}
        rest = [c for c in shortlist if c.job.id not in returned]
        return [*ranked, *blended_baseline(rest)]

    def status(self) -> Dict[str, Any]:
        return {
            "status": "ok",
            "ts": datetime.now(timezone.utc).isoformat(),
            "llm_configured": self.provider.configured,
            "provider": self.provider.name,
            "save_outputs": self.store.save_outputs,
            "jobs_loaded": len(self.catalog),
        }
