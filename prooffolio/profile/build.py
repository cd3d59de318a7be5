"""
Profile synthesis.

Builds one :class:`~prooffolio.profile.schema.Profile` from a primary
document (resume, artifact ``a1``) and any number of secondary documents
(papers, ``p1..pN`` in upload order):

1. extract text and create chunks per artifact;
2. run extraction for every artifact concurrently, bounded by a
   semaphore, with the blocking provider call in the default executor;
3. fold the results in artifact order: resume first (it seeds ``about``
   and ``preferences``), then papers (skills, projects and keywords only);
4. merge explicit preference overrides over the inferred values.

When no LLM provider is configured no extraction happens; the user's
free-text ``about`` seeds the preference summary and interests instead.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from ..config import Settings
from ..errors import InputError
from ..rank.llm_providers import LLMProvider
from ..rank.tokens import tokenize
from .chunker import create_chunks
from .extract import RESUME_ARTIFACT_ID, ExtractionResult, extract_from_paper, extract_from_resume
from .merge import apply_preference_overrides, merge_skills, uniq_strings
from .schema import Artifact, Chunk, Profile
from .text_extractor import document_type, extract_text

logger = logging.getLogger(__name__)

NO_DOCUMENT_MESSAGE = "Please add a resume or at least one paper PDF."


@dataclass
class SourceDocument:
    """An uploaded document: its original file name and raw bytes."""

    filename: str
    data: bytes


@dataclass
class PreferenceOverrides:
    """Preferences the user typed in explicitly."""

    locations: List[str] = field(default_factory=list)
    work_modes: List[str] = field(default_factory=list)


@dataclass
class BuildResult:
    profile: Profile
    counts: Dict[str, int]


def _make_artifact(artifact_id: str, doc: SourceDocument, default_title: str, budget: int, settings: Settings):
    text = extract_text(doc.data, doc.filename)
    artifact = Artifact(
        id=artifact_id,
        type=document_type(doc.filename),
        title=doc.filename or default_title,
        text_excerpt=text[:budget],
    )
    chunks = create_chunks(text, artifact_id, settings.max_chunks, budget)
    if not chunks:
        logger.warning("Artifact %s (%s) produced no chunks", artifact_id, artifact.title)
    return artifact, chunks


def prepare_artifacts(
    resume: Optional[SourceDocument],
    papers: Sequence[SourceDocument],
    settings: Settings,
) -> List[tuple]:
    """Create ``(artifact, chunks)`` pairs: ``a1`` first, then ``p1..pN``."""
    prepared = []
    if resume is not None:
        prepared.append(
            _make_artifact(RESUME_ARTIFACT_ID, resume, "resume.pdf", settings.resume_char_budget, settings)
        )
    for index, paper in enumerate(papers, start=1):
        prepared.append(
            _make_artifact(f"p{index}", paper, f"paper_{index}.pdf", settings.paper_char_budget, settings)
        )
    return prepared


async def _extract_all(
    provider: LLMProvider,
    about: str,
    prepared: Sequence[tuple],
    concurrency: int,
) -> List[ExtractionResult]:
    semaphore = asyncio.Semaphore(max(1, concurrency))
    loop = asyncio.get_running_loop()

    async def one(artifact: Artifact, chunks: List[Chunk]) -> ExtractionResult:
        async with semaphore:
            if artifact.id == RESUME_ARTIFACT_ID:
                return await loop.run_in_executor(None, extract_from_resume, provider, about, chunks)
            return await loop.run_in_executor(None, extract_from_paper, provider, artifact.id, chunks)

    return list(await asyncio.gather(*(one(a, c) for a, c in prepared)))


def fold_results(profile: Profile, artifacts: Sequence[Artifact], results: Sequence[ExtractionResult], max_skills: int) -> Profile:
    """Fold per-artifact extraction results into ``profile`` in order."""
    for artifact, result in zip(artifacts, results):
        profile.skills = merge_skills(profile.skills, result.skills, max_skills=max_skills)
        profile.projects = [*profile.projects, *result.projects]
        profile.keywords = uniq_strings([*profile.keywords, *result.keywords])
        if artifact.id == RESUME_ARTIFACT_ID and result.profile is not None:
            profile.about = result.profile.about
            profile.interests = list(result.profile.interests)
            profile.preferences = result.profile.preferences
    return profile


def _seed_from_about(profile: Profile, about: str) -> None:
    if not about:
        return
    profile.preferences.summary = about[:140]
    profile.interests = uniq_strings(tokenize(about))[:5]


async def build_profile_async(
    resume: Optional[SourceDocument],
    papers: Sequence[SourceDocument],
    provider: LLMProvider,
    settings: Settings,
    about: str = "",
    overrides: Optional[PreferenceOverrides] = None,
) -> BuildResult:
    """Build a profile from uploaded documents.

    Args:
        resume: Optional primary document.
        papers: Zero or more secondary documents, in upload order.
        provider: The LLM capability used for extraction.
        settings: Chunking budgets and concurrency limits.
        about: Free-text goals and interests from the user.
        overrides: Explicit preferences that take priority over inferred ones.

    Returns:
        The built profile and per-kind document counts.

    Raises:
        InputError: If neither a resume nor a paper was supplied.
    """
    if resume is None and not papers:
        raise InputError(NO_DOCUMENT_MESSAGE)
    about = (about or "").strip()
    prepared = prepare_artifacts(resume, papers, settings)
    artifacts = [artifact for artifact, _ in prepared]
    profile = Profile(artifacts=artifacts)

    if provider.configured:
        results = await _extract_all(provider, about, prepared, settings.extraction_concurrency)
        fold_results(profile, artifacts, results, settings.max_skills)
    else:
        logger.info("No LLM configured; building profile from stated preferences only")
        _seed_from_about(profile, about)

    overrides = overrides or PreferenceOverrides()
    apply_preference_overrides(profile.preferences, overrides.locations, overrides.work_modes)
    logger.info(
        "Built profile from %d artifacts: %d skills, %d projects, %d keywords",
        len(artifacts),
        len(profile.skills),
        len(profile.projects),
        len(profile.keywords),
    )
    counts = {"resume": 1 if resume is not None else 0, "papers": len(papers)}
    return BuildResult(profile=profile, counts=counts)


def build_profile(
    resume: Optional[SourceDocument],
    papers: Sequence[SourceDocument],
    provider: LLMProvider,
    settings: Settings,
    about: str = "",
    overrides: Optional[PreferenceOverrides] = None,
) -> BuildResult:
    """Synchronous wrapper around :func:`build_profile_async`."""
    return asyncio.run(
        build_profile_async(resume, papers, provider, settings, about=about, overrides=overrides)
    )
