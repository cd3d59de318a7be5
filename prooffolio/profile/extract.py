"""
Extraction adapter.

Sends an artifact's chunks to the LLM capability with a fixed schema
prompt and validates what comes back.  Two prompt variants exist: the
resume prompt (which also asks for ``profile`` fields such as ``about``
and ``preferences``) and the paper prompt (skills, projects and
keywords only, assuming authorship unless the text contradicts it).

Responses are parsed into a tagged result, :class:`Parsed` or
:class:`Malformed`.  Extraction never aborts the pipeline: an
unavailable capability or a malformed response yields an empty
:class:`ExtractionResult`.  Skills and projects that do not carry at
least one evidence snippet pointing at the artifact they came from are
dropped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Union

from ..errors import CapabilityError
from ..rank.llm_providers import LLMProvider, parse_json_object
from .merge import uniq_strings
from .schema import Chunk, EvidenceSnippet, Preferences, Project, Skill, as_text, as_text_list

logger = logging.getLogger(__name__)

RESUME_ARTIFACT_ID = "a1"

RESUME_PROMPT = """Extract ONLY verifiable information from a resume and a free-text "goals & interests" field.
Return STRICT JSON:
{
  "profile": {
    "about": "1-2 sentences using ONLY user-provided text (or empty)",
    "interests": ["k1","k2","k3"],
    "preferences": {
      "summary": "short summary of job-search goals & interests",
      "goals": ["goal1","goal2"],
      "interests": ["topic1","topic2"],
      "industries": ["industry1","industry2"],
      "role_types": ["role1","role2"],
      "locations": ["city/region1","city/region2"],
      "work_modes": ["remote","hybrid","onsite"],
      "company_size": ["startup","mid","enterprise"],
      "constraints": ["visa","timezone","salary hints if user wrote them"]
    }
  },
  "skills":[
    {"name":"...","level":"beginner|intermediate|advanced",
     "evidence":[{"artifact_id":"a1","snippet":"20-40 word VERBATIM quote"}]}
  ],
  "projects":[
    {"title":"...","summary":"one line",
     "evidence":[{"artifact_id":"a1","snippet":"..."}]}
  ],
  "keywords":["normalized","skill","tags"]
}
Rules:
- Be conservative; do not invent prefs or skills. Use the 'goals & interests' text as the main source for preferences.
- Every skill and project MUST include at least one evidence item with artifact_id "a1".
- Deduplicate; VALID JSON ONLY (no extra text)."""

PAPER_PROMPT_TEMPLATE = """Extract ONLY verifiable information from a scholarly/industry paper the user worked on. Return STRICT JSON:
{
  "skills":[
    {"name":"...","level":"beginner|intermediate|advanced",
     "evidence":[{"artifact_id":"%(id)s","snippet":"20-40 word VERBATIM quote"}]}
  ],
  "projects":[
    {"title":"...","summary":"one line (what & why)","role":"lead|contributor|author",
     "venue":"conf/journal/company report (if stated)","year":"YYYY or empty",
     "methods":["e.g., CRF","transformers","Monte Carlo"], "tech_stack":["e.g., Python","PyTorch","FastAPI","Rust"],
     "outcomes":["e.g., accuracy 92%%","A/B +6%%","open-source release"], "links":{"doi":"","url":""},
     "evidence":[{"artifact_id":"%(id)s","snippet":"..."}]}
  ],
  "keywords":["normalized","tags","methods","domains"]
}
Rules:
- Be conservative but assume authorship/contribution unless contradicted.
- Every skill & project MUST include at least one evidence item with artifact_id "%(id)s".
- Deduplicate; VALID JSON ONLY (no extra text)."""


def paper_prompt_for(artifact_id: str) -> str:
    return PAPER_PROMPT_TEMPLATE % {"id": artifact_id}


@dataclass
class ProfileSeed:
    """The ``profile`` block returned by resume extraction."""

    about: str = ""
    interests: List[str] = field(default_factory=list)
    preferences: Preferences = field(default_factory=Preferences)


@dataclass
class ExtractionResult:
    skills: List[Skill] = field(default_factory=list)
    projects: List[Project] = field(default_factory=list)
    keywords: List[str] = field(default_factory=list)
    profile: Optional[ProfileSeed] = None


@dataclass
class Parsed:
    result: ExtractionResult


@dataclass
class Malformed:
    reason: str


ParseOutcome = Union[Parsed, Malformed]


def _own_evidence(evidence: Sequence[EvidenceSnippet], artifact_id: str) -> List[EvidenceSnippet]:
    return [ev for ev in evidence if ev.artifact_id == artifact_id]


def _list_field(data: Dict[str, Any], name: str) -> List[Any]:
    value = data.get(name)
    if value is None:
        return []
    if not isinstance(value, list):
        logger.warning("Ignoring non-list %r in extraction response", name)
        return []
    return value


def parse_extraction(text: Optional[str], artifact_id: str, with_profile: bool = False) -> ParseOutcome:
    """Validate a raw extraction response for one artifact.

    Args:
        text: Response text from the capability.
        artifact_id: The artifact the request was about; evidence must
            point at it.
        with_profile: Whether to read the resume-only ``profile`` block.

    Returns:
        :class:`Parsed` with a default-filled result, or :class:`Malformed`
        when the text is not a single JSON object.
    """
    data = parse_json_object(text)
    if data is None:
        return Malformed("response is not a JSON object")

    skills: List[Skill] = []
    for raw in _list_field(data, "skills"):
        skill = Skill.from_dict(raw)
        if skill is None:
            continue
        skill.evidence = _own_evidence(skill.evidence, artifact_id)
        if not skill.evidence:
            logger.debug("Dropping skill %r without evidence from %s", skill.name, artifact_id)
            continue
        skills.append(skill)

    projects: List[Project] = []
    for raw in _list_field(data, "projects"):
        project = Project.from_dict(raw)
        if project is None:
            continue
        project.evidence = _own_evidence(project.evidence, artifact_id)
        if not project.evidence:
            logger.debug("Dropping project %r without evidence from %s", project.title, artifact_id)
            continue
        projects.append(project)

    result = ExtractionResult(
        skills=skills,
        projects=projects,
        keywords=uniq_strings(as_text_list(data.get("keywords"))),
    )
    if with_profile:
        head = data.get("profile") if isinstance(data.get("profile"), dict) else {}
        result.profile = ProfileSeed(
            about=as_text(head.get("about")).strip(),
            interests=uniq_strings(as_text_list(head.get("interests"))),
            preferences=Preferences.from_dict(head.get("preferences")),
        )
    return Parsed(result)


def _run(provider: LLMProvider, system_prompt: str, payload: Dict[str, Any], artifact_id: str, with_profile: bool) -> ExtractionResult:
    if not provider.configured:
        return ExtractionResult()
    try:
        text = provider.complete(system_prompt, payload)
    except CapabilityError as exc:
        logger.warning("Extraction for %s failed: %s", artifact_id, exc)
        return ExtractionResult()
    outcome = parse_extraction(text, artifact_id, with_profile=with_profile)
    if isinstance(outcome, Malformed):
        logger.warning("Malformed extraction response for %s: %s", artifact_id, outcome.reason)
        return ExtractionResult()
    result = outcome.result
    logger.info(
        "Extracted %d skills, %d projects from %s",
        len(result.skills),
        len(result.projects),
        artifact_id,
    )
    return result


def extract_from_resume(provider: LLMProvider, about: str, chunks: Sequence[Chunk]) -> ExtractionResult:
    """Run resume extraction (artifact ``a1``) seeded with the user's about text."""
    if not chunks and not about:
        return ExtractionResult()
    payload = {"about": about, "artifacts": [c.to_dict() for c in chunks]}
    return _run(provider, RESUME_PROMPT, payload, RESUME_ARTIFACT_ID, with_profile=True)


def extract_from_paper(provider: LLMProvider, paper_id: str, chunks: Sequence[Chunk]) -> ExtractionResult:
    """Run paper extraction for one secondary document."""
    if not chunks:
        return ExtractionResult()
    payload = {"artifacts": [c.to_dict() for c in chunks]}
    return _run(provider, paper_prompt_for(paper_id), payload, paper_id, with_profile=False)
