"""
Profile data model.

The dataclasses here describe everything the profile pipeline produces:
uploaded artifacts, the ephemeral chunks sent to extraction, and the
synthesised, evidence-backed :class:`Profile`.  JSON produced by the
external extraction capability is loosely typed, so every ``from_dict``
constructor treats each field as optional and fills defaults rather
than trusting the shape it receives.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

LEVELS = ("beginner", "intermediate", "advanced")
LEVEL_RANK = {level: rank for rank, level in enumerate(LEVELS, start=1)}
DEFAULT_LEVEL = "beginner"
SNIPPET_MAX_CHARS = 240

PREFERENCE_FIELDS = (
    "goals",
    "interests",
    "industries",
    "role_types",
    "locations",
    "work_modes",
    "company_size",
    "constraints",
)


def normalize_name(value: Any) -> str:
    """Identity key for names: trimmed and lower-cased."""
    return str(value or "").strip().lower()


def as_text(value: Any) -> str:
    """Coerce a scalar to ``str``; containers and ``None`` become ``""``."""
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        return ""
    return str(value)


def as_text_list(value: Any) -> List[str]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        return []
    return [str(v).strip() for v in value if isinstance(v, (str, int, float)) and str(v).strip()]


@dataclass
class Artifact:
    """One uploaded source document and the excerpt of its text."""

    id: str
    type: str
    title: str
    text_excerpt: str = ""
    source_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Artifact":
        return cls(
            id=as_text(data.get("id")),
            type=as_text(data.get("type")) or "pdf",
            title=as_text(data.get("title")),
            text_excerpt=as_text(data.get("text_excerpt")),
            source_url=data.get("source_url") or None,
        )


@dataclass
class Chunk:
    """A bounded slice of an artifact's text."""

    artifact_id: str
    text: str

    def to_dict(self) -> Dict[str, str]:
        return {"artifact_id": self.artifact_id, "text": self.text}


@dataclass(frozen=True)
class EvidenceSnippet:
    """Verbatim snippet tying a claim to the artifact it came from."""

    artifact_id: str
    snippet: str

    @property
    def key(self) -> str:
        return f"{self.artifact_id}|{self.snippet}"

    def to_dict(self) -> Dict[str, str]:
        return {"artifact_id": self.artifact_id, "snippet": self.snippet}

    @classmethod
    def from_dict(cls, data: Any) -> Optional["EvidenceSnippet"]:
        """Build a snippet, truncating it; ``None`` when it has no text."""
        if not isinstance(data, dict):
            return None
        snippet = as_text(data.get("snippet")).strip()[:SNIPPET_MAX_CHARS]
        if not snippet:
            return None
        return cls(artifact_id=as_text(data.get("artifact_id")), snippet=snippet)


def _evidence_list(value: Any) -> List[EvidenceSnippet]:
    if not isinstance(value, list):
        return []
    out = []
    for item in value:
        ev = EvidenceSnippet.from_dict(item)
        if ev is not None:
            out.append(ev)
    return out


@dataclass
class Skill:
    name: str
    level: str = DEFAULT_LEVEL
    evidence: List[EvidenceSnippet] = field(default_factory=list)

    @property
    def key(self) -> str:
        return normalize_name(self.name)

    @property
    def rank(self) -> int:
        return LEVEL_RANK.get(self.level, 0)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "level": self.level,
            "evidence": [e.to_dict() for e in self.evidence],
        }

    @classmethod
    def from_dict(cls, data: Any) -> Optional["Skill"]:
        if not isinstance(data, dict):
            return None
        name = as_text(data.get("name")).strip()
        if not name:
            return None
        level = normalize_name(data.get("level"))
        if level not in LEVEL_RANK:
            level = DEFAULT_LEVEL
        return cls(name=name, level=level, evidence=_evidence_list(data.get("evidence")))


@dataclass
class Project:
    """A project or publication.  Projects are concatenated, never merged."""

    title: str
    summary: str = ""
    role: Optional[str] = None
    venue: Optional[str] = None
    year: Optional[str] = None
    methods: List[str] = field(default_factory=list)
    tech_stack: List[str] = field(default_factory=list)
    outcomes: List[str] = field(default_factory=list)
    links: Dict[str, str] = field(default_factory=dict)
    evidence: List[EvidenceSnippet] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["evidence"] = [e.to_dict() for e in self.evidence]
        return data

    @classmethod
    def from_dict(cls, data: Any) -> Optional["Project"]:
        if not isinstance(data, dict):
            return None
        title = as_text(data.get("title")).strip()
        if not title:
            return None
        links = data.get("links")
        return cls(
            title=title,
            summary=as_text(data.get("summary")),
            role=as_text(data.get("role")) or None,
            venue=as_text(data.get("venue")) or None,
            year=as_text(data.get("year")) or None,
            methods=as_text_list(data.get("methods")),
            tech_stack=as_text_list(data.get("tech_stack")),
            outcomes=as_text_list(data.get("outcomes")),
            links={str(k): as_text(v) for k, v in links.items()} if isinstance(links, dict) else {},
            evidence=_evidence_list(data.get("evidence")),
        )


@dataclass
class Preferences:
    """Job-search goals and context, stated or inferred."""

    summary: str = ""
    goals: List[str] = field(default_factory=list)
    interests: List[str] = field(default_factory=list)
    industries: List[str] = field(default_factory=list)
    role_types: List[str] = field(default_factory=list)
    locations: List[str] = field(default_factory=list)
    work_modes: List[str] = field(default_factory=list)
    company_size: List[str] = field(default_factory=list)
    constraints: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Any) -> "Preferences":
        if not isinstance(data, dict):
            return cls()
        prefs = cls(summary=as_text(data.get("summary")))
        for name in PREFERENCE_FIELDS:
            setattr(prefs, name, as_text_list(data.get(name)))
        return prefs


@dataclass
class Profile:
    """The synthesised skill profile: the sole input to ranking."""

    about: str = ""
    interests: List[str] = field(default_factory=list)
    preferences: Preferences = field(default_factory=Preferences)
    skills: List[Skill] = field(default_factory=list)
    projects: List[Project] = field(default_factory=list)
    keywords: List[str] = field(default_factory=list)
    artifacts: List[Artifact] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "profile": {
                "about": self.about,
                "interests": list(self.interests),
                "preferences": self.preferences.to_dict(),
            },
            "artifacts": [a.to_dict() for a in self.artifacts],
            "skills": [s.to_dict() for s in self.skills],
            "projects": [p.to_dict() for p in self.projects],
            "keywords": list(self.keywords),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Profile":
        """Rebuild a profile from :meth:`to_dict` output (e.g. a snapshot)."""
        head = data.get("profile") if isinstance(data.get("profile"), dict) else {}
        skills = [Skill.from_dict(s) for s in data.get("skills") or []]
        projects = [Project.from_dict(p) for p in data.get("projects") or []]
        artifacts = [a for a in data.get("artifacts") or [] if isinstance(a, dict)]
        return cls(
            about=as_text(head.get("about")),
            interests=as_text_list(head.get("interests")),
            preferences=Preferences.from_dict(head.get("preferences")),
            skills=[s for s in skills if s is not None],
            projects=[p for p in projects if p is not None],
            keywords=as_text_list(data.get("keywords")),
            artifacts=[Artifact.from_dict(a) for a in artifacts],
        )
