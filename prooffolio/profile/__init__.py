"""
Profile building.

* `schema` – dataclasses for artifacts, evidence, skills, projects,
  preferences and the profile itself.
* `text_extractor` – PDF/DOCX/plain text extraction.
* `chunker` – sentence-aware chunking under a character budget.
* `extract` – LLM extraction requests and response validation.
* `merge` – skill merging and small list helpers.
* `build` – the end-to-end profile pipeline.
"""

from .schema import Artifact, EvidenceSnippet, Preferences, Profile, Project, Skill  # noqa: F401
from .chunker import create_chunks  # noqa: F401
from .merge import merge_skills  # noqa: F401
from .build import SourceDocument, build_profile  # noqa: F401
