"""
Static job catalog.

The catalog is a read-only JSON array of job records loaded once at
startup.  A missing or unreadable catalog is logged and degrades to an
empty list: recommendations then return zero matches instead of
failing.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List

from ..profile.schema import as_text, as_text_list

logger = logging.getLogger(__name__)

JOB_FIELDS = ("id", "title", "company", "location", "description", "keywords")


@dataclass
class Job:
    id: str
    title: str
    company: str = ""
    location: str = ""
    description: str = ""
    keywords: List[str] = field(default_factory=list)
    # Catalog fields not used for ranking are passed through untouched.
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.extra)
        data.update(
            id=self.id,
            title=self.title,
            company=self.company,
            location=self.location,
            description=self.description,
            keywords=list(self.keywords),
        )
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Job":
        return cls(
            id=as_text(data.get("id")),
            title=as_text(data.get("title")),
            company=as_text(data.get("company")),
            location=as_text(data.get("location")),
            description=as_text(data.get("description")),
            keywords=as_text_list(data.get("keywords")),
            extra={k: v for k, v in data.items() if k not in JOB_FIELDS},
        )


@dataclass
class RankedJob:
    """A job with its preference/skill/overall scores (0-100) and reasons."""

    job: Job
    preference: int
    skill: int
    overall: int
    preference_reason: str = ""
    skill_reason: str = ""

    def to_dict(self) -> Dict[str, Any]:
        data = self.job.to_dict()
        data["scores"] = {"preference": self.preference, "skill": self.skill, "overall": self.overall}
        data["reasons"] = {"preference": self.preference_reason, "skill": self.skill_reason}
        return data


def load_catalog(path: str) -> List[Job]:
    """Load the job catalog from a JSON file.

    Args:
        path: Path to a JSON array of job objects.

    Returns:
        Jobs in file order.  Entries without an ``id`` are skipped; a
        missing or malformed file yields an empty list.
    """
    if not os.path.exists(path):
        logger.warning("Job catalog not found at %s", path)
        return []
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as exc:
        logger.error("Failed to read job catalog %s: %s", path, exc)
        return []
    if not isinstance(data, list):
        logger.error("Job catalog %s is not a JSON array", path)
        return []
    jobs = [Job.from_dict(item) for item in data if isinstance(item, dict)]
    jobs = [job for job in jobs if job.id]
    logger.info("Loaded %d jobs from %s", len(jobs), path)
    return jobs
