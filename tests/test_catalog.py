"""Tests for job catalog loading."""

from __future__ import annotations

import json
from pathlib import Path

from prooffolio.rank.catalog import Job, RankedJob, load_catalog


def test_missing_or_malformed_catalog_is_empty(tmp_path: Path) -> None:
    assert load_catalog(str(tmp_path / "nope.json")) == []
    bad = tmp_path / "bad.json"
    bad.write_text("{not json", encoding="utf-8")
    assert load_catalog(str(bad)) == []
    obj = tmp_path / "obj.json"
    obj.write_text('{"id": "j1"}', encoding="utf-8")
    assert load_catalog(str(obj)) == []


def test_catalog_entries(tmp_path: Path) -> None:
    path = tmp_path / "jobs.json"
    path.write_text(
        json.dumps([
            {"id": "j1", "title": "Engineer", "keywords": ["python"], "url": "https://example.com/j1"},
            {"title": "No id"},
            "junk",
            {"id": 7, "title": "Numeric id"},
        ]),
        encoding="utf-8",
    )
    jobs = load_catalog(str(path))
    assert [j.id for j in jobs] == ["j1", "7"]
    assert jobs[0].to_dict()["url"] == "https://example.com/j1"


def test_ranked_job_dict() -> None:
    ranked = RankedJob(Job(id="j1", title="Engineer"), 50, 20, 41, "pref", "skill")
    data = ranked.to_dict()
    assert data["id"] == "j1"
    assert data["scores"] == {"preference": 50, "skill": 20, "overall": 41}
    assert data["reasons"] == {"preference": "pref", "skill": "skill"}


def test_bundled_catalog_loads() -> None:
    path = Path(__file__).resolve().parent.parent / "jobs" / "jobs.json"
    jobs = load_catalog(str(path))
    assert len(jobs) == 6
    assert len({j.id for j in jobs}) == 6
