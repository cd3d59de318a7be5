"""Tests for the lexical prefilter."""

from __future__ import annotations

from prooffolio.rank.catalog import Job
from prooffolio.rank.prefilter import Candidate, job_tokens, prefilter_jobs, to_percent


def test_preferences_outweigh_skills(jobs) -> None:
    shortlist = prefilter_jobs(["python"], ["climate", "research"], jobs, top_n=40)
    assert [c.job.id for c in shortlist] == ["j2", "j1", "j3"]
    top = shortlist[0]
    assert top.baseline_preference == 50
    assert top.baseline_skill == 0
    assert shortlist[1].baseline_skill == 33


def test_composite_is_weighted_blend(jobs) -> None:
    for c in prefilter_jobs(["python", "developer"], ["climate"], jobs):
        assert abs(c.composite - (0.7 * c.preference_similarity + 0.3 * c.skill_similarity)) < 1e-9
        assert 0.0 <= c.composite <= 1.0


def test_ties_keep_catalog_order(jobs) -> None:
    shortlist = prefilter_jobs([], [], jobs)
    assert [c.job.id for c in shortlist] == ["j1", "j2", "j3"]
    assert all(c.composite == 0.0 for c in shortlist)


def test_top_n_bounds_the_shortlist(jobs) -> None:
    assert len(prefilter_jobs(["python"], [], jobs, top_n=2)) == 2
    assert prefilter_jobs(["python"], [], [], top_n=5) == []


def test_job_tokens_cover_keywords() -> None:
    job = Job(id="x", title="ML Engineer", location="Remote", keywords=["PyTorch", "NLP"])
    assert set(job_tokens(job)) == {"ml", "engineer", "remote", "pytorch", "nlp"}


def test_to_percent_rounds_half_up() -> None:
    assert to_percent(0.125) == 13
    assert to_percent(2 / 3) == 67
    assert to_percent(0.0) == 0
    assert to_percent(1.0) == 100
    c = Candidate(job=Job(id="x", title="t"), preference_similarity=0.5, skill_similarity=0.25)
    assert (c.baseline_preference, c.baseline_skill) == (50, 25)
