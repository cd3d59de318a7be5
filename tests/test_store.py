"""Tests for the session-keyed profile store and its snapshots."""

from __future__ import annotations

import json
from pathlib import Path

from prooffolio.store import ProfileStore


def _record(about: str = "NLP engineer") -> dict:
    return {
        "session_id": "default",
        "profile": {"about": about, "interests": [], "preferences": {}},
        "artifacts": [{"id": "a1", "type": "pdf", "title": "cv.pdf", "text_excerpt": "resume text"}],
        "skills": [{"name": "Python", "level": "advanced", "evidence": [{"artifact_id": "a1", "snippet": "python"}]}],
        "projects": [],
        "keywords": ["nlp"],
        "counts": {"resume": 1, "papers": 0},
    }


def test_memory_only_when_snapshots_disabled(tmp_path: Path) -> None:
    store = ProfileStore(str(tmp_path / "out"), save_outputs=False)
    assert store.load() is None
    assert store.save(_record()) is None
    assert store.load()["profile"]["about"] == "NLP engineer"
    assert not (tmp_path / "out").exists()


def test_sessions_do_not_overwrite_each_other(tmp_path: Path) -> None:
    store = ProfileStore(str(tmp_path), save_outputs=False)
    store.save(_record("first"), session="alice")
    store.save(_record("second"), session="bob")
    store.save(_record("third"), session="alice")
    assert store.load("alice")["profile"]["about"] == "third"
    assert store.load("bob")["profile"]["about"] == "second"
    assert store.load() is None


def test_snapshots_are_written_and_survive_restart(tmp_path: Path) -> None:
    store = ProfileStore(str(tmp_path), save_outputs=True)
    path = store.save(_record())
    assert path is not None and Path(path).name.startswith("profile_")
    latest = json.loads((tmp_path / "latest.json").read_text(encoding="utf-8"))
    assert latest["keywords"] == ["nlp"]
    assert (tmp_path / "artifact_a1.txt").read_text(encoding="utf-8") == "resume text"

    restarted = ProfileStore(str(tmp_path), save_outputs=True)
    profile = restarted.load_profile()
    assert profile is not None
    assert profile.skills[0].name == "Python"
    assert profile.artifacts[0].title == "cv.pdf"


def test_named_session_snapshot_files(tmp_path: Path) -> None:
    store = ProfileStore(str(tmp_path), save_outputs=True)
    store.save(_record(), session="alice/../x")
    names = set(store.list_snapshots())
    assert "latest_alice_x.json" in names
    assert "latest.json" not in names
    assert (tmp_path / "artifact_alice_x_a1.txt").exists()


def test_snapshot_failure_is_not_fatal(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    store = ProfileStore(str(blocker), save_outputs=True)
    assert store.save(_record()) is None
    assert store.load()["keywords"] == ["nlp"]


def test_list_snapshots_without_directory(tmp_path: Path) -> None:
    assert ProfileStore(str(tmp_path / "missing")).list_snapshots() == []


def test_failed_write_does_not_serve_stale_snapshot(tmp_path: Path, monkeypatch) -> None:
    store = ProfileStore(str(tmp_path), save_outputs=True)
    store.save(_record("first"))

    def broken(record, session):
        raise OSError("disk full")

    monkeypatch.setattr(store, "_write_snapshot", broken)
    assert store.save(_record("second")) is None
    assert store.load()["profile"]["about"] == "second"

    monkeypatch.undo()
    store.save(_record("third"))
    assert store.load()["profile"]["about"] == "third"
    restarted = ProfileStore(str(tmp_path), save_outputs=True)
    assert restarted.load()["profile"]["about"] == "third"


def test_least_recently_saved_session_is_evicted(tmp_path: Path) -> None:
    store = ProfileStore(str(tmp_path), save_outputs=False, max_sessions=2)
    store.save(_record("a"), session="alice")
    store.save(_record("b"), session="bob")
    store.save(_record("a2"), session="alice")
    store.save(_record("c"), session="carol")
    assert store.load("bob") is None
    assert store.load("alice")["profile"]["about"] == "a2"
    assert store.load("carol")["profile"]["about"] == "c"
