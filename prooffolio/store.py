"""
Profile store.

Keeps the most recently built profile per session key.  Each session
slot is last-writer-wins, but different sessions never overwrite each
other.  When snapshots are enabled, every build is also written to the
outputs directory (``profile_<timestamp>.json``, a ``latest`` file for
the session and one text file per artifact excerpt); reads prefer that
durable snapshot and fall back to the in-memory value, except when the
session's last snapshot write failed and the file on disk is stale.

At most ``max_sessions`` sessions are held in memory; the least recently
saved one is evicted first.
"""

from __future__ import annotations

import json
import logging
import os
import re
import threading
from collections import OrderedDict
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Set

from .profile.schema import Profile

logger = logging.getLogger(__name__)

DEFAULT_SESSION = "default"
MAX_SESSIONS = 256

_UNSAFE = re.compile(r"[^A-Za-z0-9_-]+")


def _session_slug(session: str) -> str:
    return _UNSAFE.sub("_", session or DEFAULT_SESSION).strip("_") or DEFAULT_SESSION


class ProfileStore:
    """Session-keyed store of built profiles with optional file snapshots."""

    def __init__(
        self,
        outputs_dir: str = "outputs",
        save_outputs: bool = False,
        max_sessions: int = MAX_SESSIONS,
    ) -> None:
        self.outputs_dir = outputs_dir
        self.save_outputs = save_outputs
        self.max_sessions = max(1, max_sessions)
        self._records: "OrderedDict[str, Dict[str, Any]]" = OrderedDict()
        # Sessions whose latest file on disk is older than the in-memory record.
        self._stale: Set[str] = set()
        self._lock = threading.Lock()

    def _latest_path(self, session: str) -> str:
        slug = _session_slug(session)
        name = "latest.json" if slug == DEFAULT_SESSION else f"latest_{slug}.json"
        return os.path.join(self.outputs_dir, name)

    def save(self, record: Dict[str, Any], session: str = DEFAULT_SESSION) -> Optional[str]:
        """Remember ``record`` for ``session`` and snapshot it if enabled.

        Args:
            record: The build response (profile, artifacts, counts, ...).
            session: Session key.

        Returns:
            Path of the timestamped snapshot, or ``None`` when snapshots
            are disabled or could not be written.
        """
        with self._lock:
            self._records[session] = record
            self._records.move_to_end(session)
            while len(self._records) > self.max_sessions:
                evicted, _ = self._records.popitem(last=False)
                self._stale.discard(evicted)
                logger.info("Evicted profile for session %r", evicted)
        if not self.save_outputs:
            return None
        try:
            path = self._write_snapshot(record, session)
        except OSError as exc:
            logger.error("Failed to write profile snapshot: %s", exc)
            with self._lock:
                self._stale.add(session)
            return None
        with self._lock:
            self._stale.discard(session)
        return path

    def _write_snapshot(self, record: Dict[str, Any], session: str) -> str:
        os.makedirs(self.outputs_dir, exist_ok=True)
        slug = _session_slug(session)
        stamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H-%M-%S-%fZ")
        prefix = "profile" if slug == DEFAULT_SESSION else f"profile_{slug}"
        out_path = os.path.join(self.outputs_dir, f"{prefix}_{stamp}.json")
        body = json.dumps(record, indent=2)
        for path in (out_path, self._latest_path(session)):
            with open(path, "w", encoding="utf-8") as f:
                f.write(body)
        for artifact in record.get("artifacts") or []:
            name = f"artifact_{artifact.get('id')}.txt"
            if slug != DEFAULT_SESSION:
                name = f"artifact_{slug}_{artifact.get('id')}.txt"
            with open(os.path.join(self.outputs_dir, name), "w", encoding="utf-8") as f:
                f.write(artifact.get("text_excerpt") or "")
        logger.info("Saved profile snapshot to %s", out_path)
        return out_path

    def load(self, session: str = DEFAULT_SESSION) -> Optional[Dict[str, Any]]:
        """Return the latest record for ``session``.

        With snapshots enabled the durable ``latest`` file wins, so a
        profile survives a restart; otherwise the in-memory value is used.
        """
        with self._lock:
            if session in self._stale:
                return self._records.get(session)
        latest = self._latest_path(session)
        if self.save_outputs and os.path.exists(latest):
            try:
                with open(latest, "r", encoding="utf-8") as f:
                    data = json.load(f)
                if isinstance(data, dict):
                    return data
                logger.warning("Ignoring snapshot %s: not a JSON object", latest)
            except (OSError, ValueError) as exc:
                logger.warning("Ignoring unreadable snapshot %s: %s", latest, exc)
        with self._lock:
            return self._records.get(session)

    def load_profile(self, session: str = DEFAULT_SESSION) -> Optional[Profile]:
        record = self.load(session)
        return Profile.from_dict(record) if record is not None else None

    def list_snapshots(self) -> List[str]:
        try:
            return sorted(f for f in os.listdir(self.outputs_dir) if f.endswith(".json"))
        except OSError:
            return []
