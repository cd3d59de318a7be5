"""
Command line interface for Prooffolio.

Subcommands mirror the two service operations plus a couple of
diagnostics:

* ``profile build`` - build a profile from a resume and/or papers;
* ``jobs recommend`` - rank the job catalog against the latest profile;
* ``status`` - show provider and catalog configuration;
* ``snapshots`` - list saved profile snapshots.

Each CLI invocation is a separate process, so profile snapshots are
written to the outputs directory by default; ``--no-save`` keeps the
profile in memory only.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from typing import Any, List

from .config import Settings
from .errors import InputError, ProoffolioError
from .profile.build import SourceDocument
from .service import ProoffolioService
from .store import DEFAULT_SESSION

logger = logging.getLogger("prooffolio.cli")


def _read_document(path: str) -> SourceDocument:
    with open(path, "rb") as f:
        return SourceDocument(filename=os.path.basename(path), data=f.read())


def _emit(data: Any, out: str | None) -> None:
    body = json.dumps(data, indent=2)
    if out:
        with open(out, "w", encoding="utf-8") as f:
            f.write(body)
        logger.info("Wrote %s", out)
    else:
        print(body)


def _service(args: argparse.Namespace) -> ProoffolioService:
    settings = Settings.from_env(args.config)
    if getattr(args, "save", None) is not None:
        settings.save_outputs = args.save
    return ProoffolioService(settings)


def cmd_profile_build(args: argparse.Namespace) -> None:
    """Build a profile from the given documents and print it as JSON."""
    service = _service(args)
    resume = _read_document(args.resume) if args.resume else None
    papers = [_read_document(p) for p in args.paper or []]
    record = service.build_profile(
        resume=resume,
        papers=papers,
        about=args.about or "",
        pref_locations=args.location,
        pref_work_modes=args.work_mode,
        session=args.session,
    )
    _emit(record, args.out)


def cmd_jobs_recommend(args: argparse.Namespace) -> None:
    """Rank the catalog against the latest profile and print matches."""
    service = _service(args)
    result = service.recommend(limit=args.limit, session=args.session)
    if args.out or args.json:
        _emit(result, args.out)
        return
    print(f"{result['returned']} of {result['total_jobs']} jobs")
    for i, match in enumerate(result["matches"], start=1):
        scores = match["scores"]
        print(f"{i:02d}. {match['title']} at {match['company']} - {scores['overall']}/100")
        print(f"   Preference ({scores['preference']}): {match['reasons']['preference']}")
        print(f"   Skill ({scores['skill']}): {match['reasons']['skill']}")


def cmd_status(args: argparse.Namespace) -> None:
    _emit(_service(args).status(), None)


def cmd_snapshots(args: argparse.Namespace) -> None:
    for name in _service(args).store.list_snapshots():
        print(name)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="prooffolio", description="Prooffolio CLI")
    parser.add_argument("--config", help="Optional YAML settings file")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # Profile build
    profile_parser = subparsers.add_parser("profile", help="Profile commands")
    profile_sub = profile_parser.add_subparsers(dest="subcommand", required=True)
    build_cmd = profile_sub.add_parser("build", help="Build a profile from documents")
    build_cmd.add_argument("--resume", help="Path to résumé file (pdf, docx, txt)")
    build_cmd.add_argument("--paper", action="append", help="Path to a paper; repeat for several")
    build_cmd.add_argument("--about", help="Free-text goals and interests")
    build_cmd.add_argument("--location", action="append", help="Preferred locations (comma/semicolon separated, repeatable)")
    build_cmd.add_argument("--work-mode", dest="work_mode", action="append", help="Preferred work modes (remote, hybrid, onsite)")
    build_cmd.add_argument("--session", default=DEFAULT_SESSION, help="Session key")
    build_cmd.add_argument("--out", help="Write the profile JSON here instead of stdout")
    save_group = build_cmd.add_mutually_exclusive_group()
    save_group.add_argument("--save", dest="save", action="store_true", default=True, help="Snapshot the profile (default)")
    save_group.add_argument("--no-save", dest="save", action="store_false", help="Do not write snapshots")
    build_cmd.set_defaults(func=cmd_profile_build)

    # Jobs recommend
    jobs_parser = subparsers.add_parser("jobs", help="Job commands")
    jobs_sub = jobs_parser.add_subparsers(dest="subcommand", required=True)
    rec_cmd = jobs_sub.add_parser("recommend", help="Rank jobs against the latest profile")
    rec_cmd.add_argument("--limit", default=None, help="Number of matches, or 'all'")
    rec_cmd.add_argument("--session", default=DEFAULT_SESSION, help="Session key")
    rec_cmd.add_argument("--json", action="store_true", help="Print raw JSON")
    rec_cmd.add_argument("--out", help="Write the result JSON to this path")
    rec_cmd.set_defaults(func=cmd_jobs_recommend, save=True)

    status_cmd = subparsers.add_parser("status", help="Show configuration status")
    status_cmd.set_defaults(func=cmd_status)

    snap_cmd = subparsers.add_parser("snapshots", help="List saved profile snapshots")
    snap_cmd.set_defaults(func=cmd_snapshots, save=True)
    return parser


def main(argv: List[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
    )
    try:
        args.func(args)
    except InputError as exc:
        logger.error("%s", exc)
        return 2
    except ProoffolioError as exc:
        logger.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
