"""
Prooffolio: evidence-backed skill profiles and job matching.

The package turns a résumé and any number of papers into a structured
profile and ranks a static job catalog against it.

The high-level flow is:

1. **profile** – Extract text from each uploaded document, cut it into
   bounded chunks and ask an LLM to pull out skills, projects, keywords
   and (from the résumé) stated preferences.  Every skill and project
   must cite a verbatim snippet from the artifact it came from.  The
   per-artifact results are merged into one `Profile`.
2. **rank** – Score every catalog job lexically against the profile's
   skill and preference tokens, shortlist the best, and let the LLM
   rerank the shortlist.  Whenever the LLM is missing or misbehaves
   the lexical baselines are returned instead.
3. **store** – Keep the latest profile per session, optionally writing
   JSON snapshots to disk.
4. **service** / **cli** – The operations callers use, and a command
   line front end wiring them together.
"""

from importlib import metadata  # noqa: F401 (expose package version)
