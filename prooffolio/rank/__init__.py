"""
Ranking subsystem for Prooffolio.

Two stages produce the final list of matches:

* `prefilter` – Jaccard overlap between the profile's token sets and
  each job, blended 70/30 in favour of preferences.
* `rerank` – the LLM reorders the shortlist and explains each match,
  falling back to the lexical baselines when it cannot.
"""

from .catalog import Job, RankedJob, load_catalog  # noqa: F401
from .prefilter import prefilter_jobs  # noqa: F401
from .rerank import rerank_jobs  # noqa: F401
