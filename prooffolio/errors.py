"""
Error taxonomy for Prooffolio.

Input errors are reported straight back to the caller and carry a
client status code.  Capability errors come from the external LLM
provider and are normally caught by the extraction and reranking stages,
which degrade to empty or baseline results instead of failing the
request.
"""

from __future__ import annotations


class ProoffolioError(Exception):
    """Base class for all errors raised by the package."""

    status_code = 500


class InputError(ProoffolioError):
    """The request itself is invalid (e.g. no document supplied)."""

    status_code = 400


class ProfileNotFoundError(InputError):
    """A recommendation was requested before any profile was built."""


class CapabilityError(ProoffolioError):
    """The external extraction/rerank capability failed."""


class ModelNotFoundError(CapabilityError):
    """The requested model identifier is not available from the provider."""
