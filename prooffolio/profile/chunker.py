"""
Sentence-aware chunking.

Raw artifact text is cut to a character budget, split on sentence
boundaries and greedily packed into chunks of at most
:data:`CHUNK_MAX_CHARS` characters.  Buffers shorter than
:data:`CHUNK_MIN_CHARS` are treated as noise (page numbers, headers)
and dropped.
"""

from __future__ import annotations

import logging
import re
from typing import Iterator, List

from .schema import Chunk

logger = logging.getLogger(__name__)

CHUNK_MAX_CHARS = 800
CHUNK_MIN_CHARS = 120

_SENTENCE_BOUNDARY = re.compile(r"(?<=[.!?])\s+")


def split_sentences(text: str) -> List[str]:
    """Split text after ``.``, ``!`` or ``?`` when followed by whitespace."""
    text = (text or "").strip()
    if not text:
        return []
    return [s for s in _SENTENCE_BOUNDARY.split(text) if s]


def _bounded(sentence: str, limit: int = CHUNK_MAX_CHARS) -> Iterator[str]:
    """Yield pieces of a sentence no longer than ``limit``.

    Sentences that already fit are yielded unchanged.  Longer ones are
    broken on whitespace, and single words longer than the limit are
    cut hard.
    """
    if len(sentence) <= limit:
        yield sentence
        return
    piece = ""
    for word in sentence.split():
        while len(word) > limit:
            if piece:
                yield piece
                piece = ""
            yield word[:limit]
            word = word[limit:]
        candidate = f"{piece} {word}" if piece else word
        if len(candidate) > limit:
            yield piece
            piece = word
        else:
            piece = candidate
    if piece:
        yield piece


def create_chunks(text: str, artifact_id: str, max_chunks: int = 6, max_chars: int = 3200) -> List[Chunk]:
    """Split artifact text into ordered, bounded chunks.

    Args:
        text: Raw extracted text of one artifact.
        artifact_id: Id of the artifact every chunk is tied to.
        max_chunks: Maximum number of chunks to emit.
        max_chars: Character budget; text beyond it is ignored.

    Returns:
        Chunks in source order.  Empty or whitespace-only text yields an
        empty list.
    """
    if max_chunks <= 0:
        return []
    chunks: List[Chunk] = []

    def flush(buf: str) -> None:
        buf = buf.strip()
        if len(buf) >= CHUNK_MIN_CHARS:
            chunks.append(Chunk(artifact_id=artifact_id, text=buf))

    buf = ""
    for sentence in split_sentences((text or "")[:max_chars]):
        for piece in _bounded(sentence):
            candidate = f"{buf} {piece}" if buf else piece
            if len(candidate) > CHUNK_MAX_CHARS:
                flush(buf)
                buf = piece
            else:
                buf = candidate
            if len(chunks) >= max_chunks:
                break
        if len(chunks) >= max_chunks:
            break
    if len(chunks) < max_chunks:
        flush(buf)
    logger.debug("Chunked artifact %s into %d chunks", artifact_id, len(chunks))
    return chunks[:max_chunks]
