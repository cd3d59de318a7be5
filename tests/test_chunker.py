"""Tests for sentence-aware chunking."""

from __future__ import annotations

from prooffolio.profile.chunker import CHUNK_MAX_CHARS, CHUNK_MIN_CHARS, create_chunks, split_sentences


def _sentence(i: int) -> str:
    return f"Sentence number {i} describes a measurable outcome of the project in some detail."


def test_empty_text_yields_no_chunks() -> None:
    assert create_chunks("", "a1") == []
    assert create_chunks("   \n\t ", "a1") == []


def test_short_text_is_dropped_as_noise() -> None:
    assert create_chunks("Page 3 of 7.", "a1") == []


def test_chunks_are_bounded_and_capped() -> None:
    text = " ".join(_sentence(i) for i in range(200))
    chunks = create_chunks(text, "p1", max_chunks=6, max_chars=3200)
    assert 0 < len(chunks) <= 6
    for chunk in chunks:
        assert chunk.artifact_id == "p1"
        assert CHUNK_MIN_CHARS <= len(chunk.text) <= CHUNK_MAX_CHARS
    assert sum(len(c.text) for c in chunks) <= 3200


def test_chunk_cap_is_respected() -> None:
    text = " ".join(_sentence(i) for i in range(200))
    chunks = create_chunks(text, "a1", max_chunks=2, max_chars=100000)
    assert len(chunks) == 2


def test_chunks_keep_source_order() -> None:
    text = " ".join(_sentence(i) for i in range(30))
    chunks = create_chunks(text, "a1")
    assert chunks[0].text.startswith("Sentence number 0 ")
    joined = " ".join(c.text for c in chunks)
    assert joined.index("number 1 ") < joined.index("number 20 ")


def test_oversized_word_is_split_without_loss() -> None:
    word = "x" * 2000
    chunks = create_chunks(word, "a1", max_chunks=6, max_chars=3200)
    assert [len(c.text) for c in chunks] == [800, 800, 400]
    assert "".join(c.text for c in chunks) == word


def test_split_sentences() -> None:
    assert split_sentences("One. Two! Three? Four") == ["One.", "Two!", "Three?", "Four"]
    assert split_sentences("version 1.2 shipped.") == ["version 1.2 shipped."]
    assert split_sentences("") == []
