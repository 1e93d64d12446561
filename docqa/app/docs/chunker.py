"""Document chunker - sentence-aware, token-bounded splitting with overlap."""

import math
import re
from dataclasses import dataclass

_SENTENCE_BOUNDARY = re.compile(r"(?<=[.!?])\s+")


@dataclass(frozen=True)
class TextChunk:
    """Chunk content with its approximate token count."""

    content: str
    token_count: int


def count_tokens(text: str) -> int:
    """Approximate token count (1 token ~ 4 characters)."""
    return math.ceil(len(text) / 4)


def split_sentences(text: str) -> list[str]:
    """Split text after '.', '!' or '?' followed by whitespace.

    Fragments that are empty after stripping are dropped; kept fragments
    are returned as-is.
    """
    return [s for s in _SENTENCE_BOUNDARY.split(text) if s.strip()]


def chunk_text(
    text: str,
    min_tokens: int = 500,
    max_tokens: int = 800,
    overlap_tokens: int = 100,
) -> list[TextChunk]:
    """Chunk document text into ordered, overlapping segments.

    Pure function with no I/O or randomness.

    Args:
        text: Raw document text to chunk
        min_tokens: Accepted for interface compatibility; chunks only close
            when max_tokens would be exceeded, so it never ends one early
        max_tokens: Token ceiling a chunk may not cross by adding a sentence
        overlap_tokens: Token budget for whole sentences carried from the
            end of a closed chunk into the next one

    Returns:
        List of TextChunk in document order. A single sentence longer than
        max_tokens is never split and forms (or extends) one chunk.

    Strategy:
        1. Split into sentences
        2. Accumulate sentences while the running total stays <= max_tokens
        3. On overflow, emit the chunk and seed the next one with the
           longest whole-sentence tail that fits in overlap_tokens
        4. Emit whatever remains at the end, however small
    """
    chunks: list[TextChunk] = []
    current: list[str] = []
    current_tokens = 0

    for sentence in split_sentences(text):
        sentence_tokens = count_tokens(sentence)

        if current and current_tokens + sentence_tokens > max_tokens:
            chunks.append(TextChunk(content=" ".join(current), token_count=current_tokens))
            current, current_tokens = _overlap_tail(current, overlap_tokens)

        current.append(sentence)
        current_tokens += sentence_tokens

    if current:
        chunks.append(TextChunk(content=" ".join(current), token_count=current_tokens))

    return chunks


def _overlap_tail(sentences: list[str], overlap_tokens: int) -> tuple[list[str], int]:
    """Collect trailing whole sentences while their total stays <= overlap_tokens."""
    tail: list[str] = []
    total = 0

    for sentence in reversed(sentences):
        tokens = count_tokens(sentence)
        if total + tokens > overlap_tokens:
            break
        tail.insert(0, sentence)
        total += tokens

    return tail, total
