"""
Transcript chunking.

Splits transcript text into overlapping, token-budget-bounded chunks.
Token counts use a fixed 4-characters-per-token estimate rather than a real
tokenizer, so chunk boundaries are reproducible across runs and providers.
"""

import math

from meetinglens.errors import InvalidRequestError
from meetinglens.models.schemas import ChunkedText

CHARS_PER_TOKEN = 4


def estimate_tokens(text: str) -> int:
    """Estimate the token count of text as ceil(len / 4)."""
    return math.ceil(len(text) / CHARS_PER_TOKEN)


def chunk_text(text: str, max_tokens_per_chunk: int, overlap_tokens: int) -> list[ChunkedText]:
    """
    Split text into whitespace-word chunks bounded by an estimated token budget.

    Words are appended greedily while the joined chunk stays within
    max_tokens_per_chunk. A single word that alone exceeds the budget is
    emitted as its own chunk. Consecutive chunks share
    floor(overlap_tokens / max_tokens_per_chunk * span) words, where span is
    the previous chunk's word count; each chunk starts strictly after the
    previous one.

    Args:
        text: Transcript text.
        max_tokens_per_chunk: Estimated token budget per chunk.
        overlap_tokens: Estimated tokens of context carried into the next chunk.

    Returns:
        Chunks in transcript order, indexed from 0. Empty for empty input.

    Raises:
        InvalidRequestError: If text is non-empty and max_tokens_per_chunk is
            not positive.
    """
    if not text:
        return []
    if max_tokens_per_chunk <= 0:
        raise InvalidRequestError("max_tokens_per_chunk must be positive.")

    words = text.split()
    chunks: list[ChunkedText] = []
    start = 0

    while start < len(words):
        end = start
        buffer = ""
        while end < len(words):
            candidate = f"{buffer} {words[end]}" if buffer else words[end]
            if estimate_tokens(candidate) > max_tokens_per_chunk:
                break
            buffer = candidate
            end += 1

        if not buffer:
            # Oversize word: emit alone rather than drop it
            buffer = words[start]
            end = start + 1

        chunks.append(ChunkedText(index=len(chunks), text=buffer))

        if end >= len(words):
            break

        overlap_words = max(0, math.floor((overlap_tokens / max_tokens_per_chunk) * (end - start)))
        start = max(end - overlap_words, start + 1) if overlap_words > 0 else end

    return chunks
