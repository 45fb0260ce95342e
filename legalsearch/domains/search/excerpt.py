"""
Excerpt Extraction - Bounded preview snippets around the best text match.
"""

from __future__ import annotations

import re

__all__ = ["extract_excerpt", "significant_words"]

CONTEXT_BEFORE = 100
CONTEXT_AFTER = 200
FALLBACK_LENGTH = 300
ELLIPSIS = "..."
MIN_WORD_LENGTH = 4


def significant_words(query: str) -> list[str]:
    """Case-folded query words long enough to carry meaning (> 3 chars)."""
    return [w for w in query.casefold().split() if len(w) >= MIN_WORD_LENGTH]


def _find(text: str, needle: str) -> int:
    """Offset of the first case-insensitive match of ``needle`` in ``text``, or -1."""
    match = re.search(re.escape(needle), text, re.IGNORECASE)
    return match.start() if match else -1


def extract_excerpt(full_text: str | None, query: str) -> str | None:
    """
    Extract a snippet of ``full_text`` around the first match of ``query``.

    The whole query is tried first, then each significant query word in
    order. Without any match the head of the text is returned.

    Args:
        full_text: Document text (may be None)
        query: Raw query text

    Returns:
        Excerpt with ``...`` markers where the text was cut, or None when
        the document has no text
    """
    if not full_text:
        return None

    needle = query.strip()

    index = _find(full_text, needle) if needle else -1
    if index == -1:
        for word in query.split():
            if len(word) < MIN_WORD_LENGTH:
                continue
            index = _find(full_text, word)
            if index != -1:
                break

    if index == -1:
        return full_text[:FALLBACK_LENGTH] + ELLIPSIS

    start = max(0, index - CONTEXT_BEFORE)
    end = min(len(full_text), index + CONTEXT_AFTER)
    excerpt = full_text[start:end]

    if start > 0:
        excerpt = ELLIPSIS + excerpt
    if end < len(full_text):
        excerpt += ELLIPSIS

    return excerpt
