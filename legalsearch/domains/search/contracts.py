"""
Search Contracts - Interfaces for search domain.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from .models import (
    CandidateDocument,
    KeywordSearchOptions,
    SimilarityMatch,
    SimilaritySearchOptions,
)


@runtime_checkable
class EmbeddingClient(Protocol):
    """Contract for query embedding providers."""

    async def embed(self, text: str) -> list[float]:
        """Convert text into a fixed-length vector."""
        ...


@runtime_checkable
class SimilaritySearchBackend(Protocol):
    """Contract for vector similarity search implementations."""

    async def search_by_similarity(
        self,
        vector: Sequence[float],
        options: SimilaritySearchOptions,
    ) -> list[SimilarityMatch]:
        """Return matches ordered by descending similarity."""
        ...


@runtime_checkable
class KeywordSearchBackend(Protocol):
    """Contract for lexical search implementations."""

    async def search_by_keywords(
        self,
        query: str,
        options: KeywordSearchOptions,
    ) -> list[CandidateDocument]:
        """Return matching documents; list position is the backend rank."""
        ...
