"""
Result Fusion - Weighted merge of semantic and keyword candidates.

Scoring:
- Semantic contribution: similarity x semantic_weight
- Keyword contribution: keyword_score x keyword_weight
- Documents found by both signals sum both contributions (HYBRID)

Ordering is a stable sort on the fused score, so ties keep insertion order:
semantic candidates are inserted before keyword-only ones.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from .excerpt import significant_words
from .models import CandidateDocument, MatchType, ScoredResult, SimilarityMatch

logger = logging.getLogger(__name__)

__all__ = ["FusedPool", "ResultFusionEngine", "keyword_score"]

KEYWORD_BASE_SCORE = 0.8
TITLE_MATCH_BOOST = 0.2
KEYWORD_MATCH_BOOST = 0.05
RANK_PENALTY = 0.01


def keyword_score(document: CandidateDocument, query: str, rank: int) -> float:
    """
    Score a keyword-search hit.

    Args:
        document: Matched document
        query: Raw query text
        rank: 0-based position in the keyword backend's result list

    Returns:
        Score clamped to [0, 1]
    """
    score = KEYWORD_BASE_SCORE

    if query.casefold() in document.title.casefold():
        score += TITLE_MATCH_BOOST

    keywords = [kw.casefold() for kw in document.keywords]
    for word in significant_words(query):
        score += KEYWORD_MATCH_BOOST * sum(1 for kw in keywords if word in kw)

    score -= RANK_PENALTY * rank

    return min(1.0, max(0.0, score))


@dataclass
class _Entry:
    document: CandidateDocument
    similarity_score: float
    relevance_score: float
    match_type: MatchType


@dataclass(frozen=True)
class FusedPool:
    """Ranked candidate pool before truncation, plus the truncated view."""

    ranked: list[ScoredResult]
    limit: int

    @property
    def results(self) -> list[ScoredResult]:
        return self.ranked[: self.limit]

    @property
    def scores(self) -> list[float]:
        return [r.relevance_score for r in self.ranked]


class ResultFusionEngine:
    """
    Merge similarity and keyword candidates into one ranked list.

    Example:
        >>> engine = ResultFusionEngine()
        >>> pool = engine.fuse(semantic, keyword, query="contract termination")
        >>> pool.results[0].match_type
        <MatchType.HYBRID: 'hybrid'>
    """

    def fuse(
        self,
        semantic: Sequence[SimilarityMatch],
        keyword: Sequence[CandidateDocument],
        query: str,
        semantic_weight: float = 1.0,
        limit: int = 10,
    ) -> FusedPool:
        """
        Fuse both candidate sets.

        Args:
            semantic: Similarity matches in backend order
            keyword: Keyword matches in backend rank order
            query: Raw query text (for keyword scoring)
            semantic_weight: Weight of the semantic signal; keyword gets the rest
            limit: Maximum results in the truncated view

        Returns:
            FusedPool with one entry per document id
        """
        keyword_weight = 1.0 - semantic_weight
        merged: dict[str, _Entry] = {}

        for match in semantic:
            doc_id = match.document.id
            if doc_id in merged:
                continue
            merged[doc_id] = _Entry(
                document=match.document,
                similarity_score=match.similarity,
                relevance_score=match.similarity * semantic_weight,
                match_type=MatchType.SEMANTIC,
            )

        seen_keyword: set[str] = set()
        for rank, document in enumerate(keyword):
            if document.id in seen_keyword:
                continue
            seen_keyword.add(document.id)

            contribution = keyword_score(document, query, rank) * keyword_weight
            existing = merged.get(document.id)
            if existing:
                existing.relevance_score += contribution
                existing.match_type = MatchType.HYBRID
            else:
                merged[document.id] = _Entry(
                    document=document,
                    similarity_score=0.0,
                    relevance_score=contribution,
                    match_type=MatchType.KEYWORD,
                )

        # sorted() is stable: equal scores keep insertion order
        ordered = sorted(merged.values(), key=lambda e: e.relevance_score, reverse=True)

        ranked = [
            ScoredResult(
                document=entry.document,
                similarity_score=entry.similarity_score,
                relevance_score=entry.relevance_score,
                match_type=entry.match_type,
            )
            for entry in ordered
        ]

        logger.debug(
            "Fused %d semantic + %d keyword candidates into %d results",
            len(semantic),
            len(keyword),
            len(ranked),
        )

        return FusedPool(ranked=ranked, limit=limit)
