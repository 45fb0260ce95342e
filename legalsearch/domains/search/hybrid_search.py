"""
Hybrid Search Engine - Combines semantic and keyword search with weighted fusion.

Features:
- Embedding similarity search (relaxed threshold for recall)
- Keyword search over title, summary, full text and keywords
- Concurrent backend calls once the query vector is available
- Weighted score fusion with deduplication by document id
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING

from legalsearch.domains.telemetry.models import RequestContext, TimingMetrics

from .excerpt import extract_excerpt
from .fusion import ResultFusionEngine
from .instrumentation import SearchInstrumentation, call_backend, elapsed_ms, embed_query
from .models import (
    HYBRID_SIMILARITY_THRESHOLD,
    CandidateDocument,
    HybridSearchQuery,
    KeywordSearchOptions,
    SearchResponse,
    SimilarityMatch,
    SimilaritySearchOptions,
)

if TYPE_CHECKING:
    from legalsearch.domains.analytics import SearchAnalyticsService
    from legalsearch.domains.telemetry import TelemetryRecorder

    from .contracts import EmbeddingClient, KeywordSearchBackend, SimilaritySearchBackend

logger = logging.getLogger(__name__)

__all__ = ["HybridSearchService"]


class HybridSearchService:
    """
    Hybrid search combining semantic and keyword approaches.

    Example:
        >>> service = HybridSearchService(embedder, faiss_index, sqlite_repo, recorder, analytics)
        >>> response = await service.search(HybridSearchQuery(query="contract termination"))
    """

    def __init__(
        self,
        embedder: EmbeddingClient,
        similarity_backend: SimilaritySearchBackend,
        keyword_backend: KeywordSearchBackend,
        recorder: TelemetryRecorder,
        analytics: SearchAnalyticsService,
        timeout: float | None = None,
    ) -> None:
        """
        Initialize hybrid search.

        Args:
            embedder: Query embedding client
            similarity_backend: Vector similarity backend
            keyword_backend: Keyword backend
            recorder: Telemetry recorder
            analytics: Search analytics service
            timeout: Optional per-call timeout in seconds (None = unbounded)
        """
        self._embedder = embedder
        self._similarity = similarity_backend
        self._keyword = keyword_backend
        self._fusion = ResultFusionEngine()
        self._instrumentation = SearchInstrumentation(recorder, analytics)
        self._timeout = timeout

    async def search(
        self,
        query: HybridSearchQuery,
        requester: RequestContext | None = None,
    ) -> SearchResponse:
        """
        Execute hybrid search.

        Args:
            query: Search query parameters
            requester: Optional requester context for telemetry/analytics

        Returns:
            SearchResponse with fused results sorted by relevance

        Raises:
            EmbeddingError: Query could not be embedded
            InvalidEmbeddingError: Embedding rejected by the backend
            BackendSearchError: Either backend failed
        """
        start = time.perf_counter()
        embedding_ms = search_ms = 0

        logger.debug("Starting hybrid search for query: %r", query.query[:50])

        try:
            stage = time.perf_counter()
            vector = await embed_query(self._embedder, query.query, self._timeout)
            embedding_ms = elapsed_ms(stage)

            stage = time.perf_counter()
            semantic, keyword = await self._run_backends(query, vector)
            search_ms = elapsed_ms(stage)
        except Exception as e:
            logger.error("Error performing hybrid search: %s", e)
            await self._instrumentation.record_failure(
                query.query,
                e,
                TimingMetrics(
                    embedding_ms=embedding_ms,
                    search_ms=search_ms,
                    total_ms=elapsed_ms(start),
                ),
                requester,
            )
            raise

        logger.debug(
            "Found %d semantic + %d keyword results in %dms",
            len(semantic),
            len(keyword),
            search_ms,
        )

        stage = time.perf_counter()
        pool = self._fusion.fuse(
            semantic,
            keyword,
            query.query,
            semantic_weight=query.semantic_weight,
            limit=query.limit,
        )
        results = [
            r.model_copy(update={"excerpt": extract_excerpt(r.document.full_text, query.query)})
            for r in pool.results
        ]
        context_build_ms = elapsed_ms(stage)

        execution_time = elapsed_ms(start)
        logger.info(
            "Hybrid search: query=%r -> %d results (semantic=%d, keyword=%d) in %dms",
            query.query[:50],
            len(results),
            len(semantic),
            len(keyword),
            execution_time,
        )

        search_query_id = await self._instrumentation.record_success(
            query.query,
            pool,
            results,
            TimingMetrics(
                embedding_ms=embedding_ms,
                search_ms=search_ms,
                context_build_ms=context_build_ms,
                total_ms=execution_time,
            ),
            requester,
        )

        return SearchResponse(
            results=results,
            total=len(results),
            query=query.query,
            execution_time_ms=execution_time,
            search_type="hybrid",
            search_query_id=search_query_id,
        )

    async def _run_backends(
        self,
        query: HybridSearchQuery,
        vector: list[float],
    ) -> tuple[list[SimilarityMatch], list[CandidateDocument]]:
        """Run both backends concurrently; any failure aborts after both settle."""
        similarity_call = call_backend(
            "similarity",
            self._similarity.search_by_similarity(
                vector,
                SimilaritySearchOptions(
                    limit=query.limit,
                    similarity_threshold=HYBRID_SIMILARITY_THRESHOLD,
                    document_type=query.document_type,
                    scope=query.scope,
                    only_active=query.only_active,
                    only_published=query.only_published,
                ),
            ),
            self._timeout,
        )

        if not query.include_keyword_search:
            return await similarity_call, []

        keyword_call = call_backend(
            "keyword",
            self._keyword.search_by_keywords(
                query.query,
                KeywordSearchOptions(
                    limit=query.limit,
                    document_type=query.document_type,
                    scope=query.scope,
                    only_active=query.only_active,
                    only_published=query.only_published,
                ),
            ),
            self._timeout,
        )

        outcomes = await asyncio.gather(similarity_call, keyword_call, return_exceptions=True)
        for outcome in outcomes:
            if isinstance(outcome, BaseException):
                raise outcome

        semantic, keyword = outcomes
        return semantic, keyword  # type: ignore[return-value]
