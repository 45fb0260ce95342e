"""
Semantic Search - Embedding similarity search over legal documents.

Flow:
1. Embed the query
2. Similarity search with threshold and filters
3. Rank results by similarity
4. Attach excerpts
5. Record telemetry and analytics
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from legalsearch.domains.telemetry.models import RequestContext, TimingMetrics

from .excerpt import extract_excerpt
from .fusion import ResultFusionEngine
from .instrumentation import SearchInstrumentation, call_backend, elapsed_ms, embed_query
from .models import SearchResponse, SemanticSearchQuery, SimilaritySearchOptions

if TYPE_CHECKING:
    from legalsearch.domains.analytics import SearchAnalyticsService
    from legalsearch.domains.telemetry import TelemetryRecorder

    from .contracts import EmbeddingClient, SimilaritySearchBackend

logger = logging.getLogger(__name__)

__all__ = ["SemanticSearchService"]


class SemanticSearchService:
    """
    Pure semantic search.

    Example:
        >>> service = SemanticSearchService(embedder, faiss_index, recorder, analytics)
        >>> response = await service.search(SemanticSearchQuery(query="despido improcedente"))
    """

    def __init__(
        self,
        embedder: EmbeddingClient,
        similarity_backend: SimilaritySearchBackend,
        recorder: TelemetryRecorder,
        analytics: SearchAnalyticsService,
        timeout: float | None = None,
    ) -> None:
        """
        Initialize semantic search.

        Args:
            embedder: Query embedding client
            similarity_backend: Vector similarity backend
            recorder: Telemetry recorder
            analytics: Search analytics service
            timeout: Optional per-call timeout in seconds (None = unbounded)
        """
        self._embedder = embedder
        self._similarity = similarity_backend
        self._fusion = ResultFusionEngine()
        self._instrumentation = SearchInstrumentation(recorder, analytics)
        self._timeout = timeout

    async def search(
        self,
        query: SemanticSearchQuery,
        requester: RequestContext | None = None,
    ) -> SearchResponse:
        """
        Execute semantic search.

        Args:
            query: Search query parameters
            requester: Optional requester context for telemetry/analytics

        Returns:
            SearchResponse with results ordered by similarity

        Raises:
            EmbeddingError: Query could not be embedded
            InvalidEmbeddingError: Embedding rejected by the backend
            BackendSearchError: Similarity backend failed
        """
        start = time.perf_counter()
        embedding_ms = search_ms = 0

        logger.debug("Starting semantic search for query: %r", query.query[:50])

        try:
            stage = time.perf_counter()
            vector = await embed_query(self._embedder, query.query, self._timeout)
            embedding_ms = elapsed_ms(stage)

            stage = time.perf_counter()
            matches = await call_backend(
                "similarity",
                self._similarity.search_by_similarity(
                    vector,
                    SimilaritySearchOptions(
                        limit=query.limit,
                        similarity_threshold=query.similarity_threshold,
                        document_type=query.document_type,
                        scope=query.scope,
                        only_active=query.only_active,
                        only_published=query.only_published,
                    ),
                ),
                self._timeout,
            )
            search_ms = elapsed_ms(stage)
        except Exception as e:
            logger.error("Error performing semantic search: %s", e)
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

        stage = time.perf_counter()
        pool = self._fusion.fuse(matches, [], query.query, semantic_weight=1.0, limit=query.limit)
        results = [
            r.model_copy(update={"excerpt": extract_excerpt(r.document.full_text, query.query)})
            for r in pool.results
        ]
        context_build_ms = elapsed_ms(stage)

        execution_time = elapsed_ms(start)
        logger.info(
            "Semantic search completed in %dms with %d results",
            execution_time,
            len(results),
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
            search_type="semantic",
            search_query_id=search_query_id,
        )
