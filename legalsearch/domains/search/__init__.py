"""
Search Domain - Semantic and hybrid retrieval over legal documents.

This domain handles:
- Embedding similarity search
- Keyword search scoring
- Weighted score fusion
- Excerpt extraction
"""

from .contracts import EmbeddingClient, KeywordSearchBackend, SimilaritySearchBackend
from .excerpt import extract_excerpt
from .fusion import FusedPool, ResultFusionEngine, keyword_score
from .hybrid_search import HybridSearchService
from .models import (
    CandidateDocument,
    DocumentStatus,
    HybridSearchQuery,
    KeywordSearchOptions,
    MatchType,
    RequestContext,
    ScoredResult,
    SearchFilters,
    SearchResponse,
    SemanticSearchQuery,
    SimilarityMatch,
    SimilaritySearchOptions,
)
from .semantic_search import SemanticSearchService

__all__ = [
    # Contracts
    "EmbeddingClient",
    "SimilaritySearchBackend",
    "KeywordSearchBackend",
    # Models
    "CandidateDocument",
    "DocumentStatus",
    "SearchFilters",
    "SemanticSearchQuery",
    "HybridSearchQuery",
    "SimilaritySearchOptions",
    "KeywordSearchOptions",
    "SimilarityMatch",
    "ScoredResult",
    "MatchType",
    "RequestContext",
    "SearchResponse",
    # Services
    "SemanticSearchService",
    "HybridSearchService",
    "ResultFusionEngine",
    "FusedPool",
    "keyword_score",
    "extract_excerpt",
]
