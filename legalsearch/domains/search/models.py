"""
Search Models - Data types for search domain.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field

from legalsearch.domains.telemetry.models import RequestContext

# Similarity cut-off used by hybrid search; lower than the semantic default
# because keyword evidence compensates for weaker vector matches.
HYBRID_SIMILARITY_THRESHOLD = 0.5
MAX_RESULT_LIMIT = 100


class MatchType(str, Enum):
    """Which retrieval signal produced a result."""

    SEMANTIC = "semantic"
    KEYWORD = "keyword"
    HYBRID = "hybrid"


class DocumentStatus(str, Enum):
    """Publication status of a legal document."""

    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    ARCHIVED = "ARCHIVED"


class SearchFilters(BaseModel):
    """Filters shared by every search entry point and backend."""

    document_type: str | None = None
    scope: str | None = None
    only_active: bool = True
    only_published: bool = True

    model_config = {"frozen": True}


class SemanticSearchQuery(SearchFilters):
    """Pure semantic search request."""

    query: str = Field(..., min_length=1)
    limit: int = Field(default=10, ge=1, le=MAX_RESULT_LIMIT)
    similarity_threshold: float = Field(default=0.7, ge=0.0, le=1.0)


class HybridSearchQuery(SearchFilters):
    """Hybrid search request blending semantic and keyword signals."""

    query: str = Field(..., min_length=1)
    limit: int = Field(default=10, ge=1, le=MAX_RESULT_LIMIT)
    semantic_weight: float = Field(default=0.7, ge=0.0, le=1.0)
    include_keyword_search: bool = True

    @property
    def keyword_weight(self) -> float:
        return 1.0 - self.semantic_weight


class SimilaritySearchOptions(SearchFilters):
    """Options accepted by a similarity search backend."""

    limit: int = 10
    similarity_threshold: float = 0.7


class KeywordSearchOptions(SearchFilters):
    """Options accepted by a keyword search backend."""

    limit: int = 10


class CandidateDocument(BaseModel):
    """Document returned by a search backend. Never mutated."""

    id: str
    title: str
    document_number: str | None = None
    document_type: str = "LAW"
    hierarchy_level: int = 0
    scope: str | None = None
    issuing_entity: str | None = None
    status: DocumentStatus = DocumentStatus.PUBLISHED
    is_active: bool = True
    summary: str | None = None
    full_text: str | None = None
    keywords: list[str] = Field(default_factory=list)
    published_at: datetime | None = None

    model_config = {"frozen": True}


class SimilarityMatch(BaseModel):
    """Candidate annotated with its vector similarity."""

    document: CandidateDocument
    similarity: float = Field(..., ge=0.0, le=1.0)

    model_config = {"frozen": True}


class ScoredResult(BaseModel):
    """Ranked search result."""

    document: CandidateDocument
    similarity_score: float = 0.0
    relevance_score: float = 0.0
    match_type: MatchType
    excerpt: str | None = None

    model_config = {"frozen": True}

    @property
    def document_id(self) -> str:
        return self.document.id


class SearchResponse(BaseModel):
    """Search results with execution metadata."""

    results: list[ScoredResult]
    total: int
    query: str
    execution_time_ms: int
    search_type: Literal["semantic", "hybrid"]
    search_query_id: str = ""
