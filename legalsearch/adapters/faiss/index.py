"""
FAISS Index - Vector similarity search backend.

Features:
- Async-compatible operations
- Query vector validation before any index access
- Cosine similarity via inner product on L2-normalized vectors
- Document metadata stored alongside vectors for filtering
- Index persistence
"""

from __future__ import annotations

import asyncio
import json
import logging
import math
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import faiss
import numpy as np

from legalsearch.config.errors import InvalidEmbeddingError
from legalsearch.domains.search.models import (
    MAX_RESULT_LIMIT,
    CandidateDocument,
    DocumentStatus,
    SimilarityMatch,
    SimilaritySearchOptions,
)

logger = logging.getLogger(__name__)

__all__ = ["FaissSimilarityIndex", "validate_embedding"]

INDEX_TYPES = ("Flat", "HNSW")
# Neighbours per node in the HNSW graph
HNSW_M = 32


def validate_embedding(vector: Sequence[float], dimension: int | None = None) -> np.ndarray:
    """
    Validate a query vector and return it as a float32 row.

    Raises:
        InvalidEmbeddingError: Empty vector, non-numeric or non-finite
            values, or a dimension mismatch
    """
    if vector is None or len(vector) == 0:
        raise InvalidEmbeddingError("Invalid embedding: must be a non-empty array")

    for value in vector:
        if isinstance(value, bool) or not isinstance(value, (int, float, np.number)):
            raise InvalidEmbeddingError(
                f"Invalid embedding value: {value!r}. All values must be finite numbers."
            )
        if not math.isfinite(float(value)):
            raise InvalidEmbeddingError(
                f"Invalid embedding value: {value}. All values must be finite numbers."
            )

    if dimension is not None and len(vector) != dimension:
        raise InvalidEmbeddingError(
            f"Invalid embedding dimension: expected {dimension}, got {len(vector)}",
            {"expected": dimension, "actual": len(vector)},
        )

    return np.asarray(vector, dtype="float32").reshape(1, -1)


class FaissSimilarityIndex:
    """
    FAISS vector index for semantic search over legal documents.

    Example:
        >>> index = FaissSimilarityIndex(dimension=384)
        >>> await index.add_documents(embeddings, documents)
        >>> matches = await index.search_by_similarity(query_vector, SimilaritySearchOptions())
    """

    def __init__(
        self,
        dimension: int = 384,
        index_type: str = "Flat",
    ) -> None:
        """
        Initialize FAISS index.

        Args:
            dimension: Vector dimension (384 for MiniLM, 768 for MPNet)
            index_type: Index type ("Flat", "HNSW")

        Raises:
            ValueError: Unknown index type
        """
        if index_type not in INDEX_TYPES:
            raise ValueError(f"Unknown FAISS index type: {index_type!r}")

        self.dimension = dimension
        self.index_type = index_type

        self._index: faiss.Index | None = None
        self._documents: list[dict[str, Any]] = []

    def _create_index(self) -> faiss.Index:
        """Create FAISS index based on type."""
        if self.index_type == "HNSW":
            return faiss.IndexHNSWFlat(self.dimension, HNSW_M, faiss.METRIC_INNER_PRODUCT)
        return faiss.IndexFlatIP(self.dimension)

    async def initialize(self) -> None:
        """Initialize empty index."""
        self._index = self._create_index()
        self._documents = []
        logger.info(
            "FAISS index initialized: dimension=%d, type=%s",
            self.dimension,
            self.index_type,
        )

    async def add_documents(
        self,
        vectors: np.ndarray,
        documents: Sequence[CandidateDocument],
    ) -> None:
        """
        Add document vectors with their metadata.

        Args:
            vectors: numpy array of shape (n, dimension)
            documents: Documents, same length and order as vectors
        """
        if len(vectors) != len(documents):
            raise ValueError(
                f"vectors and documents differ in length: {len(vectors)} != {len(documents)}"
            )

        if self._index is None:
            await self.initialize()
        assert self._index is not None  # Guaranteed by initialize()

        vectors = np.ascontiguousarray(np.asarray(vectors, dtype="float32"))

        # Normalize for inner product (cosine similarity)
        faiss.normalize_L2(vectors)

        await asyncio.to_thread(self._index.add, vectors)
        self._documents.extend(doc.model_dump(mode="json") for doc in documents)

        logger.debug("Added %d vectors to index", len(vectors))

    async def search_by_similarity(
        self,
        vector: Sequence[float],
        options: SimilaritySearchOptions,
    ) -> list[SimilarityMatch]:
        """
        Search documents by cosine similarity.

        Args:
            vector: Query embedding
            options: Limit, threshold and filters

        Returns:
            Matches at or above the threshold, most similar first

        Raises:
            InvalidEmbeddingError: Malformed query vector
        """
        query_vector = validate_embedding(vector, self.dimension)
        safe_limit = min(max(1, int(options.limit)), MAX_RESULT_LIMIT)

        if self._index is None or self._index.ntotal == 0:
            return []

        query_vector = np.ascontiguousarray(query_vector)
        faiss.normalize_L2(query_vector)

        # Filters are applied after retrieval, so rank the whole index
        scores, indices = await asyncio.to_thread(
            self._index.search, query_vector, self._index.ntotal
        )

        matches: list[SimilarityMatch] = []
        for score, idx in zip(scores[0], indices[0]):
            if idx < 0 or idx >= len(self._documents):
                continue

            # similarity = 1 - cosine distance
            similarity = min(1.0, max(0.0, float(score)))
            if similarity < options.similarity_threshold:
                break

            metadata = self._documents[idx]
            if not self._matches_filters(metadata, options):
                continue

            matches.append(
                SimilarityMatch(
                    document=CandidateDocument.model_validate(metadata),
                    similarity=similarity,
                )
            )
            if len(matches) >= safe_limit:
                break

        return matches

    @staticmethod
    def _matches_filters(metadata: dict[str, Any], options: SimilaritySearchOptions) -> bool:
        if options.document_type and metadata.get("document_type") != options.document_type:
            return False
        if options.scope and metadata.get("scope") != options.scope:
            return False
        if options.only_active and not metadata.get("is_active", True):
            return False
        if options.only_published and metadata.get("status") != DocumentStatus.PUBLISHED.value:
            return False
        return True

    async def save(self, path: str | Path) -> None:
        """
        Save index to disk.

        Args:
            path: Directory to save index
        """
        path = Path(path)
        path.mkdir(parents=True, exist_ok=True)

        index_path = path / "faiss_index.bin"
        await asyncio.to_thread(faiss.write_index, self._index, str(index_path))

        metadata_path = path / "metadata.json"
        metadata = {
            "dimension": self.dimension,
            "index_type": self.index_type,
            "documents": self._documents,
        }
        await asyncio.to_thread(self._write_json, metadata_path, metadata)

        logger.info("Index saved to %s (%d vectors)", path, self.size)

    @staticmethod
    def _write_json(path: Path, data: dict[str, Any]) -> None:
        """Write JSON file (sync helper for to_thread)."""
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f)

    async def load(self, path: str | Path) -> None:
        """
        Load index from disk.

        Args:
            path: Directory containing saved index
        """
        path = Path(path)

        index_path = path / "faiss_index.bin"
        self._index = await asyncio.to_thread(faiss.read_index, str(index_path))

        metadata_path = path / "metadata.json"
        data = await asyncio.to_thread(self._read_json, metadata_path)
        self.dimension = data["dimension"]
        self.index_type = data["index_type"]
        self._documents = data["documents"]

        logger.info("Index loaded from %s (%d vectors)", path, self.size)

    @staticmethod
    def _read_json(path: Path) -> dict[str, Any]:
        """Read JSON file (sync helper for to_thread)."""
        with open(path, encoding="utf-8") as f:
            result: dict[str, Any] = json.load(f)
            return result

    @property
    def size(self) -> int:
        """Get number of vectors in index."""
        return self._index.ntotal if self._index is not None else 0
