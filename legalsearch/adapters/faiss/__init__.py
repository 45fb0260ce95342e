"""
FAISS Adapter - Vector similarity search.
"""

from .index import FaissSimilarityIndex, validate_embedding

__all__ = ["FaissSimilarityIndex", "validate_embedding"]
