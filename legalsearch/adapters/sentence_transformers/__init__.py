"""
Sentence Transformers Adapter - Local embedding model.
"""

from .embedder import SentenceTransformerEmbedder

__all__ = ["SentenceTransformerEmbedder"]
