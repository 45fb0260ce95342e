"""
Ollama Adapter - Embeddings from a local Ollama server.
"""

from .client import OllamaEmbeddingClient

__all__ = ["OllamaEmbeddingClient"]
