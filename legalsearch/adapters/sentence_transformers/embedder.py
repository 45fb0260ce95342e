"""
Sentence Transformer Embedder - In-process query embeddings.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from sentence_transformers import SentenceTransformer

from legalsearch.config.errors import EmbeddingError

logger = logging.getLogger(__name__)

__all__ = ["SentenceTransformerEmbedder"]


class SentenceTransformerEmbedder:
    """
    Embedding client backed by a local sentence-transformers model.

    The model is loaded on first use.

    Example:
        >>> embedder = SentenceTransformerEmbedder("paraphrase-multilingual-MiniLM-L12-v2")
        >>> vector = await embedder.embed("rescisión de contrato")
    """

    def __init__(self, model_name: str = "paraphrase-multilingual-MiniLM-L12-v2") -> None:
        self.model_name = model_name
        self._model: Any = None
        self._lock = asyncio.Lock()

    async def _get_model(self) -> Any:
        async with self._lock:
            if self._model is None:
                logger.info("Loading embedding model: %s", self.model_name)
                self._model = await asyncio.to_thread(SentenceTransformer, self.model_name)
        return self._model

    async def embed(self, text: str) -> list[float]:
        """
        Embed text.

        Raises:
            EmbeddingError: Model could not be loaded or encoding failed
        """
        try:
            model = await self._get_model()
            vector = await asyncio.to_thread(model.encode, text)
        except Exception as e:
            raise EmbeddingError(
                f"Embedding model failed: {e}", {"model": self.model_name}
            ) from e
        return [float(v) for v in vector]
