"""
Ollama Embedding Client - Query embeddings from a local Ollama server.

Features:
- Async HTTP client
- Transport, HTTP status and payload errors mapped to EmbeddingError
- No retries: a failed embedding fails the query
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from legalsearch.config.errors import EmbeddingError, ErrorCode

logger = logging.getLogger(__name__)

__all__ = ["OllamaEmbeddingClient"]


class OllamaEmbeddingClient:
    """
    Ollama embedding client.

    Example:
        >>> client = OllamaEmbeddingClient(model="nomic-embed-text")
        >>> vector = await client.embed("despido improcedente")
    """

    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        model: str = "nomic-embed-text",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize Ollama client.

        Args:
            base_url: Ollama server URL
            model: Embedding model name
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests)
        """
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def embed(self, text: str) -> list[float]:
        """
        Embed text.

        Args:
            text: Text to embed

        Returns:
            Embedding vector

        Raises:
            EmbeddingError: Request failed, timed out or returned no embedding
        """
        client = await self._get_client()
        payload: dict[str, Any] = {"model": self.model, "prompt": text}

        try:
            response = await client.post("/api/embeddings", json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException as e:
            raise EmbeddingError(
                f"Ollama embedding timed out after {self.timeout}s",
                {"model": self.model},
                code=ErrorCode.EMBEDDING_TIMEOUT,
            ) from e
        except httpx.HTTPStatusError as e:
            raise EmbeddingError(
                f"Ollama returned HTTP {e.response.status_code}",
                {"model": self.model, "status_code": e.response.status_code},
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise EmbeddingError(f"Ollama embedding failed: {e}", {"model": self.model}) from e

        embedding = data.get("embedding") if isinstance(data, dict) else None
        if not isinstance(embedding, list) or not embedding:
            raise EmbeddingError("Ollama response contained no embedding", {"model": self.model})

        logger.debug("Embedded %d chars -> %d dims", len(text), len(embedding))
        return embedding

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
