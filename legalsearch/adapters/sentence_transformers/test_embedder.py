"""
Tests for the sentence-transformers embedder.
"""

from __future__ import annotations

from collections.abc import Generator
from unittest.mock import MagicMock, patch

import numpy as np
import pytest

from legalsearch.config.errors import EmbeddingError

from .embedder import SentenceTransformerEmbedder


@pytest.fixture
def mock_model_class() -> Generator[MagicMock, None, None]:
    """Mock the SentenceTransformer class."""
    with patch("legalsearch.adapters.sentence_transformers.embedder.SentenceTransformer") as mock:
        mock.return_value.encode.return_value = np.array([0.1, 0.2, 0.3], dtype="float32")
        yield mock


async def test_embed_returns_floats(mock_model_class: MagicMock) -> None:
    """Test encode output is converted to a list of floats."""
    embedder = SentenceTransformerEmbedder("test-model")
    vector = await embedder.embed("contrato de arrendamiento")

    assert vector == pytest.approx([0.1, 0.2, 0.3])
    assert all(isinstance(v, float) for v in vector)
    mock_model_class.assert_called_once_with("test-model")


async def test_model_loaded_once(mock_model_class: MagicMock) -> None:
    """Test the model is loaded lazily and reused."""
    embedder = SentenceTransformerEmbedder("test-model")
    mock_model_class.assert_not_called()

    await embedder.embed("uno")
    await embedder.embed("dos")

    mock_model_class.assert_called_once()


async def test_encode_failure(mock_model_class: MagicMock) -> None:
    """Test model failures map to EmbeddingError."""
    mock_model_class.return_value.encode.side_effect = RuntimeError("CUDA out of memory")
    embedder = SentenceTransformerEmbedder("test-model")

    with pytest.raises(EmbeddingError, match="CUDA out of memory"):
        await embedder.embed("ley")
