"""
text_embedder/embedder/base.py

Abstract interface for the embedding layer.

Design goals:
  - Callers depend only on this interface, never on onnxruntime or tokenizers.
  - format_query / format_document are separate from embed so callers can
    inspect or cache the exact strings a model sees; embed_query and
    embed_documents combine the two for the common retrieval case.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List


class Embedder(ABC):
    """
    Contract every embedding backend must fulfil.

    ``embed`` is the primitive: it never adds prompt prefixes. Prefixes are
    model-specific and applied by ``format_query`` / ``format_document``.
    """

    @abstractmethod
    def embed(self, texts: List[str]) -> List[List[float]]:
        """
        Encode already-formatted texts into embedding vectors.

        Args:
            texts: Strings to embed. May be empty — implementations must
                   handle that case by returning an empty list.

        Returns:
            A list of float vectors, one per input text, in the same order.
            Every vector of a given model has the same length.

        Raises:
            EmbeddingError: If any stage of the pipeline fails.
        """

    @abstractmethod
    def format_query(self, text: str) -> str:
        """Return ``text`` with the model's query instruction applied."""

    @abstractmethod
    def format_document(self, text: str) -> str:
        """Return ``text`` with the model's document instruction applied."""

    def embed_query(self, text: str) -> List[float]:
        """Format and encode a single query string."""
        return self.embed([self.format_query(text)])[0]

    def embed_documents(self, texts: List[str]) -> List[List[float]]:
        """Format and encode document texts. Returns [] for empty input."""
        return self.embed([self.format_document(t) for t in texts])
