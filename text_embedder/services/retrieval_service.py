"""
text_embedder/services/retrieval_service.py

Ranks a set of documents against a query, fully in process:

    query, documents
      └─ Embedder.embed_query()        → [float]
      └─ Embedder.embed_documents()    → [[float]]
           └─ cosine_distance()        → one distance per document
                └─ sort + top_k        → RetrievalResponse

The embedder is injected, so any model family (or a test double) works.
"""

from __future__ import annotations

from typing import List, Optional

from text_embedder.core.config import settings
from text_embedder.core.exceptions import EmbeddingError, EmptyQueryError
from text_embedder.core.logger import get_logger
from text_embedder.embedder.base import Embedder
from text_embedder.models.retrieval_models import RankedDocument, RetrievalResponse
from text_embedder.pooling.vectors import cosine_distance

logger = get_logger(__name__)


class RetrievalService:
    """
    Orchestrates query-vs-documents ranking:
        1. Validate and normalise the query string
        2. Embed the query and the documents with their family prompts
        3. Score each document by cosine distance to the query
        4. Return the ``top_k`` closest documents

    ``top_k`` can be provided per call or falls back to
    ``settings.retrieval_top_k`` (configurable via ``RETRIEVAL_TOP_K``).
    """

    def __init__(self, embedder: Embedder) -> None:
        self._embedder = embedder

    # ── Public API ─────────────────────────────────────────────────────────────

    def rank(
        self,
        query: str,
        documents: List[str],
        top_k: Optional[int] = None,
    ) -> RetrievalResponse:
        """
        Rank ``documents`` by closeness to ``query``.

        Args:
            query     : Natural-language query. Must not be blank.
            documents : Candidate texts; may be empty.
            top_k     : Max results to return. Defaults to ``settings.retrieval_top_k``.

        Raises:
            EmptyQueryError : The query string was blank.
            EmbeddingError  : The embedder failed, or the query embedded to an
                              empty or all-zero vector.
        """
        clean_query = query.strip()
        if not clean_query:
            raise EmptyQueryError("Query must not be empty.")

        k = top_k if top_k is not None else settings.retrieval_top_k
        if not documents or k <= 0:
            return RetrievalResponse(query=clean_query, results=[])

        query_vector = self._embedder.embed_query(clean_query)
        if not any(query_vector):
            raise EmbeddingError(
                f"Query '{clean_query[:80]}' produced an empty embedding; nothing to rank against."
            )
        doc_vectors = self._embedder.embed_documents(documents)

        results: List[RankedDocument] = []
        for index, (document, vector) in enumerate(zip(documents, doc_vectors)):
            distance = self._distance(query_vector, vector)
            results.append(
                RankedDocument(
                    index=index,
                    document=document,
                    score=round(1.0 - distance, 6),
                    distance=round(distance, 6),
                )
            )

        results.sort(key=lambda r: r.distance)
        logger.info(
            "Ranked %d document(s) for query '%s' — returning %d.",
            len(documents),
            clean_query[:80],
            min(k, len(results)),
        )
        return RetrievalResponse(query=clean_query, results=results[:k])

    # ── Internals ──────────────────────────────────────────────────────────────

    @staticmethod
    def _distance(query_vector: List[float], vector: List[float]) -> float:
        """
        Cosine distance to a document vector.

        A document that tokenized to nothing embeds to an empty or all-zero
        vector and is scored as orthogonal (distance 1.0).
        """
        if not any(vector):
            return 1.0
        try:
            return cosine_distance(query_vector, vector)
        except ValueError as exc:
            raise EmbeddingError(f"Cannot score document: {exc}") from exc
