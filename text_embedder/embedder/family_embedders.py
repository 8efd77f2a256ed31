"""
text_embedder/embedder/family_embedders.py

One OnnxEmbedder subclass per supported model family.

    BgeEmbedder      bge-small-en-v1.5 and friends   CLS pooling
    MiniLmEmbedder   all-MiniLM-L6-v2                mean pooling
    JinaV3Embedder   jina-embeddings-v3              mean pooling, LoRA task id
    GemmaEmbedder    embeddinggemma-300m             pooled output, raw vectors
    Qwen3Embedder    Qwen3-Embedding                 last-token pooling
"""

from __future__ import annotations

from typing import Dict, List, Type, Union

import numpy as np

from text_embedder.core.constants import (
    JINA_V3_DEFAULT_TASK,
    JINA_V3_TASK_IDS,
    JINA_V3_TASK_INPUT,
    QWEN3_QUERY_TEMPLATE,
    QWEN3_TASK,
)
from text_embedder.embedder.families import POLICIES, ModelFamily
from text_embedder.embedder.onnx_embedder import OnnxEmbedder


class BgeEmbedder(OnnxEmbedder):
    policy = POLICIES[ModelFamily.BGE]


class MiniLmEmbedder(OnnxEmbedder):
    policy = POLICIES[ModelFamily.MINILM]


class GemmaEmbedder(OnnxEmbedder):
    """EmbeddingGemma returns its pooled ``sentence_embedding`` unnormalised."""

    policy = POLICIES[ModelFamily.GEMMA]


class Qwen3Embedder(OnnxEmbedder):
    policy = POLICIES[ModelFamily.QWEN3]

    @classmethod
    def format_query(cls, text: str, task: str = QWEN3_TASK) -> str:
        """Wrap ``text`` in Qwen3's instruction template for ``task``."""
        return f"{QWEN3_QUERY_TEMPLATE.format(task=task)}{text}"


class JinaV3Embedder(OnnxEmbedder):
    """
    jina-embeddings-v3 selects a LoRA adapter per call through its
    ``task_id`` input. ``embed_query`` / ``embed_documents`` use the
    retrieval adapters; plain ``embed`` uses the given task.
    """

    policy = POLICIES[ModelFamily.JINA_V3]

    def embed(
        self,
        texts: List[str],
        task_id: Union[int, str] = JINA_V3_DEFAULT_TASK,
    ) -> List[List[float]]:
        """
        Encode texts with the adapter for ``task_id``.

        Args:
            texts   : Strings to embed.
            task_id : Adapter index or task name (``"retrieval.query"``,
                      ``"retrieval.passage"``, ``"separation"``,
                      ``"classification"``, ``"text-matching"``).

        Raises:
            ValueError: Unknown task name.
        """
        task_index = self.resolve_task(task_id)
        overrides = {JINA_V3_TASK_INPUT: np.full(len(texts), task_index, dtype=np.int64)}
        return self._embed(texts, overrides)

    def embed_query(self, text: str) -> List[float]:
        return self.embed([self.format_query(text)], task_id="retrieval.query")[0]

    def embed_documents(self, texts: List[str]) -> List[List[float]]:
        return self.embed(
            [self.format_document(t) for t in texts], task_id="retrieval.passage"
        )

    @staticmethod
    def resolve_task(task_id: Union[int, str]) -> int:
        if isinstance(task_id, str):
            try:
                return JINA_V3_TASK_IDS[task_id]
            except KeyError:
                raise ValueError(
                    f"Unknown Jina v3 task '{task_id}'. "
                    f"Expected one of {sorted(JINA_V3_TASK_IDS)}."
                ) from None
        return int(task_id)


EMBEDDERS: Dict[ModelFamily, Type[OnnxEmbedder]] = {
    ModelFamily.BGE: BgeEmbedder,
    ModelFamily.MINILM: MiniLmEmbedder,
    ModelFamily.JINA_V3: JinaV3Embedder,
    ModelFamily.GEMMA: GemmaEmbedder,
    ModelFamily.QWEN3: Qwen3Embedder,
}


def embedder_for(family: Union[ModelFamily, str]) -> Type[OnnxEmbedder]:
    """Return the embedder class for ``family``."""
    return EMBEDDERS[ModelFamily(family)]
