"""
text_embedder/embedder/families.py

Per-family behaviour as data.

All model families run through the same pipeline; what differs is captured
in a FamilyPolicy:

    family   query prefix             pooled outputs searched       token pooling  normalised
    ───────  ───────────────────────  ────────────────────────────  ─────────────  ──────────
    BGE      "Represent this …: "     sentence_embedding, pooled_…  CLS            yes
    MiniLM   —                        (last_hidden_state first)     MEAN           yes
    JinaV3   —                        —                             MEAN           yes
    Gemma    "task: search result …"  sentence_embedding            —              no
    Qwen3    "Instruct: …\\nQuery:"    sentence_embedding, pooled_…  LAST_TOKEN     yes
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple

from text_embedder.core.constants import (
    BGE_DOCUMENT_PREFIX,
    BGE_POOLED_OUTPUTS,
    BGE_QUERY_PREFIX,
    GEMMA_DOCUMENT_PREFIX,
    GEMMA_POOLED_OUTPUTS,
    GEMMA_QUERY_PREFIX,
    MINILM_POOLED_OUTPUTS,
    QWEN3_POOLED_OUTPUTS,
    QWEN3_QUERY_TEMPLATE,
    QWEN3_TASK,
)
from text_embedder.pooling.strategies import PoolingStrategy


class ModelFamily(str, Enum):
    BGE = "bge"
    MINILM = "minilm"
    JINA_V3 = "jina_v3"
    GEMMA = "gemma"
    QWEN3 = "qwen3"


@dataclass(frozen=True)
class FamilyPolicy:
    """
    Everything that distinguishes one model family from another.

    Attributes:
        family              : The family this policy belongs to.
        query_prefix        : Prepended to queries by ``format_query``.
        document_prefix     : Prepended to documents by ``format_document``.
        pooled_outputs      : Already-pooled output names, in search order.
        pooling             : Token pooling for ``last_hidden_state``; ``None``
                              means the family only accepts pooled outputs.
        normalize_output    : L2-normalise the final vectors.
        prefer_token_output : Look for ``last_hidden_state`` before pooled outputs.
        strict_output_rank  : Reject pooled outputs that are not rank 2 and
                              token outputs that are not rank 3.
    """

    family: ModelFamily
    query_prefix: str = ""
    document_prefix: str = ""
    pooled_outputs: Tuple[str, ...] = ()
    pooling: Optional[PoolingStrategy] = PoolingStrategy.MEAN
    normalize_output: bool = True
    prefer_token_output: bool = False
    strict_output_rank: bool = False

    def format_query(self, text: str) -> str:
        return f"{self.query_prefix}{text}"

    def format_document(self, text: str) -> str:
        return f"{self.document_prefix}{text}"


POLICIES: Dict[ModelFamily, FamilyPolicy] = {
    ModelFamily.BGE: FamilyPolicy(
        family=ModelFamily.BGE,
        query_prefix=BGE_QUERY_PREFIX,
        document_prefix=BGE_DOCUMENT_PREFIX,
        pooled_outputs=BGE_POOLED_OUTPUTS,
        pooling=PoolingStrategy.CLS,
    ),
    ModelFamily.MINILM: FamilyPolicy(
        family=ModelFamily.MINILM,
        pooled_outputs=MINILM_POOLED_OUTPUTS,
        pooling=PoolingStrategy.MEAN,
        prefer_token_output=True,
        strict_output_rank=True,
    ),
    ModelFamily.JINA_V3: FamilyPolicy(
        family=ModelFamily.JINA_V3,
        pooling=PoolingStrategy.MEAN,
    ),
    ModelFamily.GEMMA: FamilyPolicy(
        family=ModelFamily.GEMMA,
        query_prefix=GEMMA_QUERY_PREFIX,
        document_prefix=GEMMA_DOCUMENT_PREFIX,
        pooled_outputs=GEMMA_POOLED_OUTPUTS,
        pooling=None,
        normalize_output=False,
    ),
    ModelFamily.QWEN3: FamilyPolicy(
        family=ModelFamily.QWEN3,
        query_prefix=QWEN3_QUERY_TEMPLATE.format(task=QWEN3_TASK),
        pooled_outputs=QWEN3_POOLED_OUTPUTS,
        pooling=PoolingStrategy.LAST_TOKEN,
    ),
}


def get_policy(family: ModelFamily | str) -> FamilyPolicy:
    """Return the policy for ``family`` (enum member or its string value)."""
    return POLICIES[ModelFamily(family)]
