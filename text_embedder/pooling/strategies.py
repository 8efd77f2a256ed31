"""
text_embedder/pooling/strategies.py

Reduce a per-token output row ``[seq_len, hidden]`` to one vector.

    CLS         the first token's hidden state
    MEAN        mask-weighted average over the sequence
    LAST_TOKEN  the last position whose mask bit is 1
"""

from __future__ import annotations

from enum import Enum

import numpy as np

from text_embedder.pooling.vectors import mean_pooling
from text_embedder.tensors.batch import fit_mask


class PoolingStrategy(str, Enum):
    CLS = "cls"
    MEAN = "mean"
    LAST_TOKEN = "last_token"


def last_token_index(mask: np.ndarray) -> int:
    """Highest index whose mask bit is 1, or the last index if there is none."""
    valid = np.flatnonzero(np.asarray(mask) == 1)
    if valid.size:
        return int(valid[-1])
    return max(len(mask) - 1, 0)


def pool_tokens(
    token_vectors: np.ndarray,
    mask: np.ndarray,
    strategy: PoolingStrategy,
) -> np.ndarray:
    """
    Pool one row of per-token vectors.

    Args:
        token_vectors : ``[seq_len, hidden]`` float array for one input.
        mask          : That input's attention mask; fit to ``seq_len`` here.
        strategy      : How to reduce the sequence axis.
    """
    seq_len = token_vectors.shape[0]
    fitted = fit_mask(mask, seq_len)

    if strategy is PoolingStrategy.MEAN:
        return mean_pooling(token_vectors, fitted)
    if strategy is PoolingStrategy.CLS:
        return np.asarray(token_vectors[0], dtype=np.float32)
    if strategy is PoolingStrategy.LAST_TOKEN:
        return np.asarray(token_vectors[last_token_index(fitted)], dtype=np.float32)
    raise ValueError(f"Unknown pooling strategy: {strategy!r}")
