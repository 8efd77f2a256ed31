"""
text_embedder/pooling/selector.py

Turn raw inference outputs into one vector per input row.

Decision order:
  1. The first pooled output found in the family's search order
     (``sentence_embedding``, ``pooler_output``, …) is sliced row by row.
  2. Otherwise ``last_hidden_state`` ``[batch, seq, hidden]`` is pooled per
     row with the family's token strategy.

Outputs are handled as a flat float32 buffer plus a shape, and every row
slice is bounds-checked against that buffer.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Mapping, Optional, Sequence, Tuple

import numpy as np

from text_embedder.core.constants import LAST_HIDDEN_STATE
from text_embedder.core.exceptions import (
    BatchSizeMismatchError,
    InvalidShapeError,
    MissingOutputTensorError,
)
from text_embedder.core.logger import get_logger
from text_embedder.pooling.strategies import PoolingStrategy, pool_tokens

logger = get_logger(__name__)


@dataclass(frozen=True)
class OutputTensor:
    """A named inference output as a flat float32 buffer and its shape."""

    name: str
    shape: Tuple[int, ...]
    data: np.ndarray

    @classmethod
    def from_array(cls, name: str, array: np.ndarray) -> "OutputTensor":
        arr = np.asarray(array)
        return cls(
            name=name,
            shape=tuple(int(d) for d in arr.shape),
            data=arr.astype(np.float32, copy=False).reshape(-1),
        )

    @property
    def rank(self) -> int:
        return len(self.shape)

    def span(self, start: int, length: int) -> np.ndarray:
        """Return ``data[start:start + length]``, refusing to read past the buffer."""
        end = start + length
        if start < 0 or end > self.data.size:
            raise InvalidShapeError(
                f"Invalid slice [{start}:{end}] of output '{self.name}' "
                f"(buffer holds {self.data.size} values)"
            )
        return self.data[start:end]


# ── Selection ──────────────────────────────────────────────────────────────────

def select_output(
    outputs: Mapping[str, np.ndarray],
    pooled_names: Sequence[str],
    token_names: Sequence[str] = (LAST_HIDDEN_STATE,),
    prefer_token_output: bool = False,
) -> OutputTensor:
    """
    Pick the output tensor to build embeddings from.

    Args:
        outputs             : Named arrays returned by the engine.
        pooled_names        : Already-pooled aliases, in priority order.
        token_names         : Per-token aliases, used when no pooled one exists.
        prefer_token_output : Search ``token_names`` before ``pooled_names``.

    Raises:
        MissingOutputTensorError: No candidate name is present.
    """
    search = (
        list(token_names) + list(pooled_names)
        if prefer_token_output
        else list(pooled_names) + list(token_names)
    )
    for name in search:
        if name in outputs:
            tensor = OutputTensor.from_array(name, outputs[name])
            logger.debug("Selected output '%s' — shape=%s", name, tensor.shape)
            return tensor
    raise MissingOutputTensorError(
        f"No embedding tensor found in outputs (looked for {search}, "
        f"got {sorted(outputs)})"
    )


# ── Pooling ────────────────────────────────────────────────────────────────────

def pool_output(
    tensor: OutputTensor,
    batch_size: int,
    masks: Sequence[np.ndarray],
    strategy: Optional[PoolingStrategy],
) -> List[np.ndarray]:
    """
    Extract one vector per row from ``tensor``.

    Args:
        tensor     : Output chosen by ``select_output``.
        batch_size : Rows requested from the engine.
        masks      : Per-row attention masks used by token pooling.
        strategy   : Token pooling for rank-3 outputs; ``None`` when the model
                     family only accepts pooled outputs.

    Raises:
        BatchSizeMismatchError : Output row count differs from ``batch_size``.
        InvalidShapeError      : Rank is not 2 or 3, the family cannot pool a
                                 rank-3 output, or a slice leaves the buffer.
    """
    if tensor.rank not in (2, 3):
        raise InvalidShapeError(
            f"Unexpected output shape {list(tensor.shape)} for '{tensor.name}'"
        )
    if tensor.shape[0] != batch_size:
        raise BatchSizeMismatchError(
            f"Batch size mismatch in outputs: requested {batch_size}, "
            f"got {tensor.shape[0]}"
        )

    if tensor.rank == 2:
        hidden = tensor.shape[1]
        return [tensor.span(i * hidden, hidden).copy() for i in range(batch_size)]

    if strategy is None:
        raise InvalidShapeError(
            f"Output '{tensor.name}' is per-token {list(tensor.shape)} but this "
            f"model family only accepts pooled outputs"
        )

    _, seq_len, hidden = tensor.shape
    if seq_len == 0 and strategy is not PoolingStrategy.MEAN:
        raise InvalidShapeError(
            f"Cannot take a {strategy.value} token from an empty sequence"
        )

    row_size = seq_len * hidden
    vectors = []
    for i in range(batch_size):
        rows = tensor.span(i * row_size, row_size).reshape(seq_len, hidden)
        vectors.append(pool_tokens(rows, masks[i], strategy))
    return vectors


def extract_embeddings(
    outputs: Mapping[str, np.ndarray],
    batch_size: int,
    masks: Sequence[np.ndarray],
    pooled_names: Sequence[str],
    strategy: Optional[PoolingStrategy],
    prefer_token_output: bool = False,
    strict_output_rank: bool = False,
) -> List[np.ndarray]:
    """
    Select the right output and pool it — one vector per input row.

    With ``strict_output_rank`` a pooled alias must be rank 2 and a per-token
    output rank 3; anything else raises InvalidShapeError instead of being
    sliced or pooled.
    """
    token_names = (LAST_HIDDEN_STATE,) if strategy is not None else ()
    tensor = select_output(outputs, pooled_names, token_names, prefer_token_output)
    if strict_output_rank:
        expected_rank = 3 if tensor.name in token_names else 2
        if tensor.rank != expected_rank:
            raise InvalidShapeError(
                f"Unexpected output shape {list(tensor.shape)} for '{tensor.name}' "
                f"(expected rank {expected_rank})"
            )
    return pool_output(tensor, batch_size, masks, strategy)
