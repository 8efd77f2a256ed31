"""
text_embedder/tensors/batch.py

Batch normalisation: turn ragged token encodings into rectangular arrays.

    encodings (ragged)                    Batch (batch_size × max_len)
    [101, 7592, 102]          ──►         [[101, 7592, 102,   0],
    [101, 2088, 2003, 102]                 [101, 2088, 2003, 102]]

Ids are right-padded with the tokenizer's pad id, masks with 0. A copy of
every row's mask is kept for pooling after inference.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Sequence, Tuple

import numpy as np


# ── Data-transfer objects ──────────────────────────────────────────────────────

@dataclass(frozen=True)
class Encoding:
    """
    One tokenized text, as produced by the tokenizer.

    Attributes:
        ids                 : Token ids (unsigned 32-bit range).
        attention_mask      : 1 for real tokens, 0 for padding; same length as ids.
        type_ids            : Segment ids, when the tokenizer provides them.
        special_tokens_mask : 1 where the tokenizer inserted a special token.
        offsets             : ``(start, end)`` character span of every token.
        tokens              : Token strings.
    """

    ids: Tuple[int, ...]
    attention_mask: Tuple[int, ...]
    type_ids: Tuple[int, ...] = ()
    special_tokens_mask: Tuple[int, ...] = ()
    offsets: Tuple[Tuple[int, int], ...] = ()
    tokens: Tuple[str, ...] = ()

    @classmethod
    def from_tokenizers(cls, encoding: Any) -> "Encoding":
        """Copy a ``tokenizers.Encoding`` into an immutable Encoding."""
        return cls(
            ids=tuple(encoding.ids),
            attention_mask=tuple(encoding.attention_mask),
            type_ids=tuple(encoding.type_ids),
            special_tokens_mask=tuple(encoding.special_tokens_mask),
            offsets=tuple((int(s), int(e)) for s, e in encoding.offsets),
            tokens=tuple(encoding.tokens),
        )

    def __len__(self) -> int:
        return len(self.ids)


@dataclass
class Batch:
    """
    Rectangular model input for one ``embed`` call.

    Attributes:
        input_ids      : int64 ``[batch_size, max_len]``, pad-id right-padded.
        attention_mask : int64 ``[batch_size, max_len]``, 0 right-padded.
        pooling_masks  : One uint32 mask per row, fit to ``max_len``; used
                         after inference to pool per-token outputs.
    """

    input_ids: np.ndarray
    attention_mask: np.ndarray
    pooling_masks: List[np.ndarray] = field(default_factory=list)

    @property
    def batch_size(self) -> int:
        return int(self.input_ids.shape[0])

    @property
    def max_len(self) -> int:
        return int(self.input_ids.shape[1])

    @property
    def is_empty(self) -> bool:
        """True when every encoding was empty — nothing to run."""
        return self.max_len == 0


# ── Helpers ────────────────────────────────────────────────────────────────────

def fit_mask(mask: Sequence[int], target_len: int) -> np.ndarray:
    """Truncate or right-pad (with 0) ``mask`` to exactly ``target_len``."""
    out = np.zeros(target_len, dtype=np.uint32)
    values = np.asarray(mask, dtype=np.uint32)[:target_len]
    out[: values.size] = values
    return out


def build_batch(encodings: Sequence[Encoding], pad_id: int = 0) -> Batch:
    """
    Pad ``encodings`` to a common length.

    Args:
        encodings : Tokenized inputs, in caller order. May be empty.
        pad_id    : Value used to right-pad ids (the tokenizer's pad id).

    Returns:
        A Batch whose row count equals ``len(encodings)``. ``max_len`` is the
        longest encoding, or 0 when every encoding is empty.
    """
    batch_size = len(encodings)
    max_len = max((len(e.ids) for e in encodings), default=0)

    input_ids = np.full((batch_size, max_len), pad_id, dtype=np.int64)
    attention_mask = np.zeros((batch_size, max_len), dtype=np.int64)
    pooling_masks: List[np.ndarray] = []

    for row, encoding in enumerate(encodings):
        length = len(encoding.ids)
        input_ids[row, :length] = encoding.ids
        mask = fit_mask(encoding.attention_mask, max_len)
        # The model attends only over real ids; mask bits past them stay 0.
        attention_mask[row, :length] = mask[:length]
        pooling_masks.append(mask)

    return Batch(
        input_ids=input_ids,
        attention_mask=attention_mask,
        pooling_masks=pooling_masks,
    )
