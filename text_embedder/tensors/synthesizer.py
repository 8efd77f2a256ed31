"""
text_embedder/tensors/synthesizer.py

Dynamic input synthesis.

Models exported for inference declare a varying set of inputs: encoders
usually want ``input_ids`` / ``attention_mask`` / ``token_type_ids``,
decoder-style models add ``position_ids`` and ``past_key_values.*`` cache
tensors, and some declare 4-D attention masks. Rather than hard-coding a
signature per model, this module reads the declared inputs at runtime and
builds a tensor for each one:

    declared input            synthesis rule
    ────────────────────────  ──────────────────────────────────────────────
    caller override           cast verbatim to the declared type
    input_ids                 batch ids                 [batch, max_len]
    attention_mask (rank 1)   single-row mask           [max_len]
    attention_mask (rank 4)   mask replicated per query [batch, 1, max_len, max_len]
    attention_mask (other)    batch mask                [batch, max_len]
    position_ids / cache_pos  0..max_len per row        [batch, max_len] or [max_len]
    token_type_ids            zeros                     [batch, max_len]
    past_key_values*          zeros, empty cache axis   declared rank
    anything else             zeros                     [max_len] / [batch, max_len] / 1s

Fixed (non-negative) declared extents always win over the fallback values.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from text_embedder.core.constants import (
    ATTENTION_MASK,
    CACHE_POSITION,
    INPUT_IDS,
    PAST_KEY_VALUES_PREFIX,
    POSITION_IDS,
    TOKEN_TYPE_IDS,
)
from text_embedder.core.exceptions import BatchSizeMismatchError, RankIncompatibleError
from text_embedder.core.logger import get_logger
from text_embedder.tensors.batch import Batch
from text_embedder.tensors.dtypes import cast_array, zeros

logger = get_logger(__name__)


@dataclass(frozen=True)
class InputSpec:
    """
    One input as declared by the model.

    Attributes:
        name         : Input name in the model graph.
        element_type : Declared ONNX type string, e.g. ``"tensor(int64)"``.
        shape        : Axis extents; a negative value marks a dynamic axis.
    """

    name: str
    element_type: str
    shape: Tuple[int, ...]

    @property
    def rank(self) -> int:
        return len(self.shape)


# ── Shape resolution ───────────────────────────────────────────────────────────

def resolve_shape(declared: Sequence[int], fallback: Sequence[int]) -> List[int]:
    """
    Merge declared extents with fallback values.

    Fixed extents are kept, dynamic ones take the fallback value. When the
    declared rank differs from the fallback rank the fallback is used as is.
    """
    if len(declared) != len(fallback):
        return list(fallback)
    return [dim if dim >= 0 else fb for dim, fb in zip(declared, fallback)]


def resolve_past_kv_shape(declared: Sequence[int], batch_size: int) -> List[int]:
    """
    Shape of an empty key/value cache input.

    Dynamic axis 0 is the batch, the axis second from last is the cached
    sequence length (0 — nothing cached yet) and any other dynamic axis is 1.
    """
    rank = len(declared)
    resolved = []
    for idx, dim in enumerate(declared):
        if dim >= 0:
            resolved.append(dim)
        elif idx == 0:
            resolved.append(batch_size)
        elif idx == max(rank - 2, 0):
            resolved.append(0)
        else:
            resolved.append(1)
    return resolved


# ── Synthesizer ────────────────────────────────────────────────────────────────

class InputSynthesizer:
    """
    Builds the complete named input set for one batch.

    Usage
    -----
    >>> inputs = InputSynthesizer(batch).synthesize(session.list_declared_inputs())
    """

    def __init__(
        self,
        batch: Batch,
        overrides: Optional[Mapping[str, np.ndarray]] = None,
    ) -> None:
        """
        Args:
            batch     : The padded batch produced by ``build_batch``.
            overrides : Caller-supplied data for specific inputs (e.g. a
                        task id); cast to the declared type, never reshaped.
        """
        self._batch = batch
        self._overrides = dict(overrides or {})

    # ── Public API ─────────────────────────────────────────────────────────────

    def synthesize(self, specs: Sequence[InputSpec]) -> Dict[str, np.ndarray]:
        """
        Return one tensor per declared input, keyed by input name.

        Raises:
            BatchSizeMismatchError : ``input_ids`` declares a fixed batch size
                                     different from the actual one.
            RankIncompatibleError  : A rank-1 input was declared for batch > 1.
            UnsupportedDtypeError  : A declared element type has no cast rule.
            InvalidShapeError      : Fixed extents cannot hold the data.
        """
        self._check_batch_dimension(specs)

        inputs: Dict[str, np.ndarray] = {}
        for spec in specs:
            tensor = self._build(spec)
            logger.debug(
                "Synthesized input '%s' — shape=%s dtype=%s",
                spec.name,
                tensor.shape,
                tensor.dtype,
            )
            inputs[spec.name] = tensor
        return inputs

    # ── Internals ──────────────────────────────────────────────────────────────

    def _check_batch_dimension(self, specs: Sequence[InputSpec]) -> None:
        batch_size = self._batch.batch_size
        for spec in specs:
            if spec.name != INPUT_IDS:
                continue
            if spec.shape and spec.shape[0] > 0 and spec.shape[0] != batch_size:
                raise BatchSizeMismatchError(
                    f"Batch size mismatch for input_ids: model expects "
                    f"{spec.shape[0]}, got {batch_size}"
                )
            return

    def _build(self, spec: InputSpec) -> np.ndarray:
        name = spec.name
        if name in self._overrides:
            value = np.asarray(self._overrides[name])
            return cast_array(value, spec.element_type, value.shape)
        if name == INPUT_IDS:
            return self._input_ids(spec)
        if name == ATTENTION_MASK:
            return self._attention_mask(spec)
        if name in (POSITION_IDS, CACHE_POSITION):
            return self._positions(spec)
        if name == TOKEN_TYPE_IDS:
            batch_size, max_len = self._batch.batch_size, self._batch.max_len
            return zeros(spec.element_type, resolve_shape(spec.shape, [batch_size, max_len]))
        if name.startswith(PAST_KEY_VALUES_PREFIX):
            shape = resolve_past_kv_shape(spec.shape, self._batch.batch_size)
            return zeros(spec.element_type, shape)
        return zeros(spec.element_type, resolve_shape(spec.shape, self._generic_fallback(spec)))

    def _input_ids(self, spec: InputSpec) -> np.ndarray:
        batch = self._batch
        shape = resolve_shape(spec.shape, [batch.batch_size, batch.max_len])
        return cast_array(batch.input_ids, spec.element_type, shape)

    def _attention_mask(self, spec: InputSpec) -> np.ndarray:
        batch = self._batch
        batch_size, max_len = batch.batch_size, batch.max_len

        if spec.rank == 1:
            self._require_single_row(spec)
            shape = resolve_shape(spec.shape, [max_len])
            return cast_array(batch.attention_mask[0], spec.element_type, shape)

        if spec.rank == 4:
            # Every query position sees the same key mask for its row.
            shape = resolve_shape(spec.shape, [batch_size, 1, max_len, max_len])
            rows = [np.tile(mask.astype(np.int64), max_len) for mask in batch.pooling_masks]
            return cast_array(np.concatenate(rows), spec.element_type, shape)

        shape = resolve_shape(spec.shape, [batch_size, max_len])
        return cast_array(batch.attention_mask, spec.element_type, shape)

    def _positions(self, spec: InputSpec) -> np.ndarray:
        batch_size, max_len = self._batch.batch_size, self._batch.max_len
        positions = np.arange(max_len, dtype=np.int64)

        if spec.rank == 1:
            self._require_single_row(spec)
            return cast_array(positions, spec.element_type, resolve_shape(spec.shape, [max_len]))

        shape = resolve_shape(spec.shape, [batch_size, max_len])
        return cast_array(np.tile(positions, batch_size), spec.element_type, shape)

    def _generic_fallback(self, spec: InputSpec) -> List[int]:
        if spec.rank == 1:
            return [self._batch.max_len]
        if spec.rank == 2:
            return [self._batch.batch_size, self._batch.max_len]
        return [1] * spec.rank

    def _require_single_row(self, spec: InputSpec) -> None:
        if self._batch.batch_size > 1:
            raise RankIncompatibleError(
                f"{spec.name} rank 1 is not batch-compatible "
                f"(batch size {self._batch.batch_size})"
            )


def synthesize_inputs(
    specs: Sequence[InputSpec],
    batch: Batch,
    overrides: Optional[Mapping[str, np.ndarray]] = None,
) -> Dict[str, np.ndarray]:
    """Functional shortcut for ``InputSynthesizer(batch, overrides).synthesize(specs)``."""
    return InputSynthesizer(batch, overrides).synthesize(specs)
