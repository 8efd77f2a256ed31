"""
tests/tensors/test_synthesizer.py

Tests for InputSynthesizer and the shape-resolution helpers.

Each test declares a small model signature and checks the tensors built
for it; no runtime is involved.
"""

import numpy as np
import pytest

from text_embedder.core.exceptions import (
    BatchSizeMismatchError,
    RankIncompatibleError,
    UnsupportedDtypeError,
)
from text_embedder.tensors.batch import Encoding, build_batch
from text_embedder.tensors.synthesizer import (
    InputSpec,
    resolve_past_kv_shape,
    resolve_shape,
    synthesize_inputs,
)


# ── Helpers ────────────────────────────────────────────────────────────────────

def two_row_batch():
    """Rows of length 3 and 5 → max_len 5."""
    return build_batch(
        [
            Encoding(ids=(1, 2, 3), attention_mask=(1, 1, 1)),
            Encoding(ids=(4, 5, 6, 7, 8), attention_mask=(1, 1, 1, 1, 1)),
        ]
    )


def one_row_batch():
    return build_batch([Encoding(ids=(1, 2, 3), attention_mask=(1, 1, 1))])


def spec(name: str, shape, element_type: str = "tensor(int64)") -> InputSpec:
    return InputSpec(name, element_type, tuple(shape))


# ── Shape resolution ───────────────────────────────────────────────────────────

class TestResolveShape:

    def test_dynamic_axes_take_fallback(self) -> None:
        assert resolve_shape([-1, -1], [2, 5]) == [2, 5]

    def test_fixed_axes_are_kept(self) -> None:
        assert resolve_shape([-1, 128], [2, 5]) == [2, 128]

    def test_rank_mismatch_uses_fallback(self) -> None:
        assert resolve_shape([-1, -1, -1], [2, 5]) == [2, 5]

    def test_past_kv_shape(self) -> None:
        """[batch, heads, past_seq, head_dim] with heads/head_dim fixed."""
        assert resolve_past_kv_shape([-1, 8, -1, 64], batch_size=3) == [3, 8, 0, 64]

    def test_past_kv_other_dynamic_axes_are_one(self) -> None:
        assert resolve_past_kv_shape([-1, -1, -1, -1], batch_size=2) == [2, 1, 0, 1]


# ── Synthesis ──────────────────────────────────────────────────────────────────

class TestInputSynthesizer:

    def test_every_declared_input_gets_a_tensor(self, encoder_specs) -> None:
        inputs = synthesize_inputs(encoder_specs, two_row_batch())

        assert set(inputs) == {"input_ids", "attention_mask", "token_type_ids"}

    def test_input_ids_and_mask_come_from_batch(self, encoder_specs) -> None:
        batch = two_row_batch()
        inputs = synthesize_inputs(encoder_specs, batch)

        np.testing.assert_array_equal(inputs["input_ids"], batch.input_ids)
        assert inputs["attention_mask"][0].tolist() == [1, 1, 1, 0, 0]

    def test_token_type_ids_are_zero(self, encoder_specs) -> None:
        inputs = synthesize_inputs(encoder_specs, two_row_batch())

        assert inputs["token_type_ids"].shape == (2, 5)
        assert not inputs["token_type_ids"].any()

    def test_declared_dtype_is_honoured(self) -> None:
        specs = [
            spec("input_ids", [-1, -1], "tensor(int32)"),
            spec("attention_mask", [-1, -1], "tensor(bool)"),
        ]
        inputs = synthesize_inputs(specs, two_row_batch())

        assert inputs["input_ids"].dtype == np.int32
        assert inputs["attention_mask"].dtype == np.bool_
        assert inputs["attention_mask"][0].tolist() == [True, True, True, False, False]

    def test_fixed_batch_dimension_mismatch(self) -> None:
        with pytest.raises(BatchSizeMismatchError):
            synthesize_inputs([spec("input_ids", [1, -1])], two_row_batch())

    def test_fixed_batch_dimension_match_is_accepted(self) -> None:
        inputs = synthesize_inputs([spec("input_ids", [2, -1])], two_row_batch())

        assert inputs["input_ids"].shape == (2, 5)

    def test_rank4_attention_mask_is_broadcast(self) -> None:
        batch = two_row_batch()
        inputs = synthesize_inputs([spec("attention_mask", [-1, -1, -1, -1])], batch)

        mask = inputs["attention_mask"]
        assert mask.shape == (2, 1, 5, 5)
        for row in range(2):
            for query_pos in range(5):
                np.testing.assert_array_equal(mask[row, 0, query_pos], batch.pooling_masks[row])

    def test_rank1_attention_mask_single_row(self) -> None:
        inputs = synthesize_inputs([spec("attention_mask", [-1])], one_row_batch())

        assert inputs["attention_mask"].tolist() == [1, 1, 1]

    def test_rank1_attention_mask_rejects_batches(self) -> None:
        with pytest.raises(RankIncompatibleError):
            synthesize_inputs([spec("attention_mask", [-1])], two_row_batch())

    def test_position_ids_repeat_per_row(self) -> None:
        inputs = synthesize_inputs([spec("position_ids", [-1, -1])], two_row_batch())

        assert inputs["position_ids"].tolist() == [[0, 1, 2, 3, 4]] * 2

    def test_cache_position_rank1(self) -> None:
        inputs = synthesize_inputs([spec("cache_position", [-1])], one_row_batch())

        assert inputs["cache_position"].tolist() == [0, 1, 2]

    def test_rank1_position_ids_reject_batches(self) -> None:
        with pytest.raises(RankIncompatibleError):
            synthesize_inputs([spec("position_ids", [-1])], two_row_batch())

    def test_past_key_values_are_empty_cache(self) -> None:
        specs = [spec("past_key_values.0.key", [-1, 8, -1, 64], "tensor(float)")]
        inputs = synthesize_inputs(specs, two_row_batch())

        cache = inputs["past_key_values.0.key"]
        assert cache.shape == (2, 8, 0, 64)
        assert cache.dtype == np.float32

    def test_unknown_inputs_are_zero_filled(self) -> None:
        specs = [
            spec("extra_rank1", [-1]),
            spec("extra_rank2", [-1, -1], "tensor(float16)"),
            spec("extra_rank3", [-1, 4, -1]),
        ]
        inputs = synthesize_inputs(specs, two_row_batch())

        assert inputs["extra_rank1"].shape == (5,)
        assert inputs["extra_rank2"].shape == (2, 5)
        assert inputs["extra_rank2"].dtype == np.float16
        assert inputs["extra_rank3"].shape == (1, 4, 1)
        assert not inputs["extra_rank3"].any()

    def test_override_is_cast_to_declared_type(self) -> None:
        overrides = {"task_id": np.array([4, 4])}
        inputs = synthesize_inputs([spec("task_id", [-1], "tensor(int32)")], two_row_batch(), overrides)

        assert inputs["task_id"].tolist() == [4, 4]
        assert inputs["task_id"].dtype == np.int32

    def test_unsupported_dtype_surfaces(self) -> None:
        with pytest.raises(UnsupportedDtypeError):
            synthesize_inputs([spec("prompt", [-1], "tensor(string)")], one_row_batch())
