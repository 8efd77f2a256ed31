"""
tests/embedder/test_runtime.py

Tests for EmbedderOptions and the OnnxSession adapter.

The onnxruntime session itself is replaced with a MagicMock; only option
translation and input/output bookkeeping are checked here.
"""

from types import SimpleNamespace
from unittest.mock import MagicMock

import numpy as np
import onnxruntime as ort
import pytest

from text_embedder.core.exceptions import ModelLoadError
from text_embedder.embedder.runtime import EmbedderOptions, OnnxSession


# ── Helpers ────────────────────────────────────────────────────────────────────

def node(name: str, type_: str = "tensor(int64)", shape=None) -> SimpleNamespace:
    return SimpleNamespace(name=name, type=type_, shape=shape)


def fake_ort_session(inputs, output_names) -> MagicMock:
    session = MagicMock()
    session.get_inputs.return_value = inputs
    session.get_outputs.return_value = [node(n, "tensor(float)") for n in output_names]
    return session


# ── Options ────────────────────────────────────────────────────────────────────

class TestEmbedderOptions:

    @pytest.mark.parametrize(
        "level, expected",
        [
            (0, ort.GraphOptimizationLevel.ORT_DISABLE_ALL),
            (1, ort.GraphOptimizationLevel.ORT_ENABLE_BASIC),
            (2, ort.GraphOptimizationLevel.ORT_ENABLE_EXTENDED),
            (3, ort.GraphOptimizationLevel.ORT_ENABLE_ALL),
            (9, ort.GraphOptimizationLevel.ORT_ENABLE_ALL),
        ],
    )
    def test_optimization_levels(self, level, expected) -> None:
        opts = EmbedderOptions(optimization_level=level).to_session_options()

        assert opts.graph_optimization_level == expected

    def test_defaults_use_single_intra_thread(self) -> None:
        opts = EmbedderOptions().to_session_options()

        assert opts.intra_op_num_threads == 1

    def test_inter_threads_enable_parallel_execution(self) -> None:
        opts = EmbedderOptions(inter_threads=2).to_session_options()

        assert opts.inter_op_num_threads == 2
        assert opts.execution_mode == ort.ExecutionMode.ORT_PARALLEL

    def test_explicit_sequential_execution_wins(self) -> None:
        opts = EmbedderOptions(inter_threads=2, parallel_execution=False).to_session_options()

        assert opts.execution_mode == ort.ExecutionMode.ORT_SEQUENTIAL

    def test_non_positive_thread_counts_are_ignored(self) -> None:
        opts = EmbedderOptions(intra_threads=0, inter_threads=-1).to_session_options()

        assert opts.intra_op_num_threads == 0
        assert opts.inter_op_num_threads == 0


# ── Session adapter ────────────────────────────────────────────────────────────

class TestOnnxSession:

    def test_declared_inputs_mark_symbolic_axes_dynamic(self) -> None:
        raw = fake_ort_session(
            [
                node("input_ids", shape=["batch_size", "sequence_length"]),
                node("past_key_values.0.key", "tensor(float16)", [None, 8, "past", 64]),
                node("task_id", shape=[]),
            ],
            ["last_hidden_state"],
        )

        specs = OnnxSession(raw).list_declared_inputs()

        assert specs[0].shape == (-1, -1)
        assert specs[1].shape == (-1, 8, -1, 64)
        assert specs[1].element_type == "tensor(float16)"
        assert specs[2].shape == ()

    def test_run_returns_named_outputs(self) -> None:
        raw = fake_ort_session([node("input_ids")], ["last_hidden_state", "pooler_output"])
        hidden, pooled = np.zeros((1, 2, 4)), np.zeros((1, 4))
        raw.run.return_value = [hidden, pooled]
        session = OnnxSession(raw)
        feed = {"input_ids": np.array([[1, 2]])}

        outputs = session.run(feed)

        raw.run.assert_called_once_with(None, feed)
        assert set(outputs) == {"last_hidden_state", "pooler_output"}
        assert outputs["pooler_output"] is pooled
        assert session.output_names == ["last_hidden_state", "pooler_output"]

    def test_from_file_missing_model(self, tmp_path) -> None:
        with pytest.raises(ModelLoadError):
            OnnxSession.from_file(str(tmp_path / "missing.onnx"))
