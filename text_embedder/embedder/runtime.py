"""
text_embedder/embedder/runtime.py

ONNX Runtime adapter.

The pipeline only needs two things from the execution engine — the list of
declared inputs and a ``run`` call — expressed by the ``InferenceSession``
protocol. ``OnnxSession`` implements it on top of
``onnxruntime.InferenceSession``; tests supply in-memory fakes instead.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Protocol

import numpy as np
import onnxruntime as ort
from pydantic import BaseModel, Field

from text_embedder.core.config import settings
from text_embedder.core.exceptions import ModelLoadError
from text_embedder.core.logger import get_logger
from text_embedder.tensors.synthesizer import InputSpec

logger = get_logger(__name__)


class InferenceSession(Protocol):
    """What the embedding pipeline consumes from an execution engine."""

    def list_declared_inputs(self) -> List[InputSpec]: ...

    def run(self, inputs: Mapping[str, np.ndarray]) -> Dict[str, np.ndarray]: ...


# ── Options ────────────────────────────────────────────────────────────────────

_OPTIMIZATION_LEVELS = {
    0: ort.GraphOptimizationLevel.ORT_DISABLE_ALL,
    1: ort.GraphOptimizationLevel.ORT_ENABLE_BASIC,
    2: ort.GraphOptimizationLevel.ORT_ENABLE_EXTENDED,
}


class EmbedderOptions(BaseModel):
    """
    Per-embedder runtime options. Defaults come from ``settings``.

        EmbedderOptions(intra_threads=4, optimization_level=1)
    """

    intra_threads: Optional[int] = Field(default_factory=lambda: settings.ort_intra_threads)
    inter_threads: Optional[int] = Field(default_factory=lambda: settings.ort_inter_threads)
    parallel_execution: Optional[bool] = Field(
        default_factory=lambda: settings.ort_parallel_execution
    )
    optimization_level: int = Field(
        default_factory=lambda: settings.ort_optimization_level,
        description="0 disables graph optimizations; 3 or above enables all of them.",
    )
    providers: List[str] = Field(default_factory=lambda: list(settings.ort_providers))
    add_special_tokens: bool = Field(default_factory=lambda: settings.add_special_tokens)

    def to_session_options(self) -> ort.SessionOptions:
        """Translate these options into ``onnxruntime.SessionOptions``."""
        opts = ort.SessionOptions()
        opts.graph_optimization_level = _OPTIMIZATION_LEVELS.get(
            self.optimization_level, ort.GraphOptimizationLevel.ORT_ENABLE_ALL
        )

        if self.intra_threads is not None and self.intra_threads > 0:
            opts.intra_op_num_threads = self.intra_threads

        parallel = self.parallel_execution
        if self.inter_threads is not None and self.inter_threads > 0:
            opts.inter_op_num_threads = self.inter_threads
            if parallel is None:
                parallel = True
        if parallel is not None:
            opts.execution_mode = (
                ort.ExecutionMode.ORT_PARALLEL if parallel else ort.ExecutionMode.ORT_SEQUENTIAL
            )
        return opts


# ── Session adapter ────────────────────────────────────────────────────────────

def _extent(dim: Any) -> int:
    """Declared axis extent; symbolic or unknown axes become -1 (dynamic)."""
    if isinstance(dim, int) and dim >= 0:
        return dim
    return -1


class OnnxSession:
    """InferenceSession backed by ``onnxruntime.InferenceSession``."""

    def __init__(self, session: ort.InferenceSession) -> None:
        self._session = session
        self._output_names = [o.name for o in session.get_outputs()]

    @classmethod
    def from_file(cls, model_path: str, options: EmbedderOptions | None = None) -> "OnnxSession":
        """
        Load a model file.

        Raises:
            ModelLoadError: The runtime could not create a session.
        """
        options = options or EmbedderOptions()
        logger.info("Loading ONNX model '%s' …", model_path)
        try:
            session = ort.InferenceSession(
                model_path,
                sess_options=options.to_session_options(),
                providers=options.providers,
            )
        except Exception as exc:
            raise ModelLoadError(f"Failed to load ONNX model '{model_path}': {exc}") from exc

        adapter = cls(session)
        logger.info(
            "Model '%s' loaded — inputs: %s, outputs: %s",
            model_path,
            [spec.name for spec in adapter.list_declared_inputs()],
            adapter.output_names,
        )
        return adapter

    @property
    def output_names(self) -> List[str]:
        return list(self._output_names)

    def list_declared_inputs(self) -> List[InputSpec]:
        return [
            InputSpec(
                name=node.name,
                element_type=node.type,
                shape=tuple(_extent(d) for d in (node.shape or [])),
            )
            for node in self._session.get_inputs()
        ]

    def run(self, inputs: Mapping[str, np.ndarray]) -> Dict[str, np.ndarray]:
        results = self._session.run(None, dict(inputs))
        return dict(zip(self._output_names, results))
