"""text_embedder/tensors/__init__.py — public API of the tensors package."""

from text_embedder.tensors.batch import Batch, Encoding, build_batch, fit_mask
from text_embedder.tensors.dtypes import ElementType, cast_array, zeros
from text_embedder.tensors.synthesizer import InputSpec, InputSynthesizer, synthesize_inputs

__all__ = [
    "Batch",
    "Encoding",
    "build_batch",
    "fit_mask",
    "ElementType",
    "cast_array",
    "zeros",
    "InputSpec",
    "InputSynthesizer",
    "synthesize_inputs",
]
