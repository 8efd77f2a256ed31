"""text_embedder/embedder/__init__.py — public API of the embedder package."""

from text_embedder.embedder.base import Embedder
from text_embedder.embedder.families import POLICIES, FamilyPolicy, ModelFamily, get_policy
from text_embedder.embedder.family_embedders import (
    BgeEmbedder,
    GemmaEmbedder,
    JinaV3Embedder,
    MiniLmEmbedder,
    Qwen3Embedder,
    embedder_for,
)
from text_embedder.embedder.onnx_embedder import OnnxEmbedder
from text_embedder.embedder.runtime import EmbedderOptions, OnnxSession
from text_embedder.embedder.tokenizer import HuggingFaceTokenizer

__all__ = [
    "Embedder",
    "OnnxEmbedder",
    "BgeEmbedder",
    "MiniLmEmbedder",
    "JinaV3Embedder",
    "GemmaEmbedder",
    "Qwen3Embedder",
    "embedder_for",
    "ModelFamily",
    "FamilyPolicy",
    "POLICIES",
    "get_policy",
    "EmbedderOptions",
    "OnnxSession",
    "HuggingFaceTokenizer",
]
