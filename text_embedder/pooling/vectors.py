"""
text_embedder/pooling/vectors.py

Vector maths shared by the pooling layer and by callers comparing
embeddings.
"""

from __future__ import annotations

from typing import Sequence, Union

import numpy as np

from text_embedder.core.constants import NORM_EPSILON

ArrayLike = Union[np.ndarray, Sequence[float]]


def normalize(vector: ArrayLike) -> np.ndarray:
    """
    L2-normalise ``vector``.

    The norm is floored at ``NORM_EPSILON`` so a zero vector comes back as
    zeros instead of NaN.
    """
    v = np.asarray(vector, dtype=np.float32)
    norm = float(np.sqrt(np.sum(v * v, dtype=np.float32)))
    return v / max(norm, NORM_EPSILON)


def cosine_distance(a: ArrayLike, b: ArrayLike) -> float:
    """
    Return ``1 - cosine_similarity(a, b)``, with the similarity clamped to [-1, 1].

    0.0 means same direction, 1.0 orthogonal, 2.0 opposite.

    Raises:
        ValueError: The vectors differ in length or either one is all zeros.
    """
    va = np.asarray(a, dtype=np.float32)
    vb = np.asarray(b, dtype=np.float32)
    if va.shape != vb.shape:
        raise ValueError("Vectors must have the same length")

    norm_sq_a = float(np.dot(va, va))
    norm_sq_b = float(np.dot(vb, vb))
    if norm_sq_a == 0.0 or norm_sq_b == 0.0:
        raise ValueError("Cannot compute cosine distance on zero vectors")

    similarity = float(np.dot(va, vb)) / (np.sqrt(norm_sq_a) * np.sqrt(norm_sq_b))
    return 1.0 - float(np.clip(similarity, -1.0, 1.0))


def mean_pooling(token_vectors: np.ndarray, attention_mask: ArrayLike) -> np.ndarray:
    """
    Average the rows of ``token_vectors`` ``[seq_len, hidden]`` whose mask bit is set.

    Returns a zero vector of length ``hidden`` when no bit is set.
    """
    vectors = np.asarray(token_vectors, dtype=np.float32)
    keep = np.asarray(attention_mask) != 0
    count = int(keep.sum())
    if count == 0:
        return np.zeros(vectors.shape[-1], dtype=np.float32)
    return vectors[keep].sum(axis=0, dtype=np.float32) / np.float32(count)
