"""text_embedder/pooling/__init__.py — public API of the pooling package."""

from text_embedder.pooling.selector import (
    OutputTensor,
    extract_embeddings,
    pool_output,
    select_output,
)
from text_embedder.pooling.strategies import PoolingStrategy, pool_tokens
from text_embedder.pooling.vectors import cosine_distance, mean_pooling, normalize

__all__ = [
    "OutputTensor",
    "extract_embeddings",
    "pool_output",
    "select_output",
    "PoolingStrategy",
    "pool_tokens",
    "cosine_distance",
    "mean_pooling",
    "normalize",
]
