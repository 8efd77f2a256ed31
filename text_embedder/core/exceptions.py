"""
text_embedder/core/exceptions.py

Custom exception hierarchy for the embedder.

Every failure inside ``embed`` is an ``EmbeddingError`` subclass, so callers
can catch the whole family at once or inspect the precise kind. None of
these are retried: inference is deterministic, so a failure means the
supplied data and the model's expectations disagree.
"""


class EmbedderBaseException(Exception):
    """Root exception — catch-all for any embedder-level error."""


# ── Construction exceptions ────────────────────────────────────────────────────

class ModelLoadError(EmbedderBaseException):
    """Raised when the inference session or the tokenizer cannot be created."""


# ── Embedding exceptions ───────────────────────────────────────────────────────

class EmbeddingError(EmbedderBaseException):
    """Raised when the pipeline fails to produce vectors."""


class TokenizationFailedError(EmbeddingError):
    """Raised when the tokenizer rejects the input or fails internally."""


class BatchSizeMismatchError(EmbeddingError):
    """Raised when a batch dimension disagrees with the number of inputs."""


class UnsupportedDtypeError(EmbeddingError):
    """Raised when a declared element type has no cast or synthesis rule."""


class MissingOutputTensorError(EmbeddingError):
    """Raised when inference returns no recognised pooled or per-token output."""


class InvalidShapeError(EmbeddingError):
    """Raised when a tensor shape does not fit its data or the expected rank."""


class RankIncompatibleError(EmbeddingError):
    """Raised when a declared input rank cannot hold the current batch."""


class InferenceError(EmbeddingError):
    """Raised when the execution engine fails while running the model."""


# ── Retrieval exceptions ───────────────────────────────────────────────────────

class EmptyQueryError(EmbedderBaseException):
    """Raised when an empty or whitespace-only query is submitted."""
