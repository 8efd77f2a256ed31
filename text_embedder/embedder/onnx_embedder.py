"""
text_embedder/embedder/onnx_embedder.py

Generic embedding pipeline shared by every model family.

    texts
      └─ tokenizer.encode_batch()           → [Encoding]
           └─ build_batch()                 → Batch (rectangular ids / masks)
                └─ InputSynthesizer         → {name: tensor} for every declared input
                     └─ session.run()       → {name: output}
                          └─ extract_embeddings() → one vector per text
                               └─ normalize()     (unless the family returns raw vectors)

Family subclasses only pick a FamilyPolicy; see family_embedders.py.
An instance owns its session and tokenizer and is not safe to share
between threads — use one embedder per worker.
"""

from __future__ import annotations

from typing import ClassVar, Dict, List, Mapping, Optional

import numpy as np

from text_embedder.core.config import settings
from text_embedder.core.exceptions import (
    EmbeddingError,
    InferenceError,
    TokenizationFailedError,
)
from text_embedder.core.logger import get_logger
from text_embedder.embedder.base import Embedder
from text_embedder.embedder.families import FamilyPolicy
from text_embedder.embedder.runtime import EmbedderOptions, InferenceSession, OnnxSession
from text_embedder.embedder.tokenizer import HuggingFaceTokenizer, TextTokenizer
from text_embedder.pooling.selector import extract_embeddings
from text_embedder.pooling.vectors import normalize
from text_embedder.tensors.batch import Batch, build_batch
from text_embedder.tensors.synthesizer import InputSynthesizer

logger = get_logger(__name__)


class OnnxEmbedder(Embedder):
    """
    Embedder driving an ONNX model through a tokenizer and an inference session.

    Subclasses set ``policy``. Construct with ``create`` to load files, or
    pass a ready session and tokenizer to ``__init__``.
    """

    policy: ClassVar[FamilyPolicy]

    def __init__(
        self,
        session: InferenceSession,
        tokenizer: TextTokenizer,
        add_special_tokens: bool | None = None,
    ) -> None:
        """
        Args:
            session            : Execution engine for the model.
            tokenizer          : Tokenizer matching the model's vocabulary.
            add_special_tokens : Let the tokenizer add BOS/CLS/SEP tokens.
                                 Defaults to ``settings.add_special_tokens``.
        """
        self._session = session
        self._tokenizer = tokenizer
        self._add_special_tokens = (
            settings.add_special_tokens if add_special_tokens is None else add_special_tokens
        )

    @classmethod
    def create(
        cls,
        model_path: str,
        tokenizer_path: str,
        options: EmbedderOptions | None = None,
    ) -> "OnnxEmbedder":
        """
        Load a model and its ``tokenizer.json`` from disk.

        Raises:
            ModelLoadError: Either file could not be loaded.
        """
        options = options or EmbedderOptions()
        logger.info(
            "Creating %s embedder — model=%s tokenizer=%s",
            cls.policy.family.value,
            model_path,
            tokenizer_path,
        )
        tokenizer = HuggingFaceTokenizer.from_file(tokenizer_path)
        session = OnnxSession.from_file(model_path, options)
        return cls(session, tokenizer, add_special_tokens=options.add_special_tokens)

    # ── Prompt formatting ──────────────────────────────────────────────────────

    @classmethod
    def format_query(cls, text: str) -> str:
        return cls.policy.format_query(text)

    @classmethod
    def format_document(cls, text: str) -> str:
        return cls.policy.format_document(text)

    # ── Embedder interface ─────────────────────────────────────────────────────

    def embed(self, texts: List[str]) -> List[List[float]]:
        """Encode texts. Returns [] for empty input."""
        return self._embed(texts)

    # ── Pipeline ───────────────────────────────────────────────────────────────

    def _embed(
        self,
        texts: List[str],
        overrides: Optional[Mapping[str, np.ndarray]] = None,
    ) -> List[List[float]]:
        if not texts:
            return []

        batch = self._tokenize(texts)
        if batch.is_empty:
            logger.debug("All %d input(s) tokenized to nothing.", batch.batch_size)
            return [[] for _ in range(batch.batch_size)]

        logger.debug(
            "Embedding batch — %d row(s) × %d token(s)", batch.batch_size, batch.max_len
        )
        specs = self._session.list_declared_inputs()
        inputs = InputSynthesizer(batch, overrides).synthesize(specs)
        outputs = self._run(inputs)

        policy = self.policy
        vectors = extract_embeddings(
            outputs,
            batch_size=batch.batch_size,
            masks=batch.pooling_masks,
            pooled_names=policy.pooled_outputs,
            strategy=policy.pooling,
            prefer_token_output=policy.prefer_token_output,
            strict_output_rank=policy.strict_output_rank,
        )
        if policy.normalize_output:
            vectors = [normalize(v) for v in vectors]
        return [np.asarray(v, dtype=np.float32).tolist() for v in vectors]

    def _tokenize(self, texts: List[str]) -> Batch:
        try:
            encodings = self._tokenizer.encode_batch(
                texts, add_special_tokens=self._add_special_tokens
            )
            pad_id = self._tokenizer.padding_config()
        except TokenizationFailedError:
            raise
        except Exception as exc:
            raise TokenizationFailedError(f"Tokenization failed: {exc}") from exc
        return build_batch(encodings, pad_id=pad_id or 0)

    def _run(self, inputs: Dict[str, np.ndarray]) -> Dict[str, np.ndarray]:
        try:
            return self._session.run(inputs)
        except EmbeddingError:
            raise
        except Exception as exc:
            raise InferenceError(f"Model inference failed: {exc}") from exc
