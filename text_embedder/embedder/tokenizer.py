"""
text_embedder/embedder/tokenizer.py

HuggingFace ``tokenizers`` adapter.

The embedding pipeline consumes only ``encode_batch`` and
``padding_config`` (the ``TextTokenizer`` protocol). ``HuggingFaceTokenizer``
implements that on a ``tokenizer.json`` and also exposes the rest of the
tokenizer surface (single encode, decode, extra special tokens) for callers
that want to inspect what a model sees.
"""

from __future__ import annotations

from typing import List, Optional, Protocol, Sequence

from tokenizers import Tokenizer

from text_embedder.core.exceptions import ModelLoadError, TokenizationFailedError
from text_embedder.core.logger import get_logger
from text_embedder.tensors.batch import Encoding

logger = get_logger(__name__)


class TextTokenizer(Protocol):
    """What the embedding pipeline consumes from a tokenizer."""

    def encode_batch(
        self, texts: Sequence[str], add_special_tokens: bool = True
    ) -> List[Encoding]: ...

    def padding_config(self) -> Optional[int]: ...


class HuggingFaceTokenizer:
    """TextTokenizer backed by ``tokenizers.Tokenizer``."""

    def __init__(self, tokenizer: Tokenizer) -> None:
        self._tokenizer = tokenizer

    # ── Loaders ────────────────────────────────────────────────────────────────

    @classmethod
    def from_file(
        cls, path: str, special_tokens: Optional[Sequence[str]] = None
    ) -> "HuggingFaceTokenizer":
        """Load a ``tokenizer.json`` from disk."""
        try:
            tokenizer = Tokenizer.from_file(path)
        except Exception as exc:
            raise ModelLoadError(f"Failed to read tokenizer file '{path}': {exc}") from exc
        logger.info("Tokenizer loaded from '%s'", path)
        return cls._with_special_tokens(tokenizer, special_tokens)

    @classmethod
    def from_json(
        cls, json: str, special_tokens: Optional[Sequence[str]] = None
    ) -> "HuggingFaceTokenizer":
        """Load a tokenizer from its JSON definition."""
        try:
            tokenizer = Tokenizer.from_str(json)
        except Exception as exc:
            raise ModelLoadError(f"Failed to load tokenizer: {exc}") from exc
        return cls._with_special_tokens(tokenizer, special_tokens)

    @classmethod
    def from_bytes(
        cls, data: bytes, special_tokens: Optional[Sequence[str]] = None
    ) -> "HuggingFaceTokenizer":
        """Load a tokenizer from UTF-8 encoded JSON bytes."""
        try:
            json = data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ModelLoadError(f"Tokenizer bytes are not valid UTF-8 JSON: {exc}") from exc
        return cls.from_json(json, special_tokens)

    @classmethod
    def _with_special_tokens(
        cls, tokenizer: Tokenizer, special_tokens: Optional[Sequence[str]]
    ) -> "HuggingFaceTokenizer":
        adapter = cls(tokenizer)
        if special_tokens:
            adapter.add_special_tokens(special_tokens)
        return adapter

    # ── Vocabulary ─────────────────────────────────────────────────────────────

    def add_special_tokens(self, tokens: Sequence[str]) -> int:
        """Register extra special tokens; returns how many were actually added."""
        if not tokens:
            return 0
        return self._tokenizer.add_special_tokens(list(tokens))

    def padding_config(self) -> Optional[int]:
        """Pad id from the tokenizer's padding configuration, if padding is set."""
        padding = self._tokenizer.padding
        if not padding:
            return None
        return int(padding["pad_id"])

    # ── Encoding ───────────────────────────────────────────────────────────────

    def encode(self, text: str, add_special_tokens: bool = True) -> Encoding:
        try:
            encoding = self._tokenizer.encode(text, add_special_tokens=add_special_tokens)
        except Exception as exc:
            raise TokenizationFailedError(f"Encode failed: {exc}") from exc
        return Encoding.from_tokenizers(encoding)

    def encode_batch(
        self, texts: Sequence[str], add_special_tokens: bool = True
    ) -> List[Encoding]:
        try:
            encodings = self._tokenizer.encode_batch(
                list(texts), add_special_tokens=add_special_tokens
            )
        except Exception as exc:
            raise TokenizationFailedError(f"Encode batch failed: {exc}") from exc
        return [Encoding.from_tokenizers(e) for e in encodings]

    # ── Decoding ───────────────────────────────────────────────────────────────

    def decode(self, ids: Sequence[int], skip_special_tokens: bool = True) -> str:
        try:
            return self._tokenizer.decode(list(ids), skip_special_tokens=skip_special_tokens)
        except Exception as exc:
            raise TokenizationFailedError(f"Decode failed: {exc}") from exc

    def decode_batch(
        self, batch_ids: Sequence[Sequence[int]], skip_special_tokens: bool = True
    ) -> List[str]:
        try:
            return self._tokenizer.decode_batch(
                [list(ids) for ids in batch_ids], skip_special_tokens=skip_special_tokens
            )
        except Exception as exc:
            raise TokenizationFailedError(f"Decode batch failed: {exc}") from exc
