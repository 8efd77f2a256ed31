"""
tests/conftest.py

Shared pytest fixtures available to all test modules.

The execution engine and the tokenizer are replaced with small in-memory
fakes so the whole pipeline runs without model files.
Fixtures defined here are auto-discovered by pytest — no import needed.
"""

from typing import Callable, Dict, List, Mapping, Optional, Sequence

import numpy as np
import pytest

from text_embedder.tensors.batch import Encoding
from text_embedder.tensors.synthesizer import InputSpec


# ── Fakes ──────────────────────────────────────────────────────────────────────

class FakeTokenizer:
    """
    Whitespace tokenizer: every word becomes one id (10 + word length).
    An empty string encodes to an empty sequence.
    """

    def __init__(self, pad_id: Optional[int] = None) -> None:
        self.pad_id = pad_id
        self.calls: List[List[str]] = []

    def encode_batch(self, texts: Sequence[str], add_special_tokens: bool = True) -> List[Encoding]:
        self.calls.append(list(texts))
        encodings = []
        for text in texts:
            ids = tuple(10 + len(word) for word in text.split())
            encodings.append(Encoding(ids=ids, attention_mask=(1,) * len(ids)))
        return encodings

    def padding_config(self) -> Optional[int]:
        return self.pad_id


class FakeSession:
    """
    Inference session that declares ``specs`` and answers ``run`` with
    ``respond(inputs)``. The last inputs received are kept for assertions.
    """

    def __init__(
        self,
        specs: Sequence[InputSpec],
        respond: Callable[[Mapping[str, np.ndarray]], Dict[str, np.ndarray]],
    ) -> None:
        self._specs = list(specs)
        self._respond = respond
        self.last_inputs: Dict[str, np.ndarray] = {}

    def list_declared_inputs(self) -> List[InputSpec]:
        return list(self._specs)

    def run(self, inputs: Mapping[str, np.ndarray]) -> Dict[str, np.ndarray]:
        self.last_inputs = dict(inputs)
        return self._respond(inputs)


# ── Fixtures ───────────────────────────────────────────────────────────────────

@pytest.fixture
def encoder_specs() -> List[InputSpec]:
    """BERT-style signature: ids, mask and token types, all dynamic."""
    return [
        InputSpec("input_ids", "tensor(int64)", (-1, -1)),
        InputSpec("attention_mask", "tensor(int64)", (-1, -1)),
        InputSpec("token_type_ids", "tensor(int64)", (-1, -1)),
    ]


@pytest.fixture
def fake_tokenizer() -> FakeTokenizer:
    return FakeTokenizer()


@pytest.fixture
def make_session() -> Callable[..., FakeSession]:
    """
    Factory for FakeSession.

    Usage:
        session = make_session(specs, lambda inputs: {"sentence_embedding": ...})
    """
    return FakeSession


@pytest.fixture
def make_tokenizer() -> Callable[..., FakeTokenizer]:
    """Factory for FakeTokenizer with an optional pad id."""
    return FakeTokenizer
