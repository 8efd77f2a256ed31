"""
text_embedder/tensors/dtypes.py

Element-type aware tensor construction.

A model declares the element type of each input as an ONNX type string
(``"tensor(int64)"``, ``"tensor(float16)"``, …). The synthesizer always
works with int64 data; this module turns that logical data into an array
of exactly the declared type.

The set of supported kinds is closed: extending it means adding an
``ElementType`` member and its numpy dtype, nothing else.
"""

from __future__ import annotations

from enum import Enum
from math import prod
from typing import Sequence, Union

import ml_dtypes
import numpy as np

from text_embedder.core.exceptions import InvalidShapeError, UnsupportedDtypeError


class ElementType(str, Enum):
    """Tensor element kinds an input can be synthesized for."""

    INT8 = "tensor(int8)"
    INT16 = "tensor(int16)"
    INT32 = "tensor(int32)"
    INT64 = "tensor(int64)"
    UINT8 = "tensor(uint8)"
    UINT16 = "tensor(uint16)"
    UINT32 = "tensor(uint32)"
    UINT64 = "tensor(uint64)"
    BOOL = "tensor(bool)"
    FLOAT16 = "tensor(float16)"
    BFLOAT16 = "tensor(bfloat16)"
    FLOAT32 = "tensor(float)"
    FLOAT64 = "tensor(double)"

    @classmethod
    def parse(cls, declared: Union[str, "ElementType"]) -> "ElementType":
        """
        Resolve a declared type string to an ElementType.

        Raises:
            UnsupportedDtypeError: For strings, sequences, maps and any other
                                   kind without a numeric representation.
        """
        if isinstance(declared, ElementType):
            return declared
        try:
            return cls(declared)
        except ValueError:
            raise UnsupportedDtypeError(
                f"Unsupported tensor element type: {declared!r}"
            ) from None

    @property
    def numpy_dtype(self) -> np.dtype:
        return np.dtype(_NUMPY_DTYPES[self])


_NUMPY_DTYPES = {
    ElementType.INT8: np.int8,
    ElementType.INT16: np.int16,
    ElementType.INT32: np.int32,
    ElementType.INT64: np.int64,
    ElementType.UINT8: np.uint8,
    ElementType.UINT16: np.uint16,
    ElementType.UINT32: np.uint32,
    ElementType.UINT64: np.uint64,
    ElementType.BOOL: np.bool_,
    ElementType.FLOAT16: np.float16,
    ElementType.BFLOAT16: ml_dtypes.bfloat16,
    ElementType.FLOAT32: np.float32,
    ElementType.FLOAT64: np.float64,
}

_FLOAT_TYPES = frozenset(
    {ElementType.FLOAT16, ElementType.BFLOAT16, ElementType.FLOAT32, ElementType.FLOAT64}
)


def cast_array(
    data: Union[np.ndarray, Sequence[int]],
    element_type: Union[str, ElementType],
    shape: Sequence[int],
) -> np.ndarray:
    """
    Build a tensor of ``shape`` and the declared element type from int data.

    Integer targets wrap exactly like a C cast, bool maps nonzero to True,
    and half-precision targets go through float32 first.

    Raises:
        UnsupportedDtypeError: The declared type has no cast rule.
        InvalidShapeError    : ``prod(shape)`` differs from the data length.
    """
    kind = ElementType.parse(element_type)
    flat = np.asarray(data, dtype=np.int64).reshape(-1)

    expected = prod(shape)
    if expected != flat.size:
        raise InvalidShapeError(
            f"Input data length mismatch: expected {expected}, got {flat.size}"
        )

    if kind is ElementType.BOOL:
        converted = flat != 0
    elif kind in _FLOAT_TYPES:
        converted = flat.astype(np.float32).astype(kind.numpy_dtype)
    else:
        converted = flat.astype(kind.numpy_dtype)
    return converted.reshape(tuple(shape))


def zeros(element_type: Union[str, ElementType], shape: Sequence[int]) -> np.ndarray:
    """Return a zero-filled (False for bool) tensor of the declared type."""
    kind = ElementType.parse(element_type)
    return np.zeros(tuple(shape), dtype=kind.numpy_dtype)
