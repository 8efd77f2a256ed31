"""
tests/pooling/test_vectors.py

Tests for normalize / cosine_distance / mean_pooling.
"""

import math

import numpy as np
import pytest

from text_embedder.pooling.vectors import cosine_distance, mean_pooling, normalize


class TestNormalize:

    @pytest.mark.parametrize(
        "vector",
        [[3.0, 4.0], [1e-6, 0.0, 0.0], [-2.0, 5.0, 7.5, 0.1], [1e6] * 8],
    )
    def test_nonzero_vectors_become_unit_length(self, vector) -> None:
        out = normalize(vector)

        assert abs(float(np.linalg.norm(out)) - 1.0) < 1e-3

    def test_zero_vector_stays_finite(self) -> None:
        out = normalize([0.0, 0.0, 0.0])

        assert np.isfinite(out).all()
        assert out.tolist() == [0.0, 0.0, 0.0]

    def test_returns_float32(self) -> None:
        assert normalize([1, 2, 3]).dtype == np.float32


class TestCosineDistance:

    def test_orthogonal_vectors(self) -> None:
        assert cosine_distance([1.0, 0.0], [0.0, 1.0]) > 0.9

    def test_equal_vectors(self) -> None:
        assert abs(cosine_distance([0.3, 0.4, 0.5], [0.3, 0.4, 0.5])) < 1e-6

    def test_opposite_vectors(self) -> None:
        assert math.isclose(cosine_distance([1.0, 0.0], [-1.0, 0.0]), 2.0, abs_tol=1e-6)

    def test_length_mismatch(self) -> None:
        with pytest.raises(ValueError):
            cosine_distance([1.0, 0.0], [1.0, 0.0, 0.0])

    def test_zero_vector(self) -> None:
        with pytest.raises(ValueError):
            cosine_distance([0.0, 0.0], [1.0, 0.0])


class TestMeanPooling:

    def test_only_masked_rows_are_averaged(self) -> None:
        tokens = np.array([[1.0, 2.0], [3.0, 4.0], [100.0, 100.0]])

        assert mean_pooling(tokens, [1, 1, 0]).tolist() == [2.0, 3.0]

    def test_all_zero_mask_gives_zero_vector(self) -> None:
        tokens = np.ones((4, 6), dtype=np.float32)
        out = mean_pooling(tokens, [0, 0, 0, 0])

        assert out.shape == (6,)
        assert np.isfinite(out).all()
        assert not out.any()
