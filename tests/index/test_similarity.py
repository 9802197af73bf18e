"""Tests for cosine similarity."""

import numpy as np
import pytest

from visabud.index import cosine_similarity
from visabud.index.similarity import l2_normalize


class TestCosineSimilarity:
    """Tests for cosine_similarity."""

    def test_identical_vectors(self):
        assert cosine_similarity([1, 2, 3], [1, 2, 3]) == pytest.approx(1.0)

    def test_opposite_vectors(self):
        assert cosine_similarity([1, 0], [-1, 0]) == pytest.approx(-1.0)

    def test_orthogonal_vectors(self):
        assert cosine_similarity([1, 0], [0, 1]) == pytest.approx(0.0)

    def test_scale_invariant(self):
        assert cosine_similarity([1, 1], [10, 10]) == pytest.approx(1.0)

    def test_zero_vector_scores_zero(self):
        assert cosine_similarity([0, 0, 0], [1, 2, 3]) == 0.0
        assert cosine_similarity([1, 2, 3], [0, 0, 0]) == 0.0

    def test_dimension_mismatch_scores_zero(self):
        assert cosine_similarity([1, 0], [1, 0, 0]) == 0.0

    def test_non_finite_scores_zero(self):
        assert cosine_similarity([np.nan, 1.0], [1.0, 1.0]) == 0.0
        assert cosine_similarity([np.inf, 1.0], [1.0, 1.0]) == 0.0

    def test_bounds_over_random_pairs(self):
        rng = np.random.default_rng(7)
        for _ in range(200):
            a = rng.normal(size=8)
            b = rng.normal(size=8)
            score = cosine_similarity(a, b)
            assert -1.0 <= score <= 1.0


class TestL2Normalize:
    def test_unit_length(self):
        assert np.linalg.norm(l2_normalize([3, 4])) == pytest.approx(1.0)

    def test_degenerate(self):
        assert l2_normalize([]) is None
        assert l2_normalize([0, 0]) is None
