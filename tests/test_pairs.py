"""
Tests for pair enumeration.
"""

import pytest

from recorddedup.core.detection.exceptions import InvalidInputError
from recorddedup.core.detection.pairs import enumerate_pairs, iter_batches, pair_count


class TestEnumeratePairs:
    """Test the pair enumerator."""

    @pytest.mark.parametrize("n", [0, 1, 2, 3, 7, 25])
    def test_count_and_distinctness(self, n):
        pairs = list(enumerate_pairs(n))
        assert len(pairs) == n * (n - 1) // 2 == pair_count(n)
        assert len(set(pairs)) == len(pairs)
        assert all(0 <= i < j < n for i, j in pairs)

    def test_order(self):
        """Test outer index ascending, then inner index ascending."""
        assert list(enumerate_pairs(4)) == [(0, 1), (0, 2), (0, 3), (1, 2), (1, 3), (2, 3)]

    def test_restartable(self):
        assert list(enumerate_pairs(6)) == list(enumerate_pairs(6))

    def test_lazy(self):
        """Test that pairs are produced on demand."""
        pairs = enumerate_pairs(100_000)
        assert next(pairs) == (0, 1)
        assert next(pairs) == (0, 2)

    def test_negative_count(self):
        with pytest.raises(InvalidInputError):
            list(enumerate_pairs(-1))
        with pytest.raises(InvalidInputError):
            pair_count(-1)


class TestIterBatches:
    """Test splitting pairs into batches."""

    def test_batches_cover_all_pairs_in_order(self):
        batches = list(iter_batches(5, 3))
        assert [len(batch) for batch in batches] == [3, 3, 3, 1]
        assert [pair for batch in batches for pair in batch] == list(enumerate_pairs(5))

    def test_no_pairs(self):
        assert list(iter_batches(1, 10)) == []

    def test_invalid_batch_size(self):
        with pytest.raises(InvalidInputError):
            list(iter_batches(5, 0))
