"""
Threshold filtering and ordering of scored pairs.
"""

from typing import List, Optional, Tuple

from .models import DuplicatePair, RecordT


class ThresholdFilter:
    """Keeps scored pairs that reach the threshold and orders the survivors."""

    def __init__(self, threshold: int):
        self.threshold = threshold
        self._pairs: List[DuplicatePair] = []

    def accept(self, index1: int, index2: int, record1: RecordT, record2: RecordT,
               similarity: int) -> Optional[DuplicatePair[RecordT]]:
        """
        Offer one scored pair.

        Returns:
            The DuplicatePair when it meets the threshold, otherwise None
        """
        if similarity < self.threshold:
            return None
        pair = DuplicatePair(index1, index2, record1, record2, similarity)
        self._pairs.append(pair)
        return pair

    def __len__(self) -> int:
        return len(self._pairs)

    def results(self) -> List[DuplicatePair[RecordT]]:
        """Pairs sorted by similarity descending, then index1 and index2 ascending."""
        return sorted(self._pairs, key=_ordering_key)


def _ordering_key(pair: DuplicatePair) -> Tuple[int, int, int]:
    return (-pair.similarity, pair.index1, pair.index2)
