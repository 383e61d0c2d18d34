"""
Enumeration of record index pairs.
"""

from itertools import islice
from typing import Iterator, List, Tuple

from .exceptions import InvalidInputError


def pair_count(n: int) -> int:
    """Number of unordered pairs over n records."""
    if n < 0:
        raise InvalidInputError(f"record count must be non-negative, got {n}")
    return n * (n - 1) // 2


def enumerate_pairs(n: int) -> Iterator[Tuple[int, int]]:
    """
    Yield every index pair (i, j) with 0 <= i < j < n.

    Pairs come out with the outer index ascending, then the inner index
    ascending: (0, 1), (0, 2), ..., (0, n-1), (1, 2), ...  Each call returns
    a fresh generator producing the same sequence.
    """
    if n < 0:
        raise InvalidInputError(f"record count must be non-negative, got {n}")
    for i in range(n):
        for j in range(i + 1, n):
            yield i, j


def iter_batches(n: int, batch_size: int) -> Iterator[List[Tuple[int, int]]]:
    """Split the pairs over n records into consecutive lists of batch_size."""
    if batch_size < 1:
        raise InvalidInputError(f"batch_size must be positive, got {batch_size}")
    pairs = enumerate_pairs(n)
    while True:
        batch = list(islice(pairs, batch_size))
        if not batch:
            return
        yield batch
