"""
Resolution of duplicate pairs into the records to keep.

Within every pair the earlier record survives and the later one (index2) is
dropped. Pairs are not chained into clusters: with pairs (0, 1) and (1, 2)
both records 1 and 2 are dropped even if 0 and 2 were never matched.
"""

from typing import Iterable, List, Sequence, Set

from .models import DuplicatePair, RecordT


def loser_indices(pairs: Iterable[DuplicatePair]) -> Set[int]:
    """Indices marked for removal by at least one pair."""
    return {pair.index2 for pair in pairs}


def resolve_duplicates(records: Sequence[RecordT],
                       pairs: Iterable[DuplicatePair]) -> List[RecordT]:
    """
    Drop the later record of every duplicate pair.

    Args:
        records: Records in their original order
        pairs: Duplicate pairs found over those records

    Returns:
        The surviving records, in original order
    """
    losers = loser_indices(pairs)
    return [record for index, record in enumerate(records) if index not in losers]
