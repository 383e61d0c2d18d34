"""
Tests for resolving duplicate pairs into surviving records.
"""

from recorddedup.core.detection.engine import DuplicateDetectionEngine
from recorddedup.core.detection.models import DuplicatePair
from recorddedup.core.detection.resolver import loser_indices, resolve_duplicates


def pair(i, j, similarity=90):
    return DuplicatePair(i, j, f"r{i}", f"r{j}", similarity)


class TestResolveDuplicates:
    """Test the keep-first policy."""

    def test_no_pairs_keeps_everything(self):
        records = ["r0", "r1", "r2"]
        assert resolve_duplicates(records, []) == records

    def test_later_record_removed(self):
        assert resolve_duplicates(["r0", "r1", "r2"], [pair(0, 2)]) == ["r0", "r1"]

    def test_chained_pairs_are_not_transitive(self):
        """Test that (0, 1) and (1, 2) remove both 1 and 2."""
        records = ["r0", "r1", "r2"]
        assert resolve_duplicates(records, [pair(0, 1), pair(1, 2)]) == ["r0"]

    def test_repeated_loser_counted_once(self):
        records = ["r0", "r1", "r2", "r3"]
        pairs = [pair(0, 3), pair(1, 3), pair(2, 3)]
        assert loser_indices(pairs) == {3}
        assert resolve_duplicates(records, pairs) == ["r0", "r1", "r2"]

    def test_order_preserved(self):
        records = [f"r{i}" for i in range(6)]
        assert resolve_duplicates(records, [pair(1, 4), pair(0, 2)]) == ["r0", "r1", "r3", "r5"]

    def test_input_not_modified(self):
        records = ["r0", "r1"]
        resolve_duplicates(records, [pair(0, 1)])
        assert records == ["r0", "r1"]

    def test_survivor_count(self, mixed_records, title_config):
        """Test survivors == records - distinct losers, and no survivor is a loser."""
        results = DuplicateDetectionEngine(title_config).detect_duplicates(mixed_records, ["Title"], 80)
        survivors = resolve_duplicates(mixed_records, results.pairs)
        losers = {p.index2 for p in results.pairs}

        assert results.pairs
        assert len(survivors) == len(mixed_records) - len(losers)
        surviving_ids = {int(record.get("Id")) for record in survivors}
        assert not surviving_ids & losers
        assert len(survivors) == results.clean_records
