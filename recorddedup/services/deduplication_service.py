"""
Service layer for duplicate detection operations.
"""

import time
from collections import defaultdict
from typing import List, Dict, Any, Optional, Sequence, Tuple

from ..core.config import settings
from ..core.detection import (
    DuplicateDetectionEngine, DetectionConfig, DetectionResults, DuplicatePair,
    ConfigManager, InvalidInputError, Record, RecordKind, resolve_duplicates
)
from ..core.detection.batching import ProgressCallback
from ..core.logging import logger


class DeduplicationService:
    """Runs detection for callers holding raw rows, applying caller-side limits."""

    def __init__(self,
                 max_records: Optional[int] = None,
                 max_matches_per_record: Optional[int] = None,
                 timeout_seconds: Optional[float] = None):
        self.max_records = settings.max_records if max_records is None else max_records
        self.max_matches_per_record = (settings.max_matches_per_record
                                       if max_matches_per_record is None else max_matches_per_record)
        self.timeout_seconds = timeout_seconds
        self.config_manager = ConfigManager()
        self.logger = logger

    def build_config(self,
                     keys: Optional[Sequence[str]] = None,
                     threshold: Optional[int] = None,
                     kind: RecordKind = RecordKind.GENERAL,
                     algorithm: Optional[str] = None) -> DetectionConfig:
        """
        Build the detection configuration for one request.

        Raises:
            InvalidInputError: if the resulting configuration is invalid
        """
        config = self.config_manager.get_config_for_kind(kind, list(keys) if keys else None)
        if kind == RecordKind.GENERAL:
            config.threshold = settings.default_threshold
        if threshold is not None:
            config.threshold = threshold
        config.scorer_algorithm = algorithm or settings.scorer_algorithm
        config.batch_size = settings.default_batch_size
        config.large_pair_count = settings.large_pair_count

        errors = config.validate()
        if errors:
            raise InvalidInputError("; ".join(errors))
        return config

    def to_records(self, rows: Sequence[Dict[str, Any]]) -> List[Record]:
        """
        Convert raw rows into records.

        Raises:
            InvalidInputError: for non-mapping rows or too many rows
        """
        if not isinstance(rows, (list, tuple)):
            raise InvalidInputError("records must be a list of objects")
        if self.max_records and len(rows) > self.max_records:
            raise InvalidInputError(
                f"Too many records: {len(rows)} (limit {self.max_records})"
            )

        records = []
        for index, row in enumerate(rows):
            if not isinstance(row, dict):
                raise InvalidInputError(f"record {index} must be an object")
            records.append(Record.from_mapping(row))
        return records

    def find_duplicates(self,
                        rows: Sequence[Dict[str, Any]],
                        keys: Optional[Sequence[str]] = None,
                        threshold: Optional[int] = None,
                        kind: RecordKind = RecordKind.GENERAL,
                        algorithm: Optional[str] = None,
                        progress_callback: Optional[ProgressCallback] = None) -> DetectionResults:
        """
        Find duplicate pairs among raw rows.

        Raises:
            InvalidInputError: for unusable input
            ScorerConstructionError: if the scorer cannot be created
            DetectionCancelled: if the run exceeds the service timeout
        """
        config = self.build_config(keys, threshold, kind, algorithm)
        records = self.to_records(rows)
        engine = DuplicateDetectionEngine(config)

        return engine.detect_duplicates(
            records,
            progress_callback=progress_callback,
            should_cancel=self._deadline_check()
        )

    async def find_duplicates_async(self,
                                    rows: Sequence[Dict[str, Any]],
                                    keys: Optional[Sequence[str]] = None,
                                    threshold: Optional[int] = None,
                                    kind: RecordKind = RecordKind.GENERAL,
                                    algorithm: Optional[str] = None) -> DetectionResults:
        """Same as find_duplicates, yielding to the event loop between batches."""
        config = self.build_config(keys, threshold, kind, algorithm)
        records = self.to_records(rows)
        engine = DuplicateDetectionEngine(config)

        return await engine.detect_duplicates_async(records, should_cancel=self._deadline_check())

    def deduplicate(self, records: Sequence[Any], pairs: Sequence[DuplicatePair]) -> List[Any]:
        """Return the records that survive the keep-first policy."""
        survivors = resolve_duplicates(records, pairs)
        self.logger.info(f"Deduplication kept {len(survivors)} of {len(records)} records")
        return survivors

    def find_and_resolve(self,
                         rows: Sequence[Dict[str, Any]],
                         keys: Optional[Sequence[str]] = None,
                         threshold: Optional[int] = None,
                         kind: RecordKind = RecordKind.GENERAL,
                         algorithm: Optional[str] = None) -> Tuple[DetectionResults, List[Dict[str, Any]]]:
        """Find duplicates and return the results together with the surviving rows."""
        results = self.find_duplicates(rows, keys, threshold, kind, algorithm)
        return results, self.deduplicate(list(rows), results.pairs)

    def get_report(self, results: DetectionResults) -> Dict[str, Any]:
        """
        Build the report for results, listing at most max_matches_per_record
        duplicates for each first record.

        Summary counts are taken from the full pair list.
        """
        report = DuplicateDetectionEngine(results.config).get_detection_report(results)
        report['duplicates'] = self._limit_matches(report['duplicates'])
        report['summary']['duplicates_reported'] = len(report['duplicates'])
        return report

    def _deadline_check(self):
        if not self.timeout_seconds:
            return None
        deadline = time.monotonic() + self.timeout_seconds
        return lambda: time.monotonic() > deadline

    def _limit_matches(self, duplicates: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Keep at most max_matches_per_record entries for each index1."""
        if not self.max_matches_per_record:
            return duplicates

        kept = []
        counts: Dict[int, int] = defaultdict(int)
        for entry in duplicates:
            if counts[entry['index1']] < self.max_matches_per_record:
                kept.append(entry)
                counts[entry['index1']] += 1

        dropped = len(duplicates) - len(kept)
        if dropped:
            self.logger.info(f"Limited reported matches to {self.max_matches_per_record} per record "
                             f"({dropped} pairs left out of the report)")
        return kept
