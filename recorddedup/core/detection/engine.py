"""
Core duplicate detection engine.
"""

import uuid
import time
import collections.abc
from typing import List, Dict, Any, Optional, Sequence, Tuple

from .models import DetectionConfig, DetectionResults, Record
from .batching import BatchRunner, ProgressCallback, CancelCheck
from .exceptions import InvalidInputError
from .scorers import SimilarityScorer, create_scorer
from ..logging import logger


class DuplicateDetectionEngine:
    """Core engine for finding near-duplicate records."""

    def __init__(self, config: Optional[DetectionConfig] = None,
                 scorer: Optional[SimilarityScorer] = None):
        self.config = config or DetectionConfig()
        self.logger = logger
        self._scorer = scorer

    def get_scorer(self) -> SimilarityScorer:
        """
        Get the scorer for this engine, creating it on first use.

        Raises:
            ScorerConstructionError: if the configured scorer cannot be built
        """
        if self._scorer is None:
            self._scorer = create_scorer(self.config)
            self.logger.info(f"Using scorer: {self._scorer.get_scorer_name()}")
        return self._scorer

    def prepare_run(self,
                    records: Sequence[Any],
                    keys: Optional[Sequence[str]] = None,
                    threshold: Optional[int] = None,
                    progress_callback: Optional[ProgressCallback] = None,
                    should_cancel: Optional[CancelCheck] = None) -> BatchRunner:
        """
        Validate the inputs and build a batch runner for them.

        Args:
            records: Ordered records (Record instances or mappings)
            keys: One or two field names to compare; defaults to the config
            threshold: Minimum similarity 0-100; defaults to the config
            progress_callback: Receives the completed percentage after every batch
            should_cancel: Checked before every batch; a true result stops the run

        Returns:
            A BatchRunner that has not processed anything yet
        """
        record_list = self._normalize_records(records)
        keys = self._validate_keys(self.config.comparison_keys if keys is None else keys)
        threshold = self._validate_threshold(self.config.threshold if threshold is None else threshold)
        scorer = self.get_scorer()

        return BatchRunner(
            record_list, keys, threshold, scorer,
            batch_size=self.config.batch_size,
            progress_callback=progress_callback,
            should_cancel=should_cancel,
            large_pair_count=self.config.large_pair_count
        )

    def detect_duplicates(self,
                          records: Sequence[Any],
                          keys: Optional[Sequence[str]] = None,
                          threshold: Optional[int] = None,
                          progress_callback: Optional[ProgressCallback] = None,
                          should_cancel: Optional[CancelCheck] = None) -> DetectionResults:
        """
        Find duplicate pairs among the records.

        Returns:
            Detection results with the pairs sorted by similarity
        """
        session_id = str(uuid.uuid4())
        start_time = time.time()
        runner = self.prepare_run(records, keys, threshold, progress_callback, should_cancel)
        self._log_start(session_id, runner)

        pairs = runner.run()
        return self._build_results(session_id, runner, pairs, start_time)

    async def detect_duplicates_async(self,
                                      records: Sequence[Any],
                                      keys: Optional[Sequence[str]] = None,
                                      threshold: Optional[int] = None,
                                      progress_callback: Optional[ProgressCallback] = None,
                                      should_cancel: Optional[CancelCheck] = None) -> DetectionResults:
        """Same as detect_duplicates, yielding to the event loop between batches."""
        session_id = str(uuid.uuid4())
        start_time = time.time()
        runner = self.prepare_run(records, keys, threshold, progress_callback, should_cancel)
        self._log_start(session_id, runner)

        pairs = await runner.run_async()
        return self._build_results(session_id, runner, pairs, start_time)

    def get_detection_report(self, results: DetectionResults) -> Dict[str, Any]:
        """
        Generate detection report.

        Args:
            results: Detection results to report on

        Returns:
            Report dictionary ready for JSON encoding
        """
        performance = results.performance
        return {
            'summary': {
                'session_id': results.session_id,
                'record_kind': results.config.record_kind.value,
                'total_records': results.total_records,
                'total_pairs': results.total_pairs,
                'total_duplicates_found': results.total_duplicates_found,
                'exact_duplicates': results.exact_duplicates,
                'fuzzy_duplicates': results.fuzzy_duplicates,
                'duplicate_records': results.duplicate_records,
                'clean_records': results.clean_records,
                'duplicate_percentage': results.duplicate_percentage,
                'detection_time_ms': results.detection_time_ms
            },
            'performance': {
                'scorer': performance.scorer_name,
                'pairs_processed': performance.pairs_processed,
                'pairs_skipped': performance.pairs_skipped,
                'batches_processed': performance.batches_processed,
                'errors_encountered': performance.errors_encountered,
                'pairs_per_second': performance.pairs_per_second,
                'error_rate': performance.error_rate
            } if performance else {},
            'duplicates': [
                {
                    'index1': pair.index1,
                    'index2': pair.index2,
                    'record1': pair.record1.to_dict(),
                    'record2': pair.record2.to_dict(),
                    'similarity': pair.similarity
                }
                for pair in results.pairs
            ],
            'errors': results.errors,
            'config': {
                'threshold': results.config.threshold,
                'comparison_keys': list(results.config.comparison_keys),
                'scorer_algorithm': results.config.scorer_algorithm
            }
        }

    def _log_start(self, session_id: str, runner: BatchRunner):
        self.logger.info(f"Starting duplicate detection (session: {session_id})")
        self.logger.info(f"Comparing {len(runner.records)} records on {list(runner.keys)}: "
                         f"{runner.total_pairs} pairs in {runner.total_batches} batches "
                         f"of up to {runner.batch_size}")

    def _build_results(self, session_id: str, runner: BatchRunner, pairs, start_time: float) -> DetectionResults:
        detection_time_ms = int((time.time() - start_time) * 1000)
        config = DetectionConfig(
            threshold=runner.threshold_filter.threshold,
            comparison_keys=list(runner.keys),
            scorer_algorithm=self.config.scorer_algorithm,
            batch_size=runner.batch_size,
            large_pair_count=self.config.large_pair_count,
            record_kind=self.config.record_kind
        )
        results = DetectionResults(
            session_id=session_id,
            pairs=pairs,
            total_records=len(runner.records),
            total_pairs=runner.total_pairs,
            detection_time_ms=detection_time_ms,
            config=config,
            performance=runner.performance,
            errors=list(runner.errors)
        )

        if runner.errors:
            self.logger.warning(f"{len(runner.errors)} pairs could not be scored")
        self.logger.info(f"Detection completed: {len(pairs)} duplicate pairs, "
                         f"{results.duplicate_records} records to remove in {detection_time_ms}ms")
        return results

    @staticmethod
    def _normalize_records(records: Sequence[Any]) -> List[Record]:
        if (isinstance(records, (str, bytes, collections.abc.Mapping))
                or not isinstance(records, collections.abc.Sequence)):
            raise InvalidInputError("records must be an ordered sequence of records")

        normalized = []
        for index, record in enumerate(records):
            if isinstance(record, Record):
                normalized.append(record)
            elif isinstance(record, collections.abc.Mapping):
                normalized.append(Record.from_mapping(record))
            else:
                raise InvalidInputError(
                    f"record {index} must be a mapping of field names to values, "
                    f"got {type(record).__name__}"
                )
        return normalized

    @staticmethod
    def _validate_keys(keys: Sequence[str]) -> Tuple[str, ...]:
        if isinstance(keys, str):
            keys = [keys]
        keys = tuple(keys or ())
        if not keys:
            raise InvalidInputError("at least one comparison key is required")
        if len(keys) > 2:
            raise InvalidInputError(f"at most two comparison keys are supported, got {len(keys)}")
        if not all(isinstance(key, str) and key for key in keys):
            raise InvalidInputError("comparison keys must be non-empty field names")
        if len(set(keys)) != len(keys):
            raise InvalidInputError(f"comparison keys must not repeat a field, got {list(keys)}")
        return keys

    @staticmethod
    def _validate_threshold(threshold: int) -> int:
        if isinstance(threshold, bool) or not isinstance(threshold, int):
            raise InvalidInputError(f"threshold must be an integer, got {threshold!r}")
        if not 0 <= threshold <= 100:
            raise InvalidInputError(f"threshold must be between 0 and 100, got {threshold}")
        return threshold
