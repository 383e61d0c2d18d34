"""
Batch scheduling of pair scoring.

The pair space of a run grows quadratically with the record count, so scoring
is split into bounded batches. ``BatchRunner.process_next_batch`` performs one
batch and can be driven by a plain loop (``run``), an event loop
(``run_async``) or any other scheduler.
"""

import asyncio
import logging
import time
from typing import Callable, List, Optional, Sequence

from .exceptions import DetectionCancelled, InvalidInputError
from .filtering import ThresholdFilter
from .models import DuplicatePair, Record, ScanPerformance
from .pairs import iter_batches, pair_count
from .scorers import SimilarityScorer

DEFAULT_BATCH_SIZE = 5000
LARGE_INPUT_BATCH_SIZE = 1000
LARGE_PAIR_COUNT = 1_000_000

ProgressCallback = Callable[[int], None]
CancelCheck = Callable[[], bool]


def choose_batch_size(total_pairs: int, large_pair_count: int = LARGE_PAIR_COUNT) -> int:
    """Pick a batch size; very large runs use smaller batches to keep each one short."""
    if total_pairs > large_pair_count:
        return LARGE_INPUT_BATCH_SIZE
    return DEFAULT_BATCH_SIZE


def progress_percent(processed: int, total: int) -> int:
    """Percentage of batches done, rounded half up."""
    if total <= 0:
        return 100
    return (processed * 200 + total) // (2 * total)


class BatchRunner:
    """Scores every pair of a record list one batch at a time."""

    def __init__(self,
                 records: Sequence[Record],
                 keys: Sequence[str],
                 threshold: int,
                 scorer: SimilarityScorer,
                 batch_size: Optional[int] = None,
                 progress_callback: Optional[ProgressCallback] = None,
                 should_cancel: Optional[CancelCheck] = None,
                 large_pair_count: int = LARGE_PAIR_COUNT):
        self.records = records
        self.keys = tuple(keys)
        self.scorer = scorer
        self.progress_callback = progress_callback
        self.should_cancel = should_cancel
        self.logger = logging.getLogger(self.__class__.__name__)

        self.total_pairs = pair_count(len(records))
        if batch_size is None:
            batch_size = choose_batch_size(self.total_pairs, large_pair_count)
        if batch_size < 1:
            raise InvalidInputError(f"batch_size must be positive, got {batch_size}")
        self.batch_size = batch_size
        self.total_batches = -(-self.total_pairs // batch_size)

        self.threshold_filter = ThresholdFilter(threshold)
        self.performance = ScanPerformance(scorer_name=scorer.get_scorer_name())
        self.errors: List[str] = []
        self.batches_processed = 0

        self._batches = iter_batches(len(records), batch_size)
        self._finished = False

    @property
    def finished(self) -> bool:
        return self._finished

    def process_next_batch(self) -> bool:
        """
        Score the next batch of pairs.

        Returns:
            True while batches remain, False once the run is complete

        Raises:
            DetectionCancelled: if the cancel check fires at this batch boundary
        """
        if self._finished:
            return False

        if self.total_batches == 0:
            self._finished = True
            self._report_progress(100)
            return False

        if self.should_cancel is not None and self.should_cancel():
            self.logger.warning(f"Run cancelled after {self.batches_processed}/"
                                f"{self.total_batches} batches")
            raise DetectionCancelled(
                f"Detection cancelled after {self.batches_processed} of {self.total_batches} batches",
                batches_processed=self.batches_processed,
                total_batches=self.total_batches
            )

        batch = next(self._batches, None)
        if batch is None:
            self._finished = True
            return False

        start_time = time.time()
        for index1, index2 in batch:
            self._score_pair(index1, index2)
        self.performance.execution_time_ms += int((time.time() - start_time) * 1000)

        self.batches_processed += 1
        self.performance.batches_processed = self.batches_processed
        self._report_progress(progress_percent(self.batches_processed, self.total_batches))

        if self.batches_processed >= self.total_batches:
            self._finished = True
        return not self._finished

    def run(self) -> List[DuplicatePair[Record]]:
        """Process all batches back to back."""
        while self.process_next_batch():
            pass
        return self.results()

    async def run_async(self) -> List[DuplicatePair[Record]]:
        """Process all batches, handing control back to the event loop between them."""
        while self.process_next_batch():
            await asyncio.sleep(0)
        return self.results()

    def results(self) -> List[DuplicatePair[Record]]:
        return self.threshold_filter.results()

    def _score_pair(self, index1: int, index2: int):
        record1 = self.records[index1]
        record2 = self.records[index2]
        self.performance.pairs_processed += 1

        try:
            similarity = self.scorer.score(record1, record2, self.keys)
        except Exception as e:
            self.performance.errors_encountered += 1
            message = f"Failed to score pair ({index1}, {index2}): {e}"
            self.logger.error(message)
            self.errors.append(message)
            return

        if similarity is None:
            self.performance.pairs_skipped += 1
            return

        if self.threshold_filter.accept(index1, index2, record1, record2, similarity):
            self.performance.matches_found += 1

    def _report_progress(self, percent: int):
        if self.progress_callback is not None:
            self.progress_callback(percent)
