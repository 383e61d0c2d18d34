"""
Data models for duplicate detection system.
"""

from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional, Tuple, Iterator, Mapping, Generic, TypeVar
from datetime import datetime
from enum import Enum


class RecordKind(Enum):
    """Kinds of tabular records the engine is used with."""
    GENERAL = "general"
    ARTICLE = "article"


@dataclass(frozen=True)
class Record:
    """An immutable, ordered set of field name / text value entries."""

    fields: Tuple[Tuple[str, str], ...] = ()
    _lookup: Dict[str, str] = field(init=False, repr=False, compare=False, hash=False)

    def __post_init__(self):
        object.__setattr__(self, '_lookup', dict(self.fields))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> 'Record':
        """
        Build a record from any mapping, keeping its key order.

        Values are normalized to text; ``None`` values are treated as absent.
        """
        if isinstance(data, Record):
            return data
        return cls(tuple(
            (str(key), value if isinstance(value, str) else str(value))
            for key, value in data.items()
            if value is not None
        ))

    def get(self, field_name: str) -> Optional[str]:
        """Return the field value, or None when the record has no such field."""
        return self._lookup.get(field_name)

    def has_field(self, field_name: str) -> bool:
        return field_name in self._lookup

    def keys(self) -> List[str]:
        return [name for name, _ in self.fields]

    def to_dict(self) -> Dict[str, str]:
        return dict(self.fields)

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def __len__(self) -> int:
        return len(self.fields)


RecordT = TypeVar('RecordT')


@dataclass(frozen=True)
class DuplicatePair(Generic[RecordT]):
    """Two records judged to be duplicates; index1 always precedes index2."""

    index1: int
    index2: int
    record1: RecordT
    record2: RecordT
    similarity: int

    def __post_init__(self):
        """Post-initialization validation."""
        if self.index1 >= self.index2:
            raise ValueError("DuplicatePair requires index1 < index2")
        if not 0 <= self.similarity <= 100:
            raise ValueError("similarity must be between 0 and 100")

    @property
    def is_exact(self) -> bool:
        """True when the comparison strings were identical."""
        return self.similarity == 100


@dataclass
class DetectionConfig:
    """Configuration for a duplicate detection run."""

    # Matching settings
    threshold: int = 85
    comparison_keys: List[str] = field(default_factory=lambda: ['Title'])
    scorer_algorithm: str = "levenshtein"

    # Batch settings
    batch_size: Optional[int] = None  # None selects a size from the pair count
    large_pair_count: int = 1_000_000

    record_kind: RecordKind = RecordKind.GENERAL

    def validate(self) -> List[str]:
        """Validate configuration and return list of errors."""
        errors = []

        if isinstance(self.threshold, bool) or not isinstance(self.threshold, int):
            errors.append("threshold must be an integer")
        elif not 0 <= self.threshold <= 100:
            errors.append("threshold must be between 0 and 100")

        if not self.comparison_keys:
            errors.append("comparison_keys must not be empty")
        elif len(self.comparison_keys) > 2:
            errors.append("comparison_keys must contain at most two fields")
        elif len(set(self.comparison_keys)) != len(self.comparison_keys):
            errors.append("comparison_keys must not repeat a field")

        if self.batch_size is not None and self.batch_size < 1:
            errors.append("batch_size must be positive")

        if self.large_pair_count < 1:
            errors.append("large_pair_count must be positive")

        if not self.scorer_algorithm:
            errors.append("scorer_algorithm must be set")

        return errors


@dataclass
class ScanPerformance:
    """Counters collected while scoring the pairs of one run."""

    scorer_name: str
    pairs_processed: int = 0
    pairs_skipped: int = 0
    matches_found: int = 0
    batches_processed: int = 0
    execution_time_ms: int = 0
    errors_encountered: int = 0

    @property
    def pairs_per_second(self) -> float:
        """Calculate processing rate."""
        if self.execution_time_ms == 0:
            return 0.0
        return self.pairs_processed / (self.execution_time_ms / 1000.0)

    @property
    def error_rate(self) -> float:
        """Calculate error rate percentage."""
        if self.pairs_processed == 0:
            return 0.0
        return self.errors_encountered / self.pairs_processed * 100


@dataclass
class DetectionResults:
    """Results from a duplicate detection run."""

    session_id: str
    pairs: List[DuplicatePair[Record]]
    total_records: int
    total_pairs: int
    detection_time_ms: int
    config: DetectionConfig
    created_at: datetime = field(default_factory=datetime.now)
    performance: Optional[ScanPerformance] = None
    errors: List[str] = field(default_factory=list)

    @property
    def total_duplicates_found(self) -> int:
        return len(self.pairs)

    @property
    def exact_duplicates(self) -> int:
        """Pairs whose comparison strings were identical."""
        return sum(1 for pair in self.pairs if pair.is_exact)

    @property
    def fuzzy_duplicates(self) -> int:
        return sum(1 for pair in self.pairs if not pair.is_exact)

    @property
    def duplicate_records(self) -> int:
        """Number of distinct records that resolution would remove."""
        return len({pair.index2 for pair in self.pairs})

    @property
    def clean_records(self) -> int:
        return self.total_records - self.duplicate_records

    @property
    def duplicate_percentage(self) -> float:
        """Percentage of records that are duplicates."""
        if self.total_records == 0:
            return 0.0
        return self.duplicate_records / self.total_records * 100
