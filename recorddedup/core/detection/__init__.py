"""
Core duplicate detection engine module.
"""

from .engine import DuplicateDetectionEngine
from .batching import BatchRunner, choose_batch_size
from .filtering import ThresholdFilter
from .models import Record, RecordKind, DuplicatePair, DetectionConfig, DetectionResults, ScanPerformance
from .pairs import enumerate_pairs, pair_count
from .resolver import resolve_duplicates, loser_indices
from .scorers import SimilarityScorer, scorer_registry, create_scorer
from .config import ConfigManager
from .exceptions import DetectionError, InvalidInputError, ScorerConstructionError, DetectionCancelled

__all__ = [
    'DuplicateDetectionEngine',
    'BatchRunner',
    'choose_batch_size',
    'ThresholdFilter',
    'Record',
    'RecordKind',
    'DuplicatePair',
    'DetectionConfig',
    'DetectionResults',
    'ScanPerformance',
    'enumerate_pairs',
    'pair_count',
    'resolve_duplicates',
    'loser_indices',
    'SimilarityScorer',
    'scorer_registry',
    'create_scorer',
    'ConfigManager',
    'DetectionError',
    'InvalidInputError',
    'ScorerConstructionError',
    'DetectionCancelled'
]
