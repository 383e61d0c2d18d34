"""
Similarity scorers used to compare records.
"""

from abc import ABC, abstractmethod
from typing import List, Dict, Optional, Sequence, Type
import logging
import math

from rapidfuzz.distance import DamerauLevenshtein, Indel, JaroWinkler, Levenshtein

from .exceptions import ScorerConstructionError
from .models import DetectionConfig, Record


class SimilarityScorer(ABC):
    """Abstract base class for record similarity scorers."""

    name: str = ""

    def __init__(self, config: DetectionConfig, logger: Optional[logging.Logger] = None):
        self.config = config
        self.logger = logger or logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def normalized_distance(self, text1: str, text2: str) -> float:
        """
        Distance between two comparison strings.

        Returns:
            0.0 for identical strings up to 1.0 for unrelated strings
        """
        pass

    def get_scorer_name(self) -> str:
        """Return the name of this scorer."""
        return self.name or self.__class__.__name__

    @staticmethod
    def comparison_string(record: Record, keys: Sequence[str]) -> Optional[str]:
        """
        Build the text compared for a record.

        Args:
            record: Record to read
            keys: One or two field names, in comparison order

        Returns:
            The field values joined by a space, or None when a field is absent
        """
        values = []
        for key in keys:
            value = record.get(key)
            if value is None:
                return None
            values.append(value)
        return " ".join(values)

    def score(self, record1: Record, record2: Record, keys: Sequence[str]) -> Optional[int]:
        """
        Score two records over the given comparison keys.

        Returns:
            Similarity from 0 to 100, or None when the pair cannot be compared
            because a field is missing or a comparison string is empty
        """
        text1 = self.comparison_string(record1, keys)
        text2 = self.comparison_string(record2, keys)
        if not text1 or not text2:
            return None

        distance = self.normalized_distance(text1, text2)
        distance = min(1.0, max(0.0, distance))
        # Half-up rounding; round() would send x.5 to the even neighbour
        return int(math.floor((1.0 - distance) * 100 + 0.5))


class LevenshteinScorer(SimilarityScorer):
    """Edit distance with insertions, deletions and substitutions."""

    name = "levenshtein"

    def normalized_distance(self, text1: str, text2: str) -> float:
        return Levenshtein.normalized_distance(text1, text2)


class IndelScorer(SimilarityScorer):
    """Edit distance with insertions and deletions only."""

    name = "indel"

    def normalized_distance(self, text1: str, text2: str) -> float:
        return Indel.normalized_distance(text1, text2)


class DamerauLevenshteinScorer(SimilarityScorer):
    """Levenshtein distance that also counts transpositions as one edit."""

    name = "damerau_levenshtein"

    def normalized_distance(self, text1: str, text2: str) -> float:
        return DamerauLevenshtein.normalized_distance(text1, text2)


class JaroWinklerScorer(SimilarityScorer):
    name = "jaro_winkler"

    def normalized_distance(self, text1: str, text2: str) -> float:
        return JaroWinkler.normalized_distance(text1, text2)


class ScorerRegistry:
    """Registry for managing similarity scorers."""

    def __init__(self):
        self._scorers: Dict[str, Type[SimilarityScorer]] = {}
        self.logger = logging.getLogger(self.__class__.__name__)

    def register(self, scorer_class: type):
        """
        Register a similarity scorer.

        Args:
            scorer_class: Class that extends SimilarityScorer
        """
        if not isinstance(scorer_class, type) or not issubclass(scorer_class, SimilarityScorer):
            raise ValueError(f"Scorer must extend SimilarityScorer: {scorer_class}")

        name = scorer_class.name or scorer_class.__name__
        self._scorers[name] = scorer_class
        self.logger.debug(f"Registered scorer: {name}")

    def create(self, name: str, config: DetectionConfig) -> SimilarityScorer:
        """
        Create an instance of a registered scorer.

        Raises:
            ScorerConstructionError: if the name is unknown or construction fails
        """
        scorer_class = self._scorers.get(name)
        if not scorer_class:
            raise ScorerConstructionError(
                f"Unknown scorer '{name}'. Available: {', '.join(self.list_scorers())}"
            )

        try:
            return scorer_class(config)
        except Exception as e:
            raise ScorerConstructionError(f"Failed to create scorer {name}: {e}") from e

    def list_scorers(self) -> List[str]:
        """Get list of registered scorer names."""
        return list(self._scorers.keys())


# Global scorer registry
scorer_registry = ScorerRegistry()
for _scorer_class in (LevenshteinScorer, IndelScorer, DamerauLevenshteinScorer, JaroWinklerScorer):
    scorer_registry.register(_scorer_class)


def create_scorer(config: DetectionConfig) -> SimilarityScorer:
    """Create the scorer named by the configuration."""
    return scorer_registry.create(config.scorer_algorithm, config)
