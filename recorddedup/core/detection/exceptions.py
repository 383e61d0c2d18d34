"""
Exceptions raised by the duplicate detection engine.
"""


class DetectionError(Exception):
    """Base class for fatal detection errors."""


class InvalidInputError(DetectionError, ValueError):
    """Records, comparison keys or threshold are not usable."""


class ScorerConstructionError(DetectionError):
    """The fuzzy matcher could not be initialized from the configuration."""


class DetectionCancelled(DetectionError):
    """A run was stopped at a batch boundary before completion."""

    def __init__(self, message: str, batches_processed: int = 0, total_batches: int = 0):
        super().__init__(message)
        self.batches_processed = batches_processed
        self.total_batches = total_batches
