"""
Service layer.
"""

from .deduplication_service import DeduplicationService

__all__ = ['DeduplicationService']
