"""
Configuration management for duplicate detection system.
"""

import json
import os
from typing import Dict, Any, Optional, List
import logging
from .models import DetectionConfig, RecordKind


class ConfigManager:
    """Manages configuration for duplicate detection system."""

    VALID_KEYS = {
        'threshold', 'comparison_keys', 'scorer_algorithm',
        'batch_size', 'large_pair_count', 'record_kind'
    }

    def __init__(self, config_file: Optional[str] = None):
        self.config_file = config_file or "detection_config.json"
        self.logger = logging.getLogger(self.__class__.__name__)
        self._default_config = DetectionConfig()

    def load_config(self, config_data: Optional[Dict[str, Any]] = None) -> DetectionConfig:
        """
        Load configuration from file or provided data.

        Args:
            config_data: Optional configuration dictionary to use instead of file

        Returns:
            DetectionConfig instance
        """
        if config_data:
            return self._create_config_from_dict(config_data)

        if os.path.exists(self.config_file):
            try:
                with open(self.config_file, 'r') as f:
                    data = json.load(f)
                return self._create_config_from_dict(data)
            except (OSError, ValueError) as e:
                self.logger.error(f"Failed to load config from {self.config_file}: {e}")
                self.logger.info("Using default configuration")

        return self.get_default_config()

    def validate_config(self, config: DetectionConfig) -> List[str]:
        """
        Validate configuration and return list of errors.

        Args:
            config: Configuration to validate

        Returns:
            List of validation error messages
        """
        return config.validate()

    def get_default_config(self) -> DetectionConfig:
        """Get default configuration."""
        return DetectionConfig()

    def get_config_for_kind(self, kind: RecordKind,
                            comparison_keys: Optional[List[str]] = None) -> DetectionConfig:
        """
        Get configuration for a kind of record.

        Args:
            kind: Record kind
            comparison_keys: Fields to compare; required for general records

        Returns:
            Configuration for the kind
        """
        config = DetectionConfig(record_kind=kind)

        if kind == RecordKind.ARTICLE:
            # Bibliographic records are matched on their title
            config.comparison_keys = list(comparison_keys or ['Title'])
            config.threshold = 85

        elif kind == RecordKind.GENERAL:
            config.comparison_keys = list(comparison_keys or [])

        return config

    def _create_config_from_dict(self, data: Dict[str, Any]) -> DetectionConfig:
        """Create DetectionConfig from dictionary."""
        try:
            # Filter out unknown keys and use defaults for missing ones
            filtered_data = {k: v for k, v in data.items() if k in self.VALID_KEYS}
            if 'record_kind' in filtered_data:
                filtered_data['record_kind'] = RecordKind(filtered_data['record_kind'])
            if 'comparison_keys' in filtered_data:
                filtered_data['comparison_keys'] = list(filtered_data['comparison_keys'])
            config = DetectionConfig(**filtered_data)

            # Validate the configuration
            errors = self.validate_config(config)
            if errors:
                self.logger.warning(f"Configuration validation errors: {errors}")
                self.logger.info("Using default configuration")
                return self.get_default_config()

            return config

        except (TypeError, ValueError) as e:
            self.logger.error(f"Failed to create config from data: {e}")
            return self.get_default_config()
