from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Duplicate detection
    default_threshold: int = 85
    default_batch_size: Optional[int] = None  # None picks a size from the pair count
    large_pair_count: int = 1_000_000
    scorer_algorithm: str = "levenshtein"

    # Caller-side limits
    max_records: int = 2000
    max_matches_per_record: int = 50
    request_timeout_seconds: Optional[float] = 25.0

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None

    # API
    api_host: str = "127.0.0.1"
    api_port: int = 8003
    debug: bool = False

    class Config:
        env_file = ".env"
        case_sensitive = False


# Global settings instance
settings = Settings()
