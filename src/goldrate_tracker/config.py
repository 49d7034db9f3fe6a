"""
Configuration management for the gold rate tracker.
Centralize all configuration values from environment variables with sensible defaults.
"""

import os
import logging
from pathlib import Path
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional, Tuple

from dotenv import load_dotenv

from goldrate_tracker.constants import BACKENDS, BACKEND_SQLITE
from goldrate_tracker.exceptions import ConfigurationError

# Default configuration values
DEFAULT_RATES_SOURCE_URL = "https://m-lombard.kz/ru/api/admin/purities/?format=json"
DEFAULT_DATA_DIR = "data"
DEFAULT_DB_PATH = "data/rates.db"
DEFAULT_JSON_STORE_PATH = "data/rates.json"
DEFAULT_STALE_THRESHOLD_HOURS = 12.0
DEFAULT_UPDATE_HOURS = "9,12,18"
DEFAULT_DISPLAY_UTC_OFFSET_HOURS = 5  # Kazakhstan

# Load .env file if it exists
_env_path: Path = Path(__file__).resolve().parent.parent.parent / '.env'
if _env_path.exists():
    load_dotenv(_env_path)


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == 'true'


@dataclass
class Config:
    """Centralized configuration for the tracker."""

    # ========================================================================
    # Upstream source
    # ========================================================================
    RATES_SOURCE_URL: str = os.getenv('RATES_SOURCE_URL', DEFAULT_RATES_SOURCE_URL)

    # ========================================================================
    # Request settings
    # ========================================================================
    REQUEST_TIMEOUT: int = int(os.getenv('REQUEST_TIMEOUT', '15'))
    RETRY_ATTEMPTS: int = int(os.getenv('RETRY_ATTEMPTS', '3'))
    RETRY_BACKOFF: float = float(os.getenv('RETRY_BACKOFF', '1.5'))

    # ========================================================================
    # Access control
    # ========================================================================
    SECRET_KEY: Optional[str] = os.getenv('SECRET_KEY', None)

    # ========================================================================
    # Snapshot storage
    # ========================================================================
    STORAGE_BACKEND: str = os.getenv('STORAGE_BACKEND', BACKEND_SQLITE)
    DB_PATH: str = os.getenv('DB_PATH', DEFAULT_DB_PATH)
    JSON_STORE_PATH: str = os.getenv('JSON_STORE_PATH', DEFAULT_JSON_STORE_PATH)

    # ========================================================================
    # Freshness and display
    # ========================================================================
    STALE_THRESHOLD_HOURS: float = float(
        os.getenv('STALE_THRESHOLD_HOURS', str(DEFAULT_STALE_THRESHOLD_HOURS))
    )
    DISPLAY_UTC_OFFSET_HOURS: int = int(
        os.getenv('DISPLAY_UTC_OFFSET_HOURS', str(DEFAULT_DISPLAY_UTC_OFFSET_HOURS))
    )
    MERGE_NINE_INTO_SIX: bool = _env_flag('MERGE_NINE_INTO_SIX', 'true')
    TRACK_DIGIT_REMOVALS: bool = _env_flag('TRACK_DIGIT_REMOVALS', 'false')

    # ========================================================================
    # Scheduled refresh
    # ========================================================================
    UPDATE_HOURS: str = os.getenv('UPDATE_HOURS', DEFAULT_UPDATE_HOURS)
    SCHEDULER_POLL_SECONDS: float = float(os.getenv('SCHEDULER_POLL_SECONDS', '60'))

    # ========================================================================
    # Logging
    # ========================================================================
    LOG_LEVEL: str = os.getenv('LOG_LEVEL', 'INFO')

    def __post_init__(self) -> None:
        """Validate configuration values after initialization."""
        self._validate()

    def _validate(self) -> None:
        """Validate configuration values."""
        if not self.RATES_SOURCE_URL:
            raise ConfigurationError("RATES_SOURCE_URL must be set")

        if self.REQUEST_TIMEOUT <= 0:
            raise ConfigurationError(f"REQUEST_TIMEOUT must be positive, got {self.REQUEST_TIMEOUT}")

        if self.RETRY_ATTEMPTS < 1:
            raise ConfigurationError(f"RETRY_ATTEMPTS must be at least 1, got {self.RETRY_ATTEMPTS}")

        if self.RETRY_BACKOFF < 0:
            raise ConfigurationError(f"RETRY_BACKOFF cannot be negative, got {self.RETRY_BACKOFF}")

        if self.STORAGE_BACKEND not in BACKENDS:
            raise ConfigurationError(
                f"Invalid STORAGE_BACKEND: {self.STORAGE_BACKEND} (expected one of {BACKENDS})"
            )

        if self.STALE_THRESHOLD_HOURS <= 0:
            raise ConfigurationError(
                f"STALE_THRESHOLD_HOURS must be positive, got {self.STALE_THRESHOLD_HOURS}"
            )

        if not -12 <= self.DISPLAY_UTC_OFFSET_HOURS <= 14:
            raise ConfigurationError(
                f"DISPLAY_UTC_OFFSET_HOURS out of range: {self.DISPLAY_UTC_OFFSET_HOURS}"
            )

        if self.SCHEDULER_POLL_SECONDS <= 0:
            raise ConfigurationError(
                f"SCHEDULER_POLL_SECONDS must be positive, got {self.SCHEDULER_POLL_SECONDS}"
            )

        # Parses and range-checks the hour list
        self.get_update_hours()

        if self.LOG_LEVEL not in ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'):
            raise ConfigurationError(f"Invalid LOG_LEVEL: {self.LOG_LEVEL}")

    def get_update_hours(self) -> Tuple[int, ...]:
        """
        Parse UPDATE_HOURS into a sorted tuple of unique hours.

        Returns:
            Tuple of local hours (0-23) at which a scheduled refresh fires

        Raises:
            ConfigurationError: If the list is empty or contains invalid hours
        """
        parts = [p.strip() for p in self.UPDATE_HOURS.split(',') if p.strip()]
        if not parts:
            raise ConfigurationError("UPDATE_HOURS must list at least one hour")

        try:
            hours = sorted({int(p) for p in parts})
        except ValueError as e:
            raise ConfigurationError(f"Invalid UPDATE_HOURS: {self.UPDATE_HOURS}") from e

        if hours[0] < 0 or hours[-1] > 23:
            raise ConfigurationError(f"UPDATE_HOURS must be between 0 and 23, got {self.UPDATE_HOURS}")

        return tuple(hours)

    def get_stale_threshold(self) -> timedelta:
        """Staleness threshold as a timedelta."""
        return timedelta(hours=self.STALE_THRESHOLD_HOURS)


_config_instance: Optional[Config] = None


def get_config() -> Config:
    """
    Get configuration instance (singleton).

    Returns:
        Config dataclass with all settings
    """
    global _config_instance
    if _config_instance is None:
        _config_instance = Config()
    return _config_instance


def configure_logging(level: Optional[str] = None):
    """Configure Python logging based on config settings."""
    config = get_config()
    logging.basicConfig(
        level=getattr(logging, level or config.LOG_LEVEL),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
