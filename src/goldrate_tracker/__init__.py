"""goldrate_tracker - Purity rate tracker with two-snapshot history."""

__version__ = "1.0.0"

from goldrate_tracker.config import Config
from goldrate_tracker.exceptions import (
    TrackerError,
    FetchError,
    NoDataAvailableError,
    StorageError,
    ValidationError,
    ConfigurationError,
    AuthorizationError,
)
from goldrate_tracker.models import RateEntry, Snapshot, ReconciliationResult

__all__ = [
    "Config",
    "TrackerError",
    "FetchError",
    "NoDataAvailableError",
    "StorageError",
    "ValidationError",
    "ConfigurationError",
    "AuthorizationError",
    "RateEntry",
    "Snapshot",
    "ReconciliationResult",
]
