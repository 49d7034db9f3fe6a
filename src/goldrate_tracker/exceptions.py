"""Custom exception classes for goldrate_tracker."""


class TrackerError(Exception):
    """Base exception for all rate tracker errors."""


class FetchError(TrackerError):
    """Raised when the upstream rate source is unreachable (timeout, connection failed, non-2xx)."""


class NoDataAvailableError(TrackerError):
    """Raised when a refresh fails and no stored snapshot exists to fall back to."""


class StorageError(TrackerError):
    """Raised when the snapshot backend fails to read or write."""


class ValidationError(TrackerError):
    """Raised when an upstream payload is malformed (not a list, no usable entries, etc.)."""


class ConfigurationError(TrackerError):
    """Raised when configuration is invalid or missing required settings."""


class AuthorizationError(TrackerError):
    """Raised when a reconciliation trigger presents a wrong shared secret."""
