"""Constants package for goldrate_tracker."""

from goldrate_tracker.constants.common import (
    SLOT_CURRENT,
    SLOT_PREVIOUS,
    SLOTS,
    BACKEND_SQLITE,
    BACKEND_JSON,
    BACKEND_MEMORY,
    BACKENDS,
    DIGITS,
    MERGED_DIGIT_SOURCE,
    MERGED_DIGIT_TARGET,
    TRIGGER_MANUAL,
    TRIGGER_VISIBILITY,
    TRIGGER_SCHEDULE,
    TRIGGER_RECONNECT,
    TRIGGERS,
)

__all__ = [
    'SLOT_CURRENT',
    'SLOT_PREVIOUS',
    'SLOTS',
    'BACKEND_SQLITE',
    'BACKEND_JSON',
    'BACKEND_MEMORY',
    'BACKENDS',
    'DIGITS',
    'MERGED_DIGIT_SOURCE',
    'MERGED_DIGIT_TARGET',
    'TRIGGER_MANUAL',
    'TRIGGER_VISIBILITY',
    'TRIGGER_SCHEDULE',
    'TRIGGER_RECONNECT',
    'TRIGGERS',
]
