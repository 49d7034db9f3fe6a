"""Common constants used across the goldrate_tracker package."""

# Snapshot slots
SLOT_CURRENT = "current"
SLOT_PREVIOUS = "previous"
SLOTS = [SLOT_CURRENT, SLOT_PREVIOUS]

# Storage backends
BACKEND_SQLITE = "sqlite"
BACKEND_JSON = "json"
BACKEND_MEMORY = "memory"
BACKENDS = [BACKEND_SQLITE, BACKEND_JSON, BACKEND_MEMORY]

# Display board digits (a rotated "6" tile doubles as "9")
DIGITS = ["0", "1", "2", "3", "4", "5", "6", "7", "8", "9"]
MERGED_DIGIT_SOURCE = "9"
MERGED_DIGIT_TARGET = "6"

# Refresh trigger names (for logging)
TRIGGER_MANUAL = "manual"
TRIGGER_VISIBILITY = "visibility"
TRIGGER_SCHEDULE = "schedule"
TRIGGER_RECONNECT = "reconnect"
TRIGGERS = [TRIGGER_MANUAL, TRIGGER_VISIBILITY, TRIGGER_SCHEDULE, TRIGGER_RECONNECT]
