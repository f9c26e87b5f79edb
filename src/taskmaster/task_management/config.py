"""Configuration constants for task management functionality."""

import os
from datetime import UTC, datetime

# Persisted State
TASKS_STORAGE_KEY = "savedTasks"  # stable across versions, never rename

# Storage Configuration
DEFAULT_STORE_PATH = os.path.expanduser("~/.taskmaster/tasks.db")
DEFAULT_WAL_MODE = True

# Key-value store schema version (the task blob itself is unversioned)
STORE_SCHEMA_VERSION = 1

# Numeric due dates in older blobs count seconds from this instant
APPLE_REFERENCE_DATE = datetime(2001, 1, 1, tzinfo=UTC)

# Display metadata consumed by presentation code
PRIORITY_COLORS = {
    "Low": "priorityLow",
    "Medium": "priorityMedium",
    "High": "priorityHigh",
}

CATEGORY_ICONS = {
    "Personal": "person.fill",
    "Work": "briefcase.fill",
    "Shopping": "cart.fill",
    "Health": "heart.fill",
    "Other": "square.fill",
}

FILTER_TITLES = {
    "all": "All Tasks",
    "today": "Today",
    "upcoming": "Upcoming",
    "completed": "Completed",
}

# Logging
LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
VERBOSE_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
