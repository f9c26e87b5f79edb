"""Task management core: task collection, derived views and persistence."""

from .events import (
    TaskAdded,
    TaskDeleted,
    TaskEvent,
    TaskEventBus,
    TaskEventKind,
    TaskStatusChanged,
    TaskUpdated,
)
from .kv_store import SQLiteKeyValueStore
from .models import (
    PersistenceResult,
    Task,
    TaskCategory,
    TaskFilter,
    TaskPriority,
    TaskStatistics,
)
from .persistence import TaskPersistence
from .task_state_manager import TaskStateManager, create_task_state_manager

__all__ = [
    "Task",
    "TaskPriority",
    "TaskCategory",
    "TaskFilter",
    "TaskStatistics",
    "PersistenceResult",
    "TaskEvent",
    "TaskEventKind",
    "TaskAdded",
    "TaskDeleted",
    "TaskUpdated",
    "TaskStatusChanged",
    "TaskEventBus",
    "SQLiteKeyValueStore",
    "TaskPersistence",
    "TaskStateManager",
    "create_task_state_manager",
]
