"""Data models for task management functionality."""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from uuid import UUID

from .config import CATEGORY_ICONS, FILTER_TITLES, PRIORITY_COLORS
from .exceptions import PersistenceError


class TaskPriority(str, Enum):
    """Task priority enumeration."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"

    @property
    def color(self) -> str:
        """Color identifier used by presentation code."""
        return PRIORITY_COLORS[self.value]


class TaskCategory(str, Enum):
    """Task category enumeration."""

    PERSONAL = "Personal"
    WORK = "Work"
    SHOPPING = "Shopping"
    HEALTH = "Health"
    OTHER = "Other"

    @property
    def icon(self) -> str:
        """Icon identifier used by presentation code."""
        return CATEGORY_ICONS[self.value]


class TaskFilter(str, Enum):
    """Named views over the task collection."""

    ALL = "all"
    TODAY = "today"
    UPCOMING = "upcoming"
    COMPLETED = "completed"

    @property
    def title(self) -> str:
        return FILTER_TITLES[self.value]


def to_local_naive(moment: datetime) -> datetime:
    """Convert an offset-aware datetime to naive local time; naive values pass through."""
    if moment.tzinfo is None:
        return moment
    return moment.astimezone().replace(tzinfo=None)


@dataclass(frozen=True)
class Task:
    """
    Represents a single to-do item.

    Tasks are immutable values; the state manager replaces a task by id
    instead of mutating it. ``id`` is ``None`` only for candidates that have
    not been added yet.
    """

    id: UUID | None = None
    title: str = ""
    description: str = ""
    due_date: datetime = field(default_factory=datetime.now)
    is_completed: bool = False
    priority: TaskPriority = TaskPriority.MEDIUM
    category: TaskCategory = TaskCategory.PERSONAL
    reminder_enabled: bool = False

    def is_overdue(self, now: datetime) -> bool:
        """Return True if the task is incomplete and its due date has passed."""
        return not self.is_completed and self.due_date < now

    def with_local_due_date(self) -> "Task":
        """Return the task with its due date in naive local time."""
        local = to_local_naive(self.due_date)
        return self if local is self.due_date else replace(self, due_date=local)

    def with_completion(self, is_completed: bool) -> "Task":
        return replace(self, is_completed=is_completed)

    def toggled(self) -> "Task":
        return self.with_completion(not self.is_completed)


@dataclass(frozen=True)
class TaskStatistics:
    """Aggregate counts over a set of tasks."""

    total: int
    completed: int
    overdue: int
    completion_rate: float
    by_priority: dict[TaskPriority, int] = field(default_factory=dict)
    by_category: dict[TaskCategory, int] = field(default_factory=dict)

    @property
    def in_progress(self) -> int:
        return self.total - self.completed


@dataclass
class PersistenceResult:
    """Outcome of a persistence adapter call."""

    tasks: list[Task] = field(default_factory=list)
    error: PersistenceError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None
