"""Typed change notifications published by the task state manager."""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar

from .logging_utils import get_logger
from .models import Task

logger = get_logger(__name__)


class TaskEventKind(str, Enum):
    """Kinds of change the state manager announces."""

    ADDED = "added"
    DELETED = "deleted"
    UPDATED = "updated"
    STATUS_CHANGED = "status_changed"


@dataclass(frozen=True)
class TaskAdded:
    """A task was appended to the collection."""

    kind: ClassVar[TaskEventKind] = TaskEventKind.ADDED
    task: Task


@dataclass(frozen=True)
class TaskDeleted:
    """A task was removed; ``task`` is the removed value."""

    kind: ClassVar[TaskEventKind] = TaskEventKind.DELETED
    task: Task


@dataclass(frozen=True)
class TaskUpdated:
    """A task was replaced by id."""

    kind: ClassVar[TaskEventKind] = TaskEventKind.UPDATED
    task: Task


@dataclass(frozen=True)
class TaskStatusChanged:
    """A task's completion flag was flipped."""

    kind: ClassVar[TaskEventKind] = TaskEventKind.STATUS_CHANGED
    task: Task
    is_completed: bool


TaskEvent = TaskAdded | TaskDeleted | TaskUpdated | TaskStatusChanged
TaskEventCallback = Callable[[TaskEvent], None]


class TaskEventBus:
    """
    Publish/subscribe channel for task change events.

    Callbacks run synchronously in subscription order. A failing callback
    is logged and does not stop delivery to the remaining subscribers.
    """

    def __init__(self) -> None:
        self._subscribers: list[TaskEventCallback] = []

    def subscribe(self, callback: TaskEventCallback) -> Callable[[], None]:
        """
        Register a callback for every published event.

        Args:
            callback: Function called with each TaskEvent

        Returns:
            A function that removes the subscription when called
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def publish(self, event: TaskEvent) -> None:
        """Deliver an event to all current subscribers."""
        logger.debug(f"Publishing {event.kind.value} event for task {event.task.id}")
        for callback in list(self._subscribers):
            try:
                callback(event)
            except Exception as e:
                logger.error(f"Error in task event callback: {e}")
