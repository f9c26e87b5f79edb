"""Task State Manager owning the task collection and its derived views."""

import asyncio
import uuid
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime

from . import statistics as stats
from .config import DEFAULT_STORE_PATH, DEFAULT_WAL_MODE
from .events import (
    TaskAdded,
    TaskDeleted,
    TaskEvent,
    TaskEventBus,
    TaskEventCallback,
    TaskStatusChanged,
    TaskUpdated,
)
from .exceptions import ManagerNotInitializedError, PersistenceError, StorageError
from .kv_store import SQLiteKeyValueStore
from .logging_utils import get_logger
from .models import (
    PersistenceResult,
    Task,
    TaskCategory,
    TaskFilter,
    TaskPriority,
    TaskStatistics,
)
from .persistence import TaskPersistence

logger = get_logger(__name__)


class TaskStateManager:
    """
    Manages the task collection with best-effort persistence.

    Holds the authoritative list of tasks in insertion order, applies
    mutations, derives filtered views and statistics, saves after every
    change and publishes a typed event for each applied mutation.

    Mutations run one at a time under an asyncio lock. Reads are
    synchronous and return snapshots, so callers never hold a reference to
    the internal list.
    """

    def __init__(
        self,
        persistence: TaskPersistence,
        event_bus: TaskEventBus | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        """
        Initialize Task State Manager.

        Args:
            persistence: Adapter used to load and save the collection
            event_bus: Channel for change events (a private one if omitted)
            clock: Source of the current time for date-relative views
        """
        self._persistence = persistence
        self._event_bus = event_bus or TaskEventBus()
        self._clock = clock
        self._tasks: list[Task] = []
        self._mutation_lock = asyncio.Lock()
        self._initialized = False
        self._last_persistence_error: PersistenceError | None = None

    async def initialize(self) -> None:
        """
        Load the stored collection once.

        A missing, unreadable or malformed blob leaves the manager empty;
        the error is kept in ``last_persistence_error``.
        """
        if self._initialized:
            return

        logger.info("Initializing Task State Manager")

        try:
            await self._persistence.initialize()
        except StorageError as e:
            logger.warning(f"Task store unavailable: {e}")
            result = PersistenceResult(error=e)
        else:
            result = await self._persistence.load()
        self._tasks = list(result.tasks)
        self._last_persistence_error = result.error
        if result.error is not None:
            logger.warning(f"Starting with empty task list: {result.error}")

        self._initialized = True
        logger.info(f"Task State Manager initialized with {len(self._tasks)} tasks")

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def event_bus(self) -> TaskEventBus:
        return self._event_bus

    @property
    def last_persistence_error(self) -> PersistenceError | None:
        """Error from the most recent load or save, None if it succeeded."""
        return self._last_persistence_error

    @property
    def tasks(self) -> tuple[Task, ...]:
        """Snapshot of the collection in insertion order."""
        return tuple(self._tasks)

    def now(self) -> datetime:
        return self._clock()

    def subscribe(self, callback: TaskEventCallback) -> Callable[[], None]:
        """
        Register a callback for change events.

        Returns:
            A function that removes the subscription
        """
        return self._event_bus.subscribe(callback)

    def get_task(self, task_id: uuid.UUID) -> Task | None:
        """Return the task with the given id, or None if absent."""
        index = self._index_of(task_id)
        return self._tasks[index] if index is not None else None

    # -------------------- mutations --------------------

    async def add_task(self, candidate: Task) -> Task:
        """
        Append a task to the collection.

        A fresh id is assigned when the candidate has none or its id is
        already taken. An offset-aware due date is converted to naive local
        time.

        Args:
            candidate: Task to add

        Returns:
            The stored task, carrying its assigned id
        """
        self._ensure_initialized()
        async with self._mutation_lock:
            task = candidate.with_local_due_date()
            if task.id is None or self._index_of(task.id) is not None:
                if task.id is not None:
                    logger.debug(f"Task id {task.id} already in use, assigning a new one")
                task = replace(task, id=self._new_id())

            self._tasks.append(task)
            logger.debug(f"Added task {task.id}: {task.title}")
            await self._commit(TaskAdded(task=task))
            return task

    async def delete_task(self, task_id: uuid.UUID) -> bool:
        """
        Remove the task with the given id.

        Args:
            task_id: Task UUID

        Returns:
            True if a task was removed, False if the id was unknown
        """
        self._ensure_initialized()
        async with self._mutation_lock:
            index = self._index_of(task_id)
            if index is None:
                logger.debug(f"Delete ignored, task {task_id} not found")
                return False

            removed = self._tasks.pop(index)
            logger.debug(f"Deleted task {task_id}")
            await self._commit(TaskDeleted(task=removed))
            return True

    async def toggle_completion(self, task_id: uuid.UUID) -> bool:
        """
        Flip the completion flag of a task.

        Args:
            task_id: Task UUID

        Returns:
            True if a task was toggled, False if the id was unknown
        """
        self._ensure_initialized()
        async with self._mutation_lock:
            index = self._index_of(task_id)
            if index is None:
                logger.debug(f"Toggle ignored, task {task_id} not found")
                return False

            task = self._tasks[index].toggled()
            self._tasks[index] = task
            logger.debug(f"Task {task_id} completed={task.is_completed}")
            await self._commit(TaskStatusChanged(task=task, is_completed=task.is_completed))
            return True

    async def update_task(self, updated: Task) -> bool:
        """
        Replace the task whose id matches ``updated.id``.

        An offset-aware due date is converted to naive local time.

        Args:
            updated: New value for the task

        Returns:
            True if a task was replaced, False if the id was unknown
        """
        self._ensure_initialized()
        async with self._mutation_lock:
            index = self._index_of(updated.id) if updated.id is not None else None
            if index is None:
                logger.debug(f"Update ignored, task {updated.id} not found")
                return False

            updated = updated.with_local_due_date()
            self._tasks[index] = updated
            logger.debug(f"Updated task {updated.id}")
            await self._commit(TaskUpdated(task=updated))
            return True

    # -------------------- derived views --------------------

    def filtered_tasks(self, task_filter: TaskFilter = TaskFilter.ALL) -> list[Task]:
        """
        Return a fresh list of the tasks in a view, sorted by due date.

        Args:
            task_filter: View to derive

        Returns:
            New list; modifying it does not affect the collection
        """
        return stats.filter_tasks(self._tasks, task_filter, self.now())

    def total_count(self, task_filter: TaskFilter | None = None) -> int:
        return len(self._scope(task_filter))

    def completed_count(self, task_filter: TaskFilter | None = None) -> int:
        return stats.count_completed(self._scope(task_filter))

    def overdue_count(self, task_filter: TaskFilter | None = None) -> int:
        return stats.count_overdue(self._scope(task_filter), self.now())

    def completion_rate(self, task_filter: TaskFilter | None = None) -> float:
        return stats.completion_rate(self._scope(task_filter))

    def count_by_priority(
        self, priority: TaskPriority, task_filter: TaskFilter | None = None
    ) -> int:
        return stats.count_by_priority(self._scope(task_filter), priority)

    def count_by_category(
        self, category: TaskCategory, task_filter: TaskFilter | None = None
    ) -> int:
        return stats.count_by_category(self._scope(task_filter), category)

    def statistics(self, task_filter: TaskFilter | None = None) -> TaskStatistics:
        """
        Compute aggregate statistics.

        Args:
            task_filter: Restrict to a view; None covers the whole collection

        Returns:
            TaskStatistics snapshot
        """
        return stats.compute_statistics(self._scope(task_filter), self.now())

    async def shutdown(self) -> None:
        """
        Close the underlying store.

        Handles errors gracefully to ensure cleanup completes.
        """
        logger.info("Shutting down Task State Manager")
        try:
            await self._persistence.store.close()
        except Exception as e:
            logger.error(f"Error closing task store: {e}")

        self._tasks.clear()
        self._initialized = False

    # -------------------- internals --------------------

    def _ensure_initialized(self) -> None:
        if not self._initialized:
            raise ManagerNotInitializedError(
                "Task State Manager must be initialized before mutating tasks"
            )

    def _index_of(self, task_id: uuid.UUID) -> int | None:
        for index, task in enumerate(self._tasks):
            if task.id == task_id:
                return index
        return None

    def _new_id(self) -> uuid.UUID:
        taken = {task.id for task in self._tasks}
        task_id = uuid.uuid4()
        while task_id in taken:
            task_id = uuid.uuid4()
        return task_id

    def _scope(self, task_filter: TaskFilter | None) -> list[Task]:
        if task_filter is None:
            return list(self._tasks)
        return self.filtered_tasks(task_filter)

    async def _commit(self, event: TaskEvent) -> None:
        """Persist the current collection, then announce the mutation."""
        result = await self._persistence.save(list(self._tasks))
        self._last_persistence_error = result.error
        if result.error is not None:
            # In-memory state stays authoritative until the next good save
            logger.warning(f"Task changes not persisted: {result.error}")

        self._event_bus.publish(event)


async def create_task_state_manager(
    db_path: str = DEFAULT_STORE_PATH,
    wal_mode: bool = DEFAULT_WAL_MODE,
    event_bus: TaskEventBus | None = None,
    clock: Callable[[], datetime] = datetime.now,
) -> TaskStateManager:
    """
    Build and initialize a manager backed by a SQLite key-value store.

    Args:
        db_path: Path to SQLite database file (use ":memory:" for in-memory)
        wal_mode: Enable WAL mode for file databases
        event_bus: Channel for change events
        clock: Source of the current time

    Returns:
        Initialized TaskStateManager
    """
    persistence = TaskPersistence(SQLiteKeyValueStore(db_path, wal_mode=wal_mode))
    manager = TaskStateManager(persistence, event_bus=event_bus, clock=clock)
    await manager.initialize()
    return manager
