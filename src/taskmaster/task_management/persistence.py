"""Persistence adapter storing the task collection as one key-value blob."""

from collections.abc import Sequence

from .codec import decode_tasks, encode_tasks
from .config import TASKS_STORAGE_KEY
from .exceptions import DecodeError, EncodeError, StorageError
from .interfaces import KeyValueStore
from .logging_utils import get_logger
from .models import PersistenceResult, Task

logger = get_logger(__name__)


class TaskPersistence:
    """
    Saves and restores the full task collection.

    Persistence is best-effort: neither ``save`` nor ``load`` raises.
    Failures come back in ``PersistenceResult.error`` so the caller decides
    whether to log, surface or ignore them. A malformed blob loads as an
    empty collection.
    """

    def __init__(self, store: KeyValueStore, key: str = TASKS_STORAGE_KEY) -> None:
        """
        Initialize the adapter.

        Args:
            store: Key-value store holding the serialized collection
            key: Key the collection is stored under
        """
        self._store = store
        self._key = key

    @property
    def store(self) -> KeyValueStore:
        return self._store

    @property
    def key(self) -> str:
        return self._key

    async def initialize(self) -> None:
        """
        Initialize the underlying store.

        Raises:
            StorageError: If the store cannot be opened
        """
        await self._store.initialize()

    async def save(self, tasks: Sequence[Task]) -> PersistenceResult:
        """
        Serialize and store the full collection, replacing any prior value.

        Args:
            tasks: Collection to persist

        Returns:
            PersistenceResult echoing the saved tasks, with ``error`` set to
            an EncodeError or StorageError on failure
        """
        snapshot = list(tasks)
        try:
            blob = encode_tasks(snapshot)
        except EncodeError as e:
            logger.warning(f"Failed to encode {len(snapshot)} tasks: {e}")
            return PersistenceResult(tasks=snapshot, error=e)

        try:
            await self._store.set(self._key, blob)
        except StorageError as e:
            logger.warning(f"Failed to write tasks under {self._key!r}: {e}")
            return PersistenceResult(tasks=snapshot, error=e)

        logger.trace(f"Saved {len(snapshot)} tasks ({len(blob)} bytes)")
        return PersistenceResult(tasks=snapshot)

    async def load(self) -> PersistenceResult:
        """
        Read the stored collection.

        Returns:
            PersistenceResult with the stored tasks. An absent key yields an
            empty list without error; a malformed blob yields an empty list
            with a DecodeError; a store failure yields an empty list with a
            StorageError.
        """
        try:
            blob = await self._store.get(self._key)
        except StorageError as e:
            logger.warning(f"Failed to read tasks under {self._key!r}: {e}")
            return PersistenceResult(error=e)

        if blob is None:
            logger.debug(f"No stored tasks under {self._key!r}")
            return PersistenceResult()

        try:
            tasks = decode_tasks(blob)
        except DecodeError as e:
            logger.warning(f"Discarding malformed stored tasks: {e}")
            return PersistenceResult(error=e)

        logger.trace(f"Loaded {len(tasks)} tasks ({len(blob)} bytes)")
        return PersistenceResult(tasks=_drop_duplicate_ids(tasks))


def _drop_duplicate_ids(tasks: list[Task]) -> list[Task]:
    """Keep the first task for each id."""
    seen = set()
    unique: list[Task] = []
    for task in tasks:
        if task.id in seen:
            logger.warning(f"Dropping stored task with duplicate id {task.id}")
            continue
        seen.add(task.id)
        unique.append(task)
    return unique
