"""Tests for the task persistence adapter."""

import uuid
from datetime import datetime, timedelta
from typing import Any
from unittest.mock import AsyncMock

import pytest

from taskmaster.task_management.codec import encode_tasks
from taskmaster.task_management.config import TASKS_STORAGE_KEY
from taskmaster.task_management.exceptions import (
    DecodeError,
    EncodeError,
    StorageError,
)
from taskmaster.task_management.kv_store import SQLiteKeyValueStore
from taskmaster.task_management.models import Task, TaskCategory, TaskPriority
from taskmaster.task_management.persistence import TaskPersistence

NOW = datetime(2026, 3, 15, 12, 0)


@pytest.fixture
def mock_store() -> AsyncMock:
    """Create a mock key-value store for testing."""
    store = AsyncMock()
    store.initialize = AsyncMock()
    store.get = AsyncMock(return_value=None)
    store.set = AsyncMock()
    store.close = AsyncMock()
    return store


def make_tasks() -> list[Task]:
    return [
        Task(
            id=uuid.uuid4(),
            title="Write report",
            description="Q1 numbers",
            due_date=NOW + timedelta(days=1),
            priority=TaskPriority.HIGH,
            category=TaskCategory.WORK,
        ),
        Task(
            id=uuid.uuid4(),
            title="Buy milk",
            due_date=NOW - timedelta(hours=2),
            is_completed=True,
            category=TaskCategory.SHOPPING,
            reminder_enabled=True,
        ),
        Task(id=uuid.uuid4(), title="Stretch", due_date=NOW),
    ]


@pytest.mark.unit
@pytest.mark.asyncio
class TestPersistenceSave:
    """Test cases for saving the collection."""

    async def test_save_writes_blob_under_fixed_key(self, mock_store: Any) -> None:
        """Test save stores the encoded collection under savedTasks."""
        tasks = make_tasks()
        persistence = TaskPersistence(mock_store)

        result = await persistence.save(tasks)

        assert result.ok
        mock_store.set.assert_awaited_once_with(TASKS_STORAGE_KEY, encode_tasks(tasks))

    async def test_save_reports_write_failure(self, mock_store: Any) -> None:
        """Test a store failure is returned, not raised."""
        mock_store.set.side_effect = StorageError("disk full")
        persistence = TaskPersistence(mock_store)

        result = await persistence.save(make_tasks())

        assert isinstance(result.error, StorageError)
        assert len(result.tasks) == 3

    async def test_save_reports_encode_failure(self, mock_store: Any) -> None:
        """Test an unencodable task is returned as EncodeError."""
        persistence = TaskPersistence(mock_store)

        result = await persistence.save([Task(title="No id", due_date=NOW)])

        assert isinstance(result.error, EncodeError)
        mock_store.set.assert_not_called()


@pytest.mark.unit
@pytest.mark.asyncio
class TestPersistenceLoad:
    """Test cases for loading the collection."""

    async def test_load_absent_key_returns_empty(self, mock_store: Any) -> None:
        """Test an absent blob is not an error."""
        persistence = TaskPersistence(mock_store)

        result = await persistence.load()

        assert result.ok
        assert result.tasks == []
        mock_store.get.assert_awaited_once_with(TASKS_STORAGE_KEY)

    async def test_load_corrupted_blob_returns_empty(self, mock_store: Any) -> None:
        """Test a corrupted blob yields an empty list and a DecodeError."""
        mock_store.get.return_value = b'[{"id": "broken"'
        persistence = TaskPersistence(mock_store)

        result = await persistence.load()

        assert result.tasks == []
        assert isinstance(result.error, DecodeError)

    async def test_load_wrong_shape_returns_empty(self, mock_store: Any) -> None:
        """Test valid JSON of the wrong shape is treated as malformed."""
        mock_store.get.return_value = b'{"tasks": []}'
        persistence = TaskPersistence(mock_store)

        result = await persistence.load()

        assert result.tasks == []
        assert isinstance(result.error, DecodeError)

    @pytest.mark.parametrize("due_date", [b"1e20", b"-1e12", b"NaN", b"-Infinity"])
    async def test_load_out_of_range_numeric_date_returns_empty(
        self, mock_store: Any, due_date: bytes
    ) -> None:
        """Test numeric due dates that cannot become a datetime are malformed."""
        mock_store.get.return_value = (
            b'[{"id": "00000000-0000-0000-0000-000000000001", "title": "x", "dueDate": '
            + due_date
            + b"}]"
        )
        persistence = TaskPersistence(mock_store)

        result = await persistence.load()

        assert result.tasks == []
        assert isinstance(result.error, DecodeError)

    async def test_load_read_failure_returns_empty(self, mock_store: Any) -> None:
        """Test a store read failure yields an empty list and the error."""
        mock_store.get.side_effect = StorageError("locked")
        persistence = TaskPersistence(mock_store)

        result = await persistence.load()

        assert result.tasks == []
        assert isinstance(result.error, StorageError)

    async def test_load_drops_duplicate_ids(self, mock_store: Any) -> None:
        """Test only the first task per id is kept."""
        first, second, third = make_tasks()
        duplicate = Task(id=first.id, title="Impostor", due_date=NOW)
        mock_store.get.return_value = encode_tasks([first, duplicate, second, third])
        persistence = TaskPersistence(mock_store)

        result = await persistence.load()

        assert result.ok
        assert result.tasks == [first, second, third]

    async def test_custom_key(self, mock_store: Any) -> None:
        """Test the storage key can be overridden."""
        persistence = TaskPersistence(mock_store, key="otherTasks")

        await persistence.load()

        mock_store.get.assert_awaited_once_with("otherTasks")


@pytest.mark.integration
@pytest.mark.asyncio
class TestPersistenceRoundTrip:
    """Round-trip tests against a real SQLite store."""

    async def test_load_returns_saved_tasks(self) -> None:
        """Test load(save(tasks)) yields the same tasks."""
        tasks = make_tasks()
        persistence = TaskPersistence(SQLiteKeyValueStore(":memory:"))
        await persistence.initialize()

        try:
            save_result = await persistence.save(tasks)
            load_result = await persistence.load()
        finally:
            await persistence.store.close()

        assert save_result.ok
        assert load_result.ok
        assert set(load_result.tasks) == set(tasks)

    async def test_save_overwrites_previous_collection(self) -> None:
        """Test the latest save replaces earlier ones."""
        tasks = make_tasks()
        persistence = TaskPersistence(SQLiteKeyValueStore(":memory:"))
        await persistence.initialize()

        try:
            await persistence.save(tasks)
            await persistence.save(tasks[:1])
            result = await persistence.load()
        finally:
            await persistence.store.close()

        assert result.tasks == tasks[:1]

    async def test_corrupted_stored_blob_loads_empty(self) -> None:
        """Test garbage written directly to the store loads as empty."""
        store = SQLiteKeyValueStore(":memory:")
        persistence = TaskPersistence(store)
        await persistence.initialize()

        try:
            await store.set(TASKS_STORAGE_KEY, b"\x00garbage")
            result = await persistence.load()
        finally:
            await store.close()

        assert result.tasks == []
        assert isinstance(result.error, DecodeError)
