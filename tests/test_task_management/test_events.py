"""Tests for the task event bus."""

import uuid
from datetime import datetime
from unittest.mock import Mock

import pytest

from taskmaster.task_management.events import (
    TaskAdded,
    TaskDeleted,
    TaskEventBus,
    TaskEventKind,
    TaskStatusChanged,
    TaskUpdated,
)
from taskmaster.task_management.models import Task


@pytest.fixture
def sample_task() -> Task:
    """Create a sample task for testing."""
    return Task(id=uuid.uuid4(), title="Event task", due_date=datetime(2026, 3, 15))


@pytest.mark.unit
class TestEventVariants:
    """Test cases for the closed set of event types."""

    def test_event_kinds(self, sample_task: Task) -> None:
        """Test each event variant reports its kind."""
        assert TaskAdded(task=sample_task).kind == TaskEventKind.ADDED
        assert TaskDeleted(task=sample_task).kind == TaskEventKind.DELETED
        assert TaskUpdated(task=sample_task).kind == TaskEventKind.UPDATED
        assert (
            TaskStatusChanged(task=sample_task, is_completed=True).kind
            == TaskEventKind.STATUS_CHANGED
        )

    def test_status_changed_carries_completion(self, sample_task: Task) -> None:
        """Test the status event carries the resulting completion value."""
        event = TaskStatusChanged(task=sample_task, is_completed=False)

        assert event.is_completed is False
        assert event.task == sample_task


@pytest.mark.unit
class TestTaskEventBus:
    """Test cases for publishing and subscribing."""

    def test_publish_reaches_all_subscribers(self, sample_task: Task) -> None:
        """Test every subscriber receives the event in order."""
        bus = TaskEventBus()
        received: list[str] = []
        bus.subscribe(lambda event: received.append("first"))
        bus.subscribe(lambda event: received.append("second"))

        bus.publish(TaskAdded(task=sample_task))

        assert received == ["first", "second"]

    def test_unsubscribe_stops_delivery(self, sample_task: Task) -> None:
        """Test an unsubscribed callback is no longer called."""
        bus = TaskEventBus()
        callback = Mock()
        unsubscribe = bus.subscribe(callback)

        unsubscribe()
        unsubscribe()
        bus.publish(TaskAdded(task=sample_task))

        callback.assert_not_called()
        assert bus.subscriber_count == 0

    def test_failing_subscriber_does_not_block_others(self, sample_task: Task) -> None:
        """Test an exception in one callback is logged and contained."""
        bus = TaskEventBus()
        failing = Mock(side_effect=RuntimeError("boom"))
        healthy = Mock()
        bus.subscribe(failing)
        bus.subscribe(healthy)

        event = TaskDeleted(task=sample_task)
        bus.publish(event)

        failing.assert_called_once_with(event)
        healthy.assert_called_once_with(event)

    def test_publish_without_subscribers(self, sample_task: Task) -> None:
        """Test publishing with no subscribers is harmless."""
        TaskEventBus().publish(TaskUpdated(task=sample_task))
