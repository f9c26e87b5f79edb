"""Example demonstrating Task State Manager usage."""

import asyncio
from datetime import datetime, timedelta

from taskmaster.task_management import (
    Task,
    TaskCategory,
    TaskEvent,
    TaskFilter,
    TaskPriority,
    TaskStatusChanged,
    create_task_state_manager,
)
from taskmaster.task_management.logging_utils import configure_logging

configure_logging()


def show_toast(event: TaskEvent) -> None:
    """Print the feedback a UI would show as a toast."""
    if isinstance(event, TaskStatusChanged):
        state = "completed" if event.is_completed else "reopened"
        print(f"  [toast] '{event.task.title}' {state}")
    else:
        print(f"  [toast] task {event.kind.value}: '{event.task.title}'")


async def main() -> None:
    """Demonstrate Task State Manager functionality."""
    manager = await create_task_state_manager(":memory:")
    manager.subscribe(show_toast)

    now = datetime.now()

    try:
        # Example 1: Add tasks
        print("=== Adding tasks ===")
        report = await manager.add_task(
            Task(
                title="Write report",
                due_date=now + timedelta(days=2),
                priority=TaskPriority.HIGH,
                category=TaskCategory.WORK,
            )
        )
        await manager.add_task(
            Task(title="Buy groceries", due_date=now + timedelta(hours=3),
                 category=TaskCategory.SHOPPING)
        )
        await manager.add_task(
            Task(title="Renew gym pass", due_date=now - timedelta(days=1),
                 category=TaskCategory.HEALTH, priority=TaskPriority.LOW)
        )
        print()

        # Example 2: Toggle completion
        print("=== Completing a task ===")
        await manager.toggle_completion(report.id)
        print()

        # Example 3: Filtered views
        for task_filter in TaskFilter:
            titles = [task.title for task in manager.filtered_tasks(task_filter)]
            print(f"{task_filter.title}: {titles}")
        print()

        # Example 4: Statistics
        print("=== Statistics ===")
        stats = manager.statistics()
        print(f"Total: {stats.total}, completed: {stats.completed}, "
              f"overdue: {stats.overdue}, rate: {stats.completion_rate:.0%}")
        for priority, count in stats.by_priority.items():
            print(f"  {priority.value} ({priority.color}): {count}")
        for category, count in stats.by_category.items():
            print(f"  {category.value} ({category.icon}): {count}")

    finally:
        await manager.shutdown()


if __name__ == "__main__":
    asyncio.run(main())
