"""Filtering and statistics over task sequences.

All functions are pure: they never modify their input and take the
reference time explicitly.
"""

from collections.abc import Iterable
from datetime import datetime

from .models import Task, TaskCategory, TaskFilter, TaskPriority, TaskStatistics


def sort_by_due_date(tasks: Iterable[Task]) -> list[Task]:
    """Return a new list ordered by due date, ties kept in input order."""
    return sorted(tasks, key=lambda task: task.due_date)


def matches_filter(task: Task, task_filter: TaskFilter, now: datetime) -> bool:
    """Return True if a task belongs to the named view at ``now``."""
    if task_filter == TaskFilter.ALL:
        return True
    if task_filter == TaskFilter.TODAY:
        return task.due_date.date() == now.date()
    if task_filter == TaskFilter.UPCOMING:
        return task.due_date > now and not task.is_completed
    if task_filter == TaskFilter.COMPLETED:
        return task.is_completed
    raise ValueError(f"Unknown task filter: {task_filter!r}")


def filter_tasks(
    tasks: Iterable[Task], task_filter: TaskFilter, now: datetime
) -> list[Task]:
    """Return the tasks in the named view, sorted by due date."""
    return sort_by_due_date(t for t in tasks if matches_filter(t, task_filter, now))


def count_completed(tasks: Iterable[Task]) -> int:
    return sum(1 for task in tasks if task.is_completed)


def count_overdue(tasks: Iterable[Task], now: datetime) -> int:
    return sum(1 for task in tasks if task.is_overdue(now))


def completion_rate(tasks: Iterable[Task]) -> float:
    """Completed share of the tasks, 0.0 for an empty sequence."""
    tasks = list(tasks)
    if not tasks:
        return 0.0
    return count_completed(tasks) / len(tasks)


def count_by_priority(tasks: Iterable[Task], priority: TaskPriority) -> int:
    return sum(1 for task in tasks if task.priority == priority)


def count_by_category(tasks: Iterable[Task], category: TaskCategory) -> int:
    return sum(1 for task in tasks if task.category == category)


def compute_statistics(tasks: Iterable[Task], now: datetime) -> TaskStatistics:
    """
    Compute every aggregate in one pass over the tasks.

    Distributions list every priority and category, zero-filled, in
    declaration order.
    """
    by_priority = {priority: 0 for priority in TaskPriority}
    by_category = {category: 0 for category in TaskCategory}
    total = completed = overdue = 0

    for task in tasks:
        total += 1
        if task.is_completed:
            completed += 1
        elif task.due_date < now:
            overdue += 1
        by_priority[task.priority] += 1
        by_category[task.category] += 1

    return TaskStatistics(
        total=total,
        completed=completed,
        overdue=overdue,
        completion_rate=completed / total if total else 0.0,
        by_priority=by_priority,
        by_category=by_category,
    )
