"""Helpers for date-range filtering, weekly counts and calendar weeks."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable, List, Tuple

from planner.app.schemas import Task, TaskStats


def in_range(task: Task, start_date: str, end_date: str) -> bool:
    """Inclusive bounds; ISO dates are zero-padded so string order is calendar order."""

    return start_date <= task.date <= end_date


def summarize(tasks: Iterable[Task]) -> TaskStats:
    completed = 0
    pending = 0
    for task in tasks:
        if task.completed:
            completed += 1
        else:
            pending += 1
    return TaskStats(completed=completed, pending=pending, total=completed + pending)


def week_start(day: date) -> date:
    # Weeks run Sunday..Saturday; date.weekday() has Monday == 0.
    return day - timedelta(days=(day.weekday() + 1) % 7)


def week_bounds(day: date) -> Tuple[str, str]:
    start = week_start(day)
    return start.isoformat(), (start + timedelta(days=6)).isoformat()


def week_days(day: date) -> List[str]:
    start = week_start(day)
    return [(start + timedelta(days=offset)).isoformat() for offset in range(7)]
