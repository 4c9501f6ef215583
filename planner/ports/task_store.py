"""Port interface for task persistence (task store boundary)."""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from planner.app.schemas import Task, TaskCreate, TaskStats, TaskUpdate


@runtime_checkable
class ITaskStore(Protocol):
    """Task store abstraction shared by the memory, MongoDB and SQL backends.

    Not-found is reported through ``None``/``False`` results. Infrastructure
    failures raise ``StorageError``.
    """

    backend: str

    def connect(self) -> None:
        """Run one-time initialization; safe to call repeatedly and concurrently."""

    def close(self) -> None:
        """Release backend resources."""

    def list_tasks(self, date: Optional[str] = None) -> list[Task]:
        """Return all tasks, or only those whose date equals ``date``."""

    def get_task(self, task_id: str) -> Optional[Task]:
        """Return a task by id or None when missing."""

    def create_task(self, payload: TaskCreate) -> Task:
        """Persist a new task with a generated id and return it as stored."""

    def update_task(self, task_id: str, patch: TaskUpdate) -> Optional[Task]:
        """Merge the supplied fields into a task; None when the task is missing."""

    def delete_task(self, task_id: str) -> bool:
        """Remove a task; True when something was deleted."""

    def weekly_stats(self, start_date: str, end_date: str) -> TaskStats:
        """Count completed/pending tasks with start_date <= date <= end_date."""
