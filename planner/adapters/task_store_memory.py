"""In-process task store (default backend, lost on restart)."""

from __future__ import annotations

import threading
from typing import Optional
from uuid import uuid4

from planner.app.schemas import Task, TaskCreate, TaskStats, TaskUpdate
from planner.app.task_stats import in_range, summarize
from planner.ports.task_store import ITaskStore


class MemoryTaskStore(ITaskStore):
    """Task store backed by a dict keyed by task id."""

    backend = "memory"

    def __init__(self) -> None:
        self._tasks: dict[str, Task] = {}
        self._lock = threading.Lock()

    def connect(self) -> None:
        return

    def close(self) -> None:
        return

    def list_tasks(self, date: Optional[str] = None) -> list[Task]:
        with self._lock:
            tasks = list(self._tasks.values())
        if date:
            return [task for task in tasks if task.date == date]
        return tasks

    def get_task(self, task_id: str) -> Optional[Task]:
        with self._lock:
            return self._tasks.get(task_id)

    def create_task(self, payload: TaskCreate) -> Task:
        task = Task(id=str(uuid4()), **payload.model_dump())
        with self._lock:
            self._tasks[task.id] = task
        return task

    def update_task(self, task_id: str, patch: TaskUpdate) -> Optional[Task]:
        with self._lock:
            current = self._tasks.get(task_id)
            if current is None:
                return None
            updated = current.model_copy(update=patch.changes())
            self._tasks[task_id] = updated
        return updated

    def delete_task(self, task_id: str) -> bool:
        with self._lock:
            return self._tasks.pop(task_id, None) is not None

    def weekly_stats(self, start_date: str, end_date: str) -> TaskStats:
        with self._lock:
            tasks = list(self._tasks.values())
        return summarize(task for task in tasks if in_range(task, start_date, end_date))
