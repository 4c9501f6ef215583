"""Task store selection and request-scoped dependency providers."""

from __future__ import annotations

import logging

from fastapi import Request

from planner.adapters.task_store_memory import MemoryTaskStore
from planner.adapters.task_store_mongo import MongoTaskStore
from planner.adapters.task_store_sql import SqlTaskStore
from planner.app.config import Settings
from planner.app.core.errors import StorageConfigError
from planner.ports.task_store import ITaskStore

logger = logging.getLogger(__name__)


def create_task_store(settings: Settings) -> ITaskStore:
    """Build (but do not connect) the task store selected by TASK_STORE_BACKEND."""
    backend = (settings.task_store_backend or "memory").strip().lower()
    logger.info("TaskStore backend=%s", backend, extra={"backend": backend})
    if backend in {"mongo", "mongodb"}:
        return MongoTaskStore(
            settings.mongodb_url,
            database=settings.mongodb_database,
            collection=settings.mongodb_collection,
            timeout_ms=settings.mongodb_timeout_ms,
        )
    if backend in {"sql", "sqlite", "postgres"}:
        return SqlTaskStore(settings.database_url)
    if backend == "memory":
        return MemoryTaskStore()
    raise StorageConfigError(f"Unknown TASK_STORE_BACKEND: {backend}")


def get_task_store(request: Request) -> ITaskStore:
    """Return the store the app factory attached to ``app.state``."""
    return request.app.state.task_store
