"""MongoDB-backed task store (durable document backend)."""

from __future__ import annotations

import contextlib
import logging
import threading
import time
from typing import Any, Callable, Iterator, Optional

from bson import ObjectId
from pymongo import ASCENDING, MongoClient, ReturnDocument
from pymongo.errors import PyMongoError

from planner.app.core.errors import StorageConfigError, StorageError, StorageUnavailableError
from planner.app.schemas import Task, TaskCreate, TaskStats, TaskUpdate
from planner.ports.task_store import ITaskStore

logger = logging.getLogger(__name__)


def _object_id(task_id: str) -> Optional[ObjectId]:
    if not ObjectId.is_valid(task_id):
        return None
    return ObjectId(task_id)


def _doc_to_task(doc: dict[str, Any]) -> Task:
    return Task(
        id=str(doc["_id"]),
        title=doc["title"],
        description=doc.get("description") or "",
        date=doc["date"],
        start_time=doc["start_time"],
        end_time=doc["end_time"],
        completed=bool(doc.get("completed", False)),
    )


class MongoTaskStore(ITaskStore):
    """Task store persisted as documents in a MongoDB collection.

    ``connect()`` is memoized behind a lock: concurrent first callers make a
    single connection attempt and all see the same outcome. Operations
    invoked before ``connect()`` go through the same guarded path.
    """

    backend = "mongo"

    def __init__(
        self,
        url: str,
        database: str = "planner",
        collection: str = "tasks",
        *,
        timeout_ms: int = 5000,
        client_factory: Callable[..., Any] = MongoClient,
    ) -> None:
        self._url = url
        self._database = database
        self._collection_name = collection
        self._timeout_ms = timeout_ms
        self._client_factory = client_factory
        self._lock = threading.Lock()
        self._client: Any = None
        self._collection: Any = None
        self._failure: Optional[StorageError] = None

    def connect(self) -> None:
        if self._collection is not None:
            return
        with self._lock:
            if self._collection is not None:
                return
            if self._failure is not None:
                raise self._failure
            try:
                self._collection = self._open()
            except StorageError as exc:
                self._failure = exc
                raise

    def _open(self) -> Any:
        if not self._url:
            raise StorageConfigError("MONGODB_URL is not configured")
        started = time.monotonic()
        client = None
        try:
            client = self._client_factory(self._url, serverSelectionTimeoutMS=self._timeout_ms)
            client.admin.command("ping")
            collection = client[self._database][self._collection_name]
            collection.create_index([("date", ASCENDING)])
        except PyMongoError as exc:
            if client is not None:
                client.close()
            logger.error(
                "MongoDB connect failed: %s",
                exc,
                extra={"backend": self.backend, "op": "connect"},
            )
            raise StorageUnavailableError("MongoDB is unreachable", cause=exc) from exc
        self._client = client
        logger.info(
            "MongoTaskStore ready db=%s collection=%s",
            self._database,
            self._collection_name,
            extra={
                "backend": self.backend,
                "op": "connect",
                "elapsed_ms": int((time.monotonic() - started) * 1000),
            },
        )
        return collection

    def close(self) -> None:
        with self._lock:
            if self._client is not None:
                self._client.close()
            self._client = None
            self._collection = None

    def _tasks(self) -> Any:
        self.connect()
        collection = self._collection
        if collection is None:
            raise StorageError("MongoDB task store is closed")
        return collection

    @contextlib.contextmanager
    def _translate_errors(self, op: str, task_id: Optional[str] = None) -> Iterator[None]:
        try:
            yield
        except PyMongoError as exc:
            logger.exception(
                "MongoDB %s failed",
                op,
                extra={"backend": self.backend, "op": op, "task": task_id or "-"},
            )
            raise StorageError(f"MongoDB {op} failed", cause=exc) from exc

    def list_tasks(self, date: Optional[str] = None) -> list[Task]:
        query = {"date": date} if date else {}
        with self._translate_errors("list"):
            return [_doc_to_task(doc) for doc in self._tasks().find(query)]

    def get_task(self, task_id: str) -> Optional[Task]:
        oid = _object_id(task_id)
        if oid is None:
            return None
        with self._translate_errors("get", task_id):
            doc = self._tasks().find_one({"_id": oid})
        return _doc_to_task(doc) if doc else None

    def create_task(self, payload: TaskCreate) -> Task:
        doc = payload.model_dump()
        with self._translate_errors("create"):
            result = self._tasks().insert_one(doc)
        doc["_id"] = result.inserted_id
        task = _doc_to_task(doc)
        logger.debug("Task created", extra={"backend": self.backend, "op": "create", "task": task.id})
        return task

    def update_task(self, task_id: str, patch: TaskUpdate) -> Optional[Task]:
        oid = _object_id(task_id)
        if oid is None:
            return None
        changes = patch.changes()
        with self._translate_errors("update", task_id):
            if not changes:
                doc = self._tasks().find_one({"_id": oid})
            else:
                doc = self._tasks().find_one_and_update(
                    {"_id": oid},
                    {"$set": changes},
                    return_document=ReturnDocument.AFTER,
                )
        return _doc_to_task(doc) if doc else None

    def delete_task(self, task_id: str) -> bool:
        oid = _object_id(task_id)
        if oid is None:
            return False
        with self._translate_errors("delete", task_id):
            result = self._tasks().delete_one({"_id": oid})
        deleted = result.deleted_count > 0
        if deleted:
            logger.debug("Task deleted", extra={"backend": self.backend, "op": "delete", "task": task_id})
        return deleted

    def weekly_stats(self, start_date: str, end_date: str) -> TaskStats:
        query: dict[str, Any] = {"date": {"$gte": start_date, "$lte": end_date}}
        with self._translate_errors("stats"):
            total = self._tasks().count_documents(query)
            completed = self._tasks().count_documents({**query, "completed": True})
        return TaskStats(completed=completed, pending=total - completed, total=total)
