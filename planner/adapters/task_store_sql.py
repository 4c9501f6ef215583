"""SQLAlchemy-backed task store (SQLite or Postgres)."""

from __future__ import annotations

import contextlib
import logging
import threading
from typing import Iterator, Optional
from uuid import uuid4

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from planner.app.core.errors import StorageConfigError, StorageError, StorageUnavailableError
from planner.app.db import Base, make_engine, make_session_factory
from planner.app.models import TaskRecord
from planner.app.schemas import Task, TaskCreate, TaskStats, TaskUpdate
from planner.ports.task_store import ITaskStore

logger = logging.getLogger(__name__)


def _record_to_task(record: TaskRecord) -> Task:
    return Task(
        id=record.id,
        title=record.title,
        description=record.description or "",
        date=record.date,
        start_time=record.start_time,
        end_time=record.end_time,
        completed=bool(record.completed),
    )


class SqlTaskStore(ITaskStore):
    """Task store persisted in a relational ``tasks`` table."""

    backend = "sql"

    def __init__(self, database_url: str) -> None:
        self._database_url = database_url
        self._lock = threading.Lock()
        self._engine = None
        self._session_factory: Optional[sessionmaker] = None
        self._failure: Optional[StorageError] = None

    def connect(self) -> None:
        if self._session_factory is not None:
            return
        with self._lock:
            if self._session_factory is not None:
                return
            if self._failure is not None:
                raise self._failure
            try:
                self._open()
            except StorageError as exc:
                self._failure = exc
                raise

    def _open(self) -> None:
        if not self._database_url:
            raise StorageConfigError("DATABASE_URL is not configured")
        try:
            engine = make_engine(self._database_url)
            # Initialize database schema (safe no-op if tables already exist)
            Base.metadata.create_all(bind=engine)
        except SQLAlchemyError as exc:
            logger.error(
                "Database connect failed: %s",
                exc,
                extra={"backend": self.backend, "op": "connect"},
            )
            raise StorageUnavailableError("Database is unreachable", cause=exc) from exc
        self._engine = engine
        self._session_factory = make_session_factory(engine)
        logger.info(
            "SqlTaskStore ready url=%s",
            engine.url.render_as_string(hide_password=True),
            extra={"backend": self.backend, "op": "connect"},
        )

    def close(self) -> None:
        with self._lock:
            if self._engine is not None:
                self._engine.dispose()
            self._engine = None
            self._session_factory = None

    @contextlib.contextmanager
    def _session(self, op: str, task_id: Optional[str] = None) -> Iterator[Session]:
        self.connect()
        session_factory = self._session_factory
        if session_factory is None:
            raise StorageError("SQL task store is closed")
        session = session_factory()
        try:
            yield session
        except SQLAlchemyError as exc:
            session.rollback()
            logger.exception(
                "Database %s failed",
                op,
                extra={"backend": self.backend, "op": op, "task": task_id or "-"},
            )
            raise StorageError(f"Database {op} failed", cause=exc) from exc
        finally:
            session.close()

    def list_tasks(self, date: Optional[str] = None) -> list[Task]:
        with self._session("list") as session:
            query = session.query(TaskRecord)
            if date:
                query = query.filter(TaskRecord.date == date)
            return [_record_to_task(record) for record in query.all()]

    def get_task(self, task_id: str) -> Optional[Task]:
        with self._session("get", task_id) as session:
            record = session.get(TaskRecord, task_id)
            return _record_to_task(record) if record else None

    def create_task(self, payload: TaskCreate) -> Task:
        with self._session("create") as session:
            record = TaskRecord(id=str(uuid4()), **payload.model_dump())
            session.add(record)
            session.commit()
            session.refresh(record)
            return _record_to_task(record)

    def update_task(self, task_id: str, patch: TaskUpdate) -> Optional[Task]:
        with self._session("update", task_id) as session:
            record = session.get(TaskRecord, task_id)
            if record is None:
                return None
            for key, value in patch.changes().items():
                setattr(record, key, value)
            session.commit()
            session.refresh(record)
            return _record_to_task(record)

    def delete_task(self, task_id: str) -> bool:
        with self._session("delete", task_id) as session:
            record = session.get(TaskRecord, task_id)
            if record is None:
                return False
            session.delete(record)
            session.commit()
            return True

    def weekly_stats(self, start_date: str, end_date: str) -> TaskStats:
        with self._session("stats") as session:
            rows = (
                session.query(TaskRecord.completed, func.count(TaskRecord.id))
                .filter(TaskRecord.date >= start_date, TaskRecord.date <= end_date)
                .group_by(TaskRecord.completed)
                .all()
            )
        completed = sum(count for done, count in rows if done)
        pending = sum(count for done, count in rows if not done)
        return TaskStats(completed=completed, pending=pending, total=completed + pending)
