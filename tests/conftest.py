from __future__ import annotations

from pathlib import Path
from uuid import uuid4

import mongomock
import pytest
from fastapi.testclient import TestClient

from planner.adapters.task_store_memory import MemoryTaskStore
from planner.adapters.task_store_mongo import MongoTaskStore
from planner.adapters.task_store_sql import SqlTaskStore
from planner.app.config import Settings
from planner.main import create_app


def _mongo_store() -> MongoTaskStore:
    # Unique database per store so mongomock state never leaks between tests.
    return MongoTaskStore(
        "mongodb://localhost:27017",
        database=f"planner_test_{uuid4().hex}",
        client_factory=mongomock.MongoClient,
    )


@pytest.fixture()
def settings() -> Settings:
    return Settings(task_store_backend="memory", app_log_level="WARNING")


@pytest.fixture()
def mongo_store() -> MongoTaskStore:
    """Unconnected MongoDB store backed by mongomock."""
    return _mongo_store()


@pytest.fixture(params=["memory", "mongo", "sql"])
def store(request, tmp_path: Path):
    """Every backend, connected, so contract tests run against all of them."""

    if request.param == "memory":
        instance = MemoryTaskStore()
    elif request.param == "mongo":
        instance = _mongo_store()
    else:
        instance = SqlTaskStore(f"sqlite:///{tmp_path / 'tasks.sqlite3'}")
    instance.connect()
    yield instance
    instance.close()


@pytest.fixture()
def client(settings: Settings, store):
    app = create_app(settings=settings, store=store)
    with TestClient(app) as test_client:
        yield test_client
