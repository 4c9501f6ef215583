import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from planner.app.config import Settings, get_settings
from planner.app.core.errors import StorageError
from planner.app.core.logging_config import configure_logging
from planner.deps import create_task_store
from planner.ports.task_store import ITaskStore
from planner.routes import tasks

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, store: Optional[ITaskStore] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.app_log_level)
    task_store = store if store is not None else create_task_store(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Connect before serving traffic so misconfiguration fails at startup
        await run_in_threadpool(task_store.connect)
        logger.info("Planner started", extra={"backend": task_store.backend})
        try:
            yield
        finally:
            await run_in_threadpool(task_store.close)

    app = FastAPI(
        title="Planner",
        version="1.0.0",
        docs_url="/docs",
        redoc_url=None,
        lifespan=lifespan,
    )
    app.state.task_store = task_store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = [{"loc": list(err.get("loc", ())), "msg": err.get("msg", "")} for err in exc.errors()]
        return JSONResponse(status_code=400, content={"detail": errors})

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError):
        logger.error(
            "Storage failure on %s %s: %s",
            request.method,
            request.url.path,
            exc.message,
            exc_info=exc,
            extra={"backend": task_store.backend},
        )
        return JSONResponse(status_code=500, content={"detail": "Storage backend unavailable"})

    app.include_router(tasks.router, prefix="/api", tags=["tasks"])

    @app.get("/healthz")
    async def healthz() -> dict:
        return {"status": "ok", "backend": task_store.backend}

    return app


app = create_app()
