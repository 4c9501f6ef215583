import logging
import os
from typing import Optional

# Structured fields passed through ``extra=`` by the task stores and the app.
STORE_FIELDS = ("backend", "op", "task", "elapsed_ms")

LOG_FORMAT = (
    "%(asctime)s %(levelname)s %(name)s "
    "backend=%(backend)s op=%(op)s task=%(task)s elapsed_ms=%(elapsed_ms)s "
    "%(message)s"
)

_CONFIGURED = False


class StoreFieldsFormatter(logging.Formatter):
    """Render records from any logger, filling missing store fields with ``-``."""

    def format(self, record: logging.LogRecord) -> str:
        for key in STORE_FIELDS:
            if not hasattr(record, key):
                setattr(record, key, "-")
        return super().format(record)


def _resolve_level(level: Optional[str]) -> int:
    name = (level or os.getenv("APP_LOG_LEVEL") or os.getenv("LOG_LEVEL") or "INFO").upper()
    return getattr(logging, name, logging.INFO)


def configure_logging(level: Optional[str] = None) -> None:
    global _CONFIGURED
    if _CONFIGURED:
        return

    resolved_level = _resolve_level(level)
    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(StoreFieldsFormatter(LOG_FORMAT))
        root.addHandler(handler)
    root.setLevel(resolved_level)

    # uvicorn installs its own handlers; keep its loggers at the app level
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(name).setLevel(resolved_level)

    _CONFIGURED = True
