from typing import Optional


class StorageError(Exception):
    """Raised when a task store backend fails (connectivity, driver or schema errors)."""

    def __init__(self, message: str, *, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


class StorageConfigError(StorageError):
    """Raised when a durable backend is selected but not configured."""


class StorageUnavailableError(StorageError):
    """Raised when a durable backend cannot be reached during connect."""
