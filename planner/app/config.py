from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=False, extra="ignore", populate_by_name=True
    )

    # Task store backend: "memory" (default, lost on restart), "mongo" or "sql"
    task_store_backend: str = Field("memory", validation_alias="TASK_STORE_BACKEND")

    # MongoDB document store (required when TASK_STORE_BACKEND=mongo)
    mongodb_url: str = Field("", validation_alias="MONGODB_URL")
    mongodb_database: str = Field("planner", validation_alias="MONGODB_DATABASE")
    mongodb_collection: str = Field("tasks", validation_alias="MONGODB_COLLECTION")
    mongodb_timeout_ms: int = Field(5000, validation_alias="MONGODB_TIMEOUT_MS")

    # Relational store (TASK_STORE_BACKEND=sql); SQLite or Postgres URL
    database_url: str = Field("sqlite:///./planner.db", validation_alias="DATABASE_URL")

    app_log_level: str = Field("INFO", validation_alias="APP_LOG_LEVEL")
    # Comma-separated origins, e.g. "http://localhost:5173,https://planner.example"
    cors_allow_origins: str = Field("*", validation_alias="CORS_ALLOW_ORIGINS")

    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.cors_allow_origins.split(",") if origin.strip()]


@lru_cache()
def get_settings() -> Settings:
    return Settings()
