import logging
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings

from salon.domain.entities import OrphanPolicy, WriteStrategy

_config_logger = logging.getLogger(__name__)

_BACKEND_DIR = Path(__file__).resolve().parents[1]
_ENV_FILES = (
    _BACKEND_DIR / ".env",
    ".env",
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    app_title: str = "Salon Admin API"
    app_version: str = "0.1.0"
    app_env: str = "development"
    cors_origins: list[str] = ["http://localhost:5173"]

    # Remote store: "supabase" (hosted) or "database" (self-hosted SQL)
    remote_store: Literal["supabase", "database"] = "database"

    # Supabase configuration
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_schema: str = "public"

    # Self-hosted store (SQLite by default, PostgreSQL via postgresql://...)
    database_url: str = "sqlite:///./salon.db"

    # Local mirror behaviour
    write_strategy: WriteStrategy = WriteStrategy.DIRECT
    orphan_policy: OrphanPolicy = OrphanPolicy.KEEP
    feed_echo_timeout: float = 2.0           # seconds, FEED strategy only
    feed_resubscribe_attempts: int = 5
    feed_resubscribe_delay: float = 1.0      # seconds, doubled per attempt
    resync_on_reconnect: bool = True

    # Logging — per-category log levels (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    log_level: str = "INFO"                  # Root / app-wide
    log_level_sql: str = "WARNING"           # sqlalchemy.engine — SQL queries
    log_level_http: str = "WARNING"          # httpx / httpcore — PostgREST calls
    log_level_uvicorn: str = "INFO"          # uvicorn.access / uvicorn.error
    log_level_mirror: str = "INFO"           # LocalMirror load / feed / writes
    log_level_realtime: str = "WARNING"      # Supabase realtime websocket

    model_config = {
        "env_file": _ENV_FILES,
        "env_file_encoding": "utf-8",
    }

    def model_post_init(self, __context: object) -> None:
        """Fall back to the self-hosted store when Supabase is not configured."""
        if self.remote_store == "supabase" and not (
            self.supabase_url.strip() and self.supabase_key.strip()
        ):
            _config_logger.warning(
                "REMOTE_STORE=supabase but SUPABASE_URL/SUPABASE_KEY are missing; "
                "using the database store instead"
            )
            object.__setattr__(self, "remote_store", "database")


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance — reads .env once."""
    return Settings()
