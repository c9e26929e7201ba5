"""Centralized logging configuration.

Each Settings ``log_level_*`` field controls a family of loggers, so the
chatty ones (SQL statements, PostgREST HTTP traffic, the Realtime websocket)
can be turned down while mirror sync stays visible.

Usage:
    from salon.infrastructure.logging.log_config import setup_logging
    setup_logging()   # once, from the FastAPI lifespan
"""

import logging
import sys

from salon.config import Settings, get_settings

_FORMAT = "%(levelname)-8s %(name)s — %(message)s"

# Settings field → logger names it governs.
LOGGER_CATEGORIES: dict[str, tuple[str, ...]] = {
    "log_level_sql": ("sqlalchemy.engine", "sqlalchemy.pool", "aiosqlite"),
    "log_level_http": ("httpx", "httpcore", "hpack"),
    "log_level_uvicorn": ("uvicorn", "uvicorn.access", "uvicorn.error"),
    # SyncLogger("LocalMirror") carries the coloured load/feed/write trace.
    "log_level_mirror": ("LocalMirror", "salon.application.services.local_mirror"),
    "log_level_realtime": ("realtime", "websockets", "salon.infrastructure.supabase"),
}


def setup_logging(settings: Settings | None = None) -> None:
    """Apply the root level and every per-category level from settings."""
    settings = settings or get_settings()

    root = logging.getLogger()
    root.setLevel(_parse_level(settings.log_level))
    if not root.handlers:
        # Uvicorn installs its own handler; tests and scripts do not.
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(_FORMAT))
        root.addHandler(handler)

    applied: dict[str, str] = {}
    for field, logger_names in LOGGER_CATEGORIES.items():
        raw = getattr(settings, field, "INFO")
        for name in logger_names:
            logging.getLogger(name).setLevel(_parse_level(raw))
        applied[field.removeprefix("log_level_")] = raw.upper()

    logging.getLogger(__name__).debug(
        "Logging configured — root=%s %s",
        settings.log_level.upper(),
        " ".join(f"{category}={level}" for category, level in applied.items()),
    )


def _parse_level(level_name: str) -> int:
    """Convert a level name such as ``"DEBUG"`` to its numeric value (INFO if unknown)."""
    level = logging.getLevelName(level_name.strip().upper())
    return level if isinstance(level, int) else logging.INFO
