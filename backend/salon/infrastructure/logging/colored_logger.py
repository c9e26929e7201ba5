"""Colored sync logger — ANSI-colored console logging for the local mirror.

Provides a SyncLogger with color-coded output per mirror stage, making it
easy to visually trace bulk loads, change-feed traffic and writes in the
terminal.

Color scheme:
    🟢 Green   — Bulk load
    🔵 Blue    — Change feed
    🟣 Magenta — Writes
    🟡 Yellow  — Resubscribe / resync
    🔴 Red     — Errors
"""

import logging
import time
from contextlib import contextmanager
from typing import Any


# ── ANSI Color Codes ─────────────────────────────────────────────────

class _Colors:
    """ANSI escape codes for terminal colors."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    BLUE = "\033[94m"
    MAGENTA = "\033[95m"
    GRAY = "\033[90m"


# ── Sync Stage Definitions ───────────────────────────────────────────

class SyncStage:
    """Predefined mirror stages with colors and icons."""

    LOAD = ("LOAD", _Colors.GREEN, "📥")
    FEED = ("FEED", _Colors.BLUE, "📡")
    WRITE = ("WRITE", _Colors.MAGENTA, "✏️")
    RESYNC = ("RESYNC", _Colors.YELLOW, "🔄")
    ERROR = ("ERROR", _Colors.RED, "❌")


# ── SyncLogger ───────────────────────────────────────────────────────

class SyncLogger:
    """Color-coded logger for the local mirror.

    Usage:
        log = SyncLogger("LocalMirror")
        with log.timed_step(SyncStage.LOAD, "Loading clients"):
            rows = await store.select_all(Table.CLIENTS)
    """

    def __init__(self, component_name: str):
        self._logger = logging.getLogger(component_name)

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def step_start(self, stage: tuple[str, str, str], message: str, **kwargs: Any) -> None:
        label, color, icon = stage
        formatted = (
            f"{color}{_Colors.BOLD}{icon} [{label}]{_Colors.RESET} "
            f"{color}{message}{_Colors.RESET}"
        )
        self._logger.info(formatted + _format_details(kwargs))

    def step_complete(self, stage: tuple[str, str, str], message: str, **kwargs: Any) -> None:
        label, color, icon = stage
        formatted = (
            f"{color}{icon} [{label}]{_Colors.RESET} "
            f"{_Colors.GREEN}✓ {message}{_Colors.RESET}"
        )
        self._logger.info(formatted + _format_details(kwargs))

    def step_error(
        self,
        stage: tuple[str, str, str],
        message: str,
        error: BaseException | None = None,
        *,
        level: int = logging.ERROR,
    ) -> None:
        """Log a stage failure in red. Warnings pass ``level=logging.WARNING``."""
        label, _, _ = stage
        formatted = (
            f"{_Colors.RED}{_Colors.BOLD}❌ [{label}]{_Colors.RESET} "
            f"{_Colors.RED}{message}{_Colors.RESET}"
        )
        if error:
            formatted += f" {_Colors.DIM}→ {type(error).__name__}: {error}{_Colors.RESET}"
        self._logger.log(level, formatted)

    def detail(self, message: str, **kwargs: Any) -> None:
        """Debug-level detail (gray/dimmed); used for per-event feed traffic."""
        formatted = f"   {_Colors.GRAY}├─ {message}{_Colors.RESET}"
        self._logger.debug(formatted + _format_details(kwargs))

    @contextmanager
    def timed_step(self, stage: tuple[str, str, str], message: str, **kwargs: Any):
        """Context manager that logs start/end with elapsed time.

        Failures are logged and re-raised.
        """
        self.step_start(stage, message, **kwargs)
        start = time.perf_counter()
        try:
            yield
        except Exception as e:
            elapsed = time.perf_counter() - start
            self.step_error(stage, f"{message} — failed after {elapsed:.2f}s", error=e)
            raise
        else:
            elapsed = time.perf_counter() - start
            self.step_complete(stage, f"{message} — {elapsed:.2f}s")


def _format_details(kwargs: dict[str, Any]) -> str:
    if not kwargs:
        return ""
    details = " | ".join(f"{k}={v}" for k, v in kwargs.items())
    return f" {_Colors.GRAY}({details}){_Colors.RESET}"
