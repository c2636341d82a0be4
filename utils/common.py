"""Logging, trace identifiers and path helpers for WebView Inspector.

Every module logs through a child of the ``webview_inspector`` logger, which
owns a single file per application run. A page load opens its own trace id
(:func:`start_page_trace`) so the bridge, navigation and injection records
of one page can be picked out of the run log together.
"""

from __future__ import annotations

import datetime as dt
import logging
import os
import platform
import uuid
from contextlib import contextmanager
from contextvars import ContextVar, Token
from pathlib import Path
from typing import Iterator, Optional

from config.constants import LogConstants


APP_LOGGER_NAME = "webview_inspector"
LOG_DIR_ENV = "WEBVIEW_INSPECTOR_LOG_DIR"

_TRACE_ID_DEFAULT = "-"
_TRACE_ID_VAR: ContextVar[str] = ContextVar("webview_inspector_trace_id", default=_TRACE_ID_DEFAULT)

_LOG_FILE_PREFIX = "webview_inspector_"
_FILE_FORMAT = "%(asctime)s.%(msecs)03d [%(trace_id)s] %(name)-36s %(levelname)-8s %(message)s"
_CONSOLE_FORMAT = "%(levelname)s [%(trace_id)s] %(message)s"

_log_level = logging.INFO


class TraceIdFilter(logging.Filter):
    """Augment log records with their active trace identifier."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.trace_id = get_trace_id()
        return True


def generate_trace_id() -> str:
    """Return a new short random trace identifier."""
    return uuid.uuid4().hex[:12]


def get_trace_id() -> str:
    """Return the current trace identifier ("-" when unset)."""
    return _TRACE_ID_VAR.get()


def set_trace_id(trace_id: Optional[str]) -> Token[str]:
    """Set the active trace identifier and return the context token."""
    value = trace_id or _TRACE_ID_DEFAULT
    return _TRACE_ID_VAR.set(value)


def reset_trace_id(token: Token[str]) -> None:
    """Reset the trace identifier to the previous context."""
    _TRACE_ID_VAR.reset(token)


@contextmanager
def trace_id_scope(trace_id: Optional[str]) -> Iterator[None]:
    """Context manager that temporarily sets the trace identifier."""
    token = set_trace_id(trace_id)
    try:
        yield
    finally:
        reset_trace_id(token)


def start_page_trace(url: str) -> str:
    """Open the trace for one page load and record which URL it covers."""
    trace_id = generate_trace_id()
    with trace_id_scope(trace_id):
        get_logger("trace").info("Page trace opened for %s", url)
    return trace_id


def _resolve_logs_dir() -> Path:
    """Return the directory where run logs are written."""
    override = os.environ.get(LOG_DIR_ENV)
    if override:
        return Path(override).expanduser()

    if platform.system().lower() == "linux":
        xdg_data_home = os.environ.get("XDG_DATA_HOME")
        if xdg_data_home:
            return Path(xdg_data_home) / "webview_inspector" / "logs"
        return Path.home() / ".local" / "share" / "webview_inspector" / "logs"

    return Path.home() / ".webview_inspector_logs"


def _prune_old_logs(logs_dir: Path, keep: int) -> int:
    """Delete all but the ``keep`` newest run logs; returns how many went."""
    # File names embed the start time, so name order is age order.
    run_logs = sorted(
        (path for path in logs_dir.glob(f"{_LOG_FILE_PREFIX}*.log") if path.is_file()),
        key=lambda path: path.name,
        reverse=True,
    )
    removed = 0
    for stale in run_logs[max(keep, 0):]:
        try:
            stale.unlink()
        except OSError as exc:
            logging.getLogger(f"{APP_LOGGER_NAME}.bootstrap").debug("Could not remove %s: %s", stale, exc)
            continue
        removed += 1
    return removed


def _open_log_file(logs_dir: Path) -> logging.FileHandler:
    started = dt.datetime.now().strftime("%Y%m%d_%H%M%S")
    filename = f"{_LOG_FILE_PREFIX}{started}_{os.getpid()}.log"
    try:
        logs_dir.mkdir(parents=True, exist_ok=True)
        return logging.FileHandler(logs_dir / filename, encoding="utf-8")
    except OSError:
        fallback_dir = Path.cwd() / "logs"
        fallback_dir.mkdir(parents=True, exist_ok=True)
        return logging.FileHandler(fallback_dir / filename, encoding="utf-8")


def _configure_app_logger() -> logging.Logger:
    app_logger = logging.getLogger(APP_LOGGER_NAME)
    if app_logger.handlers:
        return app_logger

    file_handler = _open_log_file(_resolve_logs_dir())
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(logging.Formatter(_CONSOLE_FORMAT))

    for handler in (file_handler, console_handler):
        handler.addFilter(TraceIdFilter())
        app_logger.addHandler(handler)
    app_logger.setLevel(_log_level)
    app_logger.propagate = False

    log_path = Path(file_handler.baseFilename)
    removed = _prune_old_logs(log_path.parent, LogConstants.LOG_FILES_KEPT)
    app_logger.info("Log file created: %s", log_path)
    if removed:
        app_logger.info("Removed %s old log file(s)", removed)
    return app_logger


def get_logger(name: str = APP_LOGGER_NAME) -> logging.Logger:
    """Return the application logger, or the child logger called ``name``."""
    app_logger = _configure_app_logger()
    if name == APP_LOGGER_NAME:
        return app_logger
    if name.startswith(f"{APP_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{APP_LOGGER_NAME}.{name}")


def set_log_level(level_name: str) -> int:
    """Apply a level name (e.g. ``"DEBUG"``) to the application logger.

    Child loggers inherit it. Unknown names fall back to INFO. Returns the
    numeric level applied.
    """
    global _log_level

    level = logging.getLevelName(str(level_name).upper())
    if not isinstance(level, int):
        level = logging.INFO
    _log_level = level
    logging.getLogger(APP_LOGGER_NAME).setLevel(level)
    return level


def get_full_path(path: str) -> str:
    """Return the expanded absolute path for the given path string."""
    return os.path.expanduser(path)


__all__ = [
    "APP_LOGGER_NAME",
    "LOG_DIR_ENV",
    "TraceIdFilter",
    "generate_trace_id",
    "get_full_path",
    "get_logger",
    "get_trace_id",
    "reset_trace_id",
    "set_log_level",
    "set_trace_id",
    "start_page_trace",
    "trace_id_scope",
]
