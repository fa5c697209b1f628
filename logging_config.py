"""Logging setup for the server and the demo.

- Logs go to a rotating UTF-8 file, ``logs/skirmish.log`` unless overridden.
- Console output is off by default so it does not interleave with the rich
  demo view; when on, it goes through ``rich.logging.RichHandler``.
- Idempotent: handlers are found by name and updated, never duplicated.

Environment overrides:
    SKIRMISH_LOG_LEVEL=DEBUG|INFO|WARNING|ERROR
    SKIRMISH_LOG_FILE=path/to/file.log
"""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

from rich.logging import RichHandler

_FILE_HANDLER_NAME = "skirmish_file"
_CONSOLE_HANDLER_NAME = "skirmish_console"
DEFAULT_LOG_PATH = Path("logs") / "skirmish.log"


def parse_level(level: str | int) -> int:
    """Level name or number → logging level; unknown names mean INFO."""
    if isinstance(level, int):
        return level
    name = (level or "").strip().upper()
    value = logging.getLevelName(name) if name else logging.INFO
    return value if isinstance(value, int) else logging.INFO


def _resolve_log_path(log_file: str | None) -> Path:
    path = Path(log_file) if log_file else DEFAULT_LOG_PATH
    if not path.is_absolute():
        path = Path.cwd() / path
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def setup_logging(
    *,
    level: str | int = "INFO",
    log_file: str | None = None,
    enable_file: bool = True,
    enable_console: bool = False,
    console_level: str | int = "WARNING",
    max_bytes: int = 2 * 1024 * 1024,
    backup_count: int = 5,
) -> logging.Logger:
    """Configure the root logger and return it."""
    level = os.environ.get("SKIRMISH_LOG_LEVEL") or level
    log_file = os.environ.get("SKIRMISH_LOG_FILE") or log_file

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)  # handlers filter

    existing = {getattr(h, "name", ""): h for h in root.handlers}

    log_path = None
    if enable_file:
        log_path = _resolve_log_path(log_file)
        file_handler = existing.get(_FILE_HANDLER_NAME)
        if file_handler is None:
            file_handler = RotatingFileHandler(
                str(log_path),
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding="utf-8",
            )
            file_handler.name = _FILE_HANDLER_NAME
            root.addHandler(file_handler)
        file_handler.setFormatter(logging.Formatter(
            fmt="%(asctime)s %(levelname)-8s %(name)s:%(lineno)d | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))
        file_handler.setLevel(parse_level(level))

    if enable_console:
        console_handler = existing.get(_CONSOLE_HANDLER_NAME)
        if console_handler is None:
            console_handler = RichHandler(show_path=False, rich_tracebacks=True)
            console_handler.name = _CONSOLE_HANDLER_NAME
            root.addHandler(console_handler)
        console_handler.setFormatter(logging.Formatter("%(name)s | %(message)s"))
        console_handler.setLevel(parse_level(console_level))

    logging.getLogger(__name__).info(
        "Logging initialized | level=%s file=%s console=%s",
        level, log_path, enable_console,
    )
    return root
