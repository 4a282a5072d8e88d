"""Logging setup shared by the CLI and library callers.

One console handler on stderr plus an optional file handler, both rendering
through :class:`ContextFormatter`:

    human:  2025-10-28T13:45:12.345Z | ERROR    | command=scaleBl | Output too large: 3000x2000, max 1920x1080
    json:   {"t": "2025-10-28T13:45:12.345+00:00", "lvl": "ERROR", "name": "pnmdump.cli", "command": "scaleBl", "msg": "..."}

Context fields (``command=...``) live in a contextvar and are attached to
every record rendered while they are set.

Usage:
    from pnmdump.utils.logging_config import configure_from, log_context

    configure_from(cfg.logging, level="DEBUG")
    with log_context(command="rotate90"):
        ...

setup_logging() is idempotent: it replaces the handlers it installed before
and leaves handlers installed by anyone else (e.g. pytest's caplog) alone.
"""

import contextvars
import json
import logging
import logging.handlers
import os
import sys
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from .validators import LoggingConfig

_context: contextvars.ContextVar = contextvars.ContextVar("pnmdump_log_context", default={})

# Handlers owned by setup_logging()
_installed: List[logging.Handler] = []

LEVEL_COLORS = {
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
    "CRITICAL": "\033[35m",
}
RESET = "\033[0m"


# ============================================================================
# FORMATTER
# ============================================================================

class ContextFormatter(logging.Formatter):
    """Render records as pipe-separated text or as one JSON object per line.

    Parameters
    ----------
    mode : str
        "human" or "json"
    use_color : bool
        Colorize the level name; ignored unless stderr is a terminal
    """

    MODES = ("human", "json")

    def __init__(self, mode: str = "human", use_color: bool = False):
        super().__init__()
        if mode not in self.MODES:
            raise ValueError(f"Unknown log format {mode!r}, expected one of {self.MODES}")
        self.mode = mode
        self.use_color = use_color and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        fields = _context.get()
        if self.mode == "json":
            return self._as_json(record, created, fields)
        return self._as_text(record, created, fields)

    def _as_json(self, record: logging.LogRecord, created: datetime, fields: Dict[str, Any]) -> str:
        payload = {
            "t": created.isoformat(timespec="milliseconds"),
            "lvl": record.levelname,
            "name": record.name,
            "pid": os.getpid(),
            **fields,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)

    def _as_text(self, record: logging.LogRecord, created: datetime, fields: Dict[str, Any]) -> str:
        level = f"{record.levelname:<8}"
        if self.use_color:
            level = LEVEL_COLORS.get(record.levelname, "") + level + RESET

        stamp = created.strftime("%Y-%m-%dT%H:%M:%S.") + f"{created.microsecond // 1000:03d}Z"
        columns = [stamp, level]
        if fields:
            columns.append(" ".join(f"{key}={value}" for key, value in fields.items()))
        columns.append(record.getMessage())

        text = " | ".join(columns)
        if record.exc_info:
            text += "\n" + self.formatException(record.exc_info)
        return text


# ============================================================================
# HANDLERS
# ============================================================================

def setup_logging(
    level: str = "WARNING",
    log_file: Optional[str] = None,
    *,
    json: bool = False,
    color: bool = True,
    to_stderr: bool = True,
    max_bytes: Optional[int] = None,
    backup_count: int = 3,
    context: Optional[Dict[str, Any]] = None,
) -> List[logging.Handler]:
    """Install console and file handlers on the root logger.

    Parameters
    ----------
    level : str
        Root level name, case-insensitive
    log_file : str, optional
        Append records to this file (parent directories are created)
    json : bool
        JSON lines in the log file instead of the human format
    color : bool
        Colored level names on the console
    to_stderr : bool
        Install the console handler
    max_bytes : int, optional
        Rotate the log file once it reaches this size
    backup_count : int
        Rotated files to keep
    context : dict, optional
        Fields pushed onto the logging context

    Returns
    -------
    list[logging.Handler]
        Handlers now installed
    """
    reset_logging()
    logging.getLogger().setLevel(level.upper())

    if to_stderr:
        console = logging.StreamHandler(sys.stderr)
        console.setFormatter(ContextFormatter("human", use_color=color))
        _installed.append(console)

    if log_file:
        _installed.append(_file_handler(Path(log_file), json, max_bytes, backup_count))

    root = logging.getLogger()
    for handler in _installed:
        root.addHandler(handler)

    if context:
        push_context(**context)

    # Route warnings.warn() through the same handlers
    logging.captureWarnings(True)
    return list(_installed)


def configure_from(
    cfg: LoggingConfig,
    level: Optional[str] = None,
    context: Optional[Dict[str, Any]] = None,
) -> List[logging.Handler]:
    """setup_logging() driven by the ``logging`` section of a tool config.

    ``level`` overrides ``cfg.level`` when given (e.g. from --log-level).
    """
    return setup_logging(
        level or cfg.level,
        cfg.file,
        json=cfg.json_format,
        color=cfg.color,
        max_bytes=cfg.max_bytes,
        backup_count=cfg.backup_count,
        context=context,
    )


def reset_logging() -> None:
    """Detach and close every handler installed by setup_logging()."""
    root = logging.getLogger()
    while _installed:
        handler = _installed.pop()
        root.removeHandler(handler)
        handler.close()


def _file_handler(
    path: Path,
    json_lines: bool,
    max_bytes: Optional[int],
    backup_count: int,
) -> logging.Handler:
    from . import fs

    fs.ensure_dir(path.parent)
    if max_bytes:
        handler: logging.Handler = logging.handlers.RotatingFileHandler(
            path, maxBytes=max_bytes, backupCount=backup_count
        )
    else:
        handler = logging.FileHandler(path)
    handler.setFormatter(ContextFormatter("json" if json_lines else "human"))
    return handler


# ============================================================================
# CONTEXT
# ============================================================================

def push_context(**fields: Any) -> None:
    """Attach ``fields`` to every record rendered from now on."""
    _context.set({**_context.get(), **fields})


def clear_context() -> None:
    _context.set({})


def get_context() -> Dict[str, Any]:
    return dict(_context.get())


@contextmanager
def log_context(**fields: Any) -> Iterator[None]:
    """Attach ``fields`` for the duration of a ``with`` block."""
    token = _context.set({**_context.get(), **fields})
    try:
        yield
    finally:
        _context.reset(token)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
