"""Structured logging setup for Outlinemap.

The terminal belongs to the TUI, so events never go to stdout. They are
written as JSON lines to ``~/.cache/outlinemap/logs/outlinemap.log``; the
document being edited is bound into every event once it is opened:

    {"document": "/home/me/notes.md", "target_id": "heading-3",
     "event": "subtree_deleted", "level": "info", "timestamp": "..."}

Log levels:
- DEBUG: simulation lifecycle, graph rebuilds, lookup misses
- INFO: structural edits, document loads and saves
- WARNING: save conflicts, discarded unsaved changes
- ERROR: file operation failures

The level comes from ``OUTLINEMAP_LOG_LEVEL`` (default INFO), or DEBUG with
``outlinemap --verbose``. Follow a session with::

    tail -f ~/.cache/outlinemap/logs/outlinemap.log | jq .
"""

import os
from pathlib import Path
from typing import IO, Any, Optional

import structlog

VALID_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

# (log file, level) currently installed, and the handle it writes to
_active: Optional[tuple[Path, str]] = None
_stream: Optional[IO[str]] = None


def log_path() -> Path:
    return Path.home() / ".cache" / "outlinemap" / "logs" / "outlinemap.log"


def _resolve_level(verbose: bool) -> str:
    if verbose:
        return "DEBUG"
    level = os.environ.get("OUTLINEMAP_LOG_LEVEL", "INFO").upper()
    return level if level in VALID_LEVELS else "INFO"


def configure_logging(verbose: bool = False) -> Path:
    """
    Configure structlog for JSON logging to the outlinemap log file.

    Calling it again with the same file and level is a no-op; a different
    file or level replaces the previous setup and closes its handle.

    Args:
        verbose: Force DEBUG level regardless of the environment

    Returns:
        Path of the log file
    """
    global _active, _stream

    log_file = log_path()
    level = _resolve_level(verbose)
    if _active == (log_file, level) and structlog.is_configured():
        return log_file

    log_file.parent.mkdir(parents=True, exist_ok=True)
    stream = open(log_file, "a", encoding="utf-8")

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.WriteLoggerFactory(file=stream),
        cache_logger_on_first_use=False,
    )

    if _stream is not None:
        _stream.close()
    _active, _stream = (log_file, level), stream
    return log_file


def bind_document(path: Path) -> None:
    """Tag every following event with the document being worked on."""
    structlog.contextvars.bind_contextvars(document=str(path.resolve()))


def get_logger(name: str) -> Any:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (typically __name__ of calling module)

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("subtree_deleted", target_id="heading-3", lines_after=12)
    """
    return structlog.get_logger(name)
