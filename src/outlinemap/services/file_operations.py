"""Loading and saving the document buffer.

The editor buffer is the document, so a save writes it back exactly:
line endings are never translated in either direction (a CRLF file stays
CRLF) and the file keeps its permission bits.
"""

import os
import stat
import tempfile
from pathlib import Path
from typing import Optional

import structlog

from outlinemap.services.exceptions import DocumentReadError, FileModifiedError
from outlinemap.services.file_monitor import FileMonitor

logger = structlog.get_logger()


def load_document(path: Path, file_monitor: Optional[FileMonitor] = None) -> str:
    """
    Read a document buffer without newline translation.

    A path that does not exist yet is a new, empty document.

    Args:
        path: Markdown file
        file_monitor: Optional FileMonitor that starts tracking the file

    Returns:
        File contents, or "" for a new document

    Raises:
        DocumentReadError: If the file is not valid UTF-8
        OSError: If the file cannot be read
    """
    existed = path.exists()
    text = ""
    if existed:
        try:
            with open(path, encoding="utf-8", newline="") as f:
                text = f.read()
        except UnicodeDecodeError as e:
            raise DocumentReadError(path, f"Not UTF-8 text (byte {e.start})") from e

    if file_monitor:
        file_monitor.record(path)

    logger.info(
        "document_loaded",
        path=str(path),
        size=len(text),
        new=not existed,
        crlf="\r\n" in text,
    )
    return text


def _current_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


def _document_mode(path: Path) -> int:
    """Permission bits for the saved file: the existing file's, else umask defaults."""
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        return 0o666 & ~_current_umask()


def _ensure_unchanged(path: Path, file_monitor: Optional[FileMonitor], stage: str) -> None:
    if file_monitor is not None and file_monitor.is_modified(path):
        raise FileModifiedError(path, stage)


def atomic_write(
    path: Path,
    content: str,
    file_monitor: Optional[FileMonitor] = None
) -> None:
    """
    Save a document buffer over ``path``.

    The buffer is written verbatim to a temporary file next to the
    document, synced to disk, given the document's permission bits and
    renamed into place, so readers only ever see the old or the new file.
    With a file monitor the save is refused when the document changed on
    disk, both before writing and again right before the rename.

    Args:
        path: Document path
        content: Full buffer
        file_monitor: Optional FileMonitor for concurrent modification detection

    Raises:
        FileModifiedError: If the document changed on disk underneath us
        OSError: On file I/O errors (the temporary file is removed)
    """
    _ensure_unchanged(path, file_monitor, "before_write")
    mode = _document_mode(path)

    fd, temp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    temp_path = Path(temp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.chmod(temp_path, mode)

        _ensure_unchanged(path, file_monitor, "before_rename")
        os.replace(temp_path, path)

    except FileModifiedError:
        temp_path.unlink(missing_ok=True)
        raise

    except OSError as e:
        temp_path.unlink(missing_ok=True)
        logger.error("document_write_failed", path=str(path), error=str(e))
        raise

    if file_monitor:
        file_monitor.refresh(path)

    logger.debug("document_written", path=str(path), size=len(content), mode=oct(mode))
