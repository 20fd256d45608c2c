"""File modification monitoring for concurrent edit detection."""

from pathlib import Path
from typing import Dict, Optional


class FileMonitor:
    """
    Track file modification times to detect external changes.

    Used to detect when a document is changed outside the editor (another
    editor, a sync client, ``outlinemap add`` from a second shell) before
    the TUI saves over it.

    A path recorded while it did not exist yet is tracked as "absent":
    it counts as modified once something creates it.

    Example:
        >>> monitor = FileMonitor()
        >>> monitor.record(Path("notes.md"))
        >>> # Later, before write:
        >>> if monitor.is_modified(Path("notes.md")):
        ...     ...  # refuse to overwrite
    """

    def __init__(self) -> None:
        """Initialize empty file tracker."""
        self._mtimes: Dict[Path, Optional[float]] = {}

    def record(self, path: Path) -> None:
        """
        Record current modification time for a file.

        Args:
            path: File path to track (may not exist yet)
        """
        self._mtimes[path] = path.stat().st_mtime if path.exists() else None

    def is_modified(self, path: Path) -> bool:
        """
        Check if file has been modified since last record.

        Args:
            path: File path to check

        Returns:
            True if file modified or not yet tracked, False otherwise
        """
        if path not in self._mtimes:
            return True
        current_mtime = path.stat().st_mtime if path.exists() else None
        return current_mtime != self._mtimes[path]

    def refresh(self, path: Path) -> None:
        """
        Update recorded modification time after a successful save or reload.

        Args:
            path: File path to refresh
        """
        self.record(path)
