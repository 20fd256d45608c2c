"""Unit tests for FileMonitor."""

import time

from outlinemap.services.file_monitor import FileMonitor


class TestFileMonitor:
    """Test FileMonitor class."""

    def test_record_and_check_unmodified(self, tmp_path):
        """Test recording a document and checking it hasn't changed."""
        monitor = FileMonitor()
        doc = tmp_path / "notes.md"
        doc.write_text("# Notes")

        monitor.record(doc)

        assert not monitor.is_modified(doc)

    def test_detect_modification(self, tmp_path):
        """Test detecting an external edit."""
        monitor = FileMonitor()
        doc = tmp_path / "notes.md"
        doc.write_text("# Notes")
        monitor.record(doc)

        # Wait a moment to ensure mtime changes
        time.sleep(0.01)
        doc.write_text("# Notes\n## Changed elsewhere")

        assert monitor.is_modified(doc)

    def test_refresh_after_save(self, tmp_path):
        """Test refreshing the tracker after our own save."""
        monitor = FileMonitor()
        doc = tmp_path / "notes.md"
        doc.write_text("# Notes")
        monitor.record(doc)

        time.sleep(0.01)
        doc.write_text("# Saved")
        assert monitor.is_modified(doc)

        monitor.refresh(doc)
        assert not monitor.is_modified(doc)

    def test_untracked_file_shows_as_modified(self, tmp_path):
        monitor = FileMonitor()
        doc = tmp_path / "notes.md"
        doc.write_text("# Notes")

        assert monitor.is_modified(doc)

    def test_absent_file_is_tracked(self, tmp_path):
        """A new document is unmodified until something creates it."""
        monitor = FileMonitor()
        doc = tmp_path / "new.md"

        monitor.record(doc)
        assert not monitor.is_modified(doc)

        doc.write_text("# Created by someone else")
        assert monitor.is_modified(doc)

    def test_deleted_file_shows_as_modified(self, tmp_path):
        monitor = FileMonitor()
        doc = tmp_path / "notes.md"
        doc.write_text("# Notes")
        monitor.record(doc)

        doc.unlink()

        assert monitor.is_modified(doc)
