"""Errors raised while reading or saving the document file."""

from pathlib import Path


class DocumentError(Exception):
    """Base class for problems with the document file.

    Attributes:
        path: The document's path
        message: Human-readable description without the path
    """

    def __init__(self, path: Path, message: str):
        self.path = Path(path)
        self.message = message
        super().__init__(f"{message}: {path}")


class DocumentReadError(DocumentError):
    """The document exists but is not UTF-8 text."""


class FileModifiedError(DocumentError):
    """The document changed on disk since it was loaded or last saved.

    Saving anyway would throw away somebody else's edits, so the save is
    abandoned and the file on disk is left as it is.

    Attributes:
        stage: ``"before_write"`` when the change was already there when
            the save started, ``"before_rename"`` when it landed while the
            new content was being written
    """

    def __init__(self, path: Path, stage: str):
        self.stage = stage
        super().__init__(path, f"Document changed on disk {stage.replace('_', ' ')}")
