"""Shared test fixtures for all test modules."""

import pytest
import structlog

from heading_outline.parser import HeadingOutline


SAMPLE_BUFFER = "# A\n## B\n## C\n# D"

NOTES_BUFFER = """# Project
Intro paragraph.

## Goals
- ship it

## Risks
### Scope creep

# Notes
Loose thoughts.
"""


@pytest.fixture
def sample_outline():
    """The four-heading buffer: A[B, C] and D under the root."""
    return HeadingOutline.parse(SAMPLE_BUFFER)


@pytest.fixture
def notes_outline():
    """A realistic document with body text, blank lines and three levels."""
    return HeadingOutline.parse(NOTES_BUFFER)


@pytest.fixture(autouse=True)
def isolated_home(tmp_path_factory, monkeypatch):
    """
    Point HOME at a throwaway directory.

    Keeps log files and the default config location out of the real home
    directory while tests run.
    """
    home = tmp_path_factory.mktemp("home")
    structlog.contextvars.clear_contextvars()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setattr(
        "outlinemap.config.DEFAULT_CONFIG_PATH",
        home / ".config" / "outlinemap" / "config.yaml",
    )
    return home
