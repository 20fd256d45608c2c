"""Custom widgets for the Outlinemap TUI."""

from outlinemap.tui.widgets.graph_canvas import GraphCanvas
from outlinemap.tui.widgets.source_editor import SourceEditor

__all__ = [
    "GraphCanvas",
    "SourceEditor",
]
