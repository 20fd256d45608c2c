"""Modal screens layered over the editor."""

from outlinemap.tui.screens.context_menu import ContextMenuScreen
from outlinemap.tui.screens.dialogs import (
    ConfirmDeleteScreen,
    ConfirmQuitScreen,
    ConfirmScreen,
    TopicInputScreen,
)

__all__ = [
    "ContextMenuScreen",
    "ConfirmScreen",
    "ConfirmDeleteScreen",
    "ConfirmQuitScreen",
    "TopicInputScreen",
]
