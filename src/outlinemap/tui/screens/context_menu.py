"""Context menu shown over the graph canvas."""

from typing import Optional

from textual import events
from textual.app import ComposeResult
from textual.binding import Binding
from textual.screen import ModalScreen
from textual.widgets import OptionList
from textual.widgets.option_list import Option

from outlinemap.models.interaction import MENU_LABELS, MenuAction


class ContextMenuScreen(ModalScreen[Optional[MenuAction]]):
    """Small menu anchored at the clicked cell.

    Dismisses with the chosen action, or None when the user presses Escape
    or clicks anywhere outside the menu.
    """

    DEFAULT_CSS = """
    ContextMenuScreen {
        background: transparent;
    }

    #context-menu {
        width: auto;
        min-width: 18;
        height: auto;
        border: round $secondary;
        background: $panel;
        padding: 0;
    }

    #context-menu > .option-list--option-highlighted {
        background: $accent;
        text-style: bold;
    }
    """

    BINDINGS = [
        Binding("escape", "close", "Close", show=False),
    ]

    def __init__(self, actions: list[MenuAction], anchor: tuple[int, int]) -> None:
        super().__init__()
        self._actions = actions
        self._anchor = anchor
        self._closed = False

    def compose(self) -> ComposeResult:
        yield OptionList(
            *[Option(MENU_LABELS[action], id=action.value) for action in self._actions],
            id="context-menu",
        )

    def on_mount(self) -> None:
        menu = self.query_one("#context-menu", OptionList)
        menu.styles.offset = self._anchor
        menu.highlighted = 0 if self._actions else None
        menu.focus()

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        event.stop()
        self._close(MenuAction(event.option_id))

    def on_mouse_down(self, event: events.MouseDown) -> None:
        widget, _ = self.get_widget_at(event.screen_x, event.screen_y)
        if widget is self:
            event.stop()
            self._close(None)

    def action_close(self) -> None:
        self._close(None)

    def _close(self, action: Optional[MenuAction]) -> None:
        # A click and a key can both land before the screen is popped.
        if self._closed:
            return
        self._closed = True
        self.dismiss(action)
