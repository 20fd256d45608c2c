"""Modal dialogs for structural edits.

TopicInputScreen collects the text of a new heading. The ConfirmScreen
family asks before a subtree is removed or unsaved changes are dropped.
They only report the user's answer; the controller applies the edit.
"""

from typing import Optional

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Static


class TopicInputScreen(ModalScreen[Optional[str]]):
    """Ask for the text of a new topic.

    Dismisses with the typed text (untrimmed), or None on Escape/Cancel.
    """

    DEFAULT_CSS = """
    TopicInputScreen {
        align: center middle;
        background: $background 60%;
    }

    #topic-dialog {
        width: 60;
        height: auto;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #topic-title {
        text-style: bold;
        padding-bottom: 1;
    }

    #topic-buttons {
        height: auto;
        align-horizontal: right;
        padding-top: 1;
    }

    #topic-buttons Button {
        margin-left: 1;
    }
    """

    BINDINGS = [
        Binding("escape", "cancel", "Cancel", show=False),
    ]

    def __init__(self, title: str, value: str = "") -> None:
        super().__init__()
        self._title = title
        self._value = value

    def compose(self) -> ComposeResult:
        with Vertical(id="topic-dialog"):
            yield Static(self._title, id="topic-title", markup=False)
            yield Input(value=self._value, placeholder="Topic text", id="topic-input")
            with Horizontal(id="topic-buttons"):
                yield Button("Cancel", id="topic-cancel")
                yield Button("Create", variant="primary", id="topic-create")

    def on_mount(self) -> None:
        self.query_one("#topic-input", Input).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        self.dismiss(event.value)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        if event.button.id == "topic-create":
            self.dismiss(self.query_one("#topic-input", Input).value)
        else:
            self.dismiss(None)

    def action_cancel(self) -> None:
        self.dismiss(None)


class ConfirmScreen(ModalScreen[bool]):
    """Yes/no question with a labelled confirm button."""

    # Nothing takes focus, so enter and y reach the screen bindings.
    AUTO_FOCUS = None

    DEFAULT_CSS = """
    ConfirmScreen {
        align: center middle;
        background: $background 60%;
    }

    #confirm-dialog {
        width: 60;
        height: auto;
        border: round $error;
        background: $panel;
        padding: 1 2;
    }

    #confirm-buttons {
        height: auto;
        align-horizontal: right;
        padding-top: 1;
    }

    #confirm-buttons Button {
        margin-left: 1;
    }
    """

    BINDINGS = [
        Binding("enter,y", "confirm", "Confirm"),
        Binding("escape,n", "cancel", "Cancel"),
    ]

    def __init__(self, title: str, confirm_label: str = "OK") -> None:
        super().__init__()
        self._title = title
        self._confirm_label = confirm_label

    def compose(self) -> ComposeResult:
        with Vertical(id="confirm-dialog"):
            yield Static(self._title, id="confirm-title", markup=False)
            with Horizontal(id="confirm-buttons"):
                yield Button("Cancel", id="confirm-cancel")
                yield Button(self._confirm_label, variant="error", id="confirm-ok")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        self.dismiss(event.button.id == "confirm-ok")

    def action_confirm(self) -> None:
        self.dismiss(True)

    def action_cancel(self) -> None:
        self.dismiss(False)


class ConfirmDeleteScreen(ConfirmScreen):
    """Confirmation before deleting a subtree."""

    def __init__(self, title: str) -> None:
        super().__init__(title, confirm_label="Delete")


class ConfirmQuitScreen(ConfirmScreen):
    """Confirmation before quitting with unsaved changes."""

    def __init__(self, title: str) -> None:
        super().__init__(title, confirm_label="Quit")
