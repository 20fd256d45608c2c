"""Main Outlinemap TUI application.

The screen is split in two: the markdown source on the left and the live
mind map of its headings on the right.

## Data flow

```
SourceEditor ──Changed──► parse ──► InteractionController.load()
                                └─► GraphCanvas.load_tree()

GraphCanvas ──NodeClicked──────► controller.node_clicked() ──► editor.go_to_line()
            ──NodeContextMenu──► controller.node_right_clicked() ──► ContextMenuScreen
            ──ActionRequested──► controller.request_action() ──► dialog screen

dialog result ──► controller.confirm() ──commit──► editor.replace_content()
                                                   └─► Changed (loop above)
```

The editor buffer is the single source of truth. The graph is rebuilt from
it after every change, including changes the graph itself caused.
"""

from pathlib import Path
from typing import Optional

from rich.markup import escape
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.widgets import Footer, Header, TextArea
import structlog

from heading_outline.navigator import find_enclosing
from heading_outline.parser import HeadingOutline
from outlinemap.interaction.controller import InteractionController
from outlinemap.models.config import Config
from outlinemap.models.interaction import DialogKind, DialogState, MenuAction
from outlinemap.services.exceptions import FileModifiedError
from outlinemap.services.file_monitor import FileMonitor
from outlinemap.services.file_operations import atomic_write
from outlinemap.tui.screens import (
    ConfirmDeleteScreen,
    ConfirmQuitScreen,
    ContextMenuScreen,
    TopicInputScreen,
)
from outlinemap.tui.widgets import GraphCanvas, SourceEditor

logger = structlog.get_logger()


class OutlineMapApp(App):
    """Side-by-side markdown editor and heading mind map."""

    TITLE = "Outlinemap"

    CSS = """
    Screen {
        background: $surface;
    }

    #panes {
        height: 1fr;
    }

    #source-editor {
        width: 1fr;
        height: 1fr;
    }

    #graph-canvas {
        width: 1fr;
    }
    """

    BINDINGS = [
        Binding("ctrl+s", "save", "Save", show=True),
        Binding("ctrl+q", "quit", "Quit", show=True, priority=True),
    ]

    def __init__(
        self,
        text: str,
        config: Optional[Config] = None,
        document_path: Optional[Path] = None,
        read_only: bool = False,
        file_monitor: Optional[FileMonitor] = None,
    ):
        """Initialize the Outlinemap app.

        Args:
            text: Initial document buffer
            config: Application configuration (defaults when None)
            document_path: File that ctrl+s writes to (None for an unsaved buffer)
            read_only: View the document without editing it
            file_monitor: Tracks external changes to document_path
        """
        super().__init__()
        self.config = config or Config()
        self.document_path = document_path
        self.read_only = read_only or self.config.editor.read_only
        self.file_monitor = file_monitor or FileMonitor()

        self.outline = HeadingOutline.parse(text)
        self.saved_text = text
        self.controller = InteractionController(
            self.outline,
            navigate=self._navigate,
            commit=self._commit,
            read_only=self.read_only,
        )

        if document_path is not None:
            self.sub_title = str(document_path)

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="panes"):
            yield SourceEditor(
                self.outline.source_text,
                read_only=self.read_only,
                show_line_numbers=self.config.editor.show_line_numbers,
            )
            yield GraphCanvas(
                self.outline.root,
                view_config=self.config.view,
                simulation_config=self.config.simulation,
                read_only=self.read_only,
                id="graph-canvas",
            )
        yield Footer()

    @property
    def editor(self) -> SourceEditor:
        return self.query_one(SourceEditor)

    @property
    def canvas(self) -> GraphCanvas:
        return self.query_one(GraphCanvas)

    @property
    def is_dirty(self) -> bool:
        return self.outline.source_text != self.saved_text

    # Buffer -> graph

    def on_text_area_changed(self, event: TextArea.Changed) -> None:
        self._rebuild(event.text_area.text)

    def on_text_area_selection_changed(self, event: TextArea.SelectionChanged) -> None:
        line = event.selection.end[0]
        node = find_enclosing(self.outline.root, line)
        self.canvas.select_node(None if node.is_root else node.id)

    def _rebuild(self, text: str) -> None:
        if text == self.outline.source_text:
            return
        self.outline = HeadingOutline.parse(text)
        self.controller.load(self.outline)
        self.canvas.load_tree(self.outline.root)
        logger.debug("outline_rebuilt", headings=len(self.outline.headings()))

    # Controller callbacks

    def _navigate(self, line: int) -> None:
        self.editor.go_to_line(line)

    def _commit(self, text: str) -> None:
        self.editor.replace_content(text)
        # The Changed event would get here too; rebuilding now keeps the
        # graph consistent for anything that runs before it is delivered.
        self._rebuild(text)

    # Graph -> controller

    def on_graph_canvas_node_clicked(self, message: GraphCanvas.NodeClicked) -> None:
        self.controller.node_clicked(message.node.level, message.node.text)

    def on_graph_canvas_node_context_menu(self, message: GraphCanvas.NodeContextMenu) -> None:
        menu = self.controller.node_right_clicked(message.anchor, message.node.id)
        self._show_menu(menu.is_open, menu.actions, message.anchor)

    def on_graph_canvas_background_context_menu(
        self, message: GraphCanvas.BackgroundContextMenu
    ) -> None:
        menu = self.controller.background_right_clicked(message.anchor)
        self._show_menu(menu.is_open, menu.actions, message.anchor)

    def on_graph_canvas_action_requested(self, message: GraphCanvas.ActionRequested) -> None:
        node_id = message.node.id if message.node is not None else None
        self._show_dialog(self.controller.request_action(message.action, node_id))

    def _show_menu(self, is_open: bool, actions: list[MenuAction], anchor: tuple[int, int]) -> None:
        if not is_open:
            return
        self.push_screen(ContextMenuScreen(actions, anchor), self._on_menu_closed)

    def _on_menu_closed(self, action: Optional[MenuAction]) -> None:
        if action is None:
            self.controller.dismiss_menu()
            return
        self._show_dialog(self.controller.choose(action))

    def _show_dialog(self, dialog: DialogState) -> None:
        if not dialog.is_open:
            return
        if dialog.kind == DialogKind.INPUT:
            self.push_screen(TopicInputScreen(dialog.title, dialog.value), self._on_input_closed)
        else:
            self.push_screen(ConfirmDeleteScreen(dialog.title), self._on_confirm_closed)

    def _on_input_closed(self, value: Optional[str]) -> None:
        if value is None:
            self.controller.cancel()
        else:
            self.controller.confirm(value)

    def _on_confirm_closed(self, confirmed: Optional[bool]) -> None:
        if confirmed:
            self.controller.confirm()
        else:
            self.controller.cancel()

    # Saving

    def action_save(self) -> None:
        """Write the buffer to the document file."""
        if self.document_path is None:
            self.notify("No file to save to", severity="warning")
            return
        if self.read_only:
            self.notify("Opened read-only", severity="warning")
            return

        name = escape(self.document_path.name)
        text = self.editor.text
        try:
            atomic_write(self.document_path, text, self.file_monitor)
        except FileModifiedError as e:
            logger.warning("save_conflict", path=str(self.document_path), stage=e.stage)
            self.notify(f"{name} changed on disk; not saved", severity="error")
            return
        except OSError as e:
            logger.error("save_failed", path=str(self.document_path), error=str(e))
            self.notify(f"Save failed: {escape(str(e))}", severity="error")
            return

        self.saved_text = text
        logger.info("document_saved", path=str(self.document_path), size=len(text))
        self.notify(f"Saved {name}")

    # Quitting

    def action_quit(self) -> None:
        """Quit, asking first when the buffer has unsaved changes."""
        logger.info("app_quit_requested", dirty=self.is_dirty)
        if not self.is_dirty or self.read_only or self.document_path is None:
            self.exit()
            return
        if isinstance(self.screen, ConfirmQuitScreen):
            return
        self.push_screen(
            ConfirmQuitScreen(f"Quit without saving changes to {self.document_path.name}?"),
            self._on_quit_closed,
        )

    def _on_quit_closed(self, confirmed: Optional[bool]) -> None:
        if confirmed:
            logger.warning("unsaved_changes_discarded", path=str(self.document_path))
            self.exit()
