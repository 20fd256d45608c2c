"""UI tests for the editor + mind map application.

These tests use Textual pilot to drive the app with keys, mouse events
and posted messages, then check the editor buffer and the graph.
"""

import time

import numpy as np
import pytest

from outlinemap.models.config import Config, EditorConfig
from outlinemap.services.file_monitor import FileMonitor
from outlinemap.tui.app import OutlineMapApp
from outlinemap.tui.screens import (
    ConfirmDeleteScreen,
    ConfirmQuitScreen,
    ContextMenuScreen,
    TopicInputScreen,
)
from outlinemap.tui.widgets import GraphCanvas


BUFFER = "# A\n## B\n## C\n# D"
SIZE = (120, 40)


def node_texts(app):
    return [node.text for node in app.canvas.nodes]


async def focus_canvas(app, pilot, node_id=None):
    app.canvas.focus()
    app.canvas.select_node(node_id)
    await pilot.pause()


@pytest.mark.asyncio
async def test_graph_shows_every_heading():
    app = OutlineMapApp(BUFFER)

    async with app.run_test(size=SIZE) as pilot:
        await pilot.pause()

        assert node_texts(app) == ["Root", "A", "B", "C", "D"]
        assert app.canvas.simulation.running or app.canvas.simulation.settled


@pytest.mark.asyncio
async def test_typing_rebuilds_graph():
    app = OutlineMapApp(BUFFER)

    async with app.run_test(size=SIZE) as pilot:
        await pilot.pause()
        old_simulation = app.canvas.simulation

        app.editor.insert("\n## E", app.editor.document.end)
        await pilot.pause()

        assert node_texts(app) == ["Root", "A", "B", "C", "D", "E"]
        assert app.canvas.simulation is not old_simulation
        assert not old_simulation.running


@pytest.mark.asyncio
async def test_node_click_moves_editor_caret():
    app = OutlineMapApp("intro\n\n" + BUFFER)

    async with app.run_test(size=SIZE) as pilot:
        await pilot.pause()
        node = next(n for n in app.canvas.nodes if n.text == "D")

        app.canvas.post_message(GraphCanvas.NodeClicked(node))
        await pilot.pause()

        assert app.editor.cursor_location == (5, 0)


@pytest.mark.asyncio
async def test_mouse_click_on_node():
    app = OutlineMapApp(BUFFER)

    async with app.run_test(size=SIZE) as pilot:
        await pilot.pause()
        canvas = app.canvas
        canvas.simulation.stop()
        canvas.simulation.positions[:] = np.array(
            [[-160, -160], [-160, 160], [160, -160], [160, 160], [0, 0]], dtype=float
        )
        canvas.refresh()
        await pilot.pause()

        col, row = canvas._geometry().to_cell(0.0, 0.0)
        # +1 for the canvas border
        await pilot.click(GraphCanvas, offset=(col + 1, row + 1))
        await pilot.pause()

        assert canvas.selected_node.text == "D"
        assert app.editor.cursor_location == (3, 0)


@pytest.mark.asyncio
async def test_mouse_drag_pins_node_then_releases():
    app = OutlineMapApp(BUFFER)

    async with app.run_test(size=SIZE) as pilot:
        await pilot.pause()
        canvas = app.canvas
        canvas.simulation.stop()
        canvas.simulation.positions[:] = np.array(
            [[-160, -160], [-160, 160], [160, -160], [160, 160], [0, 0]], dtype=float
        )
        col, row = canvas._geometry().to_cell(0.0, 0.0)

        await pilot.mouse_down(GraphCanvas, offset=(col + 1, row + 1))
        await pilot.hover(GraphCanvas, offset=(col + 6, row + 3))
        await pilot.pause()

        assert canvas.simulation.dragging == 4
        assert canvas.simulation.is_pinned(4)
        assert canvas.simulation.alpha_target == pytest.approx(0.3)

        await pilot.mouse_up(GraphCanvas, offset=(col + 6, row + 3))
        await pilot.pause()

        assert canvas.simulation.dragging is None
        assert not canvas.simulation.is_pinned(4)
        assert canvas.simulation.alpha_target == 0.0
        # A drag is not a click.
        assert app.editor.cursor_location == (0, 0)


@pytest.mark.asyncio
async def test_editor_caret_selects_enclosing_node():
    app = OutlineMapApp(BUFFER)

    async with app.run_test(size=SIZE) as pilot:
        await pilot.pause()

        app.editor.move_cursor((2, 1))
        await pilot.pause()

        assert app.canvas.selected_node.text == "C"


@pytest.mark.asyncio
async def test_add_child_from_keyboard():
    app = OutlineMapApp(BUFFER)

    async with app.run_test(size=SIZE) as pilot:
        await pilot.pause()
        await focus_canvas(app, pilot, "heading-0")

        await pilot.press("a")
        await pilot.pause()
        assert isinstance(app.screen, TopicInputScreen)

        await pilot.press("e", "enter")
        await pilot.pause()

        assert app.editor.text == "# A\n## B\n## C\n## e\n# D"
        assert node_texts(app) == ["Root", "A", "B", "C", "e", "D"]


@pytest.mark.asyncio
async def test_add_topic_and_undo():
    app = OutlineMapApp(BUFFER)

    async with app.run_test(size=SIZE) as pilot:
        await pilot.pause()
        await focus_canvas(app, pilot)

        await pilot.press("n")
        await pilot.pause()
        await pilot.press("z", "enter")
        await pilot.pause()
        assert app.editor.text == BUFFER + "\n# z"

        app.editor.undo()
        await pilot.pause()

        assert app.editor.text == BUFFER
        assert node_texts(app) == ["Root", "A", "B", "C", "D"]


@pytest.mark.asyncio
async def test_cancel_input_dialog():
    app = OutlineMapApp(BUFFER)

    async with app.run_test(size=SIZE) as pilot:
        await pilot.pause()
        await focus_canvas(app, pilot, "heading-3")

        await pilot.press("a")
        await pilot.pause()
        await pilot.press("q", "escape")
        await pilot.pause()

        assert not isinstance(app.screen, TopicInputScreen)
        assert app.editor.text == BUFFER


@pytest.mark.asyncio
async def test_delete_with_confirmation():
    app = OutlineMapApp(BUFFER)

    async with app.run_test(size=SIZE) as pilot:
        await pilot.pause()
        await focus_canvas(app, pilot, "heading-0")

        await pilot.press("d")
        await pilot.pause()
        assert isinstance(app.screen, ConfirmDeleteScreen)

        await pilot.press("y")
        await pilot.pause()

        assert app.editor.text == "# D"
        assert node_texts(app) == ["Root", "D"]


@pytest.mark.asyncio
async def test_delete_declined():
    app = OutlineMapApp(BUFFER)

    async with app.run_test(size=SIZE) as pilot:
        await pilot.pause()
        await focus_canvas(app, pilot, "heading-0")

        await pilot.press("d")
        await pilot.pause()
        await pilot.press("n")
        await pilot.pause()

        assert app.editor.text == BUFFER


@pytest.mark.asyncio
async def test_context_menu_delete():
    app = OutlineMapApp(BUFFER)

    async with app.run_test(size=SIZE) as pilot:
        await pilot.pause()
        await focus_canvas(app, pilot, "heading-1")

        await pilot.press("m")
        await pilot.pause()
        assert isinstance(app.screen, ContextMenuScreen)
        assert app.controller.menu.target_id == "heading-1"

        # "Add child" is highlighted first, "Delete subtree" second.
        await pilot.press("down", "enter")
        await pilot.pause()
        assert isinstance(app.screen, ConfirmDeleteScreen)

        await pilot.press("enter")
        await pilot.pause()

        assert app.editor.text == "# A\n## C\n# D"


@pytest.mark.asyncio
async def test_context_menu_escape():
    app = OutlineMapApp(BUFFER)

    async with app.run_test(size=SIZE) as pilot:
        await pilot.pause()
        await focus_canvas(app, pilot)

        await pilot.press("m")
        await pilot.pause()
        assert isinstance(app.screen, ContextMenuScreen)
        assert app.controller.menu.actions[0].value == "add_topic"

        await pilot.press("escape")
        await pilot.pause()

        assert not isinstance(app.screen, ContextMenuScreen)
        assert not app.controller.menu.is_open
        assert app.editor.text == BUFFER


@pytest.mark.asyncio
async def test_read_only_blocks_structural_edits():
    app = OutlineMapApp(BUFFER, read_only=True)

    async with app.run_test(size=SIZE) as pilot:
        await pilot.pause()
        await focus_canvas(app, pilot, "heading-0")

        await pilot.press("d", "a", "n", "m")
        await pilot.pause()

        assert len(app.screen_stack) == 1
        assert app.editor.text == BUFFER
        assert app.editor.read_only


@pytest.mark.asyncio
async def test_read_only_from_config():
    config = Config(editor=EditorConfig(read_only=True, show_line_numbers=False))
    app = OutlineMapApp(BUFFER, config=config)

    async with app.run_test(size=SIZE) as pilot:
        await pilot.pause()

        assert app.read_only
        assert app.controller.read_only
        assert not app.editor.show_line_numbers


@pytest.mark.asyncio
async def test_save_writes_document(tmp_path):
    path = tmp_path / "notes.md"
    path.write_text(BUFFER)
    monitor = FileMonitor()
    monitor.record(path)
    app = OutlineMapApp(BUFFER, document_path=path, file_monitor=monitor)

    async with app.run_test(size=SIZE) as pilot:
        await pilot.pause()
        await focus_canvas(app, pilot, "heading-3")
        await pilot.press("a")
        await pilot.pause()
        await pilot.press("x", "enter")
        await pilot.pause()
        assert app.is_dirty

        await pilot.press("ctrl+s")
        await pilot.pause()

        assert path.read_text() == BUFFER + "\n## x"
        assert not app.is_dirty


@pytest.mark.asyncio
async def test_save_refuses_to_overwrite_external_change(tmp_path):
    path = tmp_path / "notes.md"
    path.write_text(BUFFER)
    monitor = FileMonitor()
    monitor.record(path)
    app = OutlineMapApp(BUFFER, document_path=path, file_monitor=monitor)

    async with app.run_test(size=SIZE) as pilot:
        await pilot.pause()
        time.sleep(0.01)
        path.write_text("# Edited elsewhere")

        await pilot.press("ctrl+s")
        await pilot.pause()

        assert path.read_text() == "# Edited elsewhere"


@pytest.mark.asyncio
async def test_dialogs_show_bracketed_heading_text():
    app = OutlineMapApp("# Fix [/] parser\n# B")

    async with app.run_test(size=SIZE) as pilot:
        await pilot.pause()
        await focus_canvas(app, pilot, "heading-0")

        await pilot.press("d")
        await pilot.pause()
        assert isinstance(app.screen, ConfirmDeleteScreen)
        await pilot.press("escape")
        await pilot.pause()

        await pilot.press("a")
        await pilot.pause()
        assert isinstance(app.screen, TopicInputScreen)
        await pilot.press("escape")
        await pilot.pause()

        await pilot.press("d")
        await pilot.pause()
        await pilot.press("y")
        await pilot.pause()

        assert app.editor.text == "# B"


@pytest.mark.asyncio
async def test_save_notifies_bracketed_file_name(tmp_path):
    path = tmp_path / "[draft] notes.md"
    path.write_text(BUFFER)
    app = OutlineMapApp(BUFFER, document_path=path)

    async with app.run_test(size=SIZE) as pilot:
        await pilot.pause()
        app.editor.insert("\n# E", app.editor.document.end)
        await pilot.pause()

        await pilot.press("ctrl+s")
        await pilot.pause()

        assert path.read_text() == BUFFER + "\n# E"


async def make_dirty(app, pilot):
    await pilot.pause()
    app.editor.insert("\n# E", app.editor.document.end)
    await pilot.pause()
    assert app.is_dirty


@pytest.mark.asyncio
async def test_quit_with_unsaved_changes_asks_first(tmp_path):
    path = tmp_path / "notes.md"
    path.write_text(BUFFER)
    app = OutlineMapApp(BUFFER, document_path=path)

    async with app.run_test(size=SIZE) as pilot:
        await make_dirty(app, pilot)

        await pilot.press("ctrl+q")
        await pilot.pause()
        assert isinstance(app.screen, ConfirmQuitScreen)

        await pilot.press("n")
        await pilot.pause()

        assert not isinstance(app.screen, ConfirmQuitScreen)
        assert app.return_code is None
        assert app.is_dirty

    assert path.read_text() == BUFFER


@pytest.mark.asyncio
async def test_quit_confirmed_discards_changes(tmp_path):
    path = tmp_path / "notes.md"
    path.write_text(BUFFER)
    app = OutlineMapApp(BUFFER, document_path=path)

    async with app.run_test(size=SIZE) as pilot:
        await make_dirty(app, pilot)

        await pilot.press("ctrl+q")
        await pilot.pause()
        await pilot.press("y")

    assert app.return_code == 0
    assert path.read_text() == BUFFER


@pytest.mark.asyncio
async def test_quit_without_changes_exits_at_once(tmp_path):
    path = tmp_path / "notes.md"
    path.write_text(BUFFER)
    app = OutlineMapApp(BUFFER, document_path=path)

    async with app.run_test(size=SIZE) as pilot:
        await pilot.pause()
        await pilot.press("ctrl+q")

    assert app.return_code == 0
