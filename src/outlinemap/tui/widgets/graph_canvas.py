"""GraphCanvas widget: the live force-directed mind map.

The canvas owns one ForceSimulation per heading tree. Loading a new tree
tears the old simulation down (including any drag in progress) and starts
a fresh one. While the simulation runs, an interval timer ticks it and
repaints; once it settles the timer is paused until something (a drag, a
rebuild) warms it up again.

Gestures are resolved to nodes here and forwarded to the app as messages;
the canvas itself never edits the document.
"""

from typing import Optional

from rich.console import RenderableType
from rich.text import Text
from textual.binding import Binding
from textual.events import MouseDown, MouseMove, MouseScrollDown, MouseScrollUp, MouseUp
from textual.message import Message
from textual.widget import Widget
import structlog

from heading_outline.parser import HeadingNode
from outlinemap.layout.graph import GraphNode, flatten
from outlinemap.layout.simulation import ForceSimulation
from outlinemap.layout.viewport import Viewport
from outlinemap.models.config import SimulationConfig, ViewConfig
from outlinemap.models.interaction import MenuAction
from outlinemap.tui.raster import CanvasGeometry, hit_test, rasterize

logger = structlog.get_logger()


class GraphCanvas(Widget):
    """Interactive graph of the heading tree.

    Interaction:
    - Mouse: click a node to jump to it, right-click for the context menu,
      drag a node to pin it while moving, drag the background to pan,
      wheel to zoom about the pointer
    - Keyboard: tab/shift+tab select, enter jumps, m opens the menu,
      n/a/d add topic/add child/delete, +/-/0 zoom, arrows pan
    """

    DEFAULT_CSS = """
    GraphCanvas {
        height: 1fr;
        border: solid $primary;
        background: $surface;
    }

    GraphCanvas:focus {
        border: solid $accent;
    }
    """

    BINDINGS = [
        Binding("tab", "select_next", "Next node", show=False),
        Binding("shift+tab", "select_previous", "Previous node", show=False),
        Binding("enter", "open_selected", "Go to text"),
        Binding("m", "menu", "Menu"),
        Binding("n", "add_topic", "New topic"),
        Binding("a", "add_child", "Add child"),
        Binding("d", "delete", "Delete"),
        Binding("plus,equals_sign", "zoom_in", "Zoom in", show=False),
        Binding("minus", "zoom_out", "Zoom out", show=False),
        Binding("0", "reset_view", "Reset view", show=False),
        Binding("up", "pan(0, 1)", "Pan up", show=False),
        Binding("down", "pan(0, -1)", "Pan down", show=False),
        Binding("left", "pan(1, 0)", "Pan left", show=False),
        Binding("right", "pan(-1, 0)", "Pan right", show=False),
    ]

    can_focus = True

    class NodeClicked(Message):
        """Posted when a node is clicked (or chosen with enter)."""

        def __init__(self, node: GraphNode) -> None:
            super().__init__()
            self.node = node

    class NodeContextMenu(Message):
        """Posted when a node is right-clicked."""

        def __init__(self, node: GraphNode, anchor: tuple[int, int]) -> None:
            super().__init__()
            self.node = node
            self.anchor = anchor

    class BackgroundContextMenu(Message):
        """Posted when empty canvas is right-clicked."""

        def __init__(self, anchor: tuple[int, int]) -> None:
            super().__init__()
            self.anchor = anchor

    class ActionRequested(Message):
        """Posted when a structural action is requested from the keyboard."""

        def __init__(self, action: MenuAction, node: Optional[GraphNode]) -> None:
            super().__init__()
            self.action = action
            self.node = node

    def __init__(
        self,
        tree: HeadingNode,
        view_config: Optional[ViewConfig] = None,
        simulation_config: Optional[SimulationConfig] = None,
        read_only: bool = False,
        **kwargs,
    ):
        """Initialize GraphCanvas.

        Args:
            tree: Root of the heading tree to draw
            view_config: Rendering and navigation settings
            simulation_config: Force layout settings
            read_only: Hide structural actions (menu, add, delete)
        """
        super().__init__(**kwargs)
        self.view_config = view_config or ViewConfig()
        self.simulation_config = simulation_config or SimulationConfig()
        self.read_only = read_only
        self.viewport = Viewport(zoom_min=self.view_config.zoom_min, zoom_max=self.view_config.zoom_max)

        self.nodes: list[GraphNode] = []
        self.simulation: Optional[ForceSimulation] = None
        self._selected_index: Optional[int] = None
        self._timer = None
        self._press: Optional[dict] = None
        self.load_tree(tree)

    @property
    def selected_index(self) -> Optional[int]:
        return self._selected_index

    @selected_index.setter
    def selected_index(self, index: Optional[int]) -> None:
        self._selected_index = index
        self.refresh()

    # Tree lifecycle

    def load_tree(self, tree: HeadingNode) -> None:
        """Replace the graph with a freshly parsed tree.

        Selection survives the rebuild when a node with the same level and
        text still exists. Drag state never survives.
        """
        previous = self.selected_node
        if self.simulation is not None:
            self.simulation.cancel_drag()
            self.simulation.stop()
        if self._press is not None:
            self._press = None
            self.release_mouse()

        self.nodes, links = flatten(tree)
        self.simulation = ForceSimulation(self.nodes, links, self.simulation_config)
        self.simulation.start()

        self.selected_index = None
        if previous is not None:
            for node in self.nodes:
                if (node.level, node.text) == (previous.level, previous.text):
                    self.selected_index = node.index
                    break

        logger.debug("graph_rebuilt", nodes=len(self.nodes), links=len(links))
        self._wake()

    @property
    def selected_node(self) -> Optional[GraphNode]:
        if self.selected_index is None or self.selected_index >= len(self.nodes):
            return None
        return self.nodes[self.selected_index]

    def select_node(self, node_id: Optional[str]) -> None:
        """Highlight a node by id (None clears the selection)."""
        index = self.simulation.index_of(node_id) if node_id is not None else None
        self.selected_index = index

    def on_mount(self) -> None:
        self._timer = self.set_interval(1 / self.view_config.fps, self._on_tick, pause=True)
        self._wake()

    def on_unmount(self) -> None:
        if self.simulation is not None:
            self.simulation.stop()

    def _wake(self) -> None:
        if self._timer is not None and self.simulation.running:
            self._timer.resume()
        self.refresh()

    def _on_tick(self) -> None:
        still_running = self.simulation.advance()
        self.refresh()
        if not still_running:
            self._timer.pause()
            logger.debug("simulation_settled", ticks=self.simulation.ticks)

    # Rendering

    def _geometry(self) -> CanvasGeometry:
        return CanvasGeometry(
            width=self.size.width,
            height=self.size.height,
            cell_width=self.view_config.cell_width,
            cell_height=self.view_config.cell_height,
        )

    def render(self) -> RenderableType:
        geometry = self._geometry()
        if geometry.width <= 0 or geometry.height <= 0:
            return ""
        rows = rasterize(
            self.nodes,
            self.simulation.links,
            self.simulation.positions,
            self.viewport,
            geometry,
            label_max_chars=self.view_config.label_max_chars,
            selected=self.selected_index,
            pinned=self.simulation.dragging,
        )
        return Text("\n", no_wrap=True).join(rows)

    def node_at(self, col: int, row: int) -> Optional[GraphNode]:
        return hit_test(
            self.nodes,
            self.simulation.positions,
            self.viewport,
            self._geometry(),
            col,
            row,
            label_max_chars=self.view_config.label_max_chars,
        )

    # Mouse

    def on_mouse_down(self, event: MouseDown) -> None:
        offset = event.get_content_offset(self)
        if offset is None:
            return
        node = self.node_at(offset.x, offset.y)

        if event.button == 3:
            anchor = (event.screen_x, event.screen_y)
            if node is not None:
                self.selected_index = node.index
                self.post_message(self.NodeContextMenu(node, anchor))
            else:
                self.post_message(self.BackgroundContextMenu(anchor))
            event.stop()
            return

        if event.button != 1:
            return

        self._press = {"node": node, "x": offset.x, "y": offset.y, "moved": False}
        self.capture_mouse()
        event.prevent_default()
        event.stop()

    def on_mouse_move(self, event: MouseMove) -> None:
        if self._press is None:
            return
        offset = event.get_content_offset_capture(self)
        dx, dy = offset.x - self._press["x"], offset.y - self._press["y"]
        if not self._press["moved"] and dx == 0 and dy == 0:
            return

        node = self._press["node"]
        geometry = self._geometry()
        if node is not None:
            if not self._press["moved"]:
                self.simulation.drag_start(node.index)
            sx, sy = geometry.to_screen(offset.x, offset.y)
            self.simulation.drag_to(node.index, *self.viewport.invert(sx, sy))
            self._wake()
        else:
            self.viewport.pan_by(dx * geometry.cell_width, dy * geometry.cell_height)
            self._press["x"], self._press["y"] = offset.x, offset.y
            self.refresh()

        self._press["moved"] = True
        event.stop()

    def on_mouse_up(self, event: MouseUp) -> None:
        press = self._press
        if press is None:
            return
        self._press = None
        self.release_mouse()

        node = press["node"]
        if press["moved"]:
            if node is not None:
                self.simulation.drag_end(node.index)
                self._wake()
        elif node is not None:
            self.selected_index = node.index
            self.post_message(self.NodeClicked(node))
        event.stop()

    def on_mouse_scroll_up(self, event: MouseScrollUp) -> None:
        self._zoom_at(event, self.view_config.zoom_step)

    def on_mouse_scroll_down(self, event: MouseScrollDown) -> None:
        self._zoom_at(event, 1 / self.view_config.zoom_step)

    def _zoom_at(self, event, factor: float) -> None:
        offset = event.get_content_offset(self)
        anchor = (0.0, 0.0)
        if offset is not None:
            anchor = self._geometry().to_screen(offset.x, offset.y)
        self.viewport.scale_by(factor, anchor)
        self.refresh()
        event.stop()

    # Keyboard actions

    def action_select_next(self) -> None:
        if self.nodes:
            current = -1 if self.selected_index is None else self.selected_index
            self.selected_index = (current + 1) % len(self.nodes)

    def action_select_previous(self) -> None:
        if self.nodes:
            current = 0 if self.selected_index is None else self.selected_index
            self.selected_index = (current - 1) % len(self.nodes)

    def action_open_selected(self) -> None:
        node = self.selected_node
        if node is not None:
            self.post_message(self.NodeClicked(node))

    def action_menu(self) -> None:
        if self.read_only:
            return
        node = self.selected_node
        region = self.content_region
        anchor = (region.x, region.y)
        if node is not None:
            col, row = self._geometry().to_cell(
                *self.viewport.apply(*self.simulation.position(node.index))
            )
            anchor = (region.x + col, region.y + row)
            self.post_message(self.NodeContextMenu(node, anchor))
        else:
            self.post_message(self.BackgroundContextMenu(anchor))

    def action_add_topic(self) -> None:
        self._request(MenuAction.ADD_TOPIC)

    def action_add_child(self) -> None:
        self._request(MenuAction.ADD_CHILD)

    def action_delete(self) -> None:
        self._request(MenuAction.DELETE_SUBTREE)

    def _request(self, action: MenuAction) -> None:
        if self.read_only:
            return
        node = self.selected_node
        if action != MenuAction.ADD_TOPIC and node is None:
            self.notify("Select a node first (tab)", severity="warning")
            return
        self.post_message(self.ActionRequested(action, node))

    def action_zoom_in(self) -> None:
        self.viewport.scale_by(self.view_config.zoom_step)
        self.refresh()

    def action_zoom_out(self) -> None:
        self.viewport.scale_by(1 / self.view_config.zoom_step)
        self.refresh()

    def action_reset_view(self) -> None:
        self.viewport.reset()
        self.refresh()

    def action_pan(self, dx: int, dy: int) -> None:
        step = self.view_config.pan_step
        self.viewport.pan_by(
            dx * step * self.view_config.cell_width, dy * step * self.view_config.cell_height
        )
        self.refresh()
