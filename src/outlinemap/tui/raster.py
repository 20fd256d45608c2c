"""Draw a laid-out graph into a grid of terminal cells.

This is the pixel side of the graph view, kept free of Textual so it can
be exercised directly: ``rasterize`` turns node positions into rich Text
rows, and ``hit_test`` maps a cell back to the node drawn there.
"""

from dataclasses import dataclass
from typing import Iterator, Optional, Sequence

import numpy as np
from rich.text import Text

from outlinemap.layout.graph import GraphLink, GraphNode
from outlinemap.layout.style import (
    LINK_COLOR,
    label_style,
    node_color,
    node_glyph,
    node_radius,
    truncate_label,
)
from outlinemap.layout.viewport import Viewport

LINK_GLYPH = "·"


@dataclass(frozen=True)
class CanvasGeometry:
    """Mapping between screen units (centred on the canvas) and cells.

    Attributes:
        width: Canvas width in columns
        height: Canvas height in rows
        cell_width: Screen units per column
        cell_height: Screen units per row
    """

    width: int
    height: int
    cell_width: float = 8.0
    cell_height: float = 16.0

    def to_cell(self, sx: float, sy: float) -> tuple[int, int]:
        return (
            int(round(self.width / 2 + sx / self.cell_width)),
            int(round(self.height / 2 + sy / self.cell_height)),
        )

    def to_screen(self, col: int, row: int) -> tuple[float, float]:
        return (
            (col - self.width / 2) * self.cell_width,
            (row - self.height / 2) * self.cell_height,
        )

    def contains(self, col: int, row: int) -> bool:
        return 0 <= col < self.width and 0 <= row < self.height


def _line_cells(start: tuple[int, int], end: tuple[int, int]) -> Iterator[tuple[int, int]]:
    """Bresenham line between two cells, endpoints excluded."""
    x0, y0 = start
    x1, y1 = end
    dx, dy = abs(x1 - x0), -abs(y1 - y0)
    sx = 1 if x0 < x1 else -1
    sy = 1 if y0 < y1 else -1
    err = dx + dy
    x, y = x0, y0
    while (x, y) != (x1, y1):
        e2 = 2 * err
        if e2 >= dy:
            err += dy
            x += sx
        if e2 <= dx:
            err += dx
            y += sy
        if (x, y) != (x1, y1):
            yield x, y


def node_cells(
    positions: np.ndarray, viewport: Viewport, geometry: CanvasGeometry
) -> list[tuple[int, int]]:
    """Cell of every node, in node order."""
    return [geometry.to_cell(*viewport.apply(float(x), float(y))) for x, y in positions]


def rasterize(
    nodes: Sequence[GraphNode],
    links: Sequence[GraphLink],
    positions: np.ndarray,
    viewport: Viewport,
    geometry: CanvasGeometry,
    label_max_chars: int = 20,
    selected: Optional[int] = None,
    pinned: Optional[int] = None,
) -> list[Text]:
    """Render links, nodes and labels into one Text per row.

    Draw order: links first, then labels, then node glyphs, so a glyph is
    never hidden by a label or link.

    Returns:
        Exactly ``geometry.height`` rows, each ``geometry.width`` cells wide
    """
    width, height = geometry.width, geometry.height
    chars = [[" "] * width for _ in range(height)]
    styles: list[list[Optional[str]]] = [[None] * width for _ in range(height)]

    def put(col: int, row: int, char: str, style: Optional[str]) -> None:
        if geometry.contains(col, row):
            chars[row][col] = char
            styles[row][col] = style

    cells = node_cells(positions, viewport, geometry)

    for link in links:
        for col, row in _line_cells(cells[link.source], cells[link.target]):
            put(col, row, LINK_GLYPH, LINK_COLOR)

    # Deep nodes first so shallower labels win where they overlap.
    order = sorted(range(len(nodes)), key=lambda index: -nodes[index].level)

    for index in order:
        node = nodes[index]
        col, row = cells[index]
        label = truncate_label(node.text, label_max_chars)
        start = col - len(label) // 2
        style = label_style(node.level)
        if index == selected:
            style = f"{style} reverse"
        for offset, char in enumerate(label):
            put(start + offset, row - 1, char, style)

    for index in order:
        node = nodes[index]
        col, row = cells[index]
        style = node_color(node.level)
        if index == pinned:
            style = f"bold {style}"
        if index == selected:
            style = f"{style} reverse"
        put(col, row, node_glyph(node.level), style)

    rows = []
    for row in range(height):
        text = Text(no_wrap=True, overflow="crop")
        run_start = 0
        for col in range(1, width + 1):
            if col == width or styles[row][col] != styles[row][run_start]:
                text.append("".join(chars[row][run_start:col]), style=styles[row][run_start] or "")
                run_start = col
        rows.append(text)
    return rows


def hit_test(
    nodes: Sequence[GraphNode],
    positions: np.ndarray,
    viewport: Viewport,
    geometry: CanvasGeometry,
    col: int,
    row: int,
    label_max_chars: int = 20,
) -> Optional[GraphNode]:
    """Find the node drawn at a cell.

    A cell hits a node when it is within the node's (zoomed) radius of the
    glyph, or on the node's label. The nearest glyph wins; label hits rank
    behind glyph hits.

    Returns:
        The hit node, or None for background
    """
    best: Optional[GraphNode] = None
    best_score = float("inf")

    for node, (node_col, node_row) in zip(nodes, node_cells(positions, viewport, geometry)):
        # Rows are about twice as tall as columns are wide.
        distance = float(np.hypot(col - node_col, (row - node_row) * 2))
        reach = max(1.0, node_radius(node.level) * viewport.k / geometry.cell_width)

        score = float("inf")
        if distance <= reach:
            score = distance
        else:
            label = truncate_label(node.text, label_max_chars)
            start = node_col - len(label) // 2
            if row == node_row - 1 and start <= col < start + len(label):
                score = reach + 1 + abs(col - node_col) / 100

        if score < best_score:
            best, best_score = node, score

    return best
