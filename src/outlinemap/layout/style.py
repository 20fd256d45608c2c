"""Visual encoding of heading depth.

Node size and label size shrink with depth; the root is the largest and
is drawn distinctly. A terminal cannot change font size, so label sizes
map onto text weight instead.
"""

ROOT_COLOR = "#ffffff"
LEVEL_COLORS = {
    1: "#e4e4e7",  # zinc-200
    2: "#a1a1aa",  # zinc-400
}
DEEP_COLOR = "#52525b"  # zinc-600
LINK_COLOR = "#555555"


def node_radius(level: int) -> int:
    """Circle radius in layout units: 12 at the root down to a floor of 5."""
    return max(5, 12 - level * 2)


def font_size(level: int) -> int:
    """Label size in points: 16 at the root down to a floor of 10."""
    return max(10, 16 - level * 2)


def node_color(level: int) -> str:
    if level == 0:
        return ROOT_COLOR
    return LEVEL_COLORS.get(level, DEEP_COLOR)


def node_glyph(level: int) -> str:
    return "◉" if level == 0 else "●"


def label_style(level: int) -> str:
    """Rich style for a label of the given depth."""
    size = font_size(level)
    color = node_color(level)
    if level == 0 or size >= 14:
        return f"bold {color}"
    if size <= 10:
        return f"dim {color}"
    return color


def truncate_label(text: str, max_chars: int = 20) -> str:
    """Shorten long labels to ``max_chars`` characters plus an ellipsis.

    Examples:
        >>> truncate_label("Short")
        'Short'
        >>> truncate_label("A very long heading indeed", 10)
        'A very lon...'
    """
    if len(text) > max_chars:
        return text[:max_chars] + "..."
    return text
