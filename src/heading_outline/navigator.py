"""Read-only queries over a parsed heading tree.

Every function here is pure: it walks the tree (or the buffer lines) and
never modifies either. Lookups that find nothing return None rather than
raising, because a tree can legitimately shrink between the moment a UI
element was drawn and the moment its action fires.
"""

from typing import Iterator, Optional

from heading_outline.parser import HeadingNode, match_heading


def walk(tree: HeadingNode) -> Iterator[HeadingNode]:
    """Depth-first pre-order traversal, root first (document order)."""
    yield tree
    for child in tree.children:
        yield from walk(child)


def find_by_id(tree: HeadingNode, node_id: str) -> Optional[HeadingNode]:
    """Find a node by exact id.

    Args:
        tree: Root of the heading tree
        node_id: Id to search for (e.g. "heading-3" or "root")

    Returns:
        Matching node, or None if not found
    """
    for node in walk(tree):
        if node.id == node_id:
            return node
    return None


def find_by_level_and_text(tree: HeadingNode, level: int, text: str) -> Optional[HeadingNode]:
    """Re-locate a node by its semantic identity.

    Used across a rebuild, where ids have shifted but level and text are
    still meaningful. Duplicate headings resolve to the first one in
    document order.

    Args:
        tree: Root of the heading tree
        level: Heading level (0 matches only the root)
        text: Literal heading text

    Returns:
        First matching node, or None
    """
    for node in walk(tree):
        if node.level == level and node.text == text:
            return node
    return None


def find_by_line(tree: HeadingNode, line: int) -> Optional[HeadingNode]:
    """Find the heading that sits exactly on ``line``."""
    for node in walk(tree):
        if not node.is_root and node.line == line:
            return node
    return None


def find_enclosing(tree: HeadingNode, line: int) -> HeadingNode:
    """Find the deepest heading whose section contains ``line``.

    Args:
        tree: Root of the heading tree
        line: Zero-based buffer line

    Returns:
        Deepest enclosing heading, or the root for lines before the first
        heading
    """
    current = tree
    while True:
        # Children are ordered by line, so the last one starting at or
        # before ``line`` is the only candidate.
        candidate = None
        for child in current.children:
            if child.line > line:
                break
            candidate = child
        if candidate is None:
            return current
        current = candidate


def find_parent(tree: HeadingNode, node_id: str) -> Optional[HeadingNode]:
    """Find the parent of a node by walking down from the root.

    Returns:
        Parent node, or None for the root and for unknown ids
    """
    for node in walk(tree):
        for child in node.children:
            if child.id == node_id:
                return node
    return None


def subtree_line_range(node: HeadingNode, lines: list[str]) -> tuple[int, int]:
    """Compute the contiguous line span owned by a heading.

    The span starts at the heading's own line and runs up to (not
    including) the next line that is a heading of equal or shallower
    depth. For the root this is the whole buffer.

    Args:
        node: Heading whose section is wanted
        lines: Buffer lines the tree was parsed from

    Returns:
        Half-open range (start, end)

    Examples:
        >>> lines = ["# A", "## B", "text", "# C"]
        >>> subtree_line_range(HeadingNode("heading-0", "A", 1, 0), lines)
        (0, 3)
    """
    if node.is_root:
        return 0, len(lines)

    for index in range(node.line + 1, len(lines)):
        matched = match_heading(lines[index])
        if matched is not None and matched[0] <= node.level:
            return node.line, index

    return node.line, len(lines)
