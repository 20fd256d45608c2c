"""Markdown heading parser for heading-structured documents.

This module projects a plain text buffer onto a tree of its headings.
Only ATX headings (``#`` to ``######``) carry structure; every other line
stays in the buffer but produces no node.
"""

import re
from dataclasses import dataclass, field
from typing import Iterator, Optional

ROOT_ID = "root"
ROOT_TEXT = "Root"
MAX_HEADING_LEVEL = 6

HEADING_PATTERN = re.compile(r"^(#{1,6})\s+(.+)$")


def heading_id(line: int) -> str:
    """Build the node id for a heading found on ``line``."""
    return f"heading-{line}"


def match_heading(line: str) -> Optional[tuple[int, str]]:
    """Classify a single buffer line.

    A line is a heading if it starts with 1-6 ``#`` characters followed by
    whitespace and non-empty text. Seven or more markers never match.

    Args:
        line: One line of the buffer (without its line break)

    Returns:
        Tuple of (level, text) with the text trimmed, or None for plain text

    Examples:
        >>> match_heading("## Goals ")
        (2, 'Goals')
        >>> match_heading("####### too deep") is None
        True
    """
    match = HEADING_PATTERN.match(line)
    if match is None:
        return None

    text = match.group(2).strip()
    if not text:
        return None

    return len(match.group(1)), text


@dataclass
class HeadingNode:
    """One heading line and everything nested beneath it.

    Nodes hold no parent pointers. Ancestors are found by walking down from
    the root (see ``heading_outline.navigator.find_parent``).

    Attributes:
        id: ``"heading-<line>"``, or ``"root"`` for the synthetic root.
            Only valid for the parse that produced it.
        text: Heading text with the marker stripped
        level: Number of ``#`` markers (1-6); 0 for the root
        line: Zero-based line index of the heading; 0 for the root
        children: Nested headings in document order
    """

    id: str
    text: str
    level: int
    line: int
    children: list["HeadingNode"] = field(default_factory=list)

    @property
    def is_root(self) -> bool:
        return self.id == ROOT_ID

    def signature(self) -> tuple[int, str]:
        """Semantic identity used to re-find a node after a rebuild."""
        return self.level, self.text


def _new_root() -> HeadingNode:
    return HeadingNode(id=ROOT_ID, text=ROOT_TEXT, level=0, line=0)


def parse_headings(text: str) -> HeadingNode:
    """Parse a buffer into a heading tree.

    Single left-to-right scan keeping the rightmost spine of the tree on a
    stack. Equal levels are siblings; a shallower level closes every open
    heading at or below it.

    Args:
        text: Full document buffer

    Returns:
        The synthetic root node (level 0)
    """
    root = _new_root()
    stack: list[HeadingNode] = [root]

    for index, line in enumerate(text.split("\n")):
        matched = match_heading(line)
        if matched is None:
            continue

        level, heading_text = matched
        node = HeadingNode(
            id=heading_id(index),
            text=heading_text,
            level=level,
            line=index,
        )

        while len(stack) > 1 and stack[-1].level >= level:
            stack.pop()

        stack[-1].children.append(node)
        stack.append(node)

    return root


@dataclass
class HeadingOutline:
    """A buffer together with the heading tree derived from it.

    Structural edits never modify an outline in place: they return a new
    buffer, which is parsed into a fresh outline.

    Attributes:
        root: Synthetic root of the heading tree
        source_text: The buffer the tree was parsed from
        lines: ``source_text`` split on ``"\\n"``
    """

    root: HeadingNode
    source_text: str
    lines: list[str] = field(default_factory=list)

    @classmethod
    def parse(cls, text: str) -> "HeadingOutline":
        """Parse a buffer into an outline.

        Never raises: malformed headings are plain text.

        Args:
            text: Full document buffer

        Returns:
            Parsed HeadingOutline
        """
        return cls(root=parse_headings(text), source_text=text, lines=text.split("\n"))

    def headings(self) -> list[HeadingNode]:
        """All headings (root excluded) in document order."""
        return list(self._iter_headings(self.root))

    def _iter_headings(self, node: HeadingNode) -> Iterator[HeadingNode]:
        for child in node.children:
            yield child
            yield from self._iter_headings(child)

    def render_headings(self) -> str:
        """Re-serialize just the headings, one per line, in document order.

        Returns:
            Heading-only markdown (``"#" * level + " " + text`` per line)
        """
        return "\n".join(f"{'#' * node.level} {node.text}" for node in self.headings())
