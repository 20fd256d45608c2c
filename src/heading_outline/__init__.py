"""Heading outline - Parse and restructure heading-based markdown documents.

This package projects a plain markdown buffer onto a tree of its ``#``
headings and computes whole-buffer rewrites for structural edits.

Key features:
- Parse markdown headings into a HeadingNode tree under a synthetic root
- Read-only navigation (find by id, by level+text, by line, subtree ranges)
- Structural edits (insert child, delete subtree) returned as new buffers
- The tree is derived, never stored: reparse after every edit

Example:
    >>> from heading_outline import HeadingOutline, insert_child
    >>> outline = HeadingOutline.parse("# A\\n## B\\n# D")
    >>> [child.text for child in outline.root.children]
    ['A', 'D']
    >>> insert_child(outline, "heading-0", "C")
    '# A\\n## B\\n## C\\n# D'
"""

from heading_outline.parser import (
    MAX_HEADING_LEVEL,
    ROOT_ID,
    HeadingNode,
    HeadingOutline,
    match_heading,
    parse_headings,
)
from heading_outline.navigator import (
    find_by_id,
    find_by_level_and_text,
    find_by_line,
    find_enclosing,
    find_parent,
    subtree_line_range,
    walk,
)
from heading_outline.mutator import delete_subtree, format_heading, insert_child

__version__ = "0.1.0"

__all__ = [
    "MAX_HEADING_LEVEL",
    "ROOT_ID",
    "HeadingNode",
    "HeadingOutline",
    "match_heading",
    "parse_headings",
    "walk",
    "find_by_id",
    "find_by_level_and_text",
    "find_by_line",
    "find_enclosing",
    "find_parent",
    "subtree_line_range",
    "format_heading",
    "insert_child",
    "delete_subtree",
]
