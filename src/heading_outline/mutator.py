"""Structural edits expressed as whole-buffer rewrites.

Each operation takes the current outline (tree + buffer) and returns a new
buffer string. Nothing is patched in place and no line numbers are carried
forward: the caller reparses the returned buffer to get the next tree.

Unresolvable targets are not errors. The buffer comes back unchanged, so a
stale graph node can never corrupt the document.
"""

from heading_outline.navigator import find_by_id, subtree_line_range
from heading_outline.parser import MAX_HEADING_LEVEL, HeadingOutline


def format_heading(level: int, text: str) -> str:
    """Build a heading line.

    Args:
        level: Heading depth, clamped to 1-6
        text: Heading text; line breaks are folded into spaces

    Returns:
        Markdown heading line without a line break

    Examples:
        >>> format_heading(2, "Ideas")
        '## Ideas'
        >>> format_heading(9, "Deep")
        '###### Deep'
    """
    level = max(1, min(level, MAX_HEADING_LEVEL))
    single_line = " ".join(text.split())
    return f"{'#' * level} {single_line}"


def _last_content_index(lines: list[str], start: int, end: int) -> int:
    """Index just past the last non-blank line in ``lines[start:end]``.

    Returns ``start`` when the whole span is blank.
    """
    index = end
    while index > start and not lines[index - 1].strip():
        index -= 1
    return index


def insert_child(outline: HeadingOutline, parent_id: str, text: str) -> str:
    """Insert a heading as the last child of ``parent_id``.

    The child is one level deeper than the parent (capped at 6). It goes
    after the last non-blank line of the parent's section, so blank lines
    separating the section from the next heading stay where they are. For
    the root it goes after the last non-blank line of the buffer.

    Args:
        outline: Current outline
        parent_id: Id of the parent node ("root" for a top-level topic)
        text: Heading text for the new child

    Returns:
        New buffer; the original buffer when the parent does not resolve
        or the text is blank
    """
    parent = find_by_id(outline.root, parent_id)
    if parent is None or not text.strip():
        return outline.source_text

    new_line = format_heading(parent.level + 1, text)
    lines = list(outline.lines)

    start, end = subtree_line_range(parent, lines)
    # Never insert above the parent's own heading line.
    floor = start if parent.is_root else start + 1
    position = _last_content_index(lines, floor, end)

    lines.insert(position, new_line)
    _match_line_endings(lines, position, outline.source_text)
    return "\n".join(lines)


def _match_line_endings(lines: list[str], position: int, source: str) -> None:
    """Give the line inserted at ``position`` the buffer's CRLF endings.

    Lines are split on ``"\\n"``, so in a CRLF buffer every terminated line
    keeps a trailing ``"\\r"``. The inserted line needs one when a line
    follows it; the line before it needs one when it used to be the
    unterminated last line.
    """
    if "\r\n" not in source:
        return
    if position + 1 < len(lines):
        lines[position] += "\r"
    if position > 0 and not lines[position - 1].endswith("\r"):
        lines[position - 1] += "\r"


def delete_subtree(outline: HeadingOutline, node_id: str) -> str:
    """Remove a heading together with every line of its section.

    Args:
        outline: Current outline
        node_id: Id of the heading to delete

    Returns:
        New buffer; the original buffer for the root or an unknown id
    """
    node = find_by_id(outline.root, node_id)
    if node is None or node.is_root:
        return outline.source_text

    lines = list(outline.lines)
    start, end = subtree_line_range(node, lines)

    # Keep the buffer's trailing newline when the section runs to the end.
    if end == len(lines) and end - start > 1 and lines[-1] == "":
        end -= 1

    del lines[start:end]
    # The new last line loses its line break, as the deleted one had none.
    if start == len(lines) and start > 0 and lines[-1].endswith("\r"):
        lines[-1] = lines[-1][:-1]
    return "\n".join(lines)
