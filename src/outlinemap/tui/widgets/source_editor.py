"""SourceEditor widget: the plain text side of the document.

Stands in for the rich-text editor the graph is designed to sit beside:
it supplies the buffer, receives rewritten buffers, and moves its caret
when the graph asks it to navigate to a line.
"""

from textual.widgets import TextArea


class SourceEditor(TextArea):
    """Multi-line markdown editor for the document buffer."""

    def __init__(
        self,
        text: str = "",
        *args,
        read_only: bool = False,
        show_line_numbers: bool = True,
        **kwargs
    ):
        """Initialize SourceEditor.

        Args:
            text: Initial buffer
            read_only: Block typing (navigation still works)
            show_line_numbers: Show the line number gutter
        """
        super().__init__(text, *args, id="source-editor", **kwargs)
        self.read_only = read_only
        self.show_line_numbers = show_line_numbers

    def replace_content(self, content: str) -> None:
        """Swap in a rewritten buffer as one undoable edit.

        Args:
            content: New full buffer
        """
        if content == self.text:
            return
        self.replace(content, (0, 0), self.document.end)

    def go_to_line(self, line: int) -> None:
        """Move the caret to the start of ``line`` and bring it into view.

        Args:
            line: Zero-based line index (clamped to the document)
        """
        last_line = self.document.line_count - 1
        target = max(0, min(line, last_line))
        self.move_cursor((target, 0), center=True)
        self.focus()
