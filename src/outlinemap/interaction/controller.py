"""Interaction controller: graph gestures to structural edits.

The controller owns no widgets. It keeps the current outline, runs the
context menu and dialog state machines, and reports results through two
callbacks:

- ``navigate(line)`` asks the text editor to move its caret to a line
- ``commit(buffer)`` hands a rewritten buffer back to the editor

Every gesture that cannot be resolved (a node that vanished in a
rebuild, a menu action that is not on offer) is logged and ignored.
"""

from typing import Callable, Optional

from heading_outline.mutator import delete_subtree, insert_child
from heading_outline.navigator import find_by_id, find_by_level_and_text
from heading_outline.parser import ROOT_ID, HeadingNode, HeadingOutline
from outlinemap.models.interaction import (
    DialogKind,
    DialogPhase,
    DialogState,
    MenuAction,
    MenuState,
)
from outlinemap.utils.logging import get_logger

logger = get_logger(__name__)

CLOSED_MENU = MenuState()
CLOSED_DIALOG = DialogState()


class InteractionController:
    """Binds user gestures on the graph to the heading core.

    Example:
        >>> controller = InteractionController(outline, navigate=editor.go_to, commit=editor.load)
        >>> controller.node_right_clicked((10, 4), "heading-0")
        >>> controller.choose(MenuAction.ADD_CHILD)
        >>> controller.confirm("New idea")
    """

    def __init__(
        self,
        outline: HeadingOutline,
        navigate: Callable[[int], None],
        commit: Callable[[str], None],
        read_only: bool = False,
    ):
        """Initialize controller.

        Args:
            outline: Current outline (tree + buffer)
            navigate: Called with a line index when a node is clicked
            commit: Called with the new buffer after a structural edit
            read_only: Ignore every gesture that would edit the buffer
        """
        self._outline = outline
        self._navigate = navigate
        self._commit = commit
        self.read_only = read_only

        self.menu: MenuState = CLOSED_MENU
        self.dialog: DialogState = CLOSED_DIALOG
        self.last_outcome: Optional[DialogPhase] = None

    @property
    def outline(self) -> HeadingOutline:
        return self._outline

    def load(self, outline: HeadingOutline) -> None:
        """Swap in a freshly parsed outline.

        Called after every rebuild (typing, undo, external replacement).
        Ids are line based, so an open menu or dialog finds its target
        again by level and text and takes that node's new id. When the
        target is gone the menu or dialog is closed.
        """
        self._outline = outline

        if self.menu.is_open and self.menu.target_id is not None:
            node = self._resolve(self.menu.target_signature)
            if node is None:
                logger.debug("menu_target_vanished", target_id=self.menu.target_id)
                self.dismiss_menu()
            elif node.id != self.menu.target_id:
                logger.debug("menu_target_moved", old_id=self.menu.target_id, new_id=node.id)
                self.menu = self.menu.model_copy(update={"target_id": node.id})

        if self.dialog.is_open and self.dialog.target_id is not None:
            node = self._resolve(self.dialog.target_signature)
            if node is None:
                logger.debug("dialog_target_vanished", target_id=self.dialog.target_id)
                self.cancel()
            elif node.id != self.dialog.target_id:
                logger.debug("dialog_target_moved", old_id=self.dialog.target_id, new_id=node.id)
                self.dialog = self.dialog.model_copy(update={"target_id": node.id})

    def _resolve(self, signature: Optional[tuple[int, str]]) -> Optional[HeadingNode]:
        if signature is None:
            return None
        return find_by_level_and_text(self._outline.root, *signature)

    # Clicks

    def node_clicked(self, level: int, text: str) -> Optional[int]:
        """Navigate the editor to the heading a click landed on.

        The node is re-resolved by level and text against the current
        outline, since the drawn graph may predate the latest rebuild.

        Returns:
            The line navigated to, or None on a lookup miss
        """
        node = find_by_level_and_text(self._outline.root, level, text)
        if node is None:
            logger.debug("node_lookup_miss", level=level, text=text)
            return None

        logger.debug("navigate_to_line", node_id=node.id, line=node.line)
        self._navigate(node.line)
        return node.line

    # Context menu

    def background_right_clicked(self, anchor: tuple[int, int]) -> MenuState:
        """Open the menu for the empty canvas (add a top-level topic)."""
        if self.read_only or self.dialog.is_open:
            return self.menu

        self.menu = MenuState(
            is_open=True,
            anchor=anchor,
            target_id=None,
            actions=[MenuAction.ADD_TOPIC],
        )
        return self.menu

    def node_right_clicked(self, anchor: tuple[int, int], node_id: str) -> MenuState:
        """Open the menu for a node (add child; delete unless it is the root)."""
        if self.read_only or self.dialog.is_open:
            return self.menu

        node = find_by_id(self._outline.root, node_id)
        if node is None:
            logger.debug("node_lookup_miss", node_id=node_id)
            return self.menu

        actions = [MenuAction.ADD_CHILD]
        if node_id != ROOT_ID:
            actions.append(MenuAction.DELETE_SUBTREE)

        self.menu = MenuState(
            is_open=True,
            anchor=anchor,
            target_id=node_id,
            target_signature=node.signature(),
            actions=actions,
        )
        return self.menu

    def dismiss_menu(self) -> None:
        """Close the menu (outside click or Escape)."""
        self.menu = CLOSED_MENU

    def choose(self, action: MenuAction) -> DialogState:
        """Pick a menu action; closes the menu and opens the matching dialog."""
        menu = self.menu
        self.menu = CLOSED_MENU

        if not menu.is_open or action not in menu.actions:
            logger.debug("menu_action_unavailable", action=action.value)
            return self.dialog

        target_id = ROOT_ID if action == MenuAction.ADD_TOPIC else menu.target_id
        node = find_by_id(self._outline.root, target_id)
        if node is None:
            logger.debug("node_lookup_miss", node_id=target_id)
            return self.dialog

        if action == MenuAction.ADD_TOPIC:
            kind, title = DialogKind.INPUT, "New topic"
        elif action == MenuAction.ADD_CHILD:
            kind = DialogKind.INPUT
            title = "New topic" if node.is_root else f"New child of '{node.text}'"
        else:
            kind, title = DialogKind.CONFIRM, f"Delete '{node.text}' and everything under it?"

        self.dialog = DialogState(
            phase=DialogPhase.INPUT_PENDING,
            kind=kind,
            action=action,
            target_id=node.id,
            target_signature=node.signature(),
            title=title,
        )
        return self.dialog

    def request_action(self, action: MenuAction, node_id: Optional[str] = None) -> DialogState:
        """Open a dialog directly (keyboard shortcuts), as if chosen from a menu."""
        if action == MenuAction.ADD_TOPIC:
            self.background_right_clicked((0, 0))
        elif node_id is not None:
            self.node_right_clicked((0, 0), node_id)
        else:
            return self.dialog
        return self.choose(action)

    # Dialog

    def update_input(self, value: str) -> None:
        if self.dialog.is_open and self.dialog.kind == DialogKind.INPUT:
            self.dialog = self.dialog.model_copy(update={"value": value})

    def handle_key(self, key: str) -> Optional[str]:
        """Enter confirms the dialog, Escape cancels it (or closes the menu).

        Returns:
            The committed buffer when Enter produced an edit
        """
        if key == "enter" and self.dialog.is_open:
            return self.confirm()
        if key == "escape":
            if self.dialog.is_open:
                self.cancel()
            elif self.menu.is_open:
                self.dismiss_menu()
        return None

    def cancel(self) -> None:
        if not self.dialog.is_open:
            return
        self.dialog = self.dialog.model_copy(update={"phase": DialogPhase.CANCELLED})
        self._close_dialog()

    def confirm(self, value: Optional[str] = None) -> Optional[str]:
        """Confirm the open dialog and apply its edit.

        Args:
            value: Input text; defaults to the text collected by update_input

        Returns:
            The new buffer if the document changed, otherwise None
        """
        dialog = self.dialog
        if not dialog.is_open:
            return None

        if dialog.kind == DialogKind.INPUT:
            text = (value if value is not None else dialog.value).strip()
            if not text:
                self.cancel()
                return None
            self.dialog = dialog.model_copy(update={"phase": DialogPhase.CONFIRMED, "value": text})
            new_buffer = insert_child(self._outline, dialog.target_id, text)
            event = "child_inserted"
        else:
            self.dialog = dialog.model_copy(update={"phase": DialogPhase.CONFIRMED})
            new_buffer = delete_subtree(self._outline, dialog.target_id)
            event = "subtree_deleted"

        self._close_dialog()
        return self._apply(new_buffer, event, dialog.target_id)

    def _close_dialog(self) -> None:
        self.last_outcome = self.dialog.phase
        self.dialog = CLOSED_DIALOG

    def _apply(self, new_buffer: str, event: str, target_id: Optional[str]) -> Optional[str]:
        if new_buffer == self._outline.source_text:
            logger.info("mutation_noop", target_id=target_id)
            return None

        before = len(self._outline.lines)
        self._outline = HeadingOutline.parse(new_buffer)
        logger.info(
            event,
            target_id=target_id,
            lines_before=before,
            lines_after=len(self._outline.lines),
        )
        self._commit(new_buffer)
        return new_buffer
