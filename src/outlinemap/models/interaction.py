"""State models for graph interactions (context menu and dialogs)."""

from enum import Enum
from pydantic import BaseModel, Field
from typing import Optional


class MenuAction(str, Enum):
    """Actions offered by the graph context menu."""

    ADD_TOPIC = "add_topic"
    ADD_CHILD = "add_child"
    DELETE_SUBTREE = "delete_subtree"


MENU_LABELS = {
    MenuAction.ADD_TOPIC: "Add new topic",
    MenuAction.ADD_CHILD: "Add child",
    MenuAction.DELETE_SUBTREE: "Delete subtree",
}


class MenuState(BaseModel):
    """Context menu state: closed, or open at an anchor for a target."""

    is_open: bool = Field(default=False, description="Whether the menu is shown")

    anchor: Optional[tuple[int, int]] = Field(
        default=None,
        description="Screen cell (x, y) the menu is anchored to"
    )

    target_id: Optional[str] = Field(
        default=None,
        description="Node the menu acts on; None when opened on the background"
    )

    target_signature: Optional[tuple[int, str]] = Field(
        default=None,
        description="(level, text) of the target, used to find it again after a rebuild"
    )

    actions: list[MenuAction] = Field(
        default_factory=list,
        description="Actions offered, in display order"
    )

    model_config = {"frozen": True}


class DialogKind(str, Enum):
    """Kinds of modal dialog."""

    INPUT = "input"
    CONFIRM = "confirm"


class DialogPhase(str, Enum):
    """Dialog lifecycle: closed -> input_pending -> confirmed|cancelled -> closed."""

    CLOSED = "closed"
    INPUT_PENDING = "input_pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class DialogState(BaseModel):
    """Add/confirm dialog state."""

    phase: DialogPhase = Field(default=DialogPhase.CLOSED, description="Lifecycle phase")

    kind: Optional[DialogKind] = Field(default=None, description="Input or confirm")

    action: Optional[MenuAction] = Field(
        default=None,
        description="Menu action that opened the dialog"
    )

    target_id: Optional[str] = Field(
        default=None,
        description="Node the dialog acts on ('root' for a new topic)"
    )

    target_signature: Optional[tuple[int, str]] = Field(
        default=None,
        description="(level, text) of the target, used to find it again after a rebuild"
    )

    title: str = Field(default="", description="Dialog heading shown to the user")

    value: str = Field(default="", description="Text typed so far (input dialogs)")

    model_config = {"frozen": True}

    @property
    def is_open(self) -> bool:
        return self.phase == DialogPhase.INPUT_PENDING
