"""Unit tests for InteractionController menu and dialog state machines."""

import pytest

from heading_outline.parser import HeadingOutline
from outlinemap.interaction.controller import InteractionController
from outlinemap.models.interaction import DialogKind, DialogPhase, MenuAction


class Recorder:
    """Stands in for the editor: records navigate and commit calls."""

    def __init__(self):
        self.lines = []
        self.buffers = []

    def navigate(self, line):
        self.lines.append(line)

    def commit(self, buffer):
        self.buffers.append(buffer)


@pytest.fixture
def editor():
    return Recorder()


@pytest.fixture
def controller(sample_outline, editor):
    return InteractionController(sample_outline, navigate=editor.navigate, commit=editor.commit)


class TestNodeClick:
    def test_click_navigates_to_heading_line(self, controller, editor):
        assert controller.node_clicked(1, "D") == 3
        assert editor.lines == [3]

    def test_click_on_vanished_node_is_noop(self, controller, editor):
        assert controller.node_clicked(2, "Gone") is None
        assert editor.lines == []

    def test_click_resolves_against_latest_outline(self, controller, editor):
        controller.load(HeadingOutline.parse("intro\n\n# D"))
        controller.node_clicked(1, "D")
        assert editor.lines == [2]


class TestContextMenu:
    def test_background_menu_offers_add_topic(self, controller):
        menu = controller.background_right_clicked((5, 6))
        assert menu.is_open
        assert menu.anchor == (5, 6)
        assert menu.target_id is None
        assert menu.actions == [MenuAction.ADD_TOPIC]

    def test_node_menu_offers_add_and_delete(self, controller):
        menu = controller.node_right_clicked((1, 1), "heading-0")
        assert menu.target_id == "heading-0"
        assert menu.actions == [MenuAction.ADD_CHILD, MenuAction.DELETE_SUBTREE]

    def test_root_menu_has_no_delete(self, controller):
        menu = controller.node_right_clicked((1, 1), "root")
        assert menu.actions == [MenuAction.ADD_CHILD]

    def test_unknown_node_does_not_open(self, controller):
        assert not controller.node_right_clicked((1, 1), "heading-50").is_open

    def test_escape_closes_menu(self, controller):
        controller.background_right_clicked((0, 0))
        controller.handle_key("escape")
        assert not controller.menu.is_open

    def test_dismiss_outside_click(self, controller):
        controller.node_right_clicked((0, 0), "heading-1")
        controller.dismiss_menu()
        assert not controller.menu.is_open
        assert not controller.dialog.is_open

    def test_choose_closes_menu_and_opens_dialog(self, controller):
        controller.node_right_clicked((0, 0), "heading-0")
        dialog = controller.choose(MenuAction.ADD_CHILD)

        assert not controller.menu.is_open
        assert dialog.phase == DialogPhase.INPUT_PENDING
        assert dialog.kind == DialogKind.INPUT
        assert dialog.target_id == "heading-0"
        assert dialog.title == "New child of 'A'"

    def test_choose_action_not_on_offer(self, controller):
        controller.node_right_clicked((0, 0), "root")
        dialog = controller.choose(MenuAction.DELETE_SUBTREE)
        assert not dialog.is_open
        assert not controller.menu.is_open

    def test_read_only_ignores_right_clicks(self, sample_outline, editor):
        controller = InteractionController(
            sample_outline, navigate=editor.navigate, commit=editor.commit, read_only=True
        )
        assert not controller.background_right_clicked((0, 0)).is_open
        assert not controller.node_right_clicked((0, 0), "heading-0").is_open
        # Navigation still works.
        controller.node_clicked(1, "A")
        assert editor.lines == [0]

    def test_menu_closes_when_target_vanishes(self, controller):
        controller.node_right_clicked((0, 0), "heading-3")
        controller.load(HeadingOutline.parse("# A"))
        assert not controller.menu.is_open


class TestDialogs:
    def test_add_child_commits_new_buffer(self, controller, editor):
        controller.node_right_clicked((0, 0), "heading-0")
        controller.choose(MenuAction.ADD_CHILD)

        result = controller.confirm("E")

        assert result == "# A\n## B\n## C\n## E\n# D"
        assert editor.buffers == [result]
        assert controller.last_outcome == DialogPhase.CONFIRMED
        assert not controller.dialog.is_open
        assert controller.outline.source_text == result

    def test_add_topic_from_background(self, controller, editor):
        controller.background_right_clicked((0, 0))
        dialog = controller.choose(MenuAction.ADD_TOPIC)
        assert dialog.target_id == "root"
        assert dialog.title == "New topic"

        controller.update_input("Later")
        result = controller.handle_key("enter")

        assert result.endswith("# D\n# Later")
        assert editor.buffers == [result]

    def test_delete_confirmation(self, controller, editor):
        controller.node_right_clicked((0, 0), "heading-0")
        dialog = controller.choose(MenuAction.DELETE_SUBTREE)
        assert dialog.kind == DialogKind.CONFIRM
        assert dialog.title == "Delete 'A' and everything under it?"

        assert controller.confirm() == "# D"
        assert editor.buffers == ["# D"]

    def test_escape_cancels_dialog(self, controller, editor):
        controller.node_right_clicked((0, 0), "heading-0")
        controller.choose(MenuAction.DELETE_SUBTREE)

        controller.handle_key("escape")

        assert controller.last_outcome == DialogPhase.CANCELLED
        assert not controller.dialog.is_open
        assert editor.buffers == []

    def test_blank_input_cancels(self, controller, editor):
        controller.request_action(MenuAction.ADD_TOPIC)
        assert controller.confirm("   ") is None
        assert controller.last_outcome == DialogPhase.CANCELLED
        assert editor.buffers == []

    def test_confirm_without_dialog_is_noop(self, controller, editor):
        assert controller.confirm("X") is None
        assert editor.buffers == []

    def test_menu_cannot_open_over_dialog(self, controller):
        controller.request_action(MenuAction.ADD_TOPIC)
        assert not controller.node_right_clicked((0, 0), "heading-0").is_open

    def test_dialog_cancelled_when_target_vanishes(self, controller, editor):
        controller.request_action(MenuAction.DELETE_SUBTREE, "heading-3")
        controller.load(HeadingOutline.parse("# A"))

        assert not controller.dialog.is_open
        assert controller.confirm() is None
        assert editor.buffers == []

    def test_request_action_needs_a_node(self, controller):
        assert not controller.request_action(MenuAction.ADD_CHILD).is_open
        assert controller.request_action(MenuAction.ADD_CHILD, "heading-3").is_open


class TestShiftedRebuilds:
    """Ids are line numbers, so a rebuild that moves lines must not retarget."""

    def test_menu_follows_its_heading(self, controller):
        controller.node_right_clicked((0, 0), "heading-1")
        controller.load(HeadingOutline.parse("# A\n## New\n## B\n## C\n# D"))

        assert controller.menu.is_open
        assert controller.menu.target_id == "heading-2"
        dialog = controller.choose(MenuAction.DELETE_SUBTREE)
        assert dialog.title == "Delete 'B' and everything under it?"

    def test_delete_dialog_follows_its_heading(self, controller, editor):
        controller.node_right_clicked((0, 0), "heading-1")
        controller.choose(MenuAction.DELETE_SUBTREE)

        controller.load(HeadingOutline.parse("# A\n## New\n## B\n## C\n# D"))

        assert controller.dialog.target_id == "heading-2"
        assert controller.confirm() == "# A\n## New\n## C\n# D"
        assert editor.buffers == ["# A\n## New\n## C\n# D"]

    def test_add_child_dialog_follows_its_heading(self, controller, editor):
        controller.request_action(MenuAction.ADD_CHILD, "heading-3")

        controller.load(HeadingOutline.parse("intro\n# A\n## B\n## C\n# D"))

        assert controller.dialog.target_id == "heading-4"
        assert controller.confirm("X") == "intro\n# A\n## B\n## C\n# D\n## X"
