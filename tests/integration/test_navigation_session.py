"""End-to-end session behavior: keys in, tree navigation and events out.

Drives ``NavigationSession`` with canonical tokens and decoded keypresses and
checks the resulting cursor, scroll and emitted events.
"""

from __future__ import annotations

import unittest

from vats.input.bindings import default_binding_table
from vats.input.keypress import Keypress
from vats.session import Event, NavigationSession
from vats.tree import TreeNode


def build_tree() -> TreeNode:
    root = TreeNode({"name": "root"})
    for i in range(30):
        child = root.add_child(TreeNode({"name": f"item-{i:02d}"}))
        if i == 3:
            for name in ("sub-a", "sub-b", "sub-c"):
                grandchild = child.add_child(TreeNode({"name": name}))
            grandchild.add_child(TreeNode({"name": "deep"}))
        if i == 4:
            for j in range(15):
                child.add_child(TreeNode({"name": f"row-{j}"}))
    return root


class SessionTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.root = build_tree()
        self.session = NavigationSession(self.root, window_height=10)
        self.events: list[Event] = []
        for name in ("highlight", "scroll", "cd", "select", "search", "keybinding"):
            self.session.on(name, self.events.append)

    def feed(self, *tokens: str) -> None:
        for token in tokens:
            self.session.handle_token(token)

    def event_names(self) -> list[str]:
        return [event.name for event in self.events]

    @property
    def active(self) -> str:
        return self.session.current_node.get_active_child().name()


class MotionTests(SessionTestCase):
    def test_cursor_down_highlights_next_item(self) -> None:
        self.feed("j")
        self.assertEqual(self.active, "item-01")
        self.assertEqual(self.event_names(), ["keybinding", "highlight"])
        self.assertEqual(self.events[1]["item"].name(), "item-01")

    def test_count_jump_scrolls_and_centres(self) -> None:
        self.feed("j", "1", "5", "j")
        self.assertEqual(self.active, "item-16")
        self.assertEqual(self.root.scroll_pos_y, 11)
        self.assertIn("scroll", self.event_names())

    def test_document_bottom_and_top(self) -> None:
        self.feed("G")
        self.assertEqual(self.active, "item-29")
        self.feed("g", "g")
        self.assertEqual(self.active, "item-00")
        self.assertEqual(self.root.scroll_pos_y, 0)

    def test_motion_at_boundary_emits_no_highlight(self) -> None:
        self.feed("k")
        self.assertEqual(self.event_names(), ["keybinding"])

    def test_prevent_default_suppresses_motion(self) -> None:
        self.session.on("keybinding", lambda event: event.prevent_default())
        self.feed("j")
        self.assertEqual(self.active, "item-00")
        self.assertNotIn("highlight", self.event_names())

    def test_prevent_default_on_keypress_skips_engine(self) -> None:
        self.session.on("keypress", lambda event: event.prevent_default())
        self.assertIsNone(self.session.handle_token("j"))
        self.assertEqual(self.events, [])

    def test_handle_keypress_canonicalizes(self) -> None:
        command = self.session.handle_keypress(Keypress(char="\x06", name="f", ctrl=True))
        self.assertEqual(command.action, "scroll-full-window-down")
        self.assertEqual(self.active, "item-09")

    def test_pending_input_reflects_partial_sequence(self) -> None:
        self.feed("3", "z")
        self.assertEqual(self.session.pending_input, "3z")
        self.feed("escape")
        self.assertEqual(self.session.pending_input, "")

    def test_align_scrolls_without_moving_cursor(self) -> None:
        self.session.jump_to(12)
        self.feed("z", "t")
        self.assertEqual(self.active, "item-12")
        self.assertEqual(self.root.scroll_pos_y, 12)

    def test_window_height_changes_bounds(self) -> None:
        self.session.set_window_height(5)
        self.assertEqual(self.session.viewport_bounds(), (0, 4))
        self.session.set_window_height(0)
        self.assertEqual(self.session.window_height, 1)


class LongListScrollTests(unittest.TestCase):
    def setUp(self) -> None:
        self.root = TreeNode({"name": "root"}, [TreeNode({"name": f"row-{i:03d}"}) for i in range(101)])
        self.session = NavigationSession(self.root, window_height=20)

    def test_bottom_keeps_last_window_full(self) -> None:
        self.session.handle_token("G")
        self.assertEqual(self.root.active_idx, 100)
        self.assertEqual(self.root.scroll_pos_y, 81)
        self.assertEqual(self.session.viewport_bounds(), (81, 100))

    def test_page_up_after_bottom_moves_a_full_window(self) -> None:
        for token in ("G", "ctrl+b"):
            self.session.handle_token(token)
        self.assertEqual(self.root.active_idx, 81)
        self.assertEqual(self.root.scroll_pos_y, 81)

    def test_align_top_near_end_is_clamped(self) -> None:
        self.session.jump_to(95)
        for token in ("z", "t"):
            self.session.handle_token(token)
        self.assertEqual(self.root.active_idx, 95)
        self.assertEqual(self.root.scroll_pos_y, 81)

    def test_growing_window_reclamps_scroll(self) -> None:
        self.session.handle_token("G")
        self.session.set_window_height(50)
        self.assertEqual(self.root.scroll_pos_y, 51)


class TraversalTests(SessionTestCase):
    def test_enter_directory_and_return(self) -> None:
        self.session.jump_to(3)
        self.events.clear()
        self.feed("l")
        self.assertEqual(self.session.current_node.name(), "item-03")
        self.assertEqual(self.event_names(), ["keybinding", "cd", "highlight"])
        self.assertEqual(self.active, "sub-a")

        self.feed("h")
        self.assertIs(self.session.current_node, self.root)
        self.assertEqual(self.active, "item-03")

    def test_parent_count_climbs_levels(self) -> None:
        self.session.jump_to(3)
        self.feed("l", "G", "l")
        self.assertEqual(self.session.current_node.name(), "sub-c")
        self.feed("2", "h")
        self.assertIs(self.session.current_node, self.root)

    def test_left_at_root_is_a_no_op(self) -> None:
        self.feed("h")
        self.assertIs(self.session.current_node, self.root)
        self.assertNotIn("cd", self.event_names())

    def test_enter_on_leaf_selects(self) -> None:
        self.feed("j", "enter")
        self.assertIs(self.session.current_node, self.root)
        self.assertEqual(self.events[-1].name, "select")
        self.assertEqual(self.events[-1]["item"].name(), "item-01")

    def test_cd_event_carries_path_from_root(self) -> None:
        self.session.jump_to(3)
        self.feed("l")
        cd_event = next(event for event in self.events if event.name == "cd")
        self.assertEqual([node.name() for node in cd_event["path"]], ["root", "item-03"])

    def test_action_without_builtin_behaviour_is_still_reported(self) -> None:
        command = self.session.handle_token(":")
        self.assertEqual(command.action, "enter-command-mode")
        self.assertEqual(self.event_names(), ["keybinding"])

    def test_cd_refuses_childless_node(self) -> None:
        self.assertFalse(self.session.cd(self.root.children[0]))
        self.assertFalse(self.session.cd(None))

    def test_child_view_scroll(self) -> None:
        self.session.jump_to(4)
        preview = self.root.children[4]
        self.feed("shift+down")
        self.assertEqual(preview.scroll_pos_y, 1)
        self.feed("ctrl+shift+down")
        self.assertEqual(preview.scroll_pos_y, 5)
        self.feed("shift+up")
        self.assertEqual(preview.scroll_pos_y, 4)
        self.assertIs(self.session.current_node, self.root)


class SearchTests(SessionTestCase):
    def test_search_and_repeat(self) -> None:
        self.assertEqual(self.session.search("7"), 7)
        self.assertEqual(self.active, "item-07")
        self.assertEqual(self.events[0].name, "search")
        self.assertEqual(self.events[0]["index"], 7)

        self.feed("n")
        self.assertEqual(self.active, "item-17")
        self.feed("2", "n")
        self.assertEqual(self.active, "item-07")
        self.feed("N")
        self.assertEqual(self.active, "item-27")

    def test_backward_search_reverses_repeat_direction(self) -> None:
        self.session.jump_to(15)
        self.assertEqual(self.session.search("7", count=-1), 7)
        self.feed("n")
        self.assertEqual(self.active, "item-27")
        self.feed("N")
        self.assertEqual(self.active, "item-07")

    def test_search_without_match_keeps_cursor(self) -> None:
        self.assertEqual(self.session.search("nothing"), -1)
        self.assertEqual(self.active, "item-00")

    def test_repeat_without_previous_search_does_nothing(self) -> None:
        self.feed("n")
        self.assertEqual(self.active, "item-00")

    def test_ignore_case(self) -> None:
        session = NavigationSession(self.root, window_height=10, ignore_case=True)
        self.assertEqual(session.search("ITEM-05"), 5)

    def test_toggling_ignore_case_drops_cached_matches(self) -> None:
        self.root.children[3].data["name"] = "ITEM-x"
        self.assertEqual(self.session.search("item-x"), -1)
        self.session.ignore_case = True
        self.assertEqual(self.session.search("item-x"), 3)
        self.session.ignore_case = False
        self.assertEqual(self.session.search("item-x"), -1)

    def test_find_character(self) -> None:
        fruits = TreeNode(
            {"name": "fruits"},
            [TreeNode({"name": name}) for name in ("apple", "banana", "cherry", "avocado", "blueberry")],
        )
        session = NavigationSession(fruits, window_height=10)
        for token in ("f", "c"):
            session.handle_token(token)
        self.assertEqual(fruits.get_active_child().name(), "cherry")
        for token in ("f", "a"):
            session.handle_token(token)
        self.assertEqual(fruits.get_active_child().name(), "avocado")
        for token in ("f", "escape", "j"):
            session.handle_token(token)
        self.assertEqual(fruits.get_active_child().name(), "blueberry")

    def test_invalidate_search_after_mutation(self) -> None:
        self.session.search("7")
        self.root.add_child(TreeNode({"name": "item-77"}))
        self.session.invalidate_search()
        self.session.jump_to(27)
        self.feed("n")
        self.assertEqual(self.active, "item-77")


class SessionLifecycleTests(SessionTestCase):
    def test_install_bindings_replaces_keymap(self) -> None:
        self.session.install_bindings(default_binding_table({"j": "cursor-up", "k": "cursor-down"}))
        self.feed("k")
        self.assertEqual(self.active, "item-01")

    def test_off_removes_listener(self) -> None:
        self.session.off("highlight", self.events.append)
        self.feed("j")
        self.assertNotIn("highlight", self.event_names())

    def test_close_emits_and_drops_listeners(self) -> None:
        closed = []
        self.session.on("close", closed.append)
        self.session.close()
        self.assertEqual(len(closed), 1)
        self.feed("j")
        self.assertEqual(self.events, [])


if __name__ == "__main__":
    unittest.main()
