"""Binding table construction, validation and merging."""

from __future__ import annotations

import unittest

from vats.errors import BindingConfigError
from vats.input.bindings import (
    DEFAULT_BINDINGS,
    ActionDescriptor,
    BindingTable,
    ReadKind,
    ReadSpec,
    default_binding_table,
    parse_sequence,
)


class ParseSequenceTests(unittest.TestCase):
    def test_space_separates_tokens(self) -> None:
        self.assertEqual(parse_sequence("g g"), ("g", "g"))
        self.assertEqual(parse_sequence("z  t"), ("z", "t"))

    def test_lone_space_is_a_token(self) -> None:
        self.assertEqual(parse_sequence(" "), (" ",))

    def test_modifiers_are_normalized(self) -> None:
        self.assertEqual(parse_sequence("shift+ctrl+up"), ("ctrl+shift+up",))

    def test_empty_key_is_rejected(self) -> None:
        with self.assertRaises(BindingConfigError):
            parse_sequence("")


class DescriptorTests(unittest.TestCase):
    def test_string_value(self) -> None:
        self.assertEqual(ActionDescriptor.parse("cursor-down"), ActionDescriptor("cursor-down"))

    def test_mapping_with_read_and_extra(self) -> None:
        descriptor = ActionDescriptor.parse({"name": "find", "read": "char", "hint": "x"})
        self.assertEqual(descriptor.action, "find")
        self.assertEqual(descriptor.read, ReadSpec(ReadKind.CHAR, 1))
        self.assertEqual(dict(descriptor.extra), {"hint": "x"})

    def test_chars_read_spec(self) -> None:
        descriptor = ActionDescriptor.parse({"action": "mark", "read": {"chars": 2}})
        self.assertEqual(descriptor.read, ReadSpec(ReadKind.CHARS, 2))

    def test_unknown_read_is_rejected(self) -> None:
        with self.assertRaises(BindingConfigError):
            ActionDescriptor.parse({"action": "x", "read": "word"})
        with self.assertRaises(BindingConfigError):
            ActionDescriptor.parse({"action": "x", "read": {"chars": 0}})

    def test_resumable_requires_read(self) -> None:
        with self.assertRaises(BindingConfigError):
            ActionDescriptor.parse({"action": "register", "resumable": True})

    def test_default_extra_is_empty_and_read_only(self) -> None:
        first = ActionDescriptor("cursor-up")
        second = ActionDescriptor.parse("cursor-down")
        self.assertEqual(dict(first.extra), {})
        self.assertEqual(dict(second.extra), {})
        with self.assertRaises(TypeError):
            first.extra["hint"] = "x"  # type: ignore[index]

    def test_missing_action_is_rejected(self) -> None:
        with self.assertRaises(BindingConfigError):
            ActionDescriptor.parse({"read": "char"})
        with self.assertRaises(BindingConfigError):
            ActionDescriptor.parse(42)  # type: ignore[arg-type]


class BindingTableTests(unittest.TestCase):
    def test_default_table_contains_vi_keymap(self) -> None:
        table = default_binding_table()
        self.assertEqual(len(table), len(DEFAULT_BINDINGS))
        self.assertEqual(table.lookup(("g", "g")).action, "cursor-to-document-top")
        self.assertEqual(table.lookup(("ctrl+f",)).action, "scroll-full-window-down")
        self.assertEqual(table.lookup(("/",)).extra["command_alias"], "search-next")
        register = table.lookup(('"',))
        self.assertTrue(register.resumable)
        self.assertEqual(register.read.kind, ReadKind.CHAR)

    def test_prefix_tree_indexes_multi_token_sequences(self) -> None:
        tree = default_binding_table().prefix_tree
        self.assertIn("g", tree)
        self.assertIn("z", tree)
        self.assertNotIn("j", tree)

    def test_prefix_overlap_is_rejected(self) -> None:
        with self.assertRaises(BindingConfigError):
            BindingTable({"g": "go", "g g": "cursor-to-document-top"})

    def test_binding_led_by_count_digit_is_rejected(self) -> None:
        with self.assertRaises(BindingConfigError):
            BindingTable({"5": "cursor-down"})
        with self.assertRaises(BindingConfigError):
            default_binding_table({"2 j": "cursor-down"})

    def test_zero_and_later_digits_are_bindable(self) -> None:
        table = BindingTable({"0": "cursor-to-document-left", "g 5": "goto-five"})
        self.assertEqual(table.lookup(("g", "5")).action, "goto-five")
        self.assertIsNone(default_binding_table({"5": None}).lookup(("5",)))

    def test_overrides_rebind_and_unbind(self) -> None:
        table = default_binding_table({"j": "cursor-up", "k": None, "x y": "custom"})
        self.assertEqual(table.lookup(("j",)).action, "cursor-up")
        self.assertIsNone(table.lookup(("k",)))
        self.assertEqual(table.lookup(("x", "y")).action, "custom")

    def test_unbinding_prefix_allows_shorter_binding(self) -> None:
        table = default_binding_table().merged({"g g": None, "g": "cursor-to-document-top"})
        self.assertEqual(table.lookup(("g",)).action, "cursor-to-document-top")

    def test_without(self) -> None:
        table = default_binding_table().without("z t")
        self.assertIsNone(table.lookup(("z", "t")))
        self.assertIsNotNone(table.lookup(("z", "z")))

    def test_to_config_round_trips_through_constructor(self) -> None:
        table = default_binding_table()
        config = table.to_config()
        self.assertEqual(config["f"], {"action": "find", "read": "char"})
        self.assertEqual(config["g g"], "cursor-to-document-top")
        self.assertEqual(dict(BindingTable(config)), dict(table))


if __name__ == "__main__":
    unittest.main()
