"""Row formatting tests for run-tree nodes."""

from __future__ import annotations

import unittest
from pathlib import Path

from nfsandbox.render import format_run_node, render_tree_lines
from nfsandbox.run_tree import FAILURE_GLYPH, NodeRole, NodeType, RunNode
from nfsandbox.ui_theme import DEFAULT_THEME, PLAIN_THEME, available_theme_names, resolve_theme


class FormatRunNodeTests(unittest.TestCase):
    def test_directory_rows_have_marker_slash_and_note(self) -> None:
        node = RunNode(name="run", node_type=NodeType.DIRECTORY, path=Path("/s/demo/run"), note="[happy_turing]")

        self.assertEqual(format_run_node(node, 1, expanded=True, theme=PLAIN_THEME), "  ▾ run/ [happy_turing]")
        self.assertEqual(format_run_node(node, 1, expanded=False, theme=PLAIN_THEME), "  ▸ run/ [happy_turing]")

    def test_file_rows_align_under_parent_marker(self) -> None:
        node = RunNode(name=".exitcode", node_type=NodeType.FILE)

        self.assertEqual(format_run_node(node, 2, theme=PLAIN_THEME), "      .exitcode")

    def test_trailing_space_of_collapsed_note_is_trimmed(self) -> None:
        node = RunNode(name="sayHello (1)", node_type=NodeType.DIRECTORY, note="[ab/1a2b3c] ")

        self.assertEqual(format_run_node(node, 0, expanded=True, theme=PLAIN_THEME), "▾ sayHello (1)/ [ab/1a2b3c]")

    def test_failure_notes_and_groups_use_their_own_colors(self) -> None:
        group = RunNode(
            name="sayHello",
            node_type=NodeType.DIRECTORY,
            note=FAILURE_GLYPH,
            role=NodeRole.PROCESS_GROUP,
        )

        row = format_run_node(group, 0, theme=DEFAULT_THEME)

        self.assertIn(DEFAULT_THEME.tree_group + "sayHello/", row)
        self.assertIn(DEFAULT_THEME.tree_failure + FAILURE_GLYPH, row)

    def test_marker_follows_node_expanded_hint_by_default(self) -> None:
        group = RunNode(name="sayHello", node_type=NodeType.DIRECTORY, role=NodeRole.PROCESS_GROUP, expanded=True)
        folder = RunNode(name="work", node_type=NodeType.DIRECTORY, path=Path("/s/demo/work"))

        self.assertEqual(format_run_node(group, 0, theme=PLAIN_THEME), "▾ sayHello/")
        self.assertEqual(format_run_node(folder, 0, theme=PLAIN_THEME), "▸ work/")


class _StaticProvider:
    """Serves a fixed root list; every node shows its own children."""

    def __init__(self, roots: list[RunNode]) -> None:
        self.roots = roots

    async def get_children(self, node: RunNode | None = None) -> list[RunNode]:
        return list(self.roots) if node is None else list(node.children)


class RenderTreeLinesTests(unittest.IsolatedAsyncioTestCase):
    async def test_expanded_hint_opens_childless_groups_and_children_open_folders(self) -> None:
        empty_group = RunNode(name="merge", node_type=NodeType.DIRECTORY, role=NodeRole.PROCESS_GROUP, expanded=True)
        task = RunNode(
            name="sayHello (1)",
            node_type=NodeType.DIRECTORY,
            children=[RunNode(name=".exitcode", node_type=NodeType.FILE)],
        )
        empty_folder = RunNode(name="work", node_type=NodeType.DIRECTORY)
        provider = _StaticProvider([empty_group, task, empty_folder])

        lines = await render_tree_lines(provider, theme=PLAIN_THEME)

        self.assertEqual(lines, ["▾ merge/", "▾ sayHello (1)/", "    .exitcode", "▸ work/"])


class ThemeTests(unittest.TestCase):
    def test_resolve_theme_falls_back_to_default_and_honors_no_color(self) -> None:
        self.assertEqual(available_theme_names(), ("default", "ocean"))
        self.assertIs(resolve_theme("OCEAN").name, "ocean")
        self.assertIs(resolve_theme("nope"), DEFAULT_THEME)
        self.assertIs(resolve_theme("ocean", no_color=True), PLAIN_THEME)


if __name__ == "__main__":
    unittest.main()
