"""Formatting helpers for run-tree rows."""

from __future__ import annotations

from .provider import RunsTreeProvider
from .run_tree.grouping import FAILURE_GLYPH
from .run_tree.types import NodeRole, RunNode
from .ui_theme import DEFAULT_THEME, UITheme


def format_run_node(
    node: RunNode,
    depth: int,
    *,
    expanded: bool | None = None,
    theme: UITheme | None = None,
) -> str:
    """Render one tree row as ANSI-styled display text.

    ``expanded`` overrides the node's own ``expanded`` hint for the marker.
    """
    if expanded is None:
        expanded = node.expanded
    active_theme = theme or DEFAULT_THEME
    reset = active_theme.reset
    note = ""
    if node.note:
        note_color = active_theme.tree_failure if FAILURE_GLYPH in node.note else active_theme.tree_note
        note = f" {note_color}{node.note.rstrip()}{reset}"

    if node.is_dir:
        indent = "  " * depth
        marker = "▾ " if expanded else "▸ "
        color = active_theme.tree_group if node.role is NodeRole.PROCESS_GROUP else active_theme.tree_dir
        return f"{indent}{active_theme.tree_marker}{marker}{reset}{color}{node.name}/{reset}{note}"

    # Align file names under the parent directory arrow column.
    indent = "  " * depth + "  "
    color = active_theme.tree_sentinel_file if node.name.startswith(".") else active_theme.tree_file
    return f"{indent}{color}{node.name}{reset}{note}"


async def render_tree_lines(
    provider: RunsTreeProvider,
    *,
    theme: UITheme | None = None,
) -> list[str]:
    """Expand every node reachable from the provider roots into display rows."""
    lines: list[str] = []

    async def walk(node: RunNode, depth: int) -> None:
        children = await provider.get_children(node) if node.is_dir else []
        lines.append(format_run_node(node, depth, expanded=node.expanded or bool(children), theme=theme))
        for child in children:
            await walk(child, depth + 1)

    for root in await provider.get_children():
        await walk(root, 0)
    return lines


__all__ = ["format_run_node", "render_tree_lines"]
