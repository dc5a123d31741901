"""Domain datatypes for run-output tree nodes."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..pipelines import PipelineRunContext


class NodeType(Enum):
    """Filesystem kind of a node, fixed when the tree is built."""

    FILE = "file"
    DIRECTORY = "directory"


class NodeRole(Enum):
    """Structural role used by the provider to dispatch expand requests."""

    PIPELINE = "pipeline"
    RUN_FOLDER = "run_folder"
    WORK_FOLDER = "work_folder"
    PROCESS_FOLDER = "process_folder"
    PROCESS_GROUP = "process_group"
    PLAIN = "plain"


class Tristate(Enum):
    """Memoized predicate value; ``UNKNOWN`` means not computed yet."""

    UNKNOWN = "unknown"
    YES = "yes"
    NO = "no"


@dataclass(eq=False)
class RunNode:
    """One entry in a pipeline's run tree.

    Nodes compare by identity. Decoration passes build new nodes instead of
    editing existing ones, so raw and decorated trees can share subtrees.
    """

    name: str
    node_type: NodeType
    path: Path | None = None
    pipeline: "PipelineRunContext | None" = None
    children: list["RunNode"] = field(default_factory=list)
    status: int | None = None
    note: str | None = None
    role: NodeRole = NodeRole.PLAIN
    expanded: bool = False
    mtime_ns: int | None = None
    _is_run_folder: Tristate = field(default=Tristate.UNKNOWN, repr=False)
    _is_work_folder: Tristate = field(default=Tristate.UNKNOWN, repr=False)
    _is_process_folder: Tristate = field(default=Tristate.UNKNOWN, repr=False)

    @property
    def is_dir(self) -> bool:
        return self.node_type is NodeType.DIRECTORY

    @property
    def tooltip(self) -> str | None:
        return str(self.path) if self.path is not None else None

    @property
    def context_value(self) -> str | None:
        """Menu context key consumed by open/inspect collaborators."""
        from .classify import is_process_folder

        if self.node_type is NodeType.FILE:
            return "file"
        if self.path is None:
            return None
        if is_process_folder(self):
            return "work_subdirectory"
        return "directory"

    def derive(self, **changes: object) -> "RunNode":
        """Return a fresh node copied from this one with ``changes`` applied.

        Classification caches are carried over since the derived node keeps
        the same underlying shape unless ``children`` is replaced.
        """
        if "children" in changes:
            changes.setdefault("_is_run_folder", Tristate.UNKNOWN)
            changes.setdefault("_is_work_folder", Tristate.UNKNOWN)
            changes.setdefault("_is_process_folder", Tristate.UNKNOWN)
        else:
            changes["children"] = list(self.children)
        return replace(self, **changes)


def sort_nodes(nodes: list[RunNode]) -> list[RunNode]:
    """Return ``nodes`` with directories first, then ordered by name."""
    return sorted(nodes, key=lambda node: (not node.is_dir, node.name))


def structure_of(node: RunNode) -> tuple:
    """Return a comparable nested tuple describing a node and its subtree."""
    return (
        node.name,
        node.node_type,
        node.path,
        node.status,
        node.note,
        node.role,
        tuple(structure_of(child) for child in node.children),
    )


__all__ = [
    "NodeType",
    "NodeRole",
    "Tristate",
    "RunNode",
    "sort_nodes",
    "structure_of",
]
