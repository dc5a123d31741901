"""Shape-only classification of run/work/process folders.

Nextflow lays out every run as ``run/<xx>/<hash>/`` where the innermost
folder holds the generated ``.command.run``. The predicates below recognise
that nesting bottom-up from child shapes alone, so stray directories mixed
into the layout do not break classification.
"""

from __future__ import annotations

from .types import NodeRole, NodeType, RunNode, Tristate

COMMAND_RUN_FILENAME = ".command.run"


def _memoized(node: RunNode, attr: str, compute) -> bool:
    cached: Tristate = getattr(node, attr)
    if cached is not Tristate.UNKNOWN:
        return cached is Tristate.YES
    result = bool(compute(node))
    setattr(node, attr, Tristate.YES if result else Tristate.NO)
    return result


def is_process_folder(node: RunNode) -> bool:
    """Return whether ``node`` directly contains ``.command.run``."""

    def compute(target: RunNode) -> bool:
        if target.node_type is not NodeType.DIRECTORY:
            return False
        return any(child.name == COMMAND_RUN_FILENAME for child in target.children)

    return _memoized(node, "_is_process_folder", compute)


def is_work_folder(node: RunNode) -> bool:
    """Return whether ``node`` has at least one process-folder child."""

    def compute(target: RunNode) -> bool:
        if target.node_type is not NodeType.DIRECTORY:
            return False
        return any(is_process_folder(child) for child in target.children)

    return _memoized(node, "_is_work_folder", compute)


def is_run_folder(node: RunNode) -> bool:
    """Return whether ``node`` has at least one work-folder child."""

    def compute(target: RunNode) -> bool:
        if target.node_type is not NodeType.DIRECTORY:
            return False
        return any(is_work_folder(child) for child in target.children)

    return _memoized(node, "_is_run_folder", compute)


def resolve_role(node: RunNode) -> NodeRole:
    """Return the structural role of ``node``.

    Roles assigned at construction (pipeline roots, process groups) win;
    otherwise the classifier decides, checking the outermost role first.
    """
    if node.role is not NodeRole.PLAIN:
        return node.role
    if is_run_folder(node):
        return NodeRole.RUN_FOLDER
    if is_work_folder(node):
        return NodeRole.WORK_FOLDER
    if is_process_folder(node):
        return NodeRole.PROCESS_FOLDER
    return NodeRole.PLAIN


__all__ = [
    "COMMAND_RUN_FILENAME",
    "is_process_folder",
    "is_work_folder",
    "is_run_folder",
    "resolve_role",
]
