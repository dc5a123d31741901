"""Presentation passes turning a raw run folder into a task-oriented view.

Three nested passes run top-down:

- run level: keep work folders and loose files, drop directories that hold
  no task yet, then flatten every task into a single list of collapsed
  nodes annotated with its ``xx/yyyyyy`` hash prefix
- work level: decorate process folders, pass other children through
- process level: rename from the task descriptor and record the exit code

None of the passes mutate their input; each returns a new node graph.
"""

from __future__ import annotations

import logging

from .classify import is_process_folder, is_run_folder, is_work_folder
from .grouping import FAILURE_GLYPH, group_by_process_name
from .sentinels import extract_task_sentinels, is_failure_exit_code
from .types import NodeType, RunNode, sort_nodes

logger = logging.getLogger(__name__)

TASK_HASH_PREFIX_CHARS = 6


def decorate_process_folder(node: RunNode) -> RunNode:
    """Return ``node`` renamed by its task label and tagged with its status."""
    sentinels = extract_task_sentinels(node)
    decorated = node.derive(children=list(node.children))
    if sentinels.label is not None:
        decorated.name = sentinels.label
    if sentinels.exitcode is not None:
        decorated.status = sentinels.exitcode
        if is_failure_exit_code(sentinels.exitcode):
            decorated.note = FAILURE_GLYPH
    return decorated


def decorate_work_folder(node: RunNode) -> RunNode:
    children = [
        decorate_process_folder(child) if is_process_folder(child) else child
        for child in node.children
    ]
    return node.derive(children=children)


def collapse_process_folder(work_folder: RunNode, process_folder: RunNode) -> RunNode | None:
    """Lift a decorated process folder out of its work folder.

    The note records the Nextflow task hash prefix (``[ab/cdef12]``) so the
    task folder can still be located after flattening.
    """
    if work_folder.path is None or process_folder.path is None:
        return None
    short_hash = process_folder.path.name[:TASK_HASH_PREFIX_CHARS]
    note = f"[{work_folder.path.name}/{short_hash}] {process_folder.note or ''}"
    return RunNode(
        name=process_folder.name,
        node_type=NodeType.DIRECTORY,
        path=process_folder.path,
        pipeline=process_folder.pipeline,
        children=process_folder.children,
        status=process_folder.status,
        note=note,
        mtime_ns=process_folder.mtime_ns,
        _is_process_folder=process_folder._is_process_folder,
    )


def decorate_run_folder(node: RunNode) -> RunNode:
    """Return the grouped, sorted task view of a run folder."""
    work_folders: list[RunNode] = []
    loose_files: list[RunNode] = []
    for child in node.children:
        if is_work_folder(child):
            work_folders.append(decorate_work_folder(child))
        elif not child.is_dir:
            loose_files.append(child)

    collapsed: list[RunNode] = []
    for work_folder in work_folders:
        for child in work_folder.children:
            if not is_process_folder(child):
                continue
            lifted = collapse_process_folder(work_folder, child)
            if lifted is not None:
                collapsed.append(lifted)

    children = group_by_process_name(collapsed) + loose_files
    return node.derive(children=sort_nodes(children))


def decorate_tree(node: RunNode) -> RunNode:
    """Decorate ``node`` when it is a run folder, otherwise return it as is."""
    if is_run_folder(node):
        return decorate_run_folder(node)
    return node


__all__ = [
    "TASK_HASH_PREFIX_CHARS",
    "decorate_process_folder",
    "decorate_work_folder",
    "collapse_process_folder",
    "decorate_run_folder",
    "decorate_tree",
]
