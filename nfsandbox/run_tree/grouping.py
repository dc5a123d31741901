"""Group decorated process nodes by Nextflow process name."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .sentinels import is_failure_exit_code, is_success_exit_code
from .types import NodeRole, NodeType, RunNode

logger = logging.getLogger(__name__)

FAILURE_GLYPH = "❌"


@dataclass(frozen=True)
class GroupCounts:
    """Success/failure tallies over members belonging to the current run."""

    success: int = 0
    failure: int = 0


def process_group_key(name: str) -> str | None:
    """Return the process name for ``name (tag)`` labels, else ``None``."""
    if not name.endswith(")"):
        return None
    open_index = name.rfind("(")
    if open_index < 0:
        return None
    return name[:open_index].strip()


def _mtime_ms(node: RunNode) -> float | None:
    """Return the node's mtime in ms, preferring the value seen while walking."""
    if node.path is None:
        return None
    if node.mtime_ns is not None:
        return node.mtime_ns / 1_000_000
    try:
        return node.path.stat().st_mtime_ns / 1_000_000
    except OSError as exc:
        logger.debug("Unable to stat %s: %s", node.path, exc)
        return None


def is_current_run_member(node: RunNode) -> bool:
    """Return whether ``node`` was written during its pipeline's current run."""
    if node.pipeline is None:
        return False
    mtime_ms = _mtime_ms(node)
    if mtime_ms is None:
        return False
    return mtime_ms >= node.pipeline.run_started_at_ms


def summarize_group(members: list[RunNode]) -> GroupCounts:
    success = 0
    failure = 0
    for member in members:
        if not is_current_run_member(member):
            continue
        if is_success_exit_code(member.status):
            success += 1
        elif is_failure_exit_code(member.status):
            failure += 1
    return GroupCounts(success=success, failure=failure)


def group_by_process_name(nodes: list[RunNode]) -> list[RunNode]:
    """Cluster ``name (tag)`` nodes under one synthetic node per process.

    Ungroupable nodes are returned first, unchanged and in input order,
    followed by one group per process name in first-seen order. A group is
    marked with the failure glyph only when a current-run member failed;
    stale or undecided groups carry no note.
    """
    passthrough: list[RunNode] = []
    groups: dict[str, list[RunNode]] = {}
    for node in nodes:
        key = process_group_key(node.name)
        if key is None:
            passthrough.append(node)
            continue
        groups.setdefault(key, []).append(node)

    result = list(passthrough)
    for key, members in groups.items():
        counts = summarize_group(members)
        result.append(
            RunNode(
                name=key,
                node_type=NodeType.DIRECTORY,
                pipeline=members[0].pipeline,
                children=list(members),
                note=FAILURE_GLYPH if counts.failure > 0 else None,
                role=NodeRole.PROCESS_GROUP,
                expanded=True,
            )
        )
    return result


__all__ = [
    "FAILURE_GLYPH",
    "GroupCounts",
    "process_group_key",
    "is_current_run_member",
    "summarize_group",
    "group_by_process_name",
]
