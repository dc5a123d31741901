"""Filesystem scanning and run-tree construction."""

from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from .types import NodeRole, NodeType, RunNode, sort_nodes

if TYPE_CHECKING:
    from ..pipelines import PipelineRunContext

logger = logging.getLogger(__name__)

RESERVED_NAMES = frozenset({"settings.json", ".nextflow"})


@dataclass(frozen=True)
class RunDirectoryChild:
    """One visible directory child plus the metadata observed while listing."""

    name: str
    path: Path
    is_dir: bool
    mtime_ns: int | None


def safe_mtime_ns(path: Path) -> int | None:
    """Return ``st_mtime_ns`` for ``path`` or ``None`` on stat failure."""
    try:
        return int(path.stat().st_mtime_ns)
    except OSError:
        return None


def canonical_path(path: Path) -> Path:
    try:
        return path.resolve()
    except (OSError, RuntimeError):
        return path


def list_run_directory(directory: Path) -> tuple[list[RunDirectoryChild], OSError | None]:
    """List children of ``directory`` except reserved names.

    Returns ``(children, scan_error)``. ``scan_error`` is set when the
    directory cannot be scanned; children are then empty.
    """
    children: list[RunDirectoryChild] = []
    try:
        with os.scandir(directory) as entries:
            for child in entries:
                name = child.name
                if name in RESERVED_NAMES:
                    continue
                try:
                    is_dir = child.is_dir()
                except OSError:
                    is_dir = False
                try:
                    mtime_ns: int | None = int(child.stat().st_mtime_ns)
                except OSError:
                    mtime_ns = None
                children.append(
                    RunDirectoryChild(
                        name=name,
                        path=Path(child.path),
                        is_dir=is_dir,
                        mtime_ns=mtime_ns,
                    )
                )
    except OSError as exc:
        return [], exc
    return children, None


async def build_run_tree(
    root: Path,
    pipeline: "PipelineRunContext | None",
    *,
    role: NodeRole = NodeRole.PLAIN,
) -> RunNode:
    """Walk ``root`` depth-first and return the fully materialized raw tree.

    Every directory is listed in a worker thread, one at a time. A directory
    whose canonical path is already on the current descent path is a symlink
    loop and is kept as a leaf. Directories shared by sibling subtrees are
    walked under each of them.
    """
    root_node = RunNode(
        name=root.name or str(root),
        node_type=NodeType.DIRECTORY,
        path=root,
        pipeline=pipeline,
        role=role,
        mtime_ns=safe_mtime_ns(root),
    )
    ancestors: set[Path] = set()

    async def build_children(directory: Path) -> list[RunNode]:
        resolved = canonical_path(directory)
        if resolved in ancestors:
            logger.debug("Not descending into symlink loop at %s", directory)
            return []
        ancestors.add(resolved)
        try:
            return await list_and_build(directory)
        finally:
            ancestors.discard(resolved)

    async def list_and_build(directory: Path) -> list[RunNode]:
        children, scan_error = await asyncio.to_thread(list_run_directory, directory)
        if scan_error is not None:
            logger.warning("Unable to list %s: %s", directory, scan_error)
            return []

        nodes: list[RunNode] = []
        for child in children:
            node = RunNode(
                name=child.name,
                node_type=NodeType.DIRECTORY if child.is_dir else NodeType.FILE,
                path=child.path,
                pipeline=pipeline,
                mtime_ns=child.mtime_ns,
            )
            if child.is_dir:
                node.children = await build_children(child.path)
            nodes.append(node)
        return sort_nodes(nodes)

    root_node.children = await build_children(root)
    return root_node


__all__ = [
    "RESERVED_NAMES",
    "RunDirectoryChild",
    "safe_mtime_ns",
    "canonical_path",
    "list_run_directory",
    "build_run_tree",
]
