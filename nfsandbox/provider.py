"""Query surface tying pipelines, the tree cache, and decoration together.

``RunsTreeProvider`` answers expand requests from a tree widget (or the CLI
renderer). Raw trees are walked once per pipeline and memoized in
``TreeCache``; the decorated task view is recomputed from the cached raw tree
on every run-folder expand.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path

from .pipelines import PipelineRegistry, PipelineRunContext
from .run_tree.classify import resolve_role
from .run_tree.decorate import decorate_tree
from .run_tree.fs import build_run_tree
from .run_tree.types import NodeRole, NodeType, RunNode

logger = logging.getLogger(__name__)

ChangeListener = Callable[[str | None], None]


class TreeCache:
    """Per-pipeline raw-tree memo with single-flight builds.

    At most one build runs per key; callers arriving while it runs await the
    same task. Invalidating a key while its build is in flight discards that
    build's result instead of caching it.
    """

    def __init__(self) -> None:
        self._trees: dict[str, RunNode] = {}
        self._inflight: dict[str, asyncio.Task[RunNode]] = {}
        self._generations: dict[str, int] = {}
        self._epoch = 0

    def _token(self, key: str) -> tuple[int, int]:
        return (self._epoch, self._generations.get(key, 0))

    def get(self, key: str) -> RunNode | None:
        return self._trees.get(key)

    def __contains__(self, key: object) -> bool:
        return key in self._trees

    def invalidate(self, key: str) -> None:
        self._trees.pop(key, None)
        self._inflight.pop(key, None)
        self._generations[key] = self._generations.get(key, 0) + 1

    def invalidate_all(self) -> None:
        self._trees.clear()
        self._inflight.clear()
        self._epoch += 1

    def _finish(self, key: str, token: tuple[int, int], task: asyncio.Task[RunNode]) -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]
        if task.cancelled() or task.exception() is not None:
            return
        if self._token(key) == token:
            self._trees[key] = task.result()

    async def get_or_build(self, key: str, builder: Callable[[], Awaitable[RunNode]]) -> RunNode:
        tree = self._trees.get(key)
        if tree is not None:
            return tree
        task = self._inflight.get(key)
        if task is None:
            token = self._token(key)

            async def run_builder() -> RunNode:
                return await builder()

            task = asyncio.ensure_future(run_builder())
            self._inflight[key] = task
            task.add_done_callback(lambda done, key=key, token=token: self._finish(key, token, done))
        return await asyncio.shield(task)


@dataclass(frozen=True)
class NodeInspection:
    """What open-file / open-terminal collaborators need to act on a node."""

    path: Path
    is_dir: bool
    context_value: str | None
    tooltip: str | None


class RunsTreeProvider:
    """Expand/refresh/toggle surface over the run trees of registered pipelines."""

    def __init__(self, registry: PipelineRegistry, *, decorated: bool = True) -> None:
        self.registry = registry
        self.decorated = decorated
        self.cache = TreeCache()
        self._listeners: list[ChangeListener] = []

    def on_did_change(self, listener: ChangeListener) -> None:
        self._listeners.append(listener)

    def _fire(self, name: str | None) -> None:
        for listener in list(self._listeners):
            listener(name)

    def refresh(self, name: str | None = None) -> None:
        """Drop the cached tree of ``name`` (or every tree) and notify listeners."""
        if name is None:
            self.cache.invalidate_all()
        else:
            self.cache.invalidate(name)
        self._fire(name)

    def run_started(self, name: str, started_at_ms: float | None = None) -> None:
        pipeline = self.registry.get(name)
        if pipeline is not None:
            pipeline.mark_run_started(started_at_ms)
        self.refresh(name)

    def run_updated(self, name: str) -> None:
        self.refresh(name)

    def run_stopped(self, name: str) -> None:
        self.refresh(name)

    def toggle_decorated(self) -> bool:
        self.decorated = not self.decorated
        self._fire(None)
        return self.decorated

    def remove_pipeline(self, name: str) -> bool:
        removed = self.registry.remove(name)
        self.cache.invalidate(name)
        self._fire(None)
        return removed

    def pipeline_nodes(self) -> list[RunNode]:
        """Return one root node per registered pipeline with a folder on disk."""
        nodes: list[RunNode] = []
        for pipeline in self.registry:
            if not pipeline.exists():
                continue
            nodes.append(
                RunNode(
                    name=pipeline.pipeline_path.name,
                    node_type=NodeType.DIRECTORY,
                    path=pipeline.pipeline_path,
                    pipeline=pipeline,
                    role=NodeRole.PIPELINE,
                )
            )
        return nodes

    async def _build_pipeline_tree(self, pipeline: PipelineRunContext) -> RunNode:
        tree = await build_run_tree(pipeline.pipeline_path, pipeline, role=NodeRole.PIPELINE)
        run_name = await asyncio.to_thread(pipeline.run_name)
        for child in tree.children:
            if child.name == pipeline.run_path.name and child.is_dir:
                child.note = f"[{run_name}]" if run_name else None
        return tree

    async def pipeline_tree(self, name: str) -> RunNode | None:
        """Return the cached raw tree for ``name``, building it if needed."""
        pipeline = self.registry.get(name)
        if pipeline is None or not pipeline.exists():
            return None
        return await self.cache.get_or_build(name, lambda: self._build_pipeline_tree(pipeline))

    async def get_children(self, node: RunNode | None = None) -> list[RunNode]:
        """Return the children to display beneath ``node`` (roots when ``None``)."""
        try:
            if node is None:
                return self.pipeline_nodes()
            role = resolve_role(node)
            if role is NodeRole.PIPELINE:
                name = node.pipeline.name if node.pipeline is not None else node.name
                tree = await self.pipeline_tree(name)
                return list(tree.children) if tree is not None else []
            if role is NodeRole.RUN_FOLDER and self.decorated:
                return decorate_tree(node).children
            return list(node.children)
        except Exception:
            logger.exception("Failed to list children of %s", node.name if node is not None else "<root>")
            return []

    def inspect(self, node: RunNode) -> NodeInspection | None:
        """Expose the filesystem location behind ``node``; ``None`` for synthetic nodes."""
        if node.path is None:
            return None
        return NodeInspection(
            path=node.path,
            is_dir=node.is_dir,
            context_value=node.context_value,
            tooltip=node.tooltip,
        )


__all__ = [
    "TreeCache",
    "NodeInspection",
    "RunsTreeProvider",
]
