"""Poll-based change detection for pipelines with a live run.

The engine offers no callback when it writes task artifacts, so the watcher
compares per-pipeline watch signatures and refreshes the provider's cached
tree for every pipeline whose folder changed.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from .provider import RunsTreeProvider
from .run_tree.watch import build_run_watch_signature

logger = logging.getLogger(__name__)


class RunWatcher:
    """Refreshes ``provider`` for pipelines whose folders changed between polls."""

    def __init__(self, provider: RunsTreeProvider) -> None:
        self.provider = provider
        self._signatures: dict[str, str] = {}

    def collect_signatures(self) -> dict[str, str]:
        return {
            pipeline.name: build_run_watch_signature(pipeline.pipeline_path)
            for pipeline in self.provider.registry
        }

    def apply_signatures(self, signatures: dict[str, str]) -> list[str]:
        """Store ``signatures`` and refresh changed pipelines; return their names.

        The first signature seen for a pipeline only primes the watcher.
        """
        changed: list[str] = []
        for name, signature in signatures.items():
            previous = self._signatures.get(name)
            if previous is not None and previous != signature:
                changed.append(name)
        self._signatures = dict(signatures)
        for name in changed:
            logger.debug("Pipeline %s changed on disk", name)
            self.provider.run_updated(name)
        return changed

    def poll(self) -> list[str]:
        return self.apply_signatures(self.collect_signatures())

    async def run(
        self,
        interval: float,
        *,
        iterations: int | None = None,
        on_change: Callable[[list[str]], object] | None = None,
    ) -> None:
        """Poll every ``interval`` seconds, forever or for ``iterations`` polls."""
        count = 0
        while iterations is None or count < iterations:
            signatures = await asyncio.to_thread(self.collect_signatures)
            changed = self.apply_signatures(signatures)
            if changed and on_change is not None:
                result = on_change(changed)
                if asyncio.iscoroutine(result):
                    await result
            count += 1
            if iterations is None or count < iterations:
                await asyncio.sleep(interval)


__all__ = ["RunWatcher"]
