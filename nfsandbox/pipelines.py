"""Pipeline run contexts and the ordered registry the provider reads from."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from .run_tree.sentinels import parse_run_name

logger = logging.getLogger(__name__)

RUN_FOLDER_NAME = "run"
NEXTFLOW_LOG_NAME = ".nextflow.log"


@dataclass
class PipelineRunContext:
    """Where a pipeline stores its runs and when the current run began.

    ``run_started_at_ms`` scopes success/failure tallies to the current run:
    task folders last modified before it belong to a previous (resumed) run.
    """

    name: str
    storage_path: Path
    run_started_at_ms: float = 0.0

    @property
    def pipeline_path(self) -> Path:
        return self.storage_path / self.name

    @property
    def run_path(self) -> Path:
        return self.pipeline_path / RUN_FOLDER_NAME

    def exists(self) -> bool:
        return self.pipeline_path.is_dir()

    def mark_run_started(self, started_at_ms: float | None = None) -> float:
        """Record the start of a run and return the recorded timestamp.

        Defaults to the run folder's current modification time, falling back
        to the pipeline folder when the run folder does not exist yet.
        """
        if started_at_ms is None:
            started_at_ms = 0.0
            for candidate in (self.run_path, self.pipeline_path):
                try:
                    started_at_ms = candidate.stat().st_mtime_ns / 1_000_000
                    break
                except OSError:
                    continue
        self.run_started_at_ms = float(started_at_ms)
        return self.run_started_at_ms

    def run_name(self) -> str | None:
        """Return the Nextflow run name (e.g. ``happy_turing``) if logged."""
        return parse_run_name(self.run_path / NEXTFLOW_LOG_NAME)


class PipelineRegistry:
    """Ordered name → context mapping of pipelines known to the viewer."""

    def __init__(self, pipelines: list[PipelineRunContext] | None = None) -> None:
        self._pipelines: dict[str, PipelineRunContext] = {}
        for pipeline in pipelines or []:
            self.add(pipeline)

    def add(self, pipeline: PipelineRunContext) -> None:
        self._pipelines[pipeline.name] = pipeline

    def remove(self, name: str) -> bool:
        return self._pipelines.pop(name, None) is not None

    def get(self, name: str | None) -> PipelineRunContext | None:
        if name is None:
            return None
        return self._pipelines.get(name)

    def names(self) -> list[str]:
        return list(self._pipelines)

    def __iter__(self) -> Iterator[PipelineRunContext]:
        return iter(list(self._pipelines.values()))

    def __len__(self) -> int:
        return len(self._pipelines)


def discover_pipelines(storage_path: Path) -> list[PipelineRunContext]:
    """Return a context for every pipeline folder directly under ``storage_path``."""
    try:
        with os.scandir(storage_path) as entries:
            names = sorted(entry.name for entry in entries if entry.is_dir() and not entry.name.startswith("."))
    except OSError as exc:
        logger.warning("Unable to scan storage path %s: %s", storage_path, exc)
        return []
    return [PipelineRunContext(name=name, storage_path=storage_path) for name in names]


__all__ = [
    "RUN_FOLDER_NAME",
    "NEXTFLOW_LOG_NAME",
    "PipelineRunContext",
    "PipelineRegistry",
    "discover_pipelines",
]
