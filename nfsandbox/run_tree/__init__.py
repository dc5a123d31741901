"""Domain model for Nextflow run-output trees.

This package contains non-UI tree primitives:
- run-tree node datatypes with shape-based classification caches
- asynchronous filesystem walk building the raw tree
- sentinel-file parsing for task labels and exit codes
- decoration, grouping, and ordering passes for the task view
- watch signatures for detecting changes during a live run
"""

from __future__ import annotations

from .types import NodeRole, NodeType, RunNode, Tristate, sort_nodes, structure_of
from .classify import is_process_folder, is_run_folder, is_work_folder, resolve_role
from .fs import RESERVED_NAMES, build_run_tree, list_run_directory
from .sentinels import (
    KILLED_BY_CONTROLLER_EXIT_CODE,
    TaskSentinels,
    extract_task_sentinels,
    is_failure_exit_code,
    is_success_exit_code,
    parse_run_name,
)
from .grouping import FAILURE_GLYPH, GroupCounts, group_by_process_name, summarize_group
from .decorate import (
    decorate_process_folder,
    decorate_run_folder,
    decorate_tree,
    decorate_work_folder,
)
from .watch import build_run_watch_signature

__all__ = [
    "NodeRole",
    "NodeType",
    "RunNode",
    "Tristate",
    "sort_nodes",
    "structure_of",
    "is_process_folder",
    "is_work_folder",
    "is_run_folder",
    "resolve_role",
    "RESERVED_NAMES",
    "build_run_tree",
    "list_run_directory",
    "KILLED_BY_CONTROLLER_EXIT_CODE",
    "TaskSentinels",
    "extract_task_sentinels",
    "is_failure_exit_code",
    "is_success_exit_code",
    "parse_run_name",
    "FAILURE_GLYPH",
    "GroupCounts",
    "group_by_process_name",
    "summarize_group",
    "decorate_process_folder",
    "decorate_work_folder",
    "decorate_run_folder",
    "decorate_tree",
    "build_run_watch_signature",
]
