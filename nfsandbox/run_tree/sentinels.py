"""Task identity and exit-status extraction from Nextflow sentinel files."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from .types import RunNode

logger = logging.getLogger(__name__)

TASK_MARKER = "# NEXTFLOW TASK: "
RUN_NAME_MARKER = "Run name: "
COMMAND_RUN_SENTINEL = ".command.run"
EXITCODE_SENTINEL = ".exitcode"
KILLED_BY_CONTROLLER_EXIT_CODE = 143
SUCCESS_EXIT_CODES = frozenset({0, KILLED_BY_CONTROLLER_EXIT_CODE})


@dataclass(frozen=True)
class TaskSentinels:
    """Values found in one process folder; ``None`` when absent or unreadable."""

    label: str | None = None
    exitcode: int | None = None


def is_success_exit_code(code: int | None) -> bool:
    return code is not None and code in SUCCESS_EXIT_CODES


def is_failure_exit_code(code: int | None) -> bool:
    return code is not None and code not in SUCCESS_EXIT_CODES


def _read_text(path: Path) -> str | None:
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        logger.debug("Unable to read sentinel %s: %s", path, exc)
        return None


def _line_after_marker(contents: str, marker: str) -> str | None:
    index = contents.find(marker)
    if index < 0:
        return None
    start = index + len(marker)
    end = contents.find("\n", start)
    value = contents[start:] if end < 0 else contents[start:end]
    return value.rstrip("\r")


def parse_task_label(contents: str) -> str | None:
    """Return the ``process (tag)`` label embedded in ``.command.run`` text."""
    return _line_after_marker(contents, TASK_MARKER)


def parse_exitcode(contents: str) -> int | None:
    """Return the integer in ``.exitcode`` text, or ``None`` when malformed."""
    try:
        return int(contents.strip())
    except ValueError:
        return None


def extract_task_sentinels(node: RunNode) -> TaskSentinels:
    """Scan the direct file children of a process folder for sentinels."""
    label: str | None = None
    exitcode: int | None = None
    for child in node.children:
        if child.is_dir or child.path is None:
            continue
        child_path = str(child.path)
        if COMMAND_RUN_SENTINEL in child_path:
            contents = _read_text(child.path)
            if contents is not None:
                found = parse_task_label(contents)
                if found is not None:
                    label = found
        elif EXITCODE_SENTINEL in child_path:
            contents = _read_text(child.path)
            if contents is not None:
                parsed = parse_exitcode(contents)
                if parsed is not None:
                    exitcode = parsed
    return TaskSentinels(label=label, exitcode=exitcode)


def parse_run_name(log_path: Path) -> str | None:
    """Return the run name logged in ``.nextflow.log``, if any."""
    contents = _read_text(log_path)
    if contents is None:
        return None
    return _line_after_marker(contents, RUN_NAME_MARKER)


__all__ = [
    "TASK_MARKER",
    "RUN_NAME_MARKER",
    "KILLED_BY_CONTROLLER_EXIT_CODE",
    "SUCCESS_EXIT_CODES",
    "TaskSentinels",
    "is_success_exit_code",
    "is_failure_exit_code",
    "parse_task_label",
    "parse_exitcode",
    "extract_task_sentinels",
    "parse_run_name",
]
