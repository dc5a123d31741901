"""Filesystem watch signatures for live run folders.

Computes a cheap hash over the metadata of a pipeline folder so a poller can
tell when the engine has written new task artifacts.
"""

from __future__ import annotations

import hashlib
import os
from pathlib import Path

from .fs import RESERVED_NAMES, canonical_path


def _update_digest(digest, token: str) -> None:
    """Append a token plus separator byte to a hash digest."""
    digest.update(token.encode("utf-8", errors="surrogateescape"))
    digest.update(b"\0")


def _path_stat_signature(path: Path) -> tuple[str, int, int]:
    """Return a stable stat tuple describing ``path`` existence and metadata."""
    try:
        st = path.stat()
    except FileNotFoundError:
        return ("missing", 0, 0)
    except OSError:
        return ("error", 0, 0)
    return ("ok", st.st_mtime_ns, st.st_size)


def build_run_watch_signature(root: Path) -> str:
    """Build a digest over every visible entry below ``root``.

    Reserved names are skipped like the tree builder skips them. A directory
    whose canonical path is one of its own ancestors is not entered again.
    """
    digest = hashlib.blake2b(digest_size=20)
    _update_digest(digest, f"root:{root}")
    state, mtime_ns, _size = _path_stat_signature(root)
    _update_digest(digest, f"root_stat:{state}:{mtime_ns}")
    if state != "ok":
        return digest.hexdigest()

    pending: list[tuple[Path, frozenset[Path]]] = [(root, frozenset())]
    while pending:
        directory, ancestors = pending.pop()
        resolved = canonical_path(directory)
        if resolved in ancestors:
            _update_digest(digest, f"dir:{directory}:loop")
            continue
        ancestors = ancestors | {resolved}

        children: list[tuple[str, bool, int, int, str]] = []
        try:
            with os.scandir(directory) as entries:
                for child in entries:
                    if child.name in RESERVED_NAMES:
                        continue
                    try:
                        is_dir = child.is_dir()
                    except OSError:
                        is_dir = False
                    try:
                        st = child.stat()
                        children.append((child.name, is_dir, st.st_mtime_ns, st.st_size, "ok"))
                    except OSError:
                        children.append((child.name, is_dir, 0, 0, "error"))
        except OSError:
            _update_digest(digest, f"dir:{directory}:error")
            continue

        _update_digest(digest, f"dir:{directory}")
        children.sort(key=lambda item: (not item[1], item[0]))
        for name, is_dir, mtime_ns, size, entry_state in children:
            # Directory sizes vary by filesystem and say nothing about content.
            size_token = 0 if is_dir else size
            _update_digest(
                digest,
                f"child:{name}:{1 if is_dir else 0}:{entry_state}:{mtime_ns}:{size_token}",
            )
            if is_dir:
                pending.append((directory / name, ancestors))

    return digest.hexdigest()


__all__ = ["build_run_watch_signature"]
