"""Public package surface for nfsandbox.

Exports ``main`` for programmatic CLI invocation.
The run-tree engine lives in ``nfsandbox.run_tree`` and ``nfsandbox.provider``.
"""

from __future__ import annotations


def main(*args, **kwargs):
    """Lazily import CLI entrypoint to keep package imports lightweight."""
    from .cli import main as _main

    return _main(*args, **kwargs)

__all__ = ["main"]
