"""Command-line front door for nfsandbox.

Parses CLI options, resolves the pipeline storage root, and prints the run
tree of each pipeline. ``--watch`` keeps reprinting while a run is live.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from . import config
from .pipelines import PipelineRegistry, discover_pipelines
from .provider import RunsTreeProvider
from .render import render_tree_lines
from .syntax import render_file
from .ui_theme import UITheme, available_theme_names, resolve_theme
from .watch_refresh import RunWatcher


def _positive_int(value: str) -> int:
    """argparse type for positive integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be >= 1")
    return parsed


def _positive_float(value: str) -> float:
    try:
        parsed = float(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid number: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be > 0")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Show Nextflow pipeline runs as a tree of tasks with their exit status."
    )
    parser.add_argument(
        "--storage",
        default=None,
        help="Pipeline storage root (default: configured path or ~/nextflow-sandbox).",
    )
    parser.add_argument(
        "--pipeline",
        action="append",
        default=[],
        metavar="NAME",
        help="Only show this pipeline. May be given more than once.",
    )
    parser.add_argument("--raw", action="store_true", help="Show run folders as stored on disk.")
    parser.add_argument("--no-color", action="store_true", help="Disable color output.")
    parser.add_argument(
        "--theme",
        default=None,
        help=f"UI theme name ({', '.join(available_theme_names())}).",
    )
    parser.add_argument("--style", default=None, help="Pygments style name for --show.")
    parser.add_argument("--show", metavar="FILE", help="Print a task file with syntax highlighting and exit.")
    parser.add_argument(
        "--watch",
        type=_positive_float,
        default=None,
        metavar="SECONDS",
        help="Reprint the tree whenever a pipeline folder changes.",
    )
    parser.add_argument(
        "--iterations",
        type=_positive_int,
        default=None,
        help="Stop --watch after this many polls.",
    )
    parser.add_argument(
        "--save",
        action="store_true",
        help="Remember --storage, --theme, --style and --raw as defaults.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output to stderr.")
    return parser


def _save_defaults(args: argparse.Namespace) -> None:
    if args.storage:
        config.save_storage_path(Path(args.storage).expanduser())
    if args.theme:
        config.save_theme_name(args.theme)
    if args.style:
        config.save_style_name(args.style)
    config.save_decorated(not args.raw)


def _write_tree(lines: list[str], theme: UITheme) -> None:
    if not lines:
        sys.stdout.write(f"{theme.heading}No pipeline runs found.{theme.reset}\n")
        return
    sys.stdout.write("\n".join(lines) + "\n")
    sys.stdout.flush()


async def _show_runs(
    provider: RunsTreeProvider,
    theme: UITheme,
    watch_interval: float | None,
    iterations: int | None,
) -> None:
    _write_tree(await render_tree_lines(provider, theme=theme), theme)
    if watch_interval is None:
        return

    watcher = RunWatcher(provider)
    watcher.poll()

    async def reprint(changed: list[str]) -> None:
        sys.stdout.write(f"\n{theme.heading}updated: {', '.join(changed)}{theme.reset}\n")
        _write_tree(await render_tree_lines(provider, theme=theme), theme)

    await watcher.run(watch_interval, iterations=iterations, on_change=reprint)


def main() -> None:
    """Parse CLI arguments and print the run trees under the storage root."""
    args = build_parser().parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    if args.save:
        _save_defaults(args)

    if args.show is not None:
        show_path = Path(args.show)
        if not show_path.is_file():
            raise SystemExit(f"File not found: {show_path}")
        style = args.style or config.load_style_name()
        sys.stdout.write(render_file(show_path, style=style, no_color=args.no_color))
        return

    storage = Path(args.storage).expanduser() if args.storage else config.load_storage_path()
    if not storage.is_dir():
        raise SystemExit(f"Storage path not found: {storage}")

    pipelines = discover_pipelines(storage)
    if args.pipeline:
        known = {pipeline.name for pipeline in pipelines}
        unknown = [name for name in args.pipeline if name not in known]
        if unknown:
            raise SystemExit(f"Unknown pipeline: {', '.join(unknown)}")
        pipelines = [pipeline for pipeline in pipelines if pipeline.name in args.pipeline]

    provider = RunsTreeProvider(
        PipelineRegistry(pipelines),
        decorated=False if args.raw else config.load_decorated(),
    )
    theme = resolve_theme(args.theme or config.load_theme_name(), no_color=args.no_color)
    asyncio.run(_show_runs(provider, theme, args.watch, args.iterations))


if __name__ == "__main__":
    main()
