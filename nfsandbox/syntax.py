"""Task file loading, sanitization, and syntax highlighting."""

from __future__ import annotations

import re
from pathlib import Path

from pygments import highlight
from pygments.formatters import TerminalFormatter
from pygments.lexers import BashLexer, TextLexer, get_lexer_for_filename
from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound

_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")
_FORMATTERS: dict[str, TerminalFormatter] = {}
FALLBACK_STYLE = "monokai"


def read_text(path: Path) -> str:
    """Read text using tolerant encoding fallback order.

    Attempts UTF-8, UTF-8 with BOM, then latin-1; as a final fallback decodes
    raw bytes with UTF-8 replacement semantics.
    """
    for encoding in ("utf-8", "utf-8-sig", "latin-1"):
        try:
            return path.read_text(encoding=encoding)
        except UnicodeDecodeError:
            continue
    return path.read_bytes().decode("utf-8", errors="replace")


def sanitize_terminal_text(source: str) -> str:
    """Escape terminal control bytes to avoid side effects (bell, cursor moves, etc.)."""
    if _CONTROL_RE.search(source) is None:
        return source

    out: list[str] = []
    for ch in source:
        code = ord(ch)
        if ch in {"\n", "\r", "\t"}:
            out.append(ch)
            continue
        # C0 controls + DEL + C1 controls.
        if code < 32 or code == 127 or 0x80 <= code <= 0x9F:
            out.append(f"\\x{code:02x}")
            continue
        out.append(ch)
    return "".join(out)


def _normalize_style(style: str) -> str:
    try:
        get_style_by_name(style)
    except ClassNotFound:
        return FALLBACK_STYLE
    return style


def _formatter_for_style(style: str) -> TerminalFormatter:
    """Return cached Pygments terminal formatter for style name."""
    formatter = _FORMATTERS.get(style)
    if formatter is None:
        formatter = TerminalFormatter(style=style)
        _FORMATTERS[style] = formatter
    return formatter


def lexer_for_task_file(path: Path, source: str):
    """Pick a lexer; Nextflow's ``.command.*`` wrappers are bash scripts."""
    if path.name.startswith(".command.") and path.name not in {".command.log", ".command.out", ".command.err"}:
        return BashLexer()
    try:
        return get_lexer_for_filename(path.name, source)
    except ClassNotFound:
        return TextLexer()


def colorize_source(source: str, path: Path, style: str = FALLBACK_STYLE) -> str:
    """Highlight ``source`` for a terminal, keyed on ``path``'s file name."""
    formatter = _formatter_for_style(_normalize_style(style))
    return highlight(source, lexer_for_task_file(path, source), formatter)


def render_file(path: Path, style: str = FALLBACK_STYLE, no_color: bool = False) -> str:
    """Return the sanitized (and optionally highlighted) text of ``path``."""
    source = sanitize_terminal_text(read_text(path))
    if no_color:
        return source
    return colorize_source(source, path, style)
