"""UI theme definitions and selection helpers.

Themes are ANSI palettes for the run tree. Syntax highlighting style for file
previews remains a separate setting.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class UITheme:
    """Semantic ANSI palette used by renderers."""

    name: str
    reset: str
    heading: str
    tree_marker: str
    tree_dir: str
    tree_group: str
    tree_file: str
    tree_sentinel_file: str
    tree_note: str
    tree_failure: str


DEFAULT_THEME = UITheme(
    name="default",
    reset="\033[0m",
    heading="\033[1;38;5;81m",
    tree_marker="\033[38;5;44m",
    tree_dir="\033[1;34m",
    tree_group="\033[1;38;5;229m",
    tree_file="\033[38;5;252m",
    tree_sentinel_file="\033[2;38;5;250m",
    tree_note="\033[38;5;109m",
    tree_failure="\033[1;38;5;203m",
)

OCEAN_THEME = UITheme(
    name="ocean",
    reset="\033[0m",
    heading="\033[1;38;5;45m",
    tree_marker="\033[38;5;39m",
    tree_dir="\033[1;38;5;45m",
    tree_group="\033[1;38;5;153m",
    tree_file="\033[38;5;252m",
    tree_sentinel_file="\033[2;38;5;110m",
    tree_note="\033[38;5;73m",
    tree_failure="\033[1;38;5;209m",
)

PLAIN_THEME = UITheme(
    name="plain",
    reset="",
    heading="",
    tree_marker="",
    tree_dir="",
    tree_group="",
    tree_file="",
    tree_sentinel_file="",
    tree_note="",
    tree_failure="",
)

_THEMES: dict[str, UITheme] = {
    DEFAULT_THEME.name: DEFAULT_THEME,
    OCEAN_THEME.name: OCEAN_THEME,
}


def available_theme_names() -> tuple[str, ...]:
    """Return selectable non-plain theme names."""
    return tuple(sorted(_THEMES.keys()))


def normalize_theme_name(name: str | None) -> str:
    """Return a valid theme name, falling back to default."""
    if not name:
        return DEFAULT_THEME.name
    candidate = str(name).strip().lower()
    if candidate in _THEMES:
        return candidate
    return DEFAULT_THEME.name


def resolve_theme(name: str | None, *, no_color: bool = False) -> UITheme:
    """Return concrete theme for requested name and color mode."""
    if no_color:
        return PLAIN_THEME
    return _THEMES[normalize_theme_name(name)]


__all__ = [
    "UITheme",
    "DEFAULT_THEME",
    "OCEAN_THEME",
    "PLAIN_THEME",
    "available_theme_names",
    "normalize_theme_name",
    "resolve_theme",
]
