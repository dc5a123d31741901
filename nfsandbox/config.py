"""Persistent JSON config helpers.

Stores the pipeline storage root, the decorated/raw presentation preference,
and rendering choices. Malformed or missing config falls back to defaults.
"""

from __future__ import annotations

import json
import os
from pathlib import Path

from platformdirs import user_config_dir

APP_NAME = "nfsandbox"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
DEFAULT_STORAGE_PATH = Path("~/nextflow-sandbox")
STORAGE_PATH_ENV = "NFSANDBOX_STORAGE_PATH"
DEFAULT_STYLE = "monokai"


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object]) -> None:
    """Persist config data as pretty-printed JSON.

    Filesystem errors are ignored to keep the viewer usable when config
    cannot be written.
    """
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except OSError:
        pass


def _load_string(key: str) -> str | None:
    value = load_config().get(key)
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped if stripped else None


def _save_string(key: str, value: str) -> None:
    stripped = str(value).strip()
    if not stripped:
        return
    config = load_config()
    config[key] = stripped
    save_config(config)


def load_storage_path() -> Path:
    """Return the pipeline storage root.

    ``NFSANDBOX_STORAGE_PATH`` wins over the persisted value, which wins over
    ``~/nextflow-sandbox``. ``~`` is expanded.
    """
    raw = os.environ.get(STORAGE_PATH_ENV, "").strip() or _load_string("storage_path")
    path = Path(raw) if raw else DEFAULT_STORAGE_PATH
    return path.expanduser()


def save_storage_path(path: Path) -> None:
    _save_string("storage_path", str(path))


def load_decorated() -> bool:
    """Return persisted decorated-view preference.

    Only explicit boolean values are accepted; any other type falls back to
    ``True``.
    """
    value = load_config().get("decorated")
    return bool(value) if isinstance(value, bool) else True


def save_decorated(decorated: bool) -> None:
    config = load_config()
    config["decorated"] = bool(decorated)
    save_config(config)


def load_style_name() -> str:
    """Return the Pygments style used for file previews."""
    return _load_string("style") or DEFAULT_STYLE


def save_style_name(style: str) -> None:
    _save_string("style", style)


def load_theme_name() -> str | None:
    """Load persisted UI theme name, returning ``None`` when unset/invalid."""
    return _load_string("theme")


def save_theme_name(theme_name: str) -> None:
    """Persist selected UI theme name."""
    _save_string("theme", theme_name)
