"""Settings management for the organizer.

Values are layered, lowest priority first:

1. built-in defaults
2. ``settings.json`` in the platform app-data directory (or an explicit file)
3. a ``.env`` file in the current directory or the user's home
4. environment variables
"""
import json
import logging
import os
import sys
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

from dotenv import dotenv_values

log = logging.getLogger(__name__)


class ConfigurationError(Exception):
    """Raised when required settings are missing or invalid."""
    pass


# ---------------------------------------------------------------------------
# Platform-appropriate settings directory
# ---------------------------------------------------------------------------

def settings_dir() -> Path:
    """Return the platform settings directory (not created)."""
    if sys.platform == "win32":
        base = Path(os.environ.get("APPDATA", Path.home()))
    elif sys.platform == "darwin":
        base = Path.home() / "Library" / "Application Support"
    else:
        base = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return base / "drive-organizer"


SETTINGS_FILE_NAME = "settings.json"

# Environment variable -> settings field
ENV_KEYS = {
    "TMDB_API_KEY": "tmdb_api_key",
    "TMDB_LANGUAGE": "tmdb_language",
    "ORGANIZER_CACHE_DIR": "cache_dir",
    "ORGANIZER_TRASH_DIR": "trash_dir",
    "ORGANIZER_CLEAN_MAX_DEPTH": "clean_max_depth",
    "ORGANIZER_CLEAN_MAX_ITEMS": "clean_max_items",
}


@dataclass
class Settings:
    """Resolved configuration for one process."""
    tmdb_api_key: str = ""
    tmdb_language: str = "zh-CN"
    cache_dir: str = ""
    trash_dir: str = ""
    clean_max_depth: int = 8
    clean_max_items: int = 5000

    def require(self, *keys: str) -> None:
        """
        Ensure the given settings are present.

        Raises:
            ConfigurationError: Naming every missing key.
        """
        missing = [k for k in keys if not getattr(self, k, None)]
        if missing:
            raise ConfigurationError(
                "Missing required settings: " + ", ".join(missing)
            )

    def update(self, values: dict[str, Any]) -> None:
        """Apply known keys from *values*, coercing to the field's type."""
        for f in fields(self):
            if f.name not in values or values[f.name] in (None, ""):
                continue
            raw = values[f.name]
            if f.type in (int, "int"):
                try:
                    raw = int(raw)
                except (TypeError, ValueError) as e:
                    raise ConfigurationError(f"{f.name} must be an integer, got {raw!r}") from e
            else:
                raw = str(raw)
            setattr(self, f.name, raw)


def _read_json(path: Path) -> dict[str, Any]:
    try:
        with open(path, 'r', encoding='utf-8') as fh:
            data = json.load(fh)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid settings file {path}: {e}") from e
    except IOError as e:
        raise ConfigurationError(f"Cannot read settings file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"Settings file {path} must contain a JSON object")
    return data


def _env_overrides(env: dict[str, str | None]) -> dict[str, Any]:
    return {field_name: env[var] for var, field_name in ENV_KEYS.items() if env.get(var)}


def load_settings(
    path: Path | None = None,
    env: dict[str, str] | None = None,
    dotenv_paths: list[Path] | None = None,
) -> Settings:
    """
    Load settings from every source.

    Args:
        path: Explicit JSON settings file. It must exist when given.
        env: Environment mapping, defaults to ``os.environ``.
        dotenv_paths: ``.env`` files to consult, defaults to the current
            directory and the home directory.

    Returns:
        Populated Settings
    """
    settings = Settings()

    if path is not None:
        settings.update(_read_json(Path(path)))
    else:
        default_file = settings_dir() / SETTINGS_FILE_NAME
        if default_file.exists():
            settings.update(_read_json(default_file))

    if dotenv_paths is None:
        dotenv_paths = [Path.home() / ".env", Path.cwd() / ".env"]
    for dotenv_path in dotenv_paths:
        if dotenv_path.exists():
            log.debug("Loading %s", dotenv_path)
            settings.update(_env_overrides(dotenv_values(dotenv_path)))

    settings.update(_env_overrides(dict(os.environ) if env is None else env))
    return settings
