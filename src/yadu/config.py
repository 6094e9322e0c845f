# config.py
from __future__ import annotations

import json
import os
import tomllib
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Optional

import click

from .errors import SettingsError

APP_NAME = "yadu"
SETTINGS_FILENAME = "settings.json"
# Older installs kept the same two keys in TOML next to where settings.json goes
LEGACY_FILENAME = "config.toml"

# Env overrides, mostly for tests and for people keeping settings in their dotfiles
SETTINGS_ENV = "YADU_SETTINGS"
CONTEXT_ENV = "YADU_CONTEXT"


def settings_path() -> Path:
    override = os.environ.get(SETTINGS_ENV)
    if override:
        return Path(override).expanduser()
    return Path(click.get_app_dir(APP_NAME)) / SETTINGS_FILENAME


def _read_legacy(path: Path) -> dict:
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise SettingsError(path=path, reason=f"failed to read settings: {e}") from e


@dataclass
class Settings:
    """Per-user settings: the active context directory and environment."""
    context: str = ""
    environment: str = ""
    path: Optional[Path] = None

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "Settings":
        """
        Read the settings file. When it doesn't exist yet, fall back to a
        legacy config.toml in the same directory; the next save() writes JSON
        to `path` and leaves the TOML file alone.
        """
        path = path or settings_path()
        if not path.exists():
            legacy = path.with_name(LEGACY_FILENAME)
            if not legacy.is_file():
                return cls(path=path)
            data = _read_legacy(legacy)
        else:
            try:
                data = json.loads(path.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError) as e:
                raise SettingsError(path=path, reason=f"failed to read settings: {e}") from e
            if not isinstance(data, dict):
                raise SettingsError(path=path, reason="settings file must contain a JSON object")
        return cls(
            context=str(data.get("context") or ""),
            environment=str(data.get("environment") or ""),
            path=path,
        )

    def save(self) -> None:
        path = self.path or settings_path()
        data = asdict(self)
        data.pop("path")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp = path.with_suffix(path.suffix + ".tmp")
            tmp.write_text(json.dumps(data, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
            os.replace(tmp, path)
        except OSError as e:
            raise SettingsError(path=path, reason=f"failed to write settings: {e}") from e
        self.path = path

    def set_context(self, directory: str | Path) -> None:
        self.context = str(Path(directory).expanduser().resolve())
        self.save()

    def set_environment(self, name: str) -> None:
        self.environment = name
        self.save()
