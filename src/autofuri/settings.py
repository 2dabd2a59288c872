from __future__ import annotations

import dataclasses
import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

from .notation import NotationStyle

__all__ = [
    "CONFIG_ENV",
    "NOTATION_ENV",
    "DEFAULT_SETTINGS",
    "Settings",
    "SettingsError",
    "load_settings",
]

CONFIG_ENV = "AUTOFURI_CONFIG"
NOTATION_ENV = "AUTOFURI_NOTATION"


class SettingsError(ValueError):
    """Raised when a settings file exists but cannot be parsed."""


@dataclass(frozen=True)
class Settings:
    editing_mode: bool = True
    reading_mode: bool = True
    notation_style: NotationStyle = NotationStyle.CURLY

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], base: "Settings | None" = None) -> "Settings":
        """Overlay recognised keys from ``data`` (camelCase or snake_case) on ``base``."""
        settings = base or cls()
        patch: dict[str, Any] = {}
        for key, field_name in (
            ("editingMode", "editing_mode"),
            ("editing_mode", "editing_mode"),
            ("readingMode", "reading_mode"),
            ("reading_mode", "reading_mode"),
        ):
            value = data.get(key)
            if isinstance(value, bool):
                patch[field_name] = value
        for key in ("notationStyle", "notation_style"):
            if key in data:
                patch["notation_style"] = NotationStyle.coerce(data[key])
        return dataclasses.replace(settings, **patch)

    def replace(self, **patch: Any) -> "Settings":
        if "notation_style" in patch:
            patch["notation_style"] = NotationStyle.coerce(patch["notation_style"])
        return dataclasses.replace(self, **patch)

    def to_dict(self) -> dict[str, object]:
        return {
            "editingMode": self.editing_mode,
            "readingMode": self.reading_mode,
            "notationStyle": self.notation_style.value,
        }


DEFAULT_SETTINGS = Settings()


def load_settings(path: str | Path | None = None) -> Settings:
    if path is None:
        env_path = os.environ.get(CONFIG_ENV)
        path = Path(env_path).expanduser() if env_path else None
    settings = DEFAULT_SETTINGS
    if path is not None:
        config_path = Path(path)
        try:
            raw = config_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raw = None
        if raw is not None:
            try:
                data = json.loads(raw)
            except json.JSONDecodeError as exc:
                raise SettingsError(f"Invalid settings file {config_path}: {exc}") from exc
            if not isinstance(data, Mapping):
                raise SettingsError(f"Settings file {config_path} must contain a JSON object.")
            settings = Settings.from_mapping(data, settings)
    notation = os.environ.get(NOTATION_ENV)
    if notation:
        settings = settings.replace(notation_style=notation)
    return settings
