from __future__ import annotations

import json

import pytest

from autofuri.notation import NotationStyle
from autofuri.settings import DEFAULT_SETTINGS, Settings, SettingsError, load_settings


def test_defaults() -> None:
    assert DEFAULT_SETTINGS == Settings(True, True, NotationStyle.CURLY)
    assert load_settings() == DEFAULT_SETTINGS


def test_missing_file_gives_defaults(tmp_path) -> None:
    assert load_settings(tmp_path / "absent.json") == DEFAULT_SETTINGS


def test_file_overrides_are_applied(tmp_path) -> None:
    path = tmp_path / "settings.json"
    path.write_text(
        json.dumps({"editingMode": False, "notationStyle": "square", "unrelated": 1}),
        encoding="utf-8",
    )
    settings = load_settings(path)
    assert settings == Settings(editing_mode=False, reading_mode=True, notation_style=NotationStyle.SQUARE)


def test_non_boolean_toggles_are_ignored() -> None:
    settings = Settings.from_mapping({"reading_mode": "no", "notation_style": "angle"})
    assert settings.reading_mode is True
    assert settings.notation_style is NotationStyle.NONE


def test_environment_selects_file_and_notation(tmp_path, monkeypatch) -> None:
    path = tmp_path / "settings.json"
    path.write_text('{"readingMode": false}', encoding="utf-8")
    monkeypatch.setenv("AUTOFURI_CONFIG", str(path))
    monkeypatch.setenv("AUTOFURI_NOTATION", "none")
    settings = load_settings()
    assert settings.reading_mode is False
    assert settings.notation_style is NotationStyle.NONE


@pytest.mark.parametrize("content", ["{not json", "[1, 2]"])
def test_unreadable_file_raises(tmp_path, content: str) -> None:
    path = tmp_path / "settings.json"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(SettingsError):
        load_settings(path)


def test_replace_and_dict_round_trip() -> None:
    settings = DEFAULT_SETTINGS.replace(notation_style="Square", editing_mode=False)
    assert settings.notation_style is NotationStyle.SQUARE
    assert settings.to_dict() == {
        "editingMode": False,
        "readingMode": True,
        "notationStyle": "square",
    }
    assert Settings.from_mapping(settings.to_dict()) == settings
    assert DEFAULT_SETTINGS.editing_mode is True
