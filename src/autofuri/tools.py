from __future__ import annotations

import importlib
import os
from dataclasses import dataclass
from pathlib import Path

__all__ = [
    "DictionaryStatus",
    "describe_unidic",
    "get_unidic_dicdir",
]

_UNIDIC_DIR_ENV = "AUTOFURI_UNIDIC_DIR"


@dataclass(slots=True)
class DictionaryStatus:
    name: str
    available: bool
    path: Path | None
    detail: str | None = None


def _package_dicdir(module_name: str) -> Path | None:
    try:
        module = importlib.import_module(module_name)
    except ImportError:
        return None
    dicdir_value = getattr(module, "DICDIR", None)
    if not dicdir_value:
        return None
    dicdir = Path(dicdir_value)
    if (dicdir / "dicrc").exists():
        return dicdir
    return None


def get_unidic_dicdir() -> Path | None:
    env_dir = os.environ.get(_UNIDIC_DIR_ENV)
    if env_dir:
        candidate = Path(env_dir).expanduser()
        if (candidate / "dicrc").exists():
            return candidate
    for module_name in ("unidic", "unidic_lite"):
        dicdir = _package_dicdir(module_name)
        if dicdir is not None:
            return dicdir
    return None


def describe_unidic() -> DictionaryStatus:
    dicdir = get_unidic_dicdir()
    detail = None
    if dicdir is None:
        detail = f"Install unidic-lite (or unidic) or set {_UNIDIC_DIR_ENV}."
    elif os.environ.get(_UNIDIC_DIR_ENV) and Path(os.environ[_UNIDIC_DIR_ENV]).expanduser() == dicdir:
        detail = f"Using {_UNIDIC_DIR_ENV}."
    return DictionaryStatus(
        name="UniDic",
        available=dicdir is not None,
        path=dicdir,
        detail=detail,
    )
