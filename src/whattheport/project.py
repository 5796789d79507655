from __future__ import annotations

import json
import tomllib
from pathlib import Path
from typing import Any, Optional

PACKAGE_JSON = "package.json"
PYPROJECT_TOML = "pyproject.toml"


def resolve_project_name(working_dir: Optional[str]) -> Optional[str]:
    """Name the project a server was started from.

    ``package.json`` wins over ``pyproject.toml``; without a usable manifest the
    directory's basename is used.
    """

    if not working_dir:
        return None
    directory = Path(working_dir)

    name = _package_json_name(directory / PACKAGE_JSON)
    if name is None:
        name = _pyproject_name(directory / PYPROJECT_TOML)
    if name is not None:
        return name
    return directory.name or working_dir


def _package_json_name(path: Path) -> Optional[str]:
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
    except (OSError, ValueError):
        return None
    if not isinstance(data, dict):
        return None
    return _string_or_none(data.get("name"))


def _pyproject_name(path: Path) -> Optional[str]:
    try:
        with path.open("rb") as handle:
            data = tomllib.load(handle)
    except (OSError, ValueError):
        return None
    project = data.get("project")
    if isinstance(project, dict):
        name = _string_or_none(project.get("name"))
        if name is not None:
            return name
    tool = data.get("tool")
    poetry = tool.get("poetry") if isinstance(tool, dict) else None
    if isinstance(poetry, dict):
        return _string_or_none(poetry.get("name"))
    return None


def _string_or_none(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return value
    return None


__all__ = ["resolve_project_name"]
