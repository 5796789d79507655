from __future__ import annotations

import os
import shutil
from pathlib import Path
from typing import Dict, Optional, Tuple

TOOL_ENV_VARS: Dict[str, str] = {
    "lsof": "WHATTHEPORT_LSOF",
    "ps": "WHATTHEPORT_PS",
}

WELL_KNOWN_LOCATIONS: Dict[str, Tuple[Path, ...]] = {
    "lsof": (Path("/usr/sbin/lsof"), Path("/usr/bin/lsof")),
    "ps": (Path("/bin/ps"), Path("/usr/bin/ps")),
}


def discover_tool(name: str, explicit_path: Optional[Path] = None) -> str:
    """Locate an introspection tool binary.

    Lookup order: the configured path, the tool's environment variable,
    well-known system locations, then ``PATH``. The bare name is returned when
    nothing is found so the failure surfaces at invocation time.
    """

    if explicit_path is not None:
        candidate = explicit_path.expanduser()
        if _is_executable(candidate):
            return str(candidate)

    env_name = TOOL_ENV_VARS.get(name)
    env_value = os.getenv(env_name, "").strip() if env_name else ""
    if env_value:
        candidate = Path(env_value).expanduser()
        if _is_executable(candidate):
            return str(candidate)

    for candidate in WELL_KNOWN_LOCATIONS.get(name, ()):
        if _is_executable(candidate):
            return str(candidate)

    found = shutil.which(name)
    if found:
        return found
    return name


def _is_executable(path: Path) -> bool:
    return path.is_file() and os.access(path, os.X_OK)


__all__ = ["discover_tool", "TOOL_ENV_VARS", "WELL_KNOWN_LOCATIONS"]
