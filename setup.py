from __future__ import annotations

import sys
import tomllib
from pathlib import Path

from setuptools import setup

try:
    from py2app import util as py2app_util
except Exception:  # pragma: no cover - py2app may not be available
    py2app_util = None
else:  # pragma: no cover - used only during app builds
    _orig_is_platform_file = py2app_util.is_platform_file

    def _patched_is_platform_file(path: str) -> bool:
        """Treat extra binary-like files as signable for ad-hoc codesign."""

        if path.endswith((".a", ".sh")):
            return True
        return _orig_is_platform_file(path)

    py2app_util.is_platform_file = _patched_is_platform_file

APP = ["src/whattheport/app.py"]
RESOURCES_DIR = Path("src/whattheport/assets")

VERSION = "0.1.0"
PYPROJECT = Path(__file__).parent / "pyproject.toml"
if PYPROJECT.exists():
    try:
        with PYPROJECT.open("rb") as handle:
            data = tomllib.load(handle)
        VERSION = data.get("project", {}).get("version", VERSION)
    except (OSError, tomllib.TOMLDecodeError):  # pragma: no cover - best effort
        pass

OPTIONS = {
    "argv_emulation": False,
    "plist": {
        "LSUIElement": True,
        "CFBundleName": "WhatThePort",
        "CFBundleIdentifier": "com.whattheport.menubar",
        "CFBundleShortVersionString": VERSION,
        "CFBundleVersion": VERSION,
    },
    "packages": ["whattheport", "rumps", "psutil"],
    "resources": [str(RESOURCES_DIR)] if RESOURCES_DIR.exists() else [],
}

if "py2app" in sys.argv:
    setup(
        app=APP,
        options={"py2app": OPTIONS},
        setup_requires=["py2app>=0.28"],
    )
else:
    setup()
