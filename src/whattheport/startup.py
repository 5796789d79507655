from __future__ import annotations

import os
import plistlib
import subprocess
import sys
from pathlib import Path


AGENT_IDENTIFIER = "com.whattheport.menubar"
AGENT_FILENAME = f"{AGENT_IDENTIFIER}.plist"
LAUNCH_AGENTS_DIR = Path.home() / "Library" / "LaunchAgents"
PLIST_PATH = LAUNCH_AGENTS_DIR / AGENT_FILENAME


def _program_arguments() -> list[str]:
    return [sys.executable, "-m", "whattheport.app"]


def build_plist() -> dict:
    return {
        "Label": AGENT_IDENTIFIER,
        "ProgramArguments": _program_arguments(),
        "RunAtLoad": True,
        "KeepAlive": False,
        "EnvironmentVariables": {
            "PATH": os.environ.get("PATH", ""),
        },
    }


def enable_launch_agent() -> bool:
    try:
        PLIST_PATH.parent.mkdir(parents=True, exist_ok=True)
        with PLIST_PATH.open("wb") as handle:
            plistlib.dump(build_plist(), handle)
    except OSError:
        return False

    _launchctl("bootout")
    _launchctl("bootstrap")
    return True


def disable_launch_agent() -> bool:
    removed = False
    if PLIST_PATH.exists():
        try:
            PLIST_PATH.unlink()
            removed = True
        except OSError:
            removed = False
    _launchctl("bootout")
    return removed


def is_launch_agent_enabled() -> bool:
    return PLIST_PATH.exists()


def _launchctl(action: str) -> None:
    try:
        subprocess.run(
            ["launchctl", action, f"gui/{os.getuid()}", str(PLIST_PATH)],
            check=False,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )
    except FileNotFoundError:
        return


__all__ = [
    "build_plist",
    "disable_launch_agent",
    "enable_launch_agent",
    "is_launch_agent_enabled",
]
