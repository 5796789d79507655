from __future__ import annotations

import logging
import shutil
import subprocess
import sys
import webbrowser

import psutil

logger = logging.getLogger("whattheport")


def terminate(pid: int) -> bool:
    """Send SIGTERM to ``pid``.

    Only reports whether the signal was delivered. The caller re-scans after a
    short delay to see whether the listener actually went away.
    """

    if pid <= 0:
        return False
    try:
        psutil.Process(pid).terminate()
    except psutil.NoSuchProcess:
        logger.info("pid %s is already gone", pid)
        return False
    except psutil.AccessDenied:
        logger.warning("not allowed to terminate pid %s", pid)
        return False
    logger.info("sent SIGTERM to pid %s", pid)
    return True


def open_in_browser(url: str) -> bool:
    if sys.platform == "darwin":
        try:
            proc = subprocess.run(
                ["open", url],
                check=False,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
        except FileNotFoundError:
            return False
        return proc.returncode == 0
    return webbrowser.open(url)


def copy_to_clipboard(text: str) -> bool:
    command = _clipboard_command()
    if command is None:
        logger.warning("no clipboard tool found")
        return False
    try:
        proc = subprocess.run(
            command,
            input=text,
            text=True,
            check=False,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )
    except OSError:
        return False
    return proc.returncode == 0


def _clipboard_command() -> list[str] | None:
    if sys.platform == "darwin":
        return ["pbcopy"]
    if shutil.which("wl-copy"):
        return ["wl-copy"]
    if shutil.which("xclip"):
        return ["xclip", "-selection", "clipboard"]
    return None


__all__ = ["copy_to_clipboard", "open_in_browser", "terminate"]
