from __future__ import annotations

import logging
import os
import subprocess
import time
from datetime import datetime
from typing import Dict, Optional, Sequence

logger = logging.getLogger("whattheport")

DEFAULT_COMMAND_TIMEOUT = 5.0
# ps -o lstart= output, e.g. "Mon Jan 13 08:30:00 2026"
LSTART_FORMAT = "%a %b %d %H:%M:%S %Y"
CWD_MARKER = "n"


def run_tool(
    args: Sequence[str],
    timeout: float = DEFAULT_COMMAND_TIMEOUT,
    env: Optional[Dict[str, str]] = None,
) -> Optional[str]:
    """Run an introspection tool and return its stdout, or None if it could not run.

    A non-zero exit status is not a failure: lsof exits 1 when nothing matches
    and still prints whatever it found.
    """

    try:
        proc = subprocess.run(
            list(args),
            capture_output=True,
            text=True,
            errors="replace",
            timeout=timeout,
            env=env,
            check=False,
        )
    except subprocess.TimeoutExpired:
        logger.warning("%s timed out after %.1fs", args[0], timeout)
        return None
    except OSError as exc:
        logger.debug("failed to run %s: %s", args[0], exc)
        return None
    return proc.stdout or ""


def parse_lstart(text: str) -> Optional[float]:
    normalized = " ".join(text.split())
    if not normalized:
        return None
    try:
        return datetime.strptime(normalized, LSTART_FORMAT).timestamp()
    except ValueError:
        return None


class ProcessInspector:
    def __init__(
        self,
        lsof_path: str = "lsof",
        ps_path: str = "ps",
        timeout: float = DEFAULT_COMMAND_TIMEOUT,
    ) -> None:
        self.lsof_path = lsof_path
        self.ps_path = ps_path
        self.timeout = timeout

    def working_directory(self, pid: int) -> Optional[str]:
        output = run_tool(
            [self.lsof_path, "-a", "-p", str(pid), "-d", "cwd", "-Fn"],
            timeout=self.timeout,
        )
        if not output:
            return None
        for line in output.splitlines():
            if line.startswith(CWD_MARKER) and len(line) > len(CWD_MARKER):
                return line[len(CWD_MARKER):]
        return None

    def start_time(self, pid: int) -> float:
        env = dict(os.environ, LC_ALL="C")
        output = run_tool(
            [self.ps_path, "-p", str(pid), "-o", "lstart="],
            timeout=self.timeout,
            env=env,
        )
        started = parse_lstart(output) if output else None
        if started is None:
            logger.debug("no start time for pid %s, using now", pid)
            return time.time()
        return started


__all__ = ["ProcessInspector", "parse_lstart", "run_tool"]
