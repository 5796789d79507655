from __future__ import annotations

import logging
import os
import time
from typing import Dict, FrozenSet, Iterable, List, Optional, Protocol

import psutil

from .models import ListeningPort, SocketRow
from .process_inspector import DEFAULT_COMMAND_TIMEOUT, ProcessInspector, run_tool
from .project import resolve_project_name

DEBUG_MODE = os.getenv("WHATTHEPORT_DEBUG")

logger = logging.getLogger("whattheport")
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("[whattheport] %(asctime)s %(levelname)s %(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
logger.setLevel(logging.DEBUG if DEBUG_MODE else logging.INFO)

DEFAULT_MIN_PORT = 3000
DEFAULT_MAX_PORT = 9999

DEFAULT_ALLOWLIST: FrozenSet[str] = frozenset(
    {
        "node", "npm", "npx", "deno", "bun",
        "Python", "python", "python3", "uvicorn", "gunicorn", "flask", "django",
        "ruby", "rails", "puma", "unicorn",
        "php", "php-fpm",
        "java", "gradle", "mvn",
        "go", "air",
        "cargo", "rustc",
        "dotnet",
        "beam.smp", "elixir", "mix",
        "nginx", "httpd", "apache",
        "postgres", "mysql", "redis-server", "mongod",
        "docker-proxy",
    }
)

# COMMAND PID USER FD TYPE DEVICE SIZE/OFF NODE NAME
LSOF_MIN_COLUMNS = 9
# +c 0 stops lsof truncating COMMAND to 9 characters ("redis-ser").
LSOF_LISTEN_ARGS = ("-iTCP", "-sTCP:LISTEN", "-P", "-n", "+c", "0")


class SocketSource(Protocol):
    def enumerate_listening_sockets(self) -> List[SocketRow]:
        ...


def parse_lsof_output(output: str) -> List[SocketRow]:
    """Parse ``lsof -iTCP -sTCP:LISTEN -P -n`` output into rows.

    The first line is the header. Lines that are too short or whose pid or
    port does not parse are skipped. The NAME column holding ``HOST:PORT`` is
    second to last because lsof appends the ``(LISTEN)`` state.
    """

    rows: List[SocketRow] = []
    for line in output.splitlines()[1:]:
        cols = line.split()
        if len(cols) < LSOF_MIN_COLUMNS:
            continue
        process = cols[0]
        try:
            pid = int(cols[1])
        except ValueError:
            continue
        if pid <= 0:
            continue
        _, sep, port_text = cols[-2].rpartition(":")
        if not sep:
            continue
        try:
            port = int(port_text)
        except ValueError:
            continue
        if not 1 <= port <= 65535:
            continue
        rows.append(SocketRow(process=process, pid=pid, port=port))
    return rows


class LsofSocketSource:
    def __init__(self, lsof_path: str = "lsof", timeout: float = DEFAULT_COMMAND_TIMEOUT) -> None:
        self.lsof_path = lsof_path
        self.timeout = timeout

    def enumerate_listening_sockets(self) -> List[SocketRow]:
        output = run_tool([self.lsof_path, *LSOF_LISTEN_ARGS], timeout=self.timeout)
        if output is None:
            return []
        return parse_lsof_output(output)


class PsutilSocketSource:
    """Reads the kernel socket table directly instead of parsing lsof.

    On macOS ``psutil.net_connections`` needs root; the AccessDenied it raises
    is handled by :meth:`PortScanner.scan` like any other enumeration failure.
    """

    def enumerate_listening_sockets(self) -> List[SocketRow]:
        rows: List[SocketRow] = []
        names: Dict[int, Optional[str]] = {}
        for conn in psutil.net_connections(kind="tcp"):
            if conn.status != psutil.CONN_LISTEN or not conn.pid or not conn.laddr:
                continue
            if conn.pid not in names:
                names[conn.pid] = _process_name(conn.pid)
            name = names[conn.pid]
            if name is None:
                continue
            rows.append(SocketRow(process=name, pid=conn.pid, port=conn.laddr.port))
        return rows


def _process_name(pid: int) -> Optional[str]:
    try:
        return psutil.Process(pid).name()
    except (psutil.NoSuchProcess, psutil.AccessDenied):
        return None


class PortScanner:
    def __init__(
        self,
        source: Optional[SocketSource] = None,
        inspector: Optional[ProcessInspector] = None,
        allowlist: FrozenSet[str] = DEFAULT_ALLOWLIST,
        min_port: int = DEFAULT_MIN_PORT,
        max_port: int = DEFAULT_MAX_PORT,
    ) -> None:
        self.source = source or LsofSocketSource()
        self.inspector = inspector or ProcessInspector()
        self.allowlist = frozenset(allowlist)
        self.min_port = min_port
        self.max_port = max_port

    def scan(self) -> List[ListeningPort]:
        try:
            rows = self.source.enumerate_listening_sockets()
        except Exception as exc:
            logger.warning("listing TCP listeners failed: %s", exc, exc_info=bool(DEBUG_MODE))
            return []
        ports = [self._build_entry(row) for row in self.select(rows)]
        logger.debug("scan kept %s of %s listeners", len(ports), len(rows))
        return sorted(ports, key=lambda entry: entry.port)

    def select(self, rows: Iterable[SocketRow]) -> List[SocketRow]:
        """Apply the port range and allowlist, keeping the first row per port."""

        seen = set()
        selected: List[SocketRow] = []
        for row in rows:
            if not self.min_port <= row.port <= self.max_port:
                continue
            if row.process not in self.allowlist:
                logger.debug("skipping %s (pid %s) on %s", row.process, row.pid, row.port)
                continue
            if row.port in seen:
                continue
            seen.add(row.port)
            selected.append(row)
        return selected

    def _build_entry(self, row: SocketRow) -> ListeningPort:
        try:
            working_dir = self.inspector.working_directory(row.pid)
            start_time = self.inspector.start_time(row.pid)
        except Exception as exc:
            logger.debug("inspecting pid %s failed: %s", row.pid, exc)
            working_dir = None
            start_time = time.time()
        return ListeningPort(
            port=row.port,
            pid=row.pid,
            process=row.process,
            project_name=resolve_project_name(working_dir),
            working_dir=working_dir,
            start_time=start_time,
        )


__all__ = [
    "DEFAULT_ALLOWLIST",
    "DEFAULT_MAX_PORT",
    "DEFAULT_MIN_PORT",
    "LsofSocketSource",
    "PortScanner",
    "PsutilSocketSource",
    "SocketSource",
    "parse_lsof_output",
]
