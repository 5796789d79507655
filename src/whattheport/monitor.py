from __future__ import annotations

import logging
from typing import List, Optional, Set

from .actions import terminate
from .config import WhatThePortConfig
from .models import ListeningPort, ScanResult
from .paths import discover_tool
from .process_inspector import ProcessInspector
from .scanner import LsofSocketSource, PortScanner, PsutilSocketSource, SocketSource

logger = logging.getLogger("whattheport")


def build_scanner(config: WhatThePortConfig) -> PortScanner:
    lsof_path = discover_tool("lsof", config.lsof_path)
    ps_path = discover_tool("ps", config.ps_path)
    source: SocketSource
    if config.socket_source == "psutil":
        source = PsutilSocketSource()
    else:
        source = LsofSocketSource(lsof_path, timeout=config.command_timeout)
    inspector = ProcessInspector(lsof_path, ps_path, timeout=config.command_timeout)
    return PortScanner(
        source=source,
        inspector=inspector,
        allowlist=config.allowlist,
        min_port=config.min_port,
        max_port=config.max_port,
    )


class PortMonitor:
    """Tracks which ports appeared or disappeared between consecutive scans."""

    def __init__(self, scanner: PortScanner):
        self.scanner = scanner
        self.ports: List[ListeningPort] = []
        self._previous: Optional[Set[int]] = None

    @classmethod
    def from_config(cls, config: WhatThePortConfig) -> "PortMonitor":
        return cls(build_scanner(config))

    def refresh(self) -> ScanResult:
        current = self.scanner.scan()
        current_ports = {entry.port for entry in current}
        if self._previous is None:
            started: List[ListeningPort] = []
            stopped: List[int] = []
        else:
            started = [entry for entry in current if entry.port not in self._previous]
            stopped = sorted(self._previous - current_ports)
        self._previous = current_ports
        self.ports = current
        if started or stopped:
            logger.info(
                "ports started=%s stopped=%s",
                [entry.port for entry in started],
                stopped,
            )
        return ScanResult(ports=current, started=started, stopped=stopped)

    def find(self, port: int) -> Optional[ListeningPort]:
        for entry in self.ports:
            if entry.port == port:
                return entry
        return None

    def stop(self, entry: ListeningPort) -> bool:
        return terminate(entry.pid)


__all__ = ["PortMonitor", "build_scanner"]
