from __future__ import annotations

from typing import Dict, List, Optional

import pytest

from whattheport.models import SocketRow

LSOF_HEADER = "COMMAND     PID   USER   FD   TYPE             DEVICE SIZE/OFF NODE NAME"

LSOF_OUTPUT = "\n".join(
    [
        LSOF_HEADER,
        "node       1234 dev   23u  IPv4 0x1a2b3c4d5e6f7a8b      0t0  TCP 127.0.0.1:3001 (LISTEN)",
        "node       1234 dev   24u  IPv6 0x1a2b3c4d5e6f7a8c      0t0  TCP [::1]:3001 (LISTEN)",
        "Python     2345 dev    5u  IPv4 0x1a2b3c4d5e6f7a8d      0t0  TCP *:8000 (LISTEN)",
        "chrome     3456 dev   40u  IPv4 0x1a2b3c4d5e6f7a8e      0t0  TCP 127.0.0.1:4000 (LISTEN)",
        "postgres   4567 dev    7u  IPv4 0x1a2b3c4d5e6f7a8f      0t0  TCP 127.0.0.1:5432 (LISTEN)",
        "ControlCe   567 dev   10u  IPv4 0x1a2b3c4d5e6f7a90      0t0  TCP *:7000 (LISTEN)",
        "node       6789 dev   21u  IPv4 0x1a2b3c4d5e6f7a91      0t0  TCP 127.0.0.1:80 (LISTEN)",
        "",
    ]
)


class FakeSource:
    def __init__(self, rows: List[SocketRow]):
        self.rows = rows
        self.calls = 0

    def enumerate_listening_sockets(self) -> List[SocketRow]:
        self.calls += 1
        return list(self.rows)


class FakeInspector:
    def __init__(
        self,
        cwds: Optional[Dict[int, str]] = None,
        start_times: Optional[Dict[int, float]] = None,
    ):
        self.cwds = cwds or {}
        self.start_times = start_times or {}
        self.inspected: List[int] = []

    def working_directory(self, pid: int) -> Optional[str]:
        self.inspected.append(pid)
        return self.cwds.get(pid)

    def start_time(self, pid: int) -> float:
        return self.start_times.get(pid, 1_000.0)


@pytest.fixture
def lsof_output() -> str:
    return LSOF_OUTPUT


@pytest.fixture
def fake_inspector() -> FakeInspector:
    return FakeInspector()
