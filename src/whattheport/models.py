from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class SocketRow:
    process: str
    pid: int
    port: int


@dataclass(frozen=True)
class ListeningPort:
    port: int
    pid: int
    process: str
    project_name: Optional[str] = field(default=None, compare=False)
    working_dir: Optional[str] = field(default=None, compare=False)
    start_time: float = field(default=0.0, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ScanResult:
    ports: List[ListeningPort] = field(default_factory=list)
    started: List[ListeningPort] = field(default_factory=list)
    stopped: List[int] = field(default_factory=list)


__all__ = ["ListeningPort", "ScanResult", "SocketRow"]
