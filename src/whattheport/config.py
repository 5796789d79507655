from __future__ import annotations

import json
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, FrozenSet, Iterable, Optional

from .scanner import DEFAULT_ALLOWLIST, DEFAULT_MAX_PORT, DEFAULT_MIN_PORT

CONFIG_PATH = Path(
    os.getenv(
        "WHATTHEPORT_CONFIG",
        Path.home() / ".config" / "whattheport" / "config.json",
    )
)

SOCKET_SOURCES = ("lsof", "psutil")
MIN_COMMAND_TIMEOUT = 0.5
MIN_RESCAN_DELAY = 0.1

DEFAULT_CONFIG = {
    "refresh_interval": 2.0,
    "min_port": DEFAULT_MIN_PORT,
    "max_port": DEFAULT_MAX_PORT,
    "allowlist": None,
    "socket_source": "lsof",
    "command_timeout": 5.0,
    "stop_rescan_delay": 0.5,
    "notifications": True,
    "launch_at_login": False,
    "lsof_path": None,
    "ps_path": None,
}


@dataclass
class WhatThePortConfig:
    refresh_interval: float = DEFAULT_CONFIG["refresh_interval"]
    min_port: int = DEFAULT_CONFIG["min_port"]
    max_port: int = DEFAULT_CONFIG["max_port"]
    allowlist: FrozenSet[str] = field(default_factory=lambda: DEFAULT_ALLOWLIST)
    socket_source: str = DEFAULT_CONFIG["socket_source"]
    command_timeout: float = DEFAULT_CONFIG["command_timeout"]
    stop_rescan_delay: float = DEFAULT_CONFIG["stop_rescan_delay"]
    notifications: bool = DEFAULT_CONFIG["notifications"]
    launch_at_login: bool = DEFAULT_CONFIG["launch_at_login"]
    lsof_path: Optional[Path] = None
    ps_path: Optional[Path] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WhatThePortConfig":
        refresh_interval = max(
            0.5, float(data.get("refresh_interval", DEFAULT_CONFIG["refresh_interval"]))
        )
        min_port = _clamp_port(data.get("min_port", DEFAULT_CONFIG["min_port"]))
        max_port = _clamp_port(data.get("max_port", DEFAULT_CONFIG["max_port"]))
        if min_port > max_port:
            min_port, max_port = max_port, min_port

        raw_allowlist = data.get("allowlist")
        if isinstance(raw_allowlist, list):
            allowlist = frozenset(
                name.strip() for name in raw_allowlist if isinstance(name, str) and name.strip()
            )
        else:
            allowlist = DEFAULT_ALLOWLIST

        socket_source = str(data.get("socket_source", DEFAULT_CONFIG["socket_source"]))
        if socket_source not in SOCKET_SOURCES:
            socket_source = DEFAULT_CONFIG["socket_source"]

        command_timeout = max(
            MIN_COMMAND_TIMEOUT,
            float(data.get("command_timeout", DEFAULT_CONFIG["command_timeout"])),
        )
        stop_rescan_delay = max(
            MIN_RESCAN_DELAY,
            float(data.get("stop_rescan_delay", DEFAULT_CONFIG["stop_rescan_delay"])),
        )
        notifications = bool(data.get("notifications", DEFAULT_CONFIG["notifications"]))
        launch_at_login = bool(
            data.get("launch_at_login", DEFAULT_CONFIG["launch_at_login"])
        )

        return cls(
            refresh_interval=refresh_interval,
            min_port=min_port,
            max_port=max_port,
            allowlist=allowlist,
            socket_source=socket_source,
            command_timeout=command_timeout,
            stop_rescan_delay=stop_rescan_delay,
            notifications=notifications,
            launch_at_login=launch_at_login,
            lsof_path=_optional_path(data.get("lsof_path")),
            ps_path=_optional_path(data.get("ps_path")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "refresh_interval": self.refresh_interval,
            "min_port": self.min_port,
            "max_port": self.max_port,
            "allowlist": None
            if self.allowlist == DEFAULT_ALLOWLIST
            else sorted(self.allowlist),
            "socket_source": self.socket_source,
            "command_timeout": self.command_timeout,
            "stop_rescan_delay": self.stop_rescan_delay,
            "notifications": self.notifications,
            "launch_at_login": self.launch_at_login,
            "lsof_path": str(self.lsof_path) if self.lsof_path else None,
            "ps_path": str(self.ps_path) if self.ps_path else None,
        }


def ensure_config_dir(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def load_config(path: Optional[Path] = None) -> WhatThePortConfig:
    path = path or CONFIG_PATH
    ensure_config_dir(path)
    if path.exists():
        try:
            with path.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
        except (json.JSONDecodeError, OSError):
            data = {}
    else:
        data = {}
    if not isinstance(data, dict):
        data = {}
    try:
        return WhatThePortConfig.from_dict(data)
    except (TypeError, ValueError):
        return WhatThePortConfig()


def save_config(config: WhatThePortConfig, path: Optional[Path] = None) -> None:
    path = path or CONFIG_PATH
    payload = config.to_dict()
    ensure_config_dir(path)
    with path.open("w", encoding="utf-8") as handle:
        json.dump(payload, handle, indent=2, sort_keys=True)


def add_to_allowlist(config: WhatThePortConfig, names: Iterable[str]) -> WhatThePortConfig:
    cleaned = {name.strip() for name in names if name.strip()}
    return replace(config, allowlist=frozenset(config.allowlist | cleaned))


def remove_from_allowlist(
    config: WhatThePortConfig, names: Iterable[str]
) -> WhatThePortConfig:
    return replace(config, allowlist=frozenset(config.allowlist - set(names)))


def reset_allowlist(config: WhatThePortConfig) -> WhatThePortConfig:
    return replace(config, allowlist=DEFAULT_ALLOWLIST)


def _clamp_port(value: Any) -> int:
    return min(65535, max(1, int(value)))


def _optional_path(value: Any) -> Optional[Path]:
    if isinstance(value, str) and value.strip():
        return Path(value).expanduser()
    return None


__all__ = [
    "CONFIG_PATH",
    "WhatThePortConfig",
    "add_to_allowlist",
    "load_config",
    "remove_from_allowlist",
    "reset_allowlist",
    "save_config",
]
