from __future__ import annotations

import time
from typing import Optional

from .models import ListeningPort


def format_uptime(start_time: float, now: Optional[float] = None) -> str:
    now = time.time() if now is None else now
    seconds = max(0, int(now - start_time))
    if seconds < 60:
        return f"{seconds}s"
    if seconds < 3600:
        return f"{seconds // 60}m"
    if seconds < 86400:
        hours, remainder = divmod(seconds, 3600)
        minutes = remainder // 60
        return f"{hours}h {minutes}m" if minutes else f"{hours}h"
    days, remainder = divmod(seconds, 86400)
    hours = remainder // 3600
    return f"{days}d {hours}h" if hours else f"{days}d"


def display_name(port: ListeningPort) -> str:
    return port.project_name or port.process


def localhost_url(port: int) -> str:
    return f"http://localhost:{port}"


def format_entry(port: ListeningPort, now: Optional[float] = None) -> str:
    return f":{port.port} {display_name(port)} • {format_uptime(port.start_time, now)}"


__all__ = [
    "display_name",
    "format_entry",
    "format_uptime",
    "localhost_url",
]
