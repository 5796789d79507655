from __future__ import annotations

import logging
import subprocess
from typing import Dict, List, Optional

import rumps

try:
    import AppKit
    from Foundation import NSBundle
except ImportError:  # pragma: no cover - macOS only integration
    AppKit = None
    NSBundle = None

if __package__ in (None, ""):
    # Handle execution as a top-level script inside the py2app bundle.
    from whattheport.actions import copy_to_clipboard, open_in_browser
    from whattheport.config import CONFIG_PATH, WhatThePortConfig, load_config, save_config
    from whattheport.models import ListeningPort, ScanResult
    from whattheport.monitor import PortMonitor
    from whattheport.startup import (
        disable_launch_agent,
        enable_launch_agent,
        is_launch_agent_enabled,
    )
    from whattheport.utils import format_entry, localhost_url
else:
    from .actions import copy_to_clipboard, open_in_browser
    from .config import CONFIG_PATH, WhatThePortConfig, load_config, save_config
    from .models import ListeningPort, ScanResult
    from .monitor import PortMonitor
    from .startup import (
        disable_launch_agent,
        enable_launch_agent,
        is_launch_agent_enabled,
    )
    from .utils import format_entry, localhost_url

logger = logging.getLogger("whattheport")

ICON_IDLE = "⚪️"
ICON_ACTIVE = "🟢"
APP_NAME = "WhatThePort"


class WhatThePortApp(rumps.App):
    def __init__(self, config: Optional[WhatThePortConfig] = None):
        self.config = config or load_config()
        self.monitor = PortMonitor.from_config(self.config)

        super().__init__(APP_NAME, title=ICON_IDLE, quit_button=None)

        self.refresh_item = rumps.MenuItem("Refresh Now", callback=self.refresh_now, key="r")
        self.open_config_item = rumps.MenuItem("Preferences…", callback=self.open_config, key=",")
        self.login_item = rumps.MenuItem("Launch at Login", callback=self.toggle_launch_at_login)
        self.quit_item = rumps.MenuItem("Quit", callback=rumps.quit_application, key="q")

        self.port_lookup: Dict[int, ListeningPort] = {}
        self._rescan_timer: Optional[rumps.Timer] = None
        self._sync_launch_agent_preference()

        self.refresh_timer = rumps.Timer(self.refresh_timer_tick, self.config.refresh_interval)
        self.refresh_timer.start()
        self._initial_timer = rumps.Timer(self._initial_refresh, 0.1)
        self._initial_timer.start()

    # ------------------------------------------------------------------
    # Menu rendering
    # ------------------------------------------------------------------
    def refresh_timer_tick(self, _):
        result = self.monitor.refresh()
        self._notify_changes(result)
        self._render_menu(result.ports)

    def _initial_refresh(self, timer: rumps.Timer) -> None:
        timer.stop()
        self.refresh_timer_tick(None)

    def _render_menu(self, ports: List[ListeningPort]) -> None:
        self.menu.clear()
        self.port_lookup.clear()

        if not ports:
            self.menu.add(rumps.MenuItem("No ports running", callback=None))
        for entry in ports:
            self.port_lookup[entry.port] = entry
            self.menu.add(self._port_submenu(entry))

        self.login_item.state = int(is_launch_agent_enabled())
        self.menu.add(rumps.separator)
        self.menu.add(self.refresh_item)
        self.menu.add(self.open_config_item)
        self.menu.add(self.login_item)
        self.menu.add(rumps.separator)
        self.menu.add(self.quit_item)

        self.title = f"{ICON_ACTIVE} {len(ports)}" if ports else ICON_IDLE

    def _port_submenu(self, entry: ListeningPort) -> rumps.MenuItem:
        submenu = rumps.MenuItem(format_entry(entry))
        items = [
            ("Open in Browser", self._on_open),
            ("Copy URL", self._on_copy),
            ("Stop Server", self._on_stop),
        ]
        for title, callback in items:
            item = rumps.MenuItem(title, callback=callback)
            item._port = entry.port  # type: ignore[attr-defined]
            submenu.add(item)
        if entry.working_dir:
            submenu.add(rumps.separator)
            submenu.add(rumps.MenuItem(entry.working_dir, callback=None))
        return submenu

    def _notify_changes(self, result: ScanResult) -> None:
        if not self.config.notifications:
            return
        for entry in result.started:
            rumps.notification(APP_NAME, "Port Started", f"{entry.process} on port {entry.port}")
        for port in result.stopped:
            rumps.notification(APP_NAME, "Port Stopped", f"Port {port} is no longer listening")

    def _sync_launch_agent_preference(self) -> None:
        try:
            desired = bool(self.config.launch_at_login)
            current = is_launch_agent_enabled()
            if desired and not current:
                enable_launch_agent()
            elif not desired and current:
                disable_launch_agent()
        except OSError as exc:
            logger.warning("could not update launch agent: %s", exc)

    # ------------------------------------------------------------------
    # Callbacks
    # ------------------------------------------------------------------
    def refresh_now(self, _):
        self.refresh_timer_tick(None)

    def open_config(self, _):
        save_config(self.config)
        subprocess.run(["open", str(CONFIG_PATH.parent)], check=False)

    def toggle_launch_at_login(self, sender: rumps.MenuItem):
        self.config.launch_at_login = not is_launch_agent_enabled()
        save_config(self.config)
        self._sync_launch_agent_preference()
        sender.state = int(is_launch_agent_enabled())

    def _entry_for(self, sender: rumps.MenuItem) -> Optional[ListeningPort]:
        return self.port_lookup.get(getattr(sender, "_port", None))

    def _on_open(self, sender: rumps.MenuItem):
        entry = self._entry_for(sender)
        if entry:
            open_in_browser(localhost_url(entry.port))

    def _on_copy(self, sender: rumps.MenuItem):
        entry = self._entry_for(sender)
        if entry:
            copy_to_clipboard(localhost_url(entry.port))

    def _on_stop(self, sender: rumps.MenuItem):
        entry = self._entry_for(sender)
        if not entry:
            return
        if not self.monitor.stop(entry):
            rumps.alert(title=APP_NAME, message=f"Could not stop process {entry.pid}")
        self._schedule_rescan()

    def _schedule_rescan(self) -> None:
        if self._rescan_timer is not None:
            self._rescan_timer.stop()
        self._rescan_timer = rumps.Timer(self._delayed_rescan, self.config.stop_rescan_delay)
        self._rescan_timer.start()

    def _delayed_rescan(self, timer: rumps.Timer) -> None:
        timer.stop()
        self._rescan_timer = None
        self.refresh_timer_tick(None)


def main() -> None:
    if AppKit is not None and NSBundle is not None:
        info = NSBundle.mainBundle().infoDictionary()
        if info is not None:
            info["LSUIElement"] = "1"
        ns_app = AppKit.NSApplication.sharedApplication()
        ns_app.setActivationPolicy_(AppKit.NSApplicationActivationPolicyAccessory)

    app = WhatThePortApp()
    app.run()


if __name__ == "__main__":
    main()


__all__ = ["main", "WhatThePortApp"]
