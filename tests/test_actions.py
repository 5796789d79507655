from __future__ import annotations

import signal
import subprocess
import sys

import psutil
import pytest

from whattheport import actions
from whattheport.actions import copy_to_clipboard, open_in_browser, terminate


def test_terminate_running_process_sends_sigterm():
    proc = subprocess.Popen([sys.executable, "-c", "import time; time.sleep(30)"])
    try:
        assert terminate(proc.pid) is True
        assert proc.wait(timeout=10) == -signal.SIGTERM
    finally:
        if proc.poll() is None:
            proc.kill()
            proc.wait()


def test_terminate_missing_pid_returns_false(monkeypatch):
    def fake_process(pid):
        raise psutil.NoSuchProcess(pid)

    monkeypatch.setattr(actions.psutil, "Process", fake_process)

    assert terminate(999_999) is False


def test_terminate_reaped_process_returns_false():
    proc = subprocess.Popen([sys.executable, "-c", "pass"])
    proc.wait()

    assert terminate(proc.pid) is False


def test_terminate_access_denied_returns_false(monkeypatch):
    class Locked:
        def __init__(self, pid):
            self.pid = pid

        def terminate(self):
            raise psutil.AccessDenied(self.pid)

    monkeypatch.setattr(actions.psutil, "Process", Locked)

    assert terminate(1) is False


@pytest.mark.parametrize("pid", [0, -1])
def test_terminate_rejects_invalid_pid(pid):
    assert terminate(pid) is False


def test_open_in_browser_on_macos_uses_open(monkeypatch):
    calls = []

    def fake_run(args, **kwargs):
        calls.append(args)
        return subprocess.CompletedProcess(args, 0)

    monkeypatch.setattr(actions.sys, "platform", "darwin")
    monkeypatch.setattr(actions.subprocess, "run", fake_run)

    assert open_in_browser("http://localhost:3000") is True
    assert calls == [["open", "http://localhost:3000"]]


def test_open_in_browser_elsewhere_uses_webbrowser(monkeypatch):
    opened = []
    monkeypatch.setattr(actions.sys, "platform", "linux")
    monkeypatch.setattr(actions.webbrowser, "open", lambda url: opened.append(url) or True)

    assert open_in_browser("http://localhost:3000") is True
    assert opened == ["http://localhost:3000"]


def test_copy_to_clipboard_pipes_into_pbcopy(monkeypatch):
    calls = []

    def fake_run(args, **kwargs):
        calls.append((args, kwargs["input"]))
        return subprocess.CompletedProcess(args, 0)

    monkeypatch.setattr(actions.sys, "platform", "darwin")
    monkeypatch.setattr(actions.subprocess, "run", fake_run)

    assert copy_to_clipboard("http://localhost:8080") is True
    assert calls == [(["pbcopy"], "http://localhost:8080")]


def test_copy_to_clipboard_without_tool(monkeypatch):
    monkeypatch.setattr(actions.sys, "platform", "linux")
    monkeypatch.setattr(actions.shutil, "which", lambda name: None)

    assert copy_to_clipboard("http://localhost:8080") is False
