from __future__ import annotations

import os
import subprocess
from datetime import datetime

import pytest

from whattheport import process_inspector
from whattheport.process_inspector import ProcessInspector, parse_lstart


def _fake_run(stdout="", returncode=0, calls=None):
    def run(args, **kwargs):
        if calls is not None:
            calls.append((args, kwargs))
        return subprocess.CompletedProcess(args, returncode, stdout=stdout, stderr="")

    return run


def test_working_directory_reads_cwd_record(monkeypatch):
    calls = []
    monkeypatch.setattr(
        process_inspector.subprocess,
        "run",
        _fake_run("p1234\nfcwd\nn/Users/dev/projects/shop\n", calls=calls),
    )

    inspector = ProcessInspector(lsof_path="/usr/sbin/lsof", timeout=3.0)

    assert inspector.working_directory(1234) == "/Users/dev/projects/shop"
    args, kwargs = calls[0]
    assert args == ["/usr/sbin/lsof", "-a", "-p", "1234", "-d", "cwd", "-Fn"]
    assert kwargs["timeout"] == 3.0


def test_working_directory_takes_first_path(monkeypatch):
    monkeypatch.setattr(
        process_inspector.subprocess, "run", _fake_run("p1\nfcwd\nn/first\nn/second\n")
    )

    assert ProcessInspector().working_directory(1) == "/first"


@pytest.mark.parametrize("stdout", ["", "p1234\nfcwd\n", "n\n"])
def test_working_directory_absent_without_path_line(monkeypatch, stdout):
    monkeypatch.setattr(process_inspector.subprocess, "run", _fake_run(stdout, returncode=1))

    assert ProcessInspector().working_directory(1234) is None


def test_working_directory_absent_when_tool_missing(monkeypatch):
    def run(args, **kwargs):
        raise FileNotFoundError(args[0])

    monkeypatch.setattr(process_inspector.subprocess, "run", run)

    assert ProcessInspector().working_directory(1234) is None


def test_start_time_parses_lstart_as_local_time(monkeypatch):
    calls = []
    monkeypatch.setattr(
        process_inspector.subprocess,
        "run",
        _fake_run("Tue Jan 13 08:30:00 2026\n", calls=calls),
    )

    started = ProcessInspector(ps_path="/bin/ps").start_time(1234)

    assert started == datetime(2026, 1, 13, 8, 30, 0).timestamp()
    args, kwargs = calls[0]
    assert args == ["/bin/ps", "-p", "1234", "-o", "lstart="]
    assert kwargs["env"]["LC_ALL"] == "C"


def test_start_time_handles_padded_day(monkeypatch):
    monkeypatch.setattr(
        process_inspector.subprocess, "run", _fake_run("  Tue Jan  6 09:05:07 2026\n")
    )

    assert ProcessInspector().start_time(1) == datetime(2026, 1, 6, 9, 5, 7).timestamp()


@pytest.mark.parametrize("stdout", ["", "garbage", "2026-01-13 08:30:00"])
def test_start_time_falls_back_to_now(monkeypatch, stdout):
    monkeypatch.setattr(process_inspector.subprocess, "run", _fake_run(stdout))
    monkeypatch.setattr(process_inspector.time, "time", lambda: 12345.0)

    assert ProcessInspector().start_time(1234) == 12345.0


def test_start_time_falls_back_to_now_on_timeout(monkeypatch):
    def run(args, **kwargs):
        raise subprocess.TimeoutExpired(cmd=args, timeout=kwargs["timeout"])

    monkeypatch.setattr(process_inspector.subprocess, "run", run)
    monkeypatch.setattr(process_inspector.time, "time", lambda: 99.0)

    assert ProcessInspector(timeout=0.1).start_time(1234) == 99.0


def test_parse_lstart_rejects_blank():
    assert parse_lstart("   ") is None


def test_inspects_current_process():
    inspector = ProcessInspector(timeout=10.0)
    started = inspector.start_time(os.getpid())
    assert started <= datetime.now().timestamp() + 1
