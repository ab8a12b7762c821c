from __future__ import annotations

import psutil

from adapters import outlook_com
from adapters.outlook_com import OutlookProcess


class FakeProc:
    def __init__(self, pid: int, name: str, kill_error: Exception | None = None) -> None:
        self.pid = pid
        self.info = {"name": name}
        self.kill_error = kill_error
        self.killed = False

    def kill(self) -> None:
        if self.kill_error is not None:
            raise self.kill_error
        self.killed = True


def _patch_processes(monkeypatch, procs: list[FakeProc]) -> None:
    monkeypatch.setattr(outlook_com.psutil, "process_iter", lambda attrs=None: iter(procs))


def test_is_running_matches_name_case_insensitively(monkeypatch) -> None:
    _patch_processes(monkeypatch, [FakeProc(1, "explorer.exe"), FakeProc(2, "outlook.exe")])
    assert OutlookProcess().is_running()


def test_is_running_false_without_outlook(monkeypatch) -> None:
    _patch_processes(monkeypatch, [FakeProc(1, "explorer.exe"), FakeProc(3, None)])
    assert not OutlookProcess().is_running()


def test_kill_all_counts_only_successful_kills(monkeypatch) -> None:
    procs = [
        FakeProc(10, "OUTLOOK.EXE"),
        FakeProc(11, "OUTLOOK.EXE", kill_error=psutil.NoSuchProcess(11)),
        FakeProc(12, "winword.exe"),
    ]
    _patch_processes(monkeypatch, procs)

    assert OutlookProcess().kill_all() == 1
    assert procs[0].killed
    assert not procs[2].killed


def test_launch_prefers_first_existing_install_path(monkeypatch) -> None:
    started = []
    monkeypatch.setattr(outlook_com.os.path, "exists", lambda path: path.startswith(r"D:"))
    monkeypatch.setattr(outlook_com.subprocess, "Popen", lambda args: started.append(args))

    OutlookProcess(install_paths=[r"C:\missing\OUTLOOK.EXE", r"D:\Office\OUTLOOK.EXE"]).launch()

    assert started == [[r"D:\Office\OUTLOOK.EXE"]]


def test_launch_falls_back_to_executable_name(monkeypatch) -> None:
    started = []
    monkeypatch.setattr(outlook_com.os.path, "exists", lambda path: False)
    monkeypatch.setattr(outlook_com.subprocess, "Popen", lambda args: started.append(args))

    OutlookProcess().launch()

    assert started == [["OUTLOOK.EXE"]]
