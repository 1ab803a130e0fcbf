from __future__ import annotations

import subprocess

import pytest

from adbmux.bridge.adb import AdbBridge
from adbmux.core.devices import list_devices, parse_devices
from adbmux.core.errors import BridgeUnavailableError


def _cp(cmd: list[str], rc: int, stdout: str = "", stderr: str = "") -> subprocess.CompletedProcess[str]:
    return subprocess.CompletedProcess(cmd, rc, stdout=stdout, stderr=stderr)


def test_parse_keeps_ready_devices_in_bridge_order() -> None:
    output = (
        "* daemon not running; starting now at tcp:5037\n"
        "* daemon started successfully\n"
        "List of devices attached\n"
        "R58M123ABC\tdevice\n"
        "\n"
        "192.168.1.20:5555\tunauthorized\n"
        "emulator-5554\tdevice product:sdk model:sdk\n"
        "orphan\n"
        "0123456789\toffline\n"
    )
    devices = parse_devices(output)
    assert [d.serial for d in devices] == ["R58M123ABC", "emulator-5554"]
    assert all(d.ready for d in devices)


def test_parse_empty_listing() -> None:
    assert parse_devices("List of devices attached\n\n") == []


def test_list_devices_runs_adb_devices(monkeypatch: pytest.MonkeyPatch) -> None:
    seen: list[list[str]] = []

    def fake_run(cmd, **kwargs):
        seen.append(cmd)
        return _cp(cmd, 0, stdout="List of devices attached\nabc\tdevice\n")

    monkeypatch.setattr(subprocess, "run", fake_run)

    devices = list_devices(AdbBridge("/opt/adb"))
    assert [d.serial for d in devices] == ["abc"]
    assert seen == [["/opt/adb", "devices"]]


def test_missing_adb_binary_raises_bridge_unavailable(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_run(cmd, **kwargs):
        raise FileNotFoundError(2, "No such file or directory", cmd[0])

    monkeypatch.setattr(subprocess, "run", fake_run)

    with pytest.raises(BridgeUnavailableError):
        list_devices(AdbBridge())


def test_failing_adb_devices_raises_bridge_unavailable(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(subprocess, "run", lambda cmd, **kwargs: _cp(cmd, 1, stderr="cannot connect to daemon"))

    with pytest.raises(BridgeUnavailableError) as exc:
        list_devices(AdbBridge())

    assert "cannot connect to daemon" in str(exc.value)
