"""Compose logical actions into bridge invocations and fan them out to targets."""

from __future__ import annotations

import logging
import re
import shlex
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import IO, Protocol

import typer

from adbmux.bridge.base import Bridge
from adbmux.bridge.scrcpy import ScrcpyLauncher
from adbmux.core.config import Config
from adbmux.core.devices import list_devices
from adbmux.core.errors import InvocationFailureError, NoCandidatesError, NoMatchError
from adbmux.core.model import (
    Device,
    DispatchReport,
    KeywordExpression,
    PackageAction,
    ResolvedTarget,
    SelectionMode,
)
from adbmux.core.packages import LIST_PACKAGES_ARGS, resolve_packages
from adbmux.core.selector import Selector

LOGGER = logging.getLogger(__name__)

SETTINGS_ARGS = ("shell", "am", "start", "-a", "android.settings.SETTINGS")
LAUNCHER_ARGS = (
    "shell", "am", "start",
    "-a", "android.intent.action.MAIN",
    "-c", "android.intent.category.HOME",
)
SCREENCAP_ARGS = ("exec-out", "screencap", "-p")
MAX_RECORD_SECONDS = 180

PACKAGE_ACTIONS: dict[str, PackageAction] = {
    action.name: action
    for action in (
        PackageAction(name="app-info", prefix=("shell", "dumpsys", "package")),
        PackageAction(name="uninstall", prefix=("uninstall",), destructive=True, bulk=True),
        PackageAction(name="clear-data", prefix=("shell", "pm", "clear"), destructive=True, bulk=True),
        PackageAction(name="force-stop", prefix=("shell", "am", "force-stop"), destructive=True, bulk=True),
        PackageAction(
            name="start",
            prefix=("shell", "monkey", "-p"),
            suffix=("-c", "android.intent.category.LAUNCHER", "1"),
        ),
    )
}

_UNSAFE_FILENAME_RE = re.compile(r"[:/\\]")


class Launcher(Protocol):
    def launch(self, serial: str) -> None:
        """Start a mirroring session for one device."""


def capture_path(base_path: str, serial: str, extension: str) -> Path:
    return Path(f"{base_path}_{_UNSAFE_FILENAME_RE.sub('_', serial)}.{extension}")


class Dispatcher:
    def __init__(
        self,
        bridge: Bridge,
        selector: Selector,
        *,
        config: Config | None = None,
        launcher_factory: Callable[[str], Launcher] = ScrcpyLauncher,
        echo: Callable[..., None] = typer.echo,
    ) -> None:
        self.bridge = bridge
        self.selector = selector
        self.config = config or Config()
        self._launcher_factory = launcher_factory
        self._echo = echo

    def select_devices(self, mode: SelectionMode) -> list[Device]:
        devices = list_devices(self.bridge)
        if not devices:
            raise NoCandidatesError("No devices connected.")
        return self.selector.select(devices, mode, render=lambda d: d.serial, noun="device")

    def open_settings(self) -> DispatchReport:
        return self._device_command(SETTINGS_ARGS, SelectionMode.SINGLE_REQUIRED)

    def open_launcher(self) -> DispatchReport:
        return self._device_command(LAUNCHER_ARGS, SelectionMode.SINGLE_REQUIRED)

    def list_packages(self) -> DispatchReport:
        return self._device_command(LIST_PACKAGES_ARGS, SelectionMode.MULTI_OR_ALL)

    def passthrough(self, tokens: Sequence[str]) -> DispatchReport:
        """Forward ``tokens`` verbatim to every selected device."""
        return self._device_command(tuple(tokens), SelectionMode.MULTI_OR_ALL, interactive=True)

    def screenshot(self, base_path: str) -> DispatchReport:
        report = DispatchReport()
        for device in self.select_devices(SelectionMode.SINGLE_REQUIRED):
            target = ResolvedTarget(device)
            path = capture_path(base_path, device.serial, "png")
            try:
                handle = path.open("wb")
            except OSError as exc:
                self._echo(f"Error: could not create {path}: {exc}", err=True)
                report.record(target, False)
                continue
            with handle:
                ok = self._attempt(target, SCREENCAP_ARGS, stdout=handle)
            if ok:
                self._echo(f"Saved screenshot to {path}")
            else:
                path.unlink(missing_ok=True)
            report.record(target, ok)
        return report

    def screenrecord(self, base_path: str, duration: int | None = None) -> DispatchReport:
        if duration is not None and not 1 <= duration <= MAX_RECORD_SECONDS:
            raise ValueError(f"Duration must be between 1 and {MAX_RECORD_SECONDS} seconds")

        remote = self.config.record_remote_path
        record_args = ["shell", "screenrecord"]
        if duration is not None:
            record_args += ["--time-limit", str(duration)]
        record_args.append(remote)

        report = DispatchReport()
        for device in self.select_devices(SelectionMode.SINGLE_REQUIRED):
            target = ResolvedTarget(device)
            path = capture_path(base_path, device.serial, "mp4")
            try:
                ok = self._attempt(target, record_args) and self._attempt(
                    target, ["pull", remote, str(path)]
                )
            finally:
                cleaned = self._attempt(target, ["shell", "rm", "-f", remote])
            ok = ok and cleaned
            if ok:
                self._echo(f"Saved recording to {path}")
            report.record(target, ok)
        return report

    def package_action(self, action_name: str, keyword: KeywordExpression) -> DispatchReport:
        """Apply a package-scoped action to the packages ``keyword`` resolves to.

        An exact keyword is trusted as a literal identifier and applied on every
        selected device without listing packages. A contains keyword is resolved
        against a single device's installed packages first.
        """
        action = PACKAGE_ACTIONS[action_name]
        report = DispatchReport()

        if not keyword.contains:
            for device in self.select_devices(SelectionMode.MULTI_OR_ALL):
                self._apply(report, action, device, keyword.text)
            return report

        device = self.select_devices(SelectionMode.SINGLE_REQUIRED)[0]
        matches = resolve_packages(self.bridge, device, keyword)
        LOGGER.debug("Keyword %s matched %d package(s) on %s", keyword, len(matches), device.serial)
        if not matches:
            raise NoMatchError(f"No packages matching '{keyword}' on {device.serial}.")

        if len(matches) == 1:
            package = matches[0]
            self._echo(f"Matched package: {package}")
            if action.destructive and not self.selector.confirm(
                f"Run {action.name} for {package} on {device.serial}?"
            ):
                self._echo("Cancelled.")
                report.cancelled = True
                return report
            packages = matches
        else:
            mode = SelectionMode.MULTI_OR_ALL if action.bulk else SelectionMode.SINGLE_REQUIRED
            packages = self.selector.select(matches, mode, noun="package")

        for package in packages:
            self._apply(report, action, device, package)
        return report

    def mirror(self) -> DispatchReport:
        scrcpy_dir = self.config.require_scrcpy_dir()
        report = DispatchReport()
        for device in self.select_devices(SelectionMode.SINGLE_REQUIRED):
            target = ResolvedTarget(device)
            self._echo(f"Mirroring {device.serial}")
            try:
                self._launcher_factory(scrcpy_dir).launch(device.serial)
            except InvocationFailureError as exc:
                self._echo(f"Error on {target.describe()}: {exc}", err=True)
                report.record(target, False)
                continue
            report.record(target, True)
        return report

    def _device_command(
        self,
        args: Sequence[str],
        mode: SelectionMode,
        *,
        interactive: bool = False,
    ) -> DispatchReport:
        report = DispatchReport()
        for device in self.select_devices(mode):
            target = ResolvedTarget(device)
            report.record(target, self._attempt(target, args, interactive=interactive))
        return report

    def _apply(self, report: DispatchReport, action: PackageAction, device: Device, package: str) -> None:
        target = ResolvedTarget(device, package)
        report.record(target, self._attempt(target, action.bridge_args(package)))

    def _attempt(
        self,
        target: ResolvedTarget,
        args: Sequence[str],
        *,
        stdout: IO[bytes] | None = None,
        interactive: bool = False,
    ) -> bool:
        serial = target.device.serial
        self._echo(f"Executing on {serial}: {shlex.join(args)}")
        try:
            self.bridge.run(serial, args, stdout=stdout, interactive=interactive)
        except InvocationFailureError as exc:
            self._echo(f"Error on {target.describe()}: {exc}", err=True)
            return False
        return True
