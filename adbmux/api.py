"""Stable public API for building tooling on top of adbmux.

This module is the supported integration surface for third-party callers.
Avoid importing from private/internal modules unless intentionally depending on
non-stable internals.
"""

from __future__ import annotations

from adbmux.bridge.adb import AdbBridge
from adbmux.bridge.base import Bridge
from adbmux.core.config import Config, load_config
from adbmux.core.devices import list_devices
from adbmux.core.errors import (
    AdbmuxError,
    BridgeUnavailableError,
    ConfigurationMissingError,
    ConfigValidationError,
    InvalidSelectionError,
    InvocationFailureError,
    KeywordSyntaxError,
    NoCandidatesError,
    NoMatchError,
)
from adbmux.core.model import (
    Device,
    DispatchReport,
    KeywordExpression,
    PackageAction,
    ResolvedTarget,
    SelectionMode,
)
from adbmux.core.packages import resolve_packages

__all__ = [
    "AdbmuxError",
    "BridgeUnavailableError",
    "ConfigurationMissingError",
    "ConfigValidationError",
    "InvalidSelectionError",
    "InvocationFailureError",
    "KeywordSyntaxError",
    "NoCandidatesError",
    "NoMatchError",
    "Bridge",
    "AdbBridge",
    "Config",
    "Device",
    "DispatchReport",
    "KeywordExpression",
    "PackageAction",
    "ResolvedTarget",
    "SelectionMode",
    "Client",
]


class Client:
    """Public client for non-interactive device and package queries.

    A `Client` wraps configuration loading, device enumeration, and keyword-based
    package resolution behind a stable API intended for scripts that do not want
    the interactive prompts of the CLI.
    """

    def __init__(self, *, config: Config | None = None, bridge: Bridge | None = None) -> None:
        self.config = config or load_config()
        self._bridge = bridge or AdbBridge(self.config.adb_path)

    def list_devices(self) -> list[Device]:
        return list_devices(self._bridge)

    def get_device(self, serial: str) -> Device:
        for device in self.list_devices():
            if device.serial == serial:
                return device
        raise NoCandidatesError(f"Device '{serial}' is not attached or not ready.")

    def find_packages(self, serial: str, keyword: str | None = None) -> list[str]:
        expr = KeywordExpression.parse(keyword) if keyword is not None else None
        return resolve_packages(self._bridge, self.get_device(serial), expr)
