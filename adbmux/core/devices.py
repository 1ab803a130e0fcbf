"""Attached device enumeration."""

from __future__ import annotations

import logging

from adbmux.bridge.base import Bridge
from adbmux.core.model import Device

LOGGER = logging.getLogger(__name__)

_BANNER_PREFIXES = ("List of devices", "*")


def parse_devices(output: str) -> list[Device]:
    """Parse ``adb devices`` output, keeping bridge order and only ready devices."""
    devices: list[Device] = []
    for raw_line in output.splitlines():
        line = raw_line.strip()
        if not line or line.startswith(_BANNER_PREFIXES):
            continue
        parts = line.split()
        if len(parts) < 2:
            continue
        device = Device(serial=parts[0], state=parts[1])
        if not device.ready:
            LOGGER.warning("Skipping device %s (%s)", device.serial, device.state)
            continue
        devices.append(device)
    return devices


def list_devices(bridge: Bridge) -> list[Device]:
    return parse_devices(bridge.devices())
