"""Installed package listing and keyword filtering."""

from __future__ import annotations

from collections.abc import Iterable

from adbmux.bridge.base import Bridge
from adbmux.core.model import Device, KeywordExpression

PACKAGE_MARKER = "package:"
LIST_PACKAGES_ARGS = ("shell", "pm", "list", "packages")


def parse_package_listing(output: str) -> list[str]:
    return [
        line[len(PACKAGE_MARKER):].strip()
        for line in output.splitlines()
        if line.startswith(PACKAGE_MARKER)
    ]


def filter_packages(packages: Iterable[str], expr: KeywordExpression | None) -> list[str]:
    if expr is None:
        return list(packages)
    return [package for package in packages if expr.matches(package)]


def resolve_packages(
    bridge: Bridge,
    device: Device,
    expr: KeywordExpression | None = None,
) -> list[str]:
    """Return installed packages on ``device`` matching ``expr``, in bridge order."""
    listing = bridge.capture(device.serial, LIST_PACKAGES_ARGS)
    return filter_packages(parse_package_listing(listing), expr)
