"""Core data models used across enumeration, selection, dispatch, and CLI."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from adbmux.core.errors import KeywordSyntaxError

READY_STATE = "device"
WILDCARD = "*"


@dataclass(frozen=True)
class Device:
    serial: str
    state: str = READY_STATE

    @property
    def ready(self) -> bool:
        return self.state == READY_STATE


class SelectionMode(Enum):
    SINGLE_REQUIRED = "single"
    MULTI_OR_ALL = "multi"


@dataclass(frozen=True)
class KeywordExpression:
    """Parsed package keyword.

    ``*token*`` matches any package containing ``token``; anything else must equal
    the package identifier. Surrounding whitespace is stripped before parsing, so
    the exact literal is the stripped keyword. Both comparisons ignore case.
    """

    text: str
    contains: bool = False

    @classmethod
    def parse(cls, raw: str) -> KeywordExpression:
        keyword = raw.strip()
        leading = keyword.startswith(WILDCARD)
        trailing = keyword.endswith(WILDCARD)
        if leading and trailing and len(keyword) >= 2:
            return cls(text=keyword.strip(WILDCARD), contains=True)
        if leading or trailing:
            raise KeywordSyntaxError(
                f"Keyword '{raw}' has a single '*' marker. "
                f"Use '*{keyword.strip(WILDCARD)}*' for a contains match or drop the '*' for an exact match."
            )
        return cls(text=keyword, contains=False)

    def matches(self, package: str) -> bool:
        needle = self.text.lower()
        candidate = package.lower()
        if self.contains:
            return needle in candidate
        return candidate == needle

    def __str__(self) -> str:
        if self.contains:
            return f"{WILDCARD}{self.text}{WILDCARD}"
        return self.text


@dataclass(frozen=True)
class ResolvedTarget:
    device: Device
    package: str | None = None

    def describe(self) -> str:
        if self.package:
            return f"{self.package} on {self.device.serial}"
        return self.device.serial


@dataclass(frozen=True)
class PackageAction:
    name: str
    prefix: tuple[str, ...]
    suffix: tuple[str, ...] = ()
    destructive: bool = False
    bulk: bool = False

    def bridge_args(self, package: str) -> list[str]:
        return [*self.prefix, package, *self.suffix]


@dataclass
class DispatchReport:
    succeeded: list[ResolvedTarget] = field(default_factory=list)
    failed: list[ResolvedTarget] = field(default_factory=list)
    cancelled: bool = False

    @property
    def ok(self) -> bool:
        return not self.failed

    def record(self, target: ResolvedTarget, ok: bool) -> None:
        if ok:
            self.succeeded.append(target)
        else:
            self.failed.append(target)
