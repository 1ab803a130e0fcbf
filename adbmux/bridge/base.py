"""Bridge interfaces."""

from __future__ import annotations

from collections.abc import Sequence
from typing import IO, Protocol


class Bridge(Protocol):
    def devices(self) -> str:
        """Return raw ``devices`` listing output."""

    def capture(self, serial: str, args: Sequence[str]) -> str:
        """Run a query against one device and return its stdout."""

    def run(
        self,
        serial: str,
        args: Sequence[str],
        *,
        stdout: IO[bytes] | None = None,
        interactive: bool = False,
    ) -> None:
        """Run a command against one device with the caller's streams attached."""
