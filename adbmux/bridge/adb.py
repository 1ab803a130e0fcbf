"""adb bridge implementation using subprocess."""

from __future__ import annotations

import logging
import shlex
import subprocess
from collections.abc import Sequence
from typing import IO

from adbmux.core.errors import BridgeUnavailableError, InvocationFailureError

LOGGER = logging.getLogger(__name__)


class AdbBridge:
    def __init__(self, adb_path: str = "adb") -> None:
        self.adb_path = adb_path

    def command(self, serial: str, args: Sequence[str]) -> list[str]:
        return [self.adb_path, "-s", serial, *args]

    def devices(self) -> str:
        return self._query([self.adb_path, "devices"])

    def capture(self, serial: str, args: Sequence[str]) -> str:
        return self._query(self.command(serial, args))

    def run(
        self,
        serial: str,
        args: Sequence[str],
        *,
        stdout: IO[bytes] | None = None,
        interactive: bool = False,
    ) -> None:
        cmd = self.command(serial, args)
        LOGGER.debug("Running %s", shlex.join(cmd))
        try:
            result = subprocess.run(
                cmd,
                check=False,
                stdout=stdout,
                stdin=None if interactive else subprocess.DEVNULL,
            )
        except OSError as exc:
            raise InvocationFailureError(f"Could not run '{shlex.join(cmd)}': {exc}") from exc
        if result.returncode != 0:
            raise InvocationFailureError(
                f"'{shlex.join(cmd)}' exited with code {result.returncode}"
            )

    def _query(self, cmd: list[str]) -> str:
        LOGGER.debug("Running %s", shlex.join(cmd))
        try:
            result = subprocess.run(
                cmd,
                check=False,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as exc:
            raise BridgeUnavailableError(
                f"Could not run '{cmd[0]}': {exc}. Install adb or set adb_path in the config file."
            ) from exc
        if result.returncode != 0:
            stderr = (result.stderr or "").strip()
            detail = f": {stderr}" if stderr else ""
            raise BridgeUnavailableError(
                f"'{shlex.join(cmd)}' failed with exit code {result.returncode}{detail}"
            )
        return result.stdout
