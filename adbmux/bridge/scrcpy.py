"""scrcpy mirroring launcher."""

from __future__ import annotations

import logging
import shlex
import subprocess
from pathlib import Path

from adbmux.core.errors import InvocationFailureError

LOGGER = logging.getLogger(__name__)


class ScrcpyLauncher:
    def __init__(self, scrcpy_dir: str | Path) -> None:
        self.executable = Path(scrcpy_dir) / "scrcpy"

    def launch(self, serial: str) -> None:
        cmd = [str(self.executable), "-s", serial]
        LOGGER.debug("Running %s", shlex.join(cmd))
        try:
            result = subprocess.run(cmd, check=False)
        except OSError as exc:
            raise InvocationFailureError(f"Could not start scrcpy at {self.executable}: {exc}") from exc
        if result.returncode != 0:
            raise InvocationFailureError(f"scrcpy exited with code {result.returncode}")
