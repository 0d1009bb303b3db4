"""Run pipeline programs as local subprocesses."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Sequence

import structlog

from beagle.utils.errors import ExternalCommandError

from .base import ExecutionEngine

log = structlog.get_logger()


class LocalEngine(ExecutionEngine):
    """Execute each command with :func:`subprocess.run` and wait for it."""

    prefix: tuple[str, ...] = ()

    def command(self, argv: Sequence[str]) -> list[str]:
        return [*self.prefix, *argv]

    def run(self, argv: Sequence[str], *, logfile: Path | None = None) -> int:
        """Execute *argv*, appending stdout and stderr to *logfile* when given.

        Returns:
            Always ``0``; failures raise instead.
        """
        cmd = self.command(argv)
        text = " ".join(cmd)
        log.info("engine.run", engine=type(self).__name__, command=text)
        try:
            if logfile is None:
                subprocess.run(cmd, check=True)
            else:
                logfile.parent.mkdir(parents=True, exist_ok=True)
                with logfile.open("a") as fh:
                    subprocess.run(cmd, check=True, stdout=fh, stderr=subprocess.STDOUT)
        except subprocess.CalledProcessError as exc:
            log.error("engine.failed", command=text, returncode=exc.returncode)
            raise ExternalCommandError(text, exc.returncode) from exc
        except FileNotFoundError as exc:
            log.error("engine.not_found", command=text, program=cmd[0])
            raise ExternalCommandError(text, 127) from exc
        return 0
