"""Engine behind ``--fake``: log every command, execute nothing."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

import structlog

from .base import ExecutionEngine

log = structlog.get_logger()


class DryRunEngine(ExecutionEngine):
    def __init__(self) -> None:
        self.commands: list[list[str]] = []

    def run(self, argv: Sequence[str], *, logfile: Path | None = None) -> int:
        self.commands.append(list(argv))
        log.info("engine.fake", command=" ".join(argv), logfile=str(logfile) if logfile else None)
        return 0
