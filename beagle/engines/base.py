"""Execution back-ends for running Beagle pipeline programs."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Sequence


class ExecutionEngine(ABC):
    """Abstract execution engine.

    Concrete implementations launch the external program described by an
    argument vector, either directly, through a scheduler, or not at all.
    """

    @abstractmethod
    def run(self, argv: Sequence[str], *, logfile: Path | None = None) -> int:
        """Run *argv*.

        Args:
            argv: Program name followed by its arguments.
            logfile: Optional file the program's output is appended to.

        Returns:
            Process return code.

        Raises:
            ExternalCommandError: If the program exits with a non-zero status.
        """
        raise NotImplementedError
