"""Execution engines."""

from .base import ExecutionEngine
from .dryrun import DryRunEngine
from .local import LocalEngine
from .slurm import SlurmEngine

ENGINES: dict[str, type[ExecutionEngine]] = {
    "local": LocalEngine,
    "slurm": SlurmEngine,
}

__all__ = ["ExecutionEngine", "DryRunEngine", "LocalEngine", "SlurmEngine", "ENGINES"]
