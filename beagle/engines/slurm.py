"""Slurm execution engine."""

from __future__ import annotations

from .local import LocalEngine


class SlurmEngine(LocalEngine):
    """Run each pipeline program through ``srun``.

    ``srun`` blocks until the job step finishes, so stages still execute
    one after another and a failing step surfaces as a non-zero exit.
    """

    prefix = ("srun",)
