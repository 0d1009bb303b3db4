"""Job status sentinels.

A job's status is recorded as an empty file ``<jobname>.<status>`` inside a
status directory. Setting a status removes every earlier sentinel of the
same job, so at most one exists at any time.
"""

from __future__ import annotations

from pathlib import Path
from typing import List

import structlog

from .errors import ConfigError

log = structlog.get_logger()

RUNNING = "running"
FINISHED = "finished"
FAILED = "failed"


def _status_dir(dirname: str | Path) -> Path:
    path = Path(dirname).expanduser()
    if not path.is_dir():
        raise ConfigError(path, "status directory does not exist")
    return path


def _sentinels(dirname: Path, jobname: str) -> List[Path]:
    prefix = f"{jobname}."
    return sorted(
        p
        for p in dirname.iterdir()
        if p.name.startswith(prefix) and p.name[len(prefix):] and "." not in p.name[len(prefix):]
    )


def get_job_status(dirname: str | Path, jobname: str) -> str:
    """Return the recorded status of *jobname*, or ``""`` when none exists."""
    path = _status_dir(dirname)
    found = _sentinels(path, jobname)
    if not found:
        return ""
    return found[0].name[len(jobname) + 1:]


def set_job_status(dirname: str | Path, jobname: str, status: str) -> Path:
    """Record *status* for *jobname*, replacing any previous sentinel.

    Returns:
        Path of the sentinel file written.
    """
    if not status or "." in status or "/" in status:
        raise ValueError(f"invalid job status {status!r}")
    path = _status_dir(dirname)
    for old in _sentinels(path, jobname):
        log.debug("status.clear", job=jobname, sentinel=str(old))
        old.unlink()
    sentinel = path / f"{jobname}.{status}"
    sentinel.touch()
    log.debug("status.set", job=jobname, status=status)
    return sentinel


__all__ = ["RUNNING", "FINISHED", "FAILED", "get_job_status", "set_job_status"]
