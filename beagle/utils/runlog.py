"""Per-subject run log.

Every stage records key/value messages (start and stop timestamps, tool
versions, ...) in a JSON object stored in the subject's Loris directory::

    <LORIS_ROOT_DIR>/<keyname>/<LORIS_LOGFILE_PREFIX>_run-<LORIS_RUN_IDENTIFIER><LORIS_LOGFILE_EXTENSION>

Keys have the form ``progname|keyname|modality|scan_date|key``. The whole
object is rewritten on every :meth:`RunLog.save`; the last writer wins.
"""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Dict

import structlog

from beagle.config.schema import Settings

from .errors import ConfigError

log = structlog.get_logger()

TIMESTAMP_FORMAT = "%Y.%m.%d %H:%M:%S"
NULL_FIELD = "NULL"


def runlog_path(settings: Settings, keyname: str) -> Path:
    name = (
        settings.get("LORIS_LOGFILE_PREFIX")
        + "_run-"
        + settings.get("LORIS_RUN_IDENTIFIER")
        + settings.get("LORIS_LOGFILE_EXTENSION")
    )
    return settings.loris_root_dir / keyname / name


def entry_key(progname: str, keyname: str, modality: str, scan_date: str, key: str) -> str:
    return "|".join((progname, keyname, modality, scan_date, key))


class RunLog:
    """JSON key/value log for one subject.

    Args:
        keyname: Subject whose Loris directory holds the log.
        settings: Settings snapshot providing the file name parts.
        erase: Start from an empty log even if the file exists.
    """

    def __init__(self, keyname: str, settings: Settings, *, erase: bool = False) -> None:
        self.keyname = keyname
        self.path = runlog_path(settings, keyname)
        self.entries: Dict[str, str] = {}
        if erase or not self.path.exists():
            self.save()
        else:
            self._load()

    def _load(self) -> None:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise ConfigError(self.path, f"run log is not readable: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigError(self.path, "run log must contain a JSON object")
        self.entries = {str(k): str(v) for k, v in data.items()}
        log.debug("runlog.loaded", path=str(self.path), count=len(self.entries))

    def save(self) -> Path:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self.entries, indent=2, sort_keys=True) + "\n")
        return self.path

    def log_message(
        self, progname: str, keyname: str, modality: str, scan_date: str, key: str, message: str
    ) -> str:
        full_key = entry_key(progname, keyname, modality, scan_date, key)
        self.entries[full_key] = str(message)
        return full_key

    def log_start(self, progname: str, keyname: str, modality: str, scan_date: str) -> str:
        stamp = datetime.now().strftime(TIMESTAMP_FORMAT)
        return self.log_message(progname, keyname, modality, scan_date, "start_timestamp", stamp)

    def log_stop(self, progname: str, keyname: str, modality: str, scan_date: str) -> str:
        stamp = datetime.now().strftime(TIMESTAMP_FORMAT)
        return self.log_message(progname, keyname, modality, scan_date, "stop_timestamp", stamp)

    def __getitem__(self, key: str) -> str:
        return self.entries[key]

    def __len__(self) -> int:
        return len(self.entries)


__all__ = ["RunLog", "runlog_path", "entry_key", "TIMESTAMP_FORMAT", "NULL_FIELD"]
