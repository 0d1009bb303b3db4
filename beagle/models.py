"""
Domain-level data models shared across the config, civet, stage and CLI layers.

The module provides:

* **Scan contexts** (:class:`CivetScan`, :class:`PibScan`, :class:`FdgScan`)
  – one immutable record per subject/modality/scan parsed from a subject
  list.
* :class:`Comment` – the marker a line parser returns for blank and
  ``#`` lines so callers can skip them without treating them as errors.
* :class:`RunOptions` – verbosity and run flags mirrored onto every built
  command.

Every pydantic class uses ``frozen=True`` so that contexts are hashable and
cannot drift once parsed.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import ClassVar

from pydantic import BaseModel, field_validator

class Comment(BaseModel, frozen=True):
    """Blank or ``#``-prefixed subject-list line."""

    text: str = ""

class NativeFormat(str, Enum):
    """Format of the native FDG scan as tagged in the subject list."""

    ECAT = "ecat"
    DICOM = "dicom"
    MINC = "minc"

class ScanContext(BaseModel, frozen=True):
    """Fields common to every scan context.

    Attributes
    ----------
    keyname
        Subject identifier; top-level directory under the Loris root.
    civet_scan_id
        Identifier under which Civet stored this subject's anatomical
        output. Resolved once at parse time regardless of what the subject
        list called the column.
    civet_scan_directory_name
        Civet output directory name derived from *keyname* and
        *civet_scan_id* (see :func:`beagle.civet.naming.scan_directory_name`).
    """

    modality: ClassVar[str]

    keyname: str
    civet_scan_id: str
    civet_scan_directory_name: str

    @field_validator("keyname")
    @classmethod
    def _keyname_is_usable(cls, v: str) -> str:
        """Reject empty keynames and keynames containing the list separator."""
        if not v or "," in v:
            raise ValueError(f"invalid keyname {v!r}")
        return v

class CivetScan(ScanContext, frozen=True):
    """Anatomical scan as listed in the 2-column Civet subject list."""

    modality: ClassVar[str] = "anatomical"

    @property
    def scan_date(self) -> str:
        """Anatomical stages address the scan by its Civet identifier."""
        return self.civet_scan_id

class PibScan(ScanContext, frozen=True):
    """PiB tracer scan: ``keyname,scan_id,ecat_filename,civet_scan_id``."""

    modality: ClassVar[str] = "pib"

    scan_date: str
    ecat_filename: str

class FdgScan(ScanContext, frozen=True):
    """FDG tracer scan: ``keyname,scan_id,format;location,civet_scan_id``."""

    modality: ClassVar[str] = "fdg"

    scan_date: str
    source_format: NativeFormat
    scan_file_location: str

@dataclass(frozen=True)
class RunOptions:
    """Flags shared by every command built during one run.

    Attributes:
        settings_file: Settings file handed to every external program.
        verbose: Append ``-v`` to every command.
        debug: Append ``-d`` to every command.
        fake: Log commands instead of executing them.
        check_inputs: Verify Civet artifacts exist before building a command.
    """

    settings_file: Path
    verbose: bool = False
    debug: bool = False
    fake: bool = False
    check_inputs: bool = True


__all__ = [
    "Comment",
    "NativeFormat",
    "ScanContext",
    "CivetScan",
    "PibScan",
    "FdgScan",
    "RunOptions",
]
