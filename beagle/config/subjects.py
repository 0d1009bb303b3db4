"""
Subject-list (``.csv``) readers.

Four list types drive a Beagle run, each one comma-separated record per
line. Blank lines and lines starting with ``#`` are ignored.

============  ======  ====================================================
List          Fields  Layout
============  ======  ====================================================
keynames      1       ``keyname``
civet         2       ``keyname,civet_scan_id``
pib           4       ``keyname,scan_id,ecat_filename,civet_scan_id``
fdg           4       ``keyname,scan_id,format;location,civet_scan_id``
============  ======  ====================================================

Every parser derives the Civet scan directory name once, without touching
the filesystem, so downstream stages never re-derive it.
"""

from __future__ import annotations

from pathlib import Path
from typing import Generic, Iterable, List, Sequence, TypeVar, Union

import structlog
from pydantic import ValidationError

from beagle.civet.naming import scan_directory_name
from beagle.config.schema import Settings
from beagle.models import CivetScan, Comment, FdgScan, NativeFormat, PibScan, ScanContext
from beagle.utils.errors import FormatError

log = structlog.get_logger()

T = TypeVar("T")
S = TypeVar("S", bound=ScanContext)


# --------------------------------------------------------------------------- #
# Structure check                                                             #
# --------------------------------------------------------------------------- #
def _is_skippable(line: str) -> bool:
    stripped = line.strip()
    return not stripped or stripped.startswith("#")


def _read_lines(path: Path) -> List[str]:
    """Return the lines of *path* or raise :class:`FormatError`."""
    try:
        return path.read_text(encoding="utf-8").splitlines()
    except (OSError, UnicodeDecodeError) as exc:
        raise FormatError(path, f"subject list is not readable: {exc}") from exc


def check_structure(path: str | Path, expected_fields: int) -> Path:
    """Verify that *path* is a readable ``.csv`` with a fixed field count.

    Args:
        path: Subject-list file.
        expected_fields: Number of comma-separated fields every record must
            carry.

    Returns:
        The expanded path.

    Raises:
        FormatError: Wrong extension, missing or undecodable file, or a
            record with the wrong number of fields (the error names the 1-based line).
    """
    path = Path(path).expanduser()
    if path.suffix != ".csv":
        raise FormatError(path, "subject list needs to be in .csv format with a .csv extension")
    if not path.is_file():
        raise FormatError(path, "subject list is not readable")
    for lineno, line in enumerate(_read_lines(path), start=1):
        if _is_skippable(line):
            continue
        found = len(line.strip().split(","))
        if found != expected_fields:
            raise FormatError(
                path,
                "contains incorrect number of fields",
                line=lineno,
                expected=expected_fields,
                actual=found,
            )
    log.debug("subjects.structure_ok", path=str(path), fields=expected_fields)
    return path


# --------------------------------------------------------------------------- #
# Line parsers                                                                #
# --------------------------------------------------------------------------- #
class LineParser(Generic[T]):
    """Turn one subject-list line into a record or a :class:`Comment`."""

    fields: int = 0

    def parse_line(self, line: str) -> Union[T, Comment]:
        stripped = line.strip()
        if _is_skippable(stripped):
            return Comment(text=stripped)
        parts = stripped.split(",")
        if len(parts) != self.fields:
            raise FormatError(
                None,
                f"malformed record {stripped!r}",
                expected=self.fields,
                actual=len(parts),
            )
        try:
            return self._build(parts)
        except ValidationError as exc:
            raise FormatError(None, f"invalid record {stripped!r}: {exc}") from exc

    def _build(self, parts: Sequence[str]) -> T:
        raise NotImplementedError


class KeynameListParser(LineParser[str]):
    fields = 1

    def _build(self, parts: Sequence[str]) -> str:
        keyname = parts[0].strip()
        if not keyname:
            raise FormatError(None, "empty keyname")
        return keyname


class ScanListParser(LineParser[S]):
    """Parsers whose records reference a Civet scan."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    def _context(self, keyname: str, civet_scan_id: str) -> dict[str, str]:
        return {
            "keyname": keyname,
            "civet_scan_id": civet_scan_id,
            "civet_scan_directory_name": scan_directory_name(
                keyname, civet_scan_id, self.settings.append_scan_id_to_keyname
            ),
        }


class CivetSubjectParser(ScanListParser[CivetScan]):
    fields = 2

    def _build(self, parts: Sequence[str]) -> CivetScan:
        keyname, civet_scan_id = (p.strip() for p in parts)
        return CivetScan(**self._context(keyname, civet_scan_id))


class PibSubjectParser(ScanListParser[PibScan]):
    fields = 4

    def _build(self, parts: Sequence[str]) -> PibScan:
        keyname, scan_date, ecat_filename, civet_scan_id = (p.strip() for p in parts)
        return PibScan(
            **self._context(keyname, civet_scan_id),
            scan_date=scan_date,
            ecat_filename=ecat_filename,
        )


class FdgSubjectParser(ScanListParser[FdgScan]):
    """FDG records carry ``<format>;<location>`` in their third field."""

    fields = 4

    def _build(self, parts: Sequence[str]) -> FdgScan:
        keyname, scan_date, compound, civet_scan_id = (p.strip() for p in parts)
        sub = compound.split(";")
        if len(sub) != 2 or not sub[1]:
            raise FormatError(None, f"expected '<format>;<location>', got {compound!r}")
        try:
            fmt = NativeFormat(sub[0].strip().lower())
        except ValueError:
            known = ", ".join(f.value for f in NativeFormat)
            raise FormatError(None, f"unknown native format {sub[0]!r} (one of {known})") from None
        return FdgScan(
            **self._context(keyname, civet_scan_id),
            scan_date=scan_date,
            source_format=fmt,
            scan_file_location=sub[1].strip(),
        )


# --------------------------------------------------------------------------- #
# File loaders                                                                #
# --------------------------------------------------------------------------- #
def load_subject_list(path: str | Path, parser: LineParser[T]) -> List[T]:
    """Check and parse a subject list, returning records in file order.

    Errors raised while parsing a record are re-raised with the file name
    and line number attached.
    """
    path = check_structure(path, parser.fields)
    entries: List[T] = []
    for lineno, line in enumerate(_read_lines(path), start=1):
        try:
            rec = parser.parse_line(line)
        except FormatError as exc:
            raise FormatError(
                path, exc.message, line=lineno, expected=exc.expected, actual=exc.actual
            ) from exc
        if isinstance(rec, Comment):
            continue
        entries.append(rec)
    log.info("subjects.loaded", path=str(path), count=len(entries), parser=type(parser).__name__)
    return entries


def load_keynames(path: str | Path) -> List[str]:
    return load_subject_list(path, KeynameListParser())


def select_by_keyname(entries: Iterable[S], keynames: Iterable[str]) -> List[S]:
    """Keep *entries* whose keyname is listed in *keynames*, preserving order."""
    wanted = set(keynames)
    return [e for e in entries if e.keyname in wanted]


__all__ = [
    "check_structure",
    "LineParser",
    "KeynameListParser",
    "CivetSubjectParser",
    "PibSubjectParser",
    "FdgSubjectParser",
    "load_subject_list",
    "load_keynames",
    "select_by_keyname",
]
