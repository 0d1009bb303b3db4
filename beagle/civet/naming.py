"""Naming rules of the Civet output tree.

Civet writes one directory per scan under its root::

    <CIVET_ROOT_DIR>/<scan_dir>/<subdir>/<prefix>_<scan_dir><suffix>

where ``scan_dir`` is either the bare keyname (ADNI-style output such as
``0640-F-NC``) or ``<keyname>-<scan_id>`` (e.g. ``AF008-20141027``),
selected by ``CIVET_SCANID_APPEND_SCANDATE_TO_KEYNAME``.
"""

from __future__ import annotations

import structlog

log = structlog.get_logger()

TESTED_CIVET_VERSIONS: tuple[str, ...] = ("1.1.7", "1.1.9", "1.1.11")

# Civet renamed the discrete classification volume after 1.1.9.
_LEGACY_CLASSIFY_VERSION = "1.1.9"


def scan_directory_name(keyname: str, scan_id: str, append: bool) -> str:
    """Return the Civet directory name for one scan."""
    return f"{keyname}-{scan_id}" if append else keyname


def civet_filename(prefix: str, scan_dirname: str, suffix: str) -> str:
    """Return ``<prefix>_<scan_dirname><suffix>``."""
    return f"{prefix}_{scan_dirname}{suffix}"


def classify_suffix(version: str) -> str:
    """Return the tissue-classification volume suffix for a Civet version."""
    if version == _LEGACY_CLASSIFY_VERSION:
        return "_classify.mnc"
    return "_pve_classify.mnc"


def check_civet_version(version: str) -> bool:
    """Log an advisory when *version* has not been tested; never fails."""
    if version in TESTED_CIVET_VERSIONS:
        return True
    log.warning(
        "civet.untested_version",
        version=version,
        tested=list(TESTED_CIVET_VERSIONS),
        msg=f"Not tested with Civet version {version}. Use at your own risk.",
    )
    return False


__all__ = [
    "TESTED_CIVET_VERSIONS",
    "scan_directory_name",
    "civet_filename",
    "classify_suffix",
    "check_civet_version",
]
