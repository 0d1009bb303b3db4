"""Civet output-tree naming rules and the path resolver built on them."""

from .naming import (
    TESTED_CIVET_VERSIONS,
    check_civet_version,
    civet_filename,
    classify_suffix,
    scan_directory_name,
)
from .resolver import CivetResolver, CivetScanRef
from .result import Found, HemispherePair, NonlinearTransform, NotFound, ResolvedPath

__all__ = [
    "TESTED_CIVET_VERSIONS",
    "check_civet_version",
    "civet_filename",
    "classify_suffix",
    "scan_directory_name",
    "CivetResolver",
    "CivetScanRef",
    "Found",
    "NotFound",
    "ResolvedPath",
    "HemispherePair",
    "NonlinearTransform",
]
