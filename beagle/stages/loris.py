"""Paths of files Beagle itself writes under the Loris output tree.

Every stage output lives in ``<LORIS_ROOT_DIR>/<keyname>/<TAG>-<id>``; the
functions below only compute paths and never touch the filesystem.
"""

from __future__ import annotations

from pathlib import Path

from beagle.config.schema import Settings

AAL_TAG = "AAL"
VBM_TAG = "VBM"
THICKNESS_TAG = "THICKNESS"
MASKS_TAG = "MASKS"
PIB_TAG = "PiB"
FDG_TAG = "FDG"

GM_MASK_VOLUME = "wholeBrain_gray_matter_mask.mnc"
THICKNESS_VECTOR_SUFFIX = "_thickness_lhrh.txt"
THICKNESS_ZSCORES_SUFFIX = "_thickness_zscores.txt"
SURFACE_LABELS_SUFFIX = "_extracted_aal_surface_labels.txt"
SURFACE_COLOR_MAP = "hot"


def keyname_dir(settings: Settings, keyname: str) -> Path:
    return settings.loris_root_dir / keyname


def stage_dir(settings: Settings, keyname: str, tag: str, scan_id: str) -> Path:
    """Return ``<LORIS_ROOT_DIR>/<keyname>/<tag>-<scan_id>``."""
    return keyname_dir(settings, keyname) / f"{tag}-{scan_id}"


def aal_labels_volume(settings: Settings, keyname: str, scan_id: str, *, gm_masked: bool = False) -> Path:
    """AAL-labelled stereotaxic T1, optionally restricted to gray matter."""
    suffix = "_gmMask" if gm_masked else ""
    name = f"{keyname}_t1_final_{settings.aal_labels_version}Labels{suffix}.mnc"
    return stage_dir(settings, keyname, AAL_TAG, scan_id) / name


def native_tracer_volume(settings: Settings, keyname: str, tag: str, scan_date: str) -> Path:
    """Native-space MINC volume written by the PiB/FDG conversion stages."""
    return stage_dir(settings, keyname, tag, scan_date) / "native" / f"{keyname}.mnc"


__all__ = [
    "AAL_TAG",
    "VBM_TAG",
    "THICKNESS_TAG",
    "MASKS_TAG",
    "PIB_TAG",
    "FDG_TAG",
    "GM_MASK_VOLUME",
    "SURFACE_COLOR_MAP",
    "keyname_dir",
    "stage_dir",
    "aal_labels_volume",
    "native_tracer_volume",
]
