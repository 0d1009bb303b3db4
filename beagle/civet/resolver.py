"""
Accessors for files and directories inside the Civet output tree.

:class:`CivetResolver` mirrors the helpers of the rmincIO ``civet.R``
library, specialised for the Beagle pipeline. Every accessor:

* computes the path from settings plus a :class:`CivetScanRef` (no caching,
  each call recomputes);
* optionally checks existence, returning :class:`NotFound` rather than
  raising when the target is absent and logging the attempted path.

Typical use in a stage builder::

    ref = CivetScanRef.for_scan(scan)
    classify = resolver.classify(ref).unwrap()   # halts when missing
"""

from __future__ import annotations

from pathlib import Path

import structlog
from pydantic import BaseModel

from beagle.config.schema import Settings
from beagle.models import ScanContext

from .naming import (
    check_civet_version,
    civet_filename,
    classify_suffix,
    scan_directory_name,
)
from .result import (
    ArtifactKind,
    Found,
    HemispherePair,
    NonlinearTransform,
    NotFound,
    ResolvedPath,
)

log = structlog.get_logger()

_BANNERS: dict[ArtifactKind, str] = {
    "file": "Required volume does not exist",
    "directory": "Required directory does not exist",
}


class CivetScanRef(BaseModel, frozen=True):
    """Keyname plus the scan identifier Civet used for its output."""

    keyname: str
    scan_id: str

    @classmethod
    def for_scan(cls, scan: ScanContext) -> "CivetScanRef":
        return cls(keyname=scan.keyname, scan_id=scan.civet_scan_id)


class CivetResolver:
    """Resolve Civet artifacts for one settings snapshot."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    # ------------------------------------------------------------------ #
    # Internals                                                          #
    # ------------------------------------------------------------------ #
    @staticmethod
    def _checked(path: Path, kind: ArtifactKind, check_existence: bool) -> ResolvedPath:
        """Return :class:`Found` or, when *path* is absent, :class:`NotFound`."""
        if check_existence:
            exists = path.is_dir() if kind == "directory" else path.is_file()
            if not exists:
                log.error("civet.missing", kind=kind, path=str(path), msg=_BANNERS[kind])
                return NotFound(kind=kind, path=path)
        log.debug("civet.resolved", kind=kind, path=str(path), checked=check_existence)
        return Found(path=path)

    def _pair(
        self,
        ref: CivetScanRef,
        subdir: str,
        left_suffix: str,
        right_suffix: str,
        *,
        fullpath: bool,
        check_existence: bool,
    ) -> HemispherePair:
        return HemispherePair(
            self.filename(ref, subdir, left_suffix, fullpath=fullpath, check_existence=check_existence),
            self.filename(ref, subdir, right_suffix, fullpath=fullpath, check_existence=check_existence),
        )

    # ------------------------------------------------------------------ #
    # Root and scan directory                                            #
    # ------------------------------------------------------------------ #
    def root(self, *, check_existence: bool = True) -> ResolvedPath:
        """Return ``CIVET_ROOT_DIR``."""
        return self._checked(self.settings.civet_root_dir, "directory", check_existence)

    def scan_dirname(self, ref: CivetScanRef) -> str:
        """Return the bare scan directory name (never checked)."""
        return scan_directory_name(
            ref.keyname, ref.scan_id, self.settings.append_scan_id_to_keyname
        )

    def scan_directory(
        self,
        ref: CivetScanRef,
        *,
        fullpath: bool = False,
        check_existence: bool = False,
    ) -> ResolvedPath:
        """Return the scan directory, optionally joined under the Civet root.

        Existence is only checked for full paths; a bare name cannot be
        located on disk.
        """
        name = self.scan_dirname(ref)
        if not fullpath:
            return Found(path=Path(name))
        return self._checked(self.settings.civet_root_dir / name, "directory", check_existence)

    # ------------------------------------------------------------------ #
    # Generic resolvers                                                  #
    # ------------------------------------------------------------------ #
    def filename(
        self,
        ref: CivetScanRef,
        subdir: str,
        suffix: str,
        *,
        fullpath: bool = True,
        check_existence: bool = True,
    ) -> ResolvedPath:
        """Resolve ``<root>/<scan_dir>/<subdir>/<prefix>_<scan_dir><suffix>``.

        Args:
            ref: Scan whose Civet output is addressed.
            subdir: Civet sub-directory such as ``classify`` or
                ``transforms/linear``.
            suffix: Filename suffix appended to ``<prefix>_<scan_dir>``.
            fullpath: Return the full path (default) or only the filename.
            check_existence: Return :class:`NotFound` when the file is absent.

        Returns:
            :class:`Found` with the full path or bare filename, or
            :class:`NotFound` with the full path that was checked.
        """
        check_civet_version(self.settings.civet_version)
        name = self.scan_dirname(ref)
        volname = civet_filename(self.settings.civet_prefix, name, suffix)
        full = self.settings.civet_root_dir / name / subdir / volname
        rx = self._checked(full, "file", check_existence)
        if rx and not fullpath:
            return Found(path=Path(volname))
        return rx

    def directory(
        self, ref: CivetScanRef, subdir: str, *, check_existence: bool = True
    ) -> ResolvedPath:
        """Resolve ``<root>/<scan_dir>/<subdir>``."""
        check_civet_version(self.settings.civet_version)
        full = self.settings.civet_root_dir / self.scan_dirname(ref) / subdir
        return self._checked(full, "directory", check_existence)

    # ------------------------------------------------------------------ #
    # classify/                                                          #
    # ------------------------------------------------------------------ #
    def classify(self, ref: CivetScanRef, *, fullpath: bool = True, check_existence: bool = True) -> ResolvedPath:
        """Discrete tissue classification volume (suffix depends on version)."""
        suffix = classify_suffix(self.settings.civet_version)
        return self.filename(ref, "classify", suffix, fullpath=fullpath, check_existence=check_existence)

    def gray_matter_pve(self, ref: CivetScanRef, *, fullpath: bool = True, check_existence: bool = True) -> ResolvedPath:
        return self.filename(ref, "classify", "_pve_gm.mnc", fullpath=fullpath, check_existence=check_existence)

    def white_matter_pve(self, ref: CivetScanRef, *, fullpath: bool = True, check_existence: bool = True) -> ResolvedPath:
        return self.filename(ref, "classify", "_pve_wm.mnc", fullpath=fullpath, check_existence=check_existence)

    def csf_pve(self, ref: CivetScanRef, *, fullpath: bool = True, check_existence: bool = True) -> ResolvedPath:
        return self.filename(ref, "classify", "_pve_csf.mnc", fullpath=fullpath, check_existence=check_existence)

    # ------------------------------------------------------------------ #
    # final/, mask/, native/                                             #
    # ------------------------------------------------------------------ #
    def stx_t1(self, ref: CivetScanRef, *, fullpath: bool = True, check_existence: bool = True) -> ResolvedPath:
        """Skull-stripped T1 volume in stereotaxic space."""
        return self.filename(ref, "final", "_t1_final.mnc", fullpath=fullpath, check_existence=check_existence)

    def cerebrum_mask(self, ref: CivetScanRef, *, fullpath: bool = True, check_existence: bool = True) -> ResolvedPath:
        # excludes the cerebellum
        return self.filename(ref, "mask", "_brain_mask.mnc", fullpath=fullpath, check_existence=check_existence)

    def skull_mask(self, ref: CivetScanRef, *, fullpath: bool = True, check_existence: bool = True) -> ResolvedPath:
        # includes the cerebellum
        return self.filename(ref, "mask", "_skull_mask.mnc", fullpath=fullpath, check_existence=check_existence)

    def skull_mask_native(self, ref: CivetScanRef, *, fullpath: bool = True, check_existence: bool = True) -> ResolvedPath:
        return self.filename(ref, "mask", "_skull_mask_native.mnc", fullpath=fullpath, check_existence=check_existence)

    def native_t1(self, ref: CivetScanRef, *, fullpath: bool = True, check_existence: bool = True) -> ResolvedPath:
        return self.filename(ref, "native", "_t1.mnc", fullpath=fullpath, check_existence=check_existence)

    def native_t1_nuc(self, ref: CivetScanRef, *, fullpath: bool = True, check_existence: bool = True) -> ResolvedPath:
        """Non-uniformity corrected native T1."""
        return self.filename(ref, "native", "_t1_nuc.mnc", fullpath=fullpath, check_existence=check_existence)

    # ------------------------------------------------------------------ #
    # surfaces/                                                          #
    # ------------------------------------------------------------------ #
    def gray_surfaces(
        self, ref: CivetScanRef, *, resampled: bool, fullpath: bool = True, check_existence: bool = True
    ) -> HemispherePair:
        rsl = "_rsl" if resampled else ""
        return self._pair(
            ref,
            "surfaces",
            f"_gray_surface{rsl}_left_81920.obj",
            f"_gray_surface{rsl}_right_81920.obj",
            fullpath=fullpath,
            check_existence=check_existence,
        )

    def white_surfaces(
        self, ref: CivetScanRef, *, resampled: bool, fullpath: bool = True, check_existence: bool = True
    ) -> HemispherePair:
        rsl = "_rsl" if resampled else ""
        return self._pair(
            ref,
            "surfaces",
            f"_white_surface{rsl}_left_calibrated_81920.obj",
            f"_white_surface{rsl}_right_calibrated_81920.obj",
            fullpath=fullpath,
            check_existence=check_existence,
        )

    def mid_surfaces(
        self, ref: CivetScanRef, *, resampled: bool, fullpath: bool = True, check_existence: bool = True
    ) -> HemispherePair:
        rsl = "_rsl" if resampled else ""
        return self._pair(
            ref,
            "surfaces",
            f"_mid_surface{rsl}_left_81920.obj",
            f"_mid_surface{rsl}_right_81920.obj",
            fullpath=fullpath,
            check_existence=check_existence,
        )

    # ------------------------------------------------------------------ #
    # thickness/                                                         #
    # ------------------------------------------------------------------ #
    def cortical_thickness(
        self, ref: CivetScanRef, *, resampled: bool, fullpath: bool = True, check_existence: bool = True
    ) -> HemispherePair:
        """Per-vertex cortical thickness vectors (tlink, 20 mm blur)."""
        rsl = "_rsl" if resampled else ""
        return self._pair(
            ref,
            "thickness",
            f"_native_rms{rsl}_tlink_20mm_left.txt",
            f"_native_rms{rsl}_tlink_20mm_right.txt",
            fullpath=fullpath,
            check_existence=check_existence,
        )

    def mean_curvature(
        self, ref: CivetScanRef, *, resampled: bool, fullpath: bool = True, check_existence: bool = True
    ) -> HemispherePair:
        # Not produced by Civet releases after 1.1.9.
        rsl = "_rsl" if resampled else ""
        return self._pair(
            ref,
            "thickness",
            f"_native_mc{rsl}_20mm_left.txt",
            f"_native_mc{rsl}_20mm_right.txt",
            fullpath=fullpath,
            check_existence=check_existence,
        )

    # ------------------------------------------------------------------ #
    # transforms/                                                        #
    # ------------------------------------------------------------------ #
    def linear_transform(self, ref: CivetScanRef, *, fullpath: bool = True, check_existence: bool = True) -> ResolvedPath:
        return self.filename(ref, "transforms/linear", "_t1_tal.xfm", fullpath=fullpath, check_existence=check_existence)

    def nonlinear_transform(
        self,
        ref: CivetScanRef,
        *,
        inverted: bool = False,
        fullpath: bool = True,
        check_existence: bool = True,
    ) -> NonlinearTransform:
        """Non-linear transform and its grid volume.

        The inverted variants are absent from Civet releases after 1.1.9.
        """
        stem = "_nlfit_invert" if inverted else "_nlfit_It"
        return NonlinearTransform(
            self.filename(ref, "transforms/nonlinear", f"{stem}.xfm", fullpath=fullpath, check_existence=check_existence),
            self.filename(ref, "transforms/nonlinear", f"{stem}_grid_0.mnc", fullpath=fullpath, check_existence=check_existence),
        )

    # ------------------------------------------------------------------ #
    # Directory accessors                                                #
    # ------------------------------------------------------------------ #
    def classify_dir(self, ref: CivetScanRef, *, check_existence: bool = True) -> ResolvedPath:
        return self.directory(ref, "classify", check_existence=check_existence)

    def final_dir(self, ref: CivetScanRef, *, check_existence: bool = True) -> ResolvedPath:
        return self.directory(ref, "final", check_existence=check_existence)

    def logs_dir(self, ref: CivetScanRef, *, check_existence: bool = True) -> ResolvedPath:
        return self.directory(ref, "logs", check_existence=check_existence)

    def mask_dir(self, ref: CivetScanRef, *, check_existence: bool = True) -> ResolvedPath:
        return self.directory(ref, "mask", check_existence=check_existence)

    def native_dir(self, ref: CivetScanRef, *, check_existence: bool = True) -> ResolvedPath:
        return self.directory(ref, "native", check_existence=check_existence)

    def surfaces_dir(self, ref: CivetScanRef, *, check_existence: bool = True) -> ResolvedPath:
        return self.directory(ref, "surfaces", check_existence=check_existence)

    def thickness_dir(self, ref: CivetScanRef, *, check_existence: bool = True) -> ResolvedPath:
        return self.directory(ref, "thickness", check_existence=check_existence)

    def transforms_dir(self, ref: CivetScanRef, *, check_existence: bool = True) -> ResolvedPath:
        return self.directory(ref, "transforms", check_existence=check_existence)

    def transforms_linear_dir(self, ref: CivetScanRef, *, check_existence: bool = True) -> ResolvedPath:
        return self.directory(ref, "transforms/linear", check_existence=check_existence)

    def transforms_nonlinear_dir(self, ref: CivetScanRef, *, check_existence: bool = True) -> ResolvedPath:
        return self.directory(ref, "transforms/nonlinear", check_existence=check_existence)

    def vbm_dir(self, ref: CivetScanRef, *, check_existence: bool = True) -> ResolvedPath:
        return self.directory(ref, "VBM", check_existence=check_existence)

    def verify_dir(self, ref: CivetScanRef, *, check_existence: bool = True) -> ResolvedPath:
        return self.directory(ref, "verify", check_existence=check_existence)


__all__ = ["CivetScanRef", "CivetResolver"]
