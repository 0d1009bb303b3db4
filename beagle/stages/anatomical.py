"""
Anatomical stages: AAL labelling, masks, VBM and cortical thickness.

Each stage receives a :class:`~beagle.models.CivetScan`; its
``--scanDate`` is the Civet scan identifier, and every Civet input is
looked up through :class:`~beagle.civet.CivetResolver` so that a missing
artifact stops the build instead of yielding a path to nowhere.
"""

from __future__ import annotations

from pathlib import Path

from beagle.models import CivetScan

from . import loris
from .base import CommandSpec, ScanStage


class AnatomicalStage(ScanStage):
    scan_type = CivetScan

    def identity_args(self) -> list[str]:
        """``--keyname``, ``--scanDate`` and ``--settingsFile``."""
        return [
            "--keyname", self.scan.keyname,
            "--scanDate", self.scan.civet_scan_id,
            *self.settings_file_args,
        ]

    def build_spec(self) -> CommandSpec:
        return self._spec(*self.identity_args())

    # ------------------------------------------------------------------ #
    def zscore_volumes(self) -> list[str]:
        """GM then WM VBM z-score volumes written by the VBM stage."""
        vbm_dir = self.loris_dir(loris.VBM_TAG)
        keyname = self.scan.keyname
        return [
            str(vbm_dir / f"{keyname}{self.settings.get(key)}.mnc")
            for key in ("VBM_GM_ZSCORE_VOLUME_SUFFIX", "VBM_WM_ZSCORE_VOLUME_SUFFIX")
        ]

    def thickness_file(self, suffix: str) -> Path:
        return self.loris_dir(loris.THICKNESS_TAG) / f"{self.scan.keyname}{suffix}"


# --------------------------------------------------------------------------- #
# Initialisation, labels and masks                                            #
# --------------------------------------------------------------------------- #
class AnatomicalInitialization(AnatomicalStage):
    name = "anatomical_initialization"
    program = "beagle_anatomical_initialization"


class LabelsFitAal(AnatomicalStage):
    """Fit the AAL template labels onto the stereotaxic T1."""

    name = "labels_fit_aal"
    program = "beagle_labels_fit_AAL"


class MasksGenerateFromLabels(AnatomicalStage):
    """Combine AAL labels with the Civet classification into ROI masks."""

    name = "masks_generate_from_labels"
    program = "beagle_masks_generate_from_labels"

    def build_spec(self) -> CommandSpec:
        labels = loris.aal_labels_volume(self.settings, self.scan.keyname, self.scan.civet_scan_id)
        classify = self.resolver.classify(self.civet_ref, check_existence=self.check).unwrap()
        return self._spec(
            "--keyname", self.scan.keyname,
            "--scanDate", self.scan.civet_scan_id,
            "--labelledAALvolume", labels,
            "--classifyVolume", classify,
            *self.settings_file_args,
        )


# --------------------------------------------------------------------------- #
# VBM                                                                         #
# --------------------------------------------------------------------------- #
class VbmComputeIndividVbm(AnatomicalStage):
    name = "vbm_compute_individ_vbm"
    program = "beagle_vbm_compute_individ_VBM.Rscript"


class VbmQuantification(AnatomicalStage):
    """Quantify the GM/WM z-score volumes per ROI."""

    name = "vbm_quantification"
    program = "beagle_vbm_quantification.Rscript"

    def build_spec(self) -> CommandSpec:
        return self._spec(*self.identity_args(), *self.zscore_volumes())


class VbmVolumetricVisualization(AnatomicalStage):
    name = "vbm_volumetric_visualization"
    program = "beagle_vbm_volumetric_visualization"

    def build_spec(self) -> CommandSpec:
        return self._spec(
            *self.identity_args(),
            "--t1UnderlayVol", self.stx_t1(),
            *self.zscore_volumes(),
        )


# --------------------------------------------------------------------------- #
# Cortical thickness                                                          #
# --------------------------------------------------------------------------- #
class ThicknessComputeZscores(AnatomicalStage):
    """Z-score the resampled thickness vectors against the normal population."""

    name = "thickness_compute_zscores"
    program = "beagle_thickness_compute_zscores"

    def build_spec(self) -> CommandSpec:
        lh, rh = self.resolver.cortical_thickness(
            self.civet_ref, resampled=True, check_existence=self.check
        ).unwrap()
        return self._spec(
            *self.identity_args(),
            "--lhThicknessVectorFile", lh,
            "--rhThicknessVectorFile", rh,
        )


class ThicknessExtractSurfaceLabels(AnatomicalStage):
    name = "thickness_extract_surface_labels"
    program = "beagle_thickness_extract_surface_labels"

    def build_spec(self) -> CommandSpec:
        lh, rh = self.resolver.mid_surfaces(
            self.civet_ref, resampled=True, check_existence=self.check
        ).unwrap()
        labels = loris.aal_labels_volume(
            self.settings, self.scan.keyname, self.scan.civet_scan_id, gm_masked=True
        )
        return self._spec(
            *self.identity_args(),
            "--surfaceLh", lh,
            "--surfaceRh", rh,
            "--aalLblVolume", labels,
        )


class ThicknessComputeRoiStatistics(AnatomicalStage):
    name = "thickness_compute_roi_statistics"
    program = "beagle_thickness_compute_roi_statistics.Rscript"

    def build_spec(self) -> CommandSpec:
        return self._spec(
            *self.identity_args(),
            "--thicknessVectorFile", self.thickness_file(loris.THICKNESS_VECTOR_SUFFIX),
            "--zscoresVectorFile", self.thickness_file(loris.THICKNESS_ZSCORES_SUFFIX),
            "--surfaceLabelsVectorFile", self.thickness_file(loris.SURFACE_LABELS_SUFFIX),
        )


class ThicknessSurfaceVisualization(AnatomicalStage):
    name = "thickness_surface_visualization"
    program = "beagle_thickness_surface_visualization"

    def build_spec(self) -> CommandSpec:
        return self._spec(
            *self.identity_args(),
            *self.avg_surface_args(),
            *self.indiv_surface_args(),
        )


ANATOMICAL_STAGES: tuple[type[AnatomicalStage], ...] = (
    AnatomicalInitialization,
    LabelsFitAal,
    MasksGenerateFromLabels,
    VbmComputeIndividVbm,
    VbmQuantification,
    VbmVolumetricVisualization,
    ThicknessComputeZscores,
    ThicknessExtractSurfaceLabels,
    ThicknessComputeRoiStatistics,
    ThicknessSurfaceVisualization,
)

__all__ = ["AnatomicalStage", "ANATOMICAL_STAGES"] + [s.__name__ for s in ANATOMICAL_STAGES]
