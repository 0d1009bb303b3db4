"""FDG glucose-metabolism tracer stages.

FDG scans arrive in one of three native formats. ECAT and MINC scans are
single files under ``FDG_NATIVE_DIR``; a DICOM series is a directory that
lives inside a per-scan sub-directory named after the scan identifier.
"""

from __future__ import annotations

from pathlib import Path

from beagle.models import FdgScan, NativeFormat

from . import loris
from .base import CommandSpec
from .tracer import (
    TracerInitialization,
    TracerPreprocess,
    TracerStage,
    TracerSurfaceVisualization,
    TracerVolumetricVisualization,
)


class FdgStage(TracerStage):
    scan_type = FdgScan
    tag = loris.FDG_TAG


class FdgInitialization(FdgStage, TracerInitialization):
    name = "fdg_initialization"
    program = "beagle_fdg_initialization"


class FdgConvertNative2Mnc(FdgStage):
    name = "fdg_convert_native2mnc"
    program = "beagle_fdg_convert_native2mnc"

    def input_target(self) -> Path:
        """Location of the native scan for the format tagged in the list."""
        native_dir = Path(self.settings.get("FDG_NATIVE_DIR"))
        if self.scan.source_format is NativeFormat.DICOM:
            return native_dir / self.scan.scan_date / self.scan.scan_file_location
        return native_dir / self.scan.scan_file_location

    def build_spec(self) -> CommandSpec:
        return self._spec(
            "--keyname", self.scan.keyname,
            "--scanDate", self.scan.scan_date,
            *self.settings_file_args,
            f"--{self.scan.source_format.value}",
            f"--inputTarget={self.input_target()}",
        )


class FdgPreprocess(FdgStage, TracerPreprocess):
    name = "fdg_preprocess"
    program = "beagle_fdg_preprocess"


class FdgPreprocessVerification(FdgStage):
    name = "fdg_preprocess_verification"
    program = "beagle_fdg_preprocess_verification"


class FdgComputeRatios(FdgStage):
    name = "fdg_compute_ratios"
    program = "beagle_fdg_compute_ratios.Rscript"


class FdgComputeSuvr(FdgStage):
    name = "fdg_compute_suvr"
    program = "beagle_fdg_compute_SUVR.Rscript"


class FdgVolumetricVisualization(FdgStage, TracerVolumetricVisualization):
    name = "fdg_volumetric_visualization"
    program = "beagle_fdg_volumetric_visualization"


class FdgSurfaceVisualization(FdgStage, TracerSurfaceVisualization):
    """Surface rendering masked by the elderly-model CSF probability map."""

    name = "fdg_surface_visualization"
    program = "beagle_fdg_surface_visualization"

    def extra_args(self) -> list[str]:
        pmap = Path(self.settings.get("ELDERLY_MODEL_DIR")) / self.settings.get(
            "ELDERLY_MODEL_PMAP_MEAN_CSF_VOLUME"
        )
        return ["--csfPmapVolume", str(pmap)]


FDG_STAGES: tuple[type[FdgStage], ...] = (
    FdgInitialization,
    FdgConvertNative2Mnc,
    FdgPreprocess,
    FdgPreprocessVerification,
    FdgComputeRatios,
    FdgComputeSuvr,
    FdgVolumetricVisualization,
    FdgSurfaceVisualization,
)

__all__ = ["FdgStage", "FDG_STAGES"] + [s.__name__ for s in FDG_STAGES]
