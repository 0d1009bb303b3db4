"""PiB amyloid tracer stages."""

from __future__ import annotations

from pathlib import Path

from beagle.models import PibScan

from . import loris
from .base import CommandSpec
from .tracer import (
    TracerInitialization,
    TracerPreprocess,
    TracerStage,
    TracerSurfaceVisualization,
    TracerVolumetricVisualization,
)


class PibStage(TracerStage):
    scan_type = PibScan
    tag = loris.PIB_TAG


class PibInitialization(PibStage, TracerInitialization):
    name = "pib_initialization"
    program = "beagle_pib_initialization"


class PibConvertEcat2Mnc(PibStage):
    """Convert the ECAT acquisition found under ``PIB_ECAT_DIR`` to MINC."""

    name = "pib_convert_ecat2mnc"
    program = "beagle_pib_convert_ecat2mnc"
    civet_flag = "--civetScanId"

    def build_spec(self) -> CommandSpec:
        ecat = Path(self.settings.get("PIB_ECAT_DIR")) / self.scan.ecat_filename
        return self._spec(*self.identity_args(), ecat)


class PibPreprocess(PibStage, TracerPreprocess):
    name = "pib_preprocess"
    program = "beagle_pib_preprocess"


class PibGenerateMasks(PibStage):
    name = "pib_generate_masks"
    program = "beagle_pib_generate_masks"


class PibPreprocessVerification(PibStage):
    name = "pib_preprocess_verification"
    program = "beagle_pib_preprocess_verification"


class PibComputeRatios(PibStage):
    name = "pib_compute_ratios"
    program = "beagle_pib_compute_ratios.Rscript"


class PibComputeSuvr(PibStage):
    name = "pib_compute_suvr"
    program = "beagle_pib_compute_SUVR.Rscript"


class PibVolumetricVisualization(PibStage, TracerVolumetricVisualization):
    name = "pib_volumetric_visualization"
    program = "beagle_pib_volumetric_visualization"


class PibSurfaceVisualization(PibStage, TracerSurfaceVisualization):
    name = "pib_surface_visualization"
    program = "beagle_pib_surface_visualization"


PIB_STAGES: tuple[type[PibStage], ...] = (
    PibInitialization,
    PibConvertEcat2Mnc,
    PibPreprocess,
    PibGenerateMasks,
    PibPreprocessVerification,
    PibComputeRatios,
    PibComputeSuvr,
    PibVolumetricVisualization,
    PibSurfaceVisualization,
)

__all__ = ["PibStage", "PIB_STAGES"] + [s.__name__ for s in PIB_STAGES]
