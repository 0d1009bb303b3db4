"""Shared shapes of the PET tracer (PiB, FDG) stages.

Both tracers run the same sequence against their own Loris directory
(``PiB-<date>`` or ``FDG-<date>``) and the subject's Civet anatomy. The
concrete stages in :mod:`beagle.stages.pib` and :mod:`beagle.stages.fdg`
only pick the program name and tracer tag.

The external scripts disagree on the name of the Civet identifier switch:
the initialisation, conversion and preprocessing scripts take
``--civetScanId`` while the later ones take ``--civetScanDate``. Both carry
the scan context's ``civet_scan_id``.
"""

from __future__ import annotations

from typing import ClassVar

from . import loris
from .base import CommandSpec, ScanStage


class TracerStage(ScanStage):
    tag: ClassVar[str] = ""
    civet_flag: ClassVar[str] = "--civetScanDate"

    def identity_args(self) -> list[str]:
        return [
            "--keyname", self.scan.keyname,
            "--scanDate", self.scan.scan_date,
            self.civet_flag, self.scan.civet_scan_id,
            *self.settings_file_args,
        ]

    def build_spec(self) -> CommandSpec:
        return self._spec(*self.identity_args())


class TracerInitialization(TracerStage):
    civet_flag = "--civetScanId"


class TracerPreprocess(TracerStage):
    """Register the native tracer volume to the subject's MRI and ICBM space."""

    civet_flag = "--civetScanId"

    def build_spec(self) -> CommandSpec:
        native = loris.native_tracer_volume(
            self.settings, self.scan.keyname, self.tag, self.scan.scan_date
        )
        return self._spec("--xfmToNativeMRI", "--xfmToIcbmMRI", *self.identity_args(), native)


class TracerVolumetricVisualization(TracerStage):
    def build_spec(self) -> CommandSpec:
        gm_mask = (
            self.loris_dir(loris.MASKS_TAG, self.scan.civet_scan_id) / loris.GM_MASK_VOLUME
        )
        return self._spec(
            *self.identity_args(),
            "--gmMaskVol", gm_mask,
            "--t1UnderlayVol", self.stx_t1(),
        )


class TracerSurfaceVisualization(TracerStage):
    def extra_args(self) -> list[str]:
        return []

    def build_spec(self) -> CommandSpec:
        return self._spec(
            *self.identity_args(),
            *self.extra_args(),
            *self.avg_surface_args(),
            *self.indiv_surface_args(),
        )


__all__ = [
    "TracerStage",
    "TracerInitialization",
    "TracerPreprocess",
    "TracerVolumetricVisualization",
    "TracerSurfaceVisualization",
]
