"""Base classes for Beagle pipeline stages.

A stage knows how to turn one subject (or one scan of a subject) into the
command line of an external Beagle program. Building is deterministic: the
same inputs always give the same :class:`CommandSpec`, and the only
filesystem access is the optional existence check on Civet inputs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import ClassVar, Sequence

from beagle.civet import CivetResolver, CivetScanRef
from beagle.config.schema import Settings
from beagle.engines import ExecutionEngine
from beagle.models import ScanContext, RunOptions

from . import loris


@dataclass(frozen=True)
class CommandSpec:
    """Command line returned by :meth:`Stage.build_spec`.

    Attributes:
        program: Name of the external executable.
        args: Arguments following *program*, in order.
    """

    program: str
    args: Sequence[str] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "args", tuple(str(a) for a in self.args))

    @property
    def argv(self) -> list[str]:
        return [self.program, *self.args]

    def to_string(self) -> str:
        """Single-space joined command line, as written to the run log."""
        return " ".join(self.argv)

    def __str__(self) -> str:
        return self.to_string()


class Stage:
    """Base class for wrappers around Beagle pipeline programs."""

    name: ClassVar[str] = ""
    program: ClassVar[str] = ""
    opt: RunOptions
    settings: Settings

    def execute(self, engine: ExecutionEngine, *, logfile: Path | None = None) -> int:
        """Build a :class:`CommandSpec` and execute it with *engine*."""
        spec = self.build_spec()
        return engine.run(spec.argv, logfile=logfile)

    def build_spec(self) -> CommandSpec:
        """Return a :class:`CommandSpec` describing how to run this stage."""
        raise NotImplementedError

    def _spec(self, *args: object) -> CommandSpec:
        """Prefix *args* with the verbosity switches every program accepts."""
        head: list[object] = []
        if self.opt.verbose:
            head.append("-v")
        if self.opt.debug:
            head.append("-d")
        return CommandSpec(self.program, [*head, *args])

    @property
    def settings_file_args(self) -> tuple[str, str]:
        return ("--settingsFile", str(self.opt.settings_file))


@dataclass
class SubjectStage(Stage):
    """Stage run once per subject, outside any scan."""

    keyname: str
    opt: RunOptions
    settings: Settings


@dataclass
class ScanStage(Stage):
    """Stage run once per scan of a subject.

    Subclasses set :attr:`scan_type` to the context they accept.
    """

    scan_type: ClassVar[type[ScanContext]] = ScanContext

    scan: ScanContext
    opt: RunOptions
    settings: Settings

    def __post_init__(self) -> None:
        if not isinstance(self.scan, self.scan_type):
            raise TypeError(
                f"{self.name} expects a {self.scan_type.__name__}, "
                f"got {type(self.scan).__name__}"
            )

    # --------------------------- civet inputs ---------------------------- #
    @property
    def resolver(self) -> CivetResolver:
        return CivetResolver(self.settings)

    @property
    def civet_ref(self) -> CivetScanRef:
        return CivetScanRef.for_scan(self.scan)

    @property
    def check(self) -> bool:
        return self.opt.check_inputs

    def stx_t1(self) -> Path:
        return self.resolver.stx_t1(self.civet_ref, check_existence=self.check).unwrap()

    def gray_surfaces_rsl(self) -> tuple[Path, Path]:
        return self.resolver.gray_surfaces(
            self.civet_ref, resampled=True, check_existence=self.check
        ).unwrap()

    # --------------------------- loris outputs --------------------------- #
    def loris_dir(self, tag: str, scan_id: str | None = None) -> Path:
        """``<LORIS_ROOT_DIR>/<keyname>/<tag>-<scan_id>`` (defaults to scan date)."""
        sid = scan_id if scan_id is not None else self.scan.scan_date  # type: ignore[attr-defined]
        return loris.stage_dir(self.settings, self.scan.keyname, tag, sid)

    def avg_surface_args(self) -> list[str]:
        """Hot colour map plus the averaged ADNI gray surfaces."""
        surf_dir = self.settings.adni_surfaces_dir
        return [
            "--colorMap", loris.SURFACE_COLOR_MAP,
            "--avgLhSurface", str(surf_dir / self.settings.get("ADNI_LH_GM_SURFACE")),
            "--avgRhSurface", str(surf_dir / self.settings.get("ADNI_RH_GM_SURFACE")),
        ]

    def indiv_surface_args(self) -> list[str]:
        lh, rh = self.gray_surfaces_rsl()
        return ["--indivLhSurface", str(lh), "--indivRhSurface", str(rh)]


__all__ = ["CommandSpec", "Stage", "SubjectStage", "ScanStage"]
