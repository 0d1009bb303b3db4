"""Command builders for every Beagle pipeline program.

:data:`STAGES` maps the stage names used in the pipeline definition to the
builder classes; :func:`build_command` is the single entry point used by
the orchestrator and the ``show-command`` debug command.
"""

from __future__ import annotations

from typing import Dict, Union

from beagle.config.schema import Settings
from beagle.models import RunOptions, ScanContext
from beagle.utils.errors import BeagleError

from .anatomical import ANATOMICAL_STAGES
from .base import CommandSpec, ScanStage, Stage, SubjectStage
from .fdg import FDG_STAGES
from .pib import PIB_STAGES
from .subject import MakeSummaryReport, RunInitialization

SUBJECT_STAGES: tuple[type[SubjectStage], ...] = (RunInitialization, MakeSummaryReport)

STAGES: Dict[str, type[Stage]] = {
    cls.name: cls
    for cls in (*SUBJECT_STAGES, *ANATOMICAL_STAGES, *PIB_STAGES, *FDG_STAGES)
}


def get_stage(name: str) -> type[Stage]:
    try:
        return STAGES[name]
    except KeyError:
        raise BeagleError(
            f"Unknown stage '{name}'. Known stages: {', '.join(sorted(STAGES))}"
        ) from None


def make_stage(
    name: str,
    target: Union[str, ScanContext],
    opt: RunOptions,
    settings: Settings,
) -> Stage:
    """Instantiate stage *name* for a keyname or a scan context.

    Raises:
        BeagleError: If *name* is unknown or *target* does not match the
            level of the stage.
    """
    cls = get_stage(name)
    if issubclass(cls, SubjectStage):
        if not isinstance(target, str):
            raise BeagleError(f"Stage '{name}' runs per subject and expects a keyname")
        return cls(target, opt, settings)
    if isinstance(target, str):
        raise BeagleError(f"Stage '{name}' runs per scan and expects a scan context")
    try:
        return cls(target, opt, settings)
    except TypeError as exc:
        raise BeagleError(str(exc)) from exc


def build_command(
    name: str,
    target: Union[str, ScanContext],
    opt: RunOptions,
    settings: Settings,
) -> CommandSpec:
    """Return the command line of stage *name*.

    Raises:
        BeagleError: Unknown stage or mismatched target.
        MissingArtifactError: A required Civet input does not exist.
    """
    return make_stage(name, target, opt, settings).build_spec()


__all__ = [
    "CommandSpec",
    "Stage",
    "SubjectStage",
    "ScanStage",
    "STAGES",
    "SUBJECT_STAGES",
    "ANATOMICAL_STAGES",
    "PIB_STAGES",
    "FDG_STAGES",
    "get_stage",
    "make_stage",
    "build_command",
]
