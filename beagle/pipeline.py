"""
Per-subject orchestration of the Beagle stages.

For one subject the order is fixed:

1. the ``subject_first`` stages (run initialisation);
2. for each modality in the pipeline definition, every stage for every scan
   of that modality, scans in subject-list order;
3. the ``subject_last`` stages (summary report).

Each stage is guarded by a status sentinel in ``<LORIS_ROOT_DIR>/<keyname>/status``
so an interrupted run resumes after the last finished stage. The first
failure marks the stage ``failed``, saves the run log and propagates.

In fake mode commands are handed to the engine (normally
:class:`~beagle.engines.DryRunEngine`) but no sentinel or run-log entry is
written, so a later real run starts from scratch.
"""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Union

import structlog

from beagle.civet.naming import check_civet_version
from beagle.config.loader import (
    dump_aggregated_settings,
    load_pipeline_definition,
    write_settings_file,
)
from beagle.config.schema import PipelineDefinition, Settings
from beagle.engines import ExecutionEngine
from beagle.models import RunOptions, ScanContext
from beagle.stages import get_stage, make_stage
from beagle.stages.loris import keyname_dir
from beagle.utils.runlog import NULL_FIELD, RunLog
from beagle.utils.status import FAILED, FINISHED, RUNNING, get_job_status, set_job_status

log = structlog.get_logger()

PROGNAME = "beagle-cli"


def status_dir(settings: Settings, keyname: str) -> Path:
    return keyname_dir(settings, keyname) / "status"


def job_name(stage_name: str, scan: Optional[ScanContext] = None) -> str:
    """Sentinel name: the stage, plus the scan date for per-scan stages."""
    if scan is None:
        return stage_name
    return f"{stage_name}-{scan.scan_date}"  # type: ignore[attr-defined]


def run_settings_file(settings: Settings) -> Path:
    """Location of the merged settings file for the current run."""
    ident = settings.get("LORIS_RUN_IDENTIFIER") if "LORIS_RUN_IDENTIFIER" in settings else ""
    stem = f"beagle_run-{ident}" if ident else "beagle_run"
    return settings.loris_root_dir / f"{stem}.settings"


def prepare_run_settings(settings: Settings, opt: RunOptions, *, write: bool = True) -> RunOptions:
    """Return *opt* pointing at a settings file that holds *settings*.

    Used when a run configuration was merged over the settings file: the
    merged snapshot is written under the Loris root, with its JSON aggregate
    beside it, and every built command receives it through ``--settingsFile``.
    With ``write=False`` (fake runs, ``show-command``) only the path changes.
    """
    path = run_settings_file(settings)
    if write:
        write_settings_file(settings, path)
        dump_aggregated_settings(settings, path.with_suffix(".json"))
    return replace(opt, settings_file=path)


class SubjectRun:
    """Run every stage of one subject with one engine."""

    def __init__(
        self,
        keyname: str,
        opt: RunOptions,
        settings: Settings,
        engine: ExecutionEngine,
        *,
        logfile: Path | None = None,
    ) -> None:
        self.keyname = keyname
        self.opt = opt
        self.settings = settings
        self.engine = engine
        self.logfile = logfile
        self.executed: List[str] = []
        self.skipped: List[str] = []
        self.runlog: Optional[RunLog] = None
        self.status_dir = status_dir(settings, keyname)

    def _prepare(self) -> None:
        if self.opt.fake:
            return
        self.status_dir.mkdir(parents=True, exist_ok=True)
        self.runlog = RunLog(self.keyname, self.settings)

    def run_stage(self, stage_name: str, target: Union[str, ScanContext]) -> bool:
        """Run one stage unless its sentinel says ``finished``.

        Returns:
            ``True`` when the stage was executed, ``False`` when skipped.
        """
        scan = None if isinstance(target, str) else target
        job = job_name(stage_name, scan)
        modality = scan.modality if scan is not None else NULL_FIELD
        scan_date = scan.scan_date if scan is not None else NULL_FIELD  # type: ignore[attr-defined]

        if not self.opt.fake and self.runlog is None:
            self._prepare()
        if not self.opt.fake and get_job_status(self.status_dir, job) == FINISHED:
            log.info("stage.skip", keyname=self.keyname, job=job, reason="finished")
            self.skipped.append(job)
            return False

        if self.opt.fake:
            make_stage(stage_name, target, self.opt, self.settings).execute(
                self.engine, logfile=self.logfile
            )
            self.executed.append(job)
            return True

        program = get_stage(stage_name).program
        set_job_status(self.status_dir, job, RUNNING)
        self.runlog.log_start(program, self.keyname, modality, scan_date)
        try:
            spec = make_stage(stage_name, target, self.opt, self.settings).build_spec()
            self.runlog.log_message(
                program, self.keyname, modality, scan_date, "command", spec.to_string()
            )
            self.engine.run(spec.argv, logfile=self.logfile)
        except Exception:
            set_job_status(self.status_dir, job, FAILED)
            self.runlog.save()
            log.error("stage.failed", keyname=self.keyname, job=job)
            raise
        self.runlog.log_stop(program, self.keyname, modality, scan_date)
        set_job_status(self.status_dir, job, FINISHED)
        self.runlog.save()
        self.executed.append(job)
        log.info("stage.done", keyname=self.keyname, job=job)
        return True

    def run(
        self,
        scans: Mapping[str, Sequence[ScanContext]],
        definition: PipelineDefinition,
    ) -> List[str]:
        """Run the whole definition for this subject; return executed job names."""
        self._prepare()
        if self.runlog is not None:
            self.runlog.log_message(
                PROGNAME, self.keyname, NULL_FIELD, NULL_FIELD,
                "civet_version", self.settings.civet_version,
            )
        for name in definition.subject_first:
            self.run_stage(name, self.keyname)
        for modality, stage_names in definition.modalities.items():
            for scan in scans.get(modality, ()):
                for name in stage_names:
                    self.run_stage(name, scan)
        for name in definition.subject_last:
            self.run_stage(name, self.keyname)
        if self.runlog is not None:
            self.runlog.save()
        return self.executed


def run_subject(
    keyname: str,
    scans: Mapping[str, Sequence[ScanContext]],
    opt: RunOptions,
    settings: Settings,
    engine: ExecutionEngine,
    *,
    definition: Optional[PipelineDefinition] = None,
    logfile: Path | None = None,
) -> List[str]:
    """Run every stage for one subject.

    Args:
        keyname: Subject identifier.
        scans: Scan contexts of this subject keyed by modality
            (``anatomical``, ``pib``, ``fdg``).
        opt: Run options mirrored onto every command.
        settings: Settings snapshot.
        engine: Back-end executing the built commands.
        definition: Stage sequences; the packaged default when ``None``.
        logfile: File receiving the output of every program.

    Returns:
        Job names executed, in order.
    """
    definition = definition or load_pipeline_definition()
    log.info("subject.start", keyname=keyname, modalities={m: len(s) for m, s in scans.items()})
    executed = SubjectRun(keyname, opt, settings, engine, logfile=logfile).run(scans, definition)
    log.info("subject.done", keyname=keyname, executed=len(executed))
    return executed


def group_by_subject(
    scans: Mapping[str, Iterable[ScanContext]],
) -> Dict[str, Dict[str, List[ScanContext]]]:
    """Regroup per-modality scan lists into ``{keyname: {modality: [scans]}}``.

    Subjects keep the order in which they first appear, anatomical lists
    first.
    """
    out: Dict[str, Dict[str, List[ScanContext]]] = {}
    for modality, entries in scans.items():
        for scan in entries:
            out.setdefault(scan.keyname, {}).setdefault(modality, []).append(scan)
    return out


def run_pipeline(
    scans: Mapping[str, Iterable[ScanContext]],
    opt: RunOptions,
    settings: Settings,
    engine: ExecutionEngine,
    *,
    definition: Optional[PipelineDefinition] = None,
    logfile: Path | None = None,
) -> Dict[str, List[str]]:
    """Run every subject found in *scans*, one after another."""
    check_civet_version(settings.civet_version)
    definition = definition or load_pipeline_definition()
    results: Dict[str, List[str]] = {}
    for keyname, by_modality in group_by_subject(scans).items():
        results[keyname] = run_subject(
            keyname, by_modality, opt, settings, engine, definition=definition, logfile=logfile
        )
    return results


__all__ = [
    "PROGNAME",
    "status_dir",
    "job_name",
    "run_settings_file",
    "prepare_run_settings",
    "SubjectRun",
    "run_subject",
    "group_by_subject",
    "run_pipeline",
]
