"""``beagle-cli run`` – execute the pipeline for every listed subject."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Tuple

import click
import structlog

from beagle.config import load_pipeline_definition
from beagle.config.subjects import (
    CivetSubjectParser,
    FdgSubjectParser,
    PibSubjectParser,
    load_keynames,
    load_subject_list,
    select_by_keyname,
)
from beagle.engines import ENGINES, DryRunEngine
from beagle.models import RunOptions, ScanContext
from beagle.pipeline import group_by_subject, prepare_run_settings, run_subject
from beagle.utils.display import echo_banner, echo_section, echo_subject, echo_success
from beagle.utils.errors import BeagleError

log = structlog.get_logger()

_CSV = click.Path(exists=True, dir_okay=False, path_type=Path)


@click.command(name="run")
@click.option("--civet", "civet_list", type=_CSV, required=True, help="Civet subject list (keyname,civet_scan_id).")
@click.option("--pib", "pib_list", type=_CSV, help="PiB subject list.")
@click.option("--fdg", "fdg_list", type=_CSV, help="FDG subject list.")
@click.option(
    "-k",
    "--keyname",
    "keynames",
    multiple=True,
    help="Only process these subjects (repeatable).",
)
@click.option("--keyname-list", type=_CSV, help="One-column .csv of subjects to process.")
@click.option("--fake", is_flag=True, help="Log the commands without executing them.")
@click.option(
    "--engine",
    "engine_name",
    type=click.Choice(sorted(ENGINES)),
    default="local",
    help="Execution back-end.",
)
@click.option("--no-check-inputs", is_flag=True, help="Skip Civet existence checks while building commands.")
@click.option(
    "--pipeline",
    "pipeline_yaml",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Stage definition YAML overriding the packaged default.",
)
@click.option(
    "--command-log",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Append the output of every program to this file.",
)
@click.pass_obj
def cli(
    ctx_obj,
    civet_list: Path,
    pib_list: Path | None,
    fdg_list: Path | None,
    keynames: Tuple[str, ...],
    keyname_list: Path | None,
    fake: bool,
    engine_name: str,
    no_check_inputs: bool,
    pipeline_yaml: Path | None,
    command_log: Path | None,
) -> None:
    """Run every stage for each subject of the Civet list."""
    settings = ctx_obj["settings"]
    opt = RunOptions(
        settings_file=ctx_obj["settings_file"],
        verbose=ctx_obj["verbose"],
        debug=ctx_obj["debug"],
        fake=fake,
        check_inputs=not no_check_inputs,
    )

    try:
        if ctx_obj.get("run_config") is not None:
            opt = prepare_run_settings(settings, opt, write=not fake)
        definition = load_pipeline_definition(pipeline_yaml)
        scans: Dict[str, List[ScanContext]] = {
            "anatomical": load_subject_list(civet_list, CivetSubjectParser(settings)),
        }
        if pib_list:
            scans["pib"] = load_subject_list(pib_list, PibSubjectParser(settings))
        if fdg_list:
            scans["fdg"] = load_subject_list(fdg_list, FdgSubjectParser(settings))

        wanted = list(keynames)
        if keyname_list:
            wanted += load_keynames(keyname_list)
        if wanted:
            scans = {m: select_by_keyname(entries, wanted) for m, entries in scans.items()}

        engine = DryRunEngine() if fake else ENGINES[engine_name]()
        by_subject = group_by_subject(scans)
        echo_banner(f"Running {len(by_subject)} subject(s)" + (" [fake]" if fake else ""))
        for keyname, by_modality in by_subject.items():
            echo_section(keyname)
            for modality, entries in by_modality.items():
                for scan in entries:
                    echo_subject(f"{modality}", scan.scan_date)  # type: ignore[attr-defined]
            run_subject(
                keyname,
                by_modality,
                opt,
                settings,
                engine,
                definition=definition,
                logfile=command_log,
            )
            echo_success(f"{keyname} done")
    except BeagleError as exc:
        raise click.ClickException(str(exc)) from exc

    if fake:
        for argv in engine.commands:
            click.echo(" ".join(argv))


__all__ = ["cli"]
