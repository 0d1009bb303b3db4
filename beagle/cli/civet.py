"""Debug helpers: list resolved Civet artifacts and print single commands."""

from __future__ import annotations

import click

from beagle.civet import CivetResolver, CivetScanRef
from beagle.config.subjects import CivetSubjectParser, FdgSubjectParser, PibSubjectParser
from beagle.models import CivetScan, FdgScan, PibScan, RunOptions
from beagle.pipeline import prepare_run_settings
from beagle.stages import STAGES, SubjectStage, build_command, get_stage
from beagle.utils.display import echo_banner, echo_resolved, echo_section
from beagle.utils.errors import BeagleError

_FILES = (
    "classify",
    "gray_matter_pve",
    "white_matter_pve",
    "csf_pve",
    "stx_t1",
    "cerebrum_mask",
    "skull_mask",
    "skull_mask_native",
    "native_t1",
    "native_t1_nuc",
    "linear_transform",
)
_PAIRS = (
    "gray_surfaces",
    "white_surfaces",
    "mid_surfaces",
    "cortical_thickness",
    "mean_curvature",
)
_DIRS = (
    "classify_dir",
    "final_dir",
    "logs_dir",
    "mask_dir",
    "native_dir",
    "surfaces_dir",
    "thickness_dir",
    "transforms_dir",
    "transforms_linear_dir",
    "transforms_nonlinear_dir",
    "vbm_dir",
    "verify_dir",
)


@click.command(name="civet-paths")
@click.argument("keyname")
@click.argument("scan_id")
@click.option("--resampled", is_flag=True, help="Show resampled surfaces and thickness files.")
@click.option("--check", is_flag=True, help="Flag artifacts that do not exist.")
@click.pass_obj
def civet_paths(ctx_obj, keyname: str, scan_id: str, resampled: bool, check: bool) -> None:
    """Print every Civet artifact path for KEYNAME / SCAN_ID."""
    resolver = CivetResolver(ctx_obj["settings"])
    ref = CivetScanRef(keyname=keyname, scan_id=scan_id)

    echo_banner(f"Civet output for {resolver.scan_dirname(ref)}")
    echo_resolved("root", resolver.root(check_existence=check))
    echo_resolved("scan_directory", resolver.scan_directory(ref, fullpath=True, check_existence=check))

    echo_section("files")
    for name in _FILES:
        echo_resolved(name, getattr(resolver, name)(ref, check_existence=check))
    for name in _PAIRS:
        pair = getattr(resolver, name)(ref, resampled=resampled, check_existence=check)
        echo_resolved(f"{name}.left", pair.left)
        echo_resolved(f"{name}.right", pair.right)
    for inverted in (False, True):
        nl = resolver.nonlinear_transform(ref, inverted=inverted, check_existence=check)
        label = "nonlinear_inverted" if inverted else "nonlinear"
        echo_resolved(f"{label}.xfm", nl.xfm)
        echo_resolved(f"{label}.grid", nl.grid)

    echo_section("directories")
    for name in _DIRS:
        echo_resolved(name, getattr(resolver, name)(ref, check_existence=check))


@click.command(name="show-command")
@click.argument("stage", type=click.Choice(sorted(STAGES)))
@click.option("-k", "--keyname", required=True)
@click.option("--scan-id", help="Civet scan identifier (required for per-scan stages).")
@click.option("--scan-date", help="Tracer scan identifier (PiB/FDG stages).")
@click.option("--ecat-filename", help="ECAT file name (PiB stages).")
@click.option("--native", "native", help="FDG '<format>;<location>' field.")
@click.option("--no-check-inputs", is_flag=True, help="Do not check that Civet inputs exist.")
@click.pass_obj
def show_command(
    ctx_obj,
    stage: str,
    keyname: str,
    scan_id: str | None,
    scan_date: str | None,
    ecat_filename: str | None,
    native: str | None,
    no_check_inputs: bool,
) -> None:
    """Print the command line STAGE would run."""
    settings = ctx_obj["settings"]
    opt = RunOptions(
        settings_file=ctx_obj["settings_file"],
        verbose=ctx_obj["verbose"],
        debug=ctx_obj["debug"],
        check_inputs=not no_check_inputs,
    )
    if ctx_obj.get("run_config") is not None:
        opt = prepare_run_settings(settings, opt, write=False)
    cls = get_stage(stage)

    def _need(value: str | None, flag: str) -> str:
        if not value:
            raise click.UsageError(f"{stage} requires {flag}")
        return value

    try:
        if issubclass(cls, SubjectStage):
            target = keyname
        else:
            scan_type = cls.scan_type  # type: ignore[attr-defined]
            sid = _need(scan_id, "--scan-id")
            if scan_type is CivetScan:
                target = CivetSubjectParser(settings).parse_line(f"{keyname},{sid}")
            elif scan_type is PibScan:
                line = f"{keyname},{_need(scan_date, '--scan-date')},{_need(ecat_filename, '--ecat-filename')},{sid}"
                target = PibSubjectParser(settings).parse_line(line)
            elif scan_type is FdgScan:
                line = f"{keyname},{_need(scan_date, '--scan-date')},{_need(native, '--native')},{sid}"
                target = FdgSubjectParser(settings).parse_line(line)
            else:  # pragma: no cover - every registered stage has a concrete scan type
                raise click.UsageError(f"{stage} has no concrete scan type")
        click.echo(build_command(stage, target, opt, settings).to_string())
    except BeagleError as exc:
        raise click.ClickException(str(exc)) from exc


__all__ = ["civet_paths", "show_command"]
