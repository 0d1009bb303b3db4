"""Expose the project-wide Click group for the ``beagle-cli`` script.

The module:

* declares a single Click *group* called :pyfunc:`main`;
* wires the global flags (settings file, run configuration, verbosity);
* sets up logging via :pyfunc:`beagle.utils.logging.setup_logging`;
* loads and validates the settings once, merging the run configuration;
* registers every sub-command lazily from sibling modules.
"""

from __future__ import annotations

import importlib
from pathlib import Path
from typing import Any, Dict

import click

from beagle import __version__
from beagle.config import load_run_config, load_settings
from beagle.utils.errors import BeagleError
from beagle.utils.logging import setup_logging


class LazyGroup(click.Group):
    """Click group that imports sub-commands lazily."""

    def __init__(self, *args, **kwargs):
        self._lazy: dict[str, str] = {}
        super().__init__(*args, **kwargs)

    def set_lazy_command(self, name: str, target: str) -> None:
        """Register *name* to be imported from ``module:attr`` on first use."""
        self._lazy[name] = target

    def list_commands(self, ctx):
        return sorted({*super().list_commands(ctx), *self._lazy})

    def get_command(self, ctx, cmd_name):  # noqa: D401 - Click signature
        cmd = super().get_command(ctx, cmd_name)
        if cmd is not None:
            return cmd
        target = self._lazy.get(cmd_name)
        if not target:
            return None
        module_name, attr = target.split(":", 1)
        cmd = getattr(importlib.import_module(module_name), attr)
        self.add_command(cmd, name=cmd_name)
        return cmd


# ─────────────────────────────────────────────────────────────────────────────
# Context settings shared by the entire Click hierarchy
# ─────────────────────────────────────────────────────────────────────────────
_CTX: Dict[str, Any] = dict(
    help_option_names=["-h", "--help"],
    show_default=True,
    max_content_width=120,
)


@click.group(
    cls=LazyGroup,
    context_settings=_CTX,
    help="""\b
beagle-cli – PiB/FDG/anatomical pipeline driver on top of Civet output.

""",
)
@click.version_option(__version__)
@click.option(
    "-s",
    "--settings",
    "settings_file",
    envvar="BEAGLE_SETTINGS_FILE",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Beagle settings file (defaults to $BEAGLE_SETTINGS_FILE).",
)
@click.option(
    "-c",
    "--run-config",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Run configuration merged over the settings.",
)
@click.option("-v", "--verbose", is_flag=True, help="INFO-level console output; -v on every command.")
@click.option("--debug", is_flag=True, help="DEBUG console output; -d on every command.")
@click.option(
    "--save-logfile",
    type=click.Path(dir_okay=False, writable=True, path_type=Path),
    help="Mirror console output into this plain-text file.",
)
@click.pass_context
def main(  # noqa: D401 – Click requires the callback to be named “main”.
    ctx: click.Context,
    settings_file: Path | None,
    run_config: Path | None,
    verbose: bool,
    debug: bool,
    save_logfile: Path | None,
) -> None:
    """Root command executed by *beagle-cli*.

    Raises:
        click.ClickException: When no settings file is given or it fails
            validation.
    """
    setup_logging(verbose=verbose, debug=debug, extra_text_log=save_logfile)

    if settings_file is None:
        raise click.ClickException(
            "No settings file given. Use --settings or set BEAGLE_SETTINGS_FILE."
        )
    try:
        settings = load_settings(settings_file)
        if run_config is not None:
            settings = settings.merged_with(load_run_config(run_config))
    except BeagleError as exc:
        raise click.ClickException(str(exc)) from exc

    ctx.obj = {
        "settings": settings,
        "settings_file": settings_file.expanduser().resolve(),
        "verbose": verbose,
        "debug": debug,
        "run_config": run_config,
    }


main.set_lazy_command("run", "beagle.cli.run:cli")
main.set_lazy_command("civet-paths", "beagle.cli.civet:civet_paths")
main.set_lazy_command("show-command", "beagle.cli.civet:show_command")

cli = main
__all__: list[str] = ["main"]
