"""
Settings and pipeline-definition loaders.

Three on-disk formats are handled here:

1. The permanent **settings file** and the per-run **run configuration**,
   both plain ``KEY=VALUE`` text whose reserved ``NBR_SETTINGS`` entry must
   equal the number of entries read. A merged snapshot is written back in
   the same grammar when a run configuration is in effect, so the external
   programs see the overrides through ``--settingsFile``.
2. The **aggregated settings** JSON document, written next to the merged
   settings file at run start for the R stages.
3. The **pipeline definition** YAML listing stage sequences per modality.

Everything returned from this module is already validated; the rest of
*beagle* treats configuration as immutable objects.
"""

from __future__ import annotations

import json
from importlib.resources import as_file, files
from pathlib import Path
from typing import Dict, Optional

import structlog
import yaml
from pydantic import ValidationError

from beagle.utils.errors import ConfigError

from .schema import COUNT_KEY, PipelineDefinition, Settings

log = structlog.get_logger()

_DEFAULT_PIPELINE = files("beagle.resources") / "default_pipeline.yaml"


# --------------------------------------------------------------------------- #
# Helper functions                                                            #
# --------------------------------------------------------------------------- #
def _read_text(path: Path, kind: str) -> str:
    """Return the contents of *path* or raise :class:`ConfigError`."""
    if not path.is_file():
        raise ConfigError(path, f"{kind} not found or not a regular file")
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(path, f"{kind} is not readable: {exc}") from exc


def _parse_key_value_lines(path: Path, text: str) -> Dict[str, str]:
    """Parse ``KEY=VALUE`` lines into a dict.

    Blank lines and lines starting with ``#`` are skipped. Only the first
    ``=`` separates key from value; surrounding double quotes are removed
    from the value. A repeated key overwrites the earlier entry.
    """
    entries: Dict[str, str] = {}
    for lineno, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        key = key.strip()
        if not sep or not key:
            raise ConfigError(path, f"line {lineno} is not a KEY=VALUE entry: {raw!r}")
        entries[key] = value.strip().strip('"')
        log.debug("settings.entry", key=key, value=entries[key])
    return entries


def _check_declared_count(path: Path, entries: Dict[str, str]) -> None:
    """Compare ``NBR_SETTINGS`` against the number of entries read."""
    declared = entries.get(COUNT_KEY)
    if declared is None:
        raise ConfigError(path, f"{COUNT_KEY} is not defined", actual=len(entries))
    try:
        expected = int(declared)
    except ValueError as exc:
        raise ConfigError(path, f"{COUNT_KEY} is not an integer: {declared!r}") from exc
    if expected != len(entries):
        raise ConfigError(
            path,
            "does not have the correct number of settings",
            expected=expected,
            actual=len(entries),
        )


def _read_counted_file(path: str | Path, kind: str) -> Dict[str, str]:
    path = Path(path).expanduser()
    entries = _parse_key_value_lines(path, _read_text(path, kind))
    _check_declared_count(path, entries)
    return entries


def _validated(entries: Dict[str, str], source: Path) -> Settings:
    try:
        return Settings(entries=entries, source=source)
    except ValidationError as exc:
        raise ConfigError(source, f"Invalid settings – {exc}") from exc


# --------------------------------------------------------------------------- #
# Public API                                                                  #
# --------------------------------------------------------------------------- #
def load_settings(path: str | Path) -> Settings:
    """Load and validate the permanent settings file.

    Args:
        path: Location of the ``KEY=VALUE`` settings file.

    Returns:
        Immutable :class:`Settings` snapshot.

    Raises:
        ConfigError: If the file is missing, malformed, its entry count
            disagrees with ``NBR_SETTINGS``, or a required key is absent.
    """
    path = Path(path).expanduser()
    entries = _read_counted_file(path, "Settings file")
    settings = _validated(entries, path)
    log.info("settings.loaded", path=str(path), count=len(settings))
    return settings


def load_run_config(path: str | Path) -> Dict[str, str]:
    """Load a run configuration file.

    Run configuration values change from run to run (run identifier,
    subject lists) and are merged over the permanent settings with
    :meth:`Settings.merged_with`. The same grammar and ``NBR_SETTINGS`` rule
    apply.
    """
    entries = _read_counted_file(path, "Run configuration file")
    log.info("run_config.loaded", path=str(path), count=len(entries))
    return entries


def write_settings_file(settings: Settings, path: str | Path) -> Path:
    """Write *settings* as a ``KEY=VALUE`` file that :func:`load_settings` accepts.

    ``NBR_SETTINGS`` is recomputed so a merged snapshot stays loadable by the
    external programs that receive it through ``--settingsFile``.
    """
    path = Path(path).expanduser()
    body = {k: v for k, v in settings.entries.items() if k != COUNT_KEY}
    lines = [f"{COUNT_KEY}={len(body) + 1}"]
    lines += [f'{key}="{value}"' for key, value in body.items()]
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    log.info("settings.written", path=str(path), count=len(body) + 1)
    return path


def dump_aggregated_settings(settings: Settings, path: str | Path) -> Path:
    """Write *settings* as a JSON object and return the destination path."""
    path = Path(path).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(settings.as_dict(), indent=2, sort_keys=True) + "\n")
    log.info("settings.aggregated", path=str(path))
    return path


def load_aggregated_settings(path: str | Path) -> Settings:
    """Read settings previously written by :func:`dump_aggregated_settings`.

    The aggregated document was validated when it was produced, so the
    ``NBR_SETTINGS`` count is not re-checked here; required keys still are.
    """
    path = Path(path).expanduser()
    text = _read_text(path, "Aggregated settings file")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConfigError(path, f"is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(path, "must contain a JSON object")
    return _validated({str(k): str(v) for k, v in data.items()}, path)


def load_pipeline_definition(path: Optional[str | Path] = None) -> PipelineDefinition:
    """Return the stage sequences for every modality.

    Args:
        path: Optional project-local YAML. ``None`` selects the packaged
            default.

    Raises:
        ConfigError: If the YAML cannot be read or fails validation.
    """
    if path is not None:
        source = Path(path).expanduser()
        text = _read_text(source, "Pipeline definition")
    else:
        with as_file(_DEFAULT_PIPELINE) as p:
            source = Path(p)
            text = source.read_text(encoding="utf-8")
    try:
        data = yaml.safe_load(text) or {}
        return PipelineDefinition(**data)
    except (yaml.YAMLError, ValidationError, TypeError) as exc:
        raise ConfigError(source, f"Invalid pipeline definition – {exc}") from exc


__all__ = [
    "load_settings",
    "load_run_config",
    "write_settings_file",
    "dump_aggregated_settings",
    "load_aggregated_settings",
    "load_pipeline_definition",
]
