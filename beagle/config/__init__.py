"""Public configuration API.

Only the loaders and the validated models are re-exported; the parsing
helpers stay private to :mod:`beagle.config.loader`.
"""

from .loader import (
    dump_aggregated_settings,
    load_aggregated_settings,
    load_pipeline_definition,
    load_run_config,
    load_settings,
    write_settings_file,
)
from .schema import PipelineDefinition, Settings

__all__ = [
    "Settings",
    "PipelineDefinition",
    "load_settings",
    "load_run_config",
    "dump_aggregated_settings",
    "load_aggregated_settings",
    "load_pipeline_definition",
    "write_settings_file",
]
