"""
beagle package initialisation.

Exposes the version string resolved from the installed distribution
metadata and re-exports :func:`beagle.config.load_settings`::

    from beagle import load_settings
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__: str = version("beagle-pipeline")
except PackageNotFoundError:
    # Source checkout without an installed distribution.
    __version__ = "0.0.0"

from .config import load_settings  # noqa: E402

__all__: list[str] = ["load_settings", "__version__"]
