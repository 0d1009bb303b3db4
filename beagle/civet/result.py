"""
Result type returned by every Civet path accessor.

A lookup either produced a path (:class:`Found`) or did not
(:class:`NotFound`, carrying what was looked for and where). Nothing in the
resolver raises for a missing artifact; the caller decides when to halt,
typically by calling :meth:`unwrap`, which raises
:class:`~beagle.utils.errors.MissingArtifactError`.

Both variants are falsy/truthy to match their outcome, so ``if not rx``
guards keep working, but callers are encouraged to branch with
``isinstance`` or to call :meth:`unwrap`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal, NamedTuple, Union

from pydantic import BaseModel

from beagle.utils.errors import MissingArtifactError

ArtifactKind = Literal["file", "directory"]


class Found(BaseModel, frozen=True):
    """Successful resolution."""

    path: Path

    def __bool__(self) -> bool:
        return True

    def unwrap(self) -> Path:
        return self.path


class NotFound(BaseModel, frozen=True):
    """Existence check failed.

    Attributes:
        kind: ``"file"`` or ``"directory"``.
        path: Full path that was checked.
    """

    kind: ArtifactKind
    path: Path

    def __bool__(self) -> bool:
        return False

    def unwrap(self) -> Path:
        raise MissingArtifactError(self.kind, self.path)


ResolvedPath = Union[Found, NotFound]


class HemispherePair(NamedTuple):
    """Left/right results of a surface, thickness or curvature lookup."""

    left: ResolvedPath
    right: ResolvedPath

    def unwrap(self) -> tuple[Path, Path]:
        return self.left.unwrap(), self.right.unwrap()


class NonlinearTransform(NamedTuple):
    """Non-linear transform file and its deformation grid volume."""

    xfm: ResolvedPath
    grid: ResolvedPath

    def unwrap(self) -> tuple[Path, Path]:
        return self.xfm.unwrap(), self.grid.unwrap()


__all__ = [
    "ArtifactKind",
    "Found",
    "NotFound",
    "ResolvedPath",
    "HemispherePair",
    "NonlinearTransform",
]
