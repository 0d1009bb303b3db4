"""Custom exceptions used across the Beagle orchestration layer."""

from __future__ import annotations

from pathlib import Path


class BeagleError(RuntimeError):
    """Base class for every unrecoverable Beagle condition."""

    pass


class ConfigError(BeagleError):
    """Raised when a settings or run-configuration file cannot be used.

    Attributes:
        path: File that triggered the error (``None`` when unknown).
        expected: Declared entry count for ``NBR_SETTINGS`` mismatches.
        actual: Number of entries actually read.
    """

    def __init__(
        self,
        path: str | Path | None,
        message: str,
        *,
        expected: int | None = None,
        actual: int | None = None,
    ) -> None:
        self.path = Path(path) if path is not None else None
        self.expected = expected
        self.actual = actual
        text = f"{path}: {message}" if path is not None else message
        if expected is not None or actual is not None:
            text += f" (expected {expected}, read {actual})"
        super().__init__(text)


class MissingSettingError(ConfigError, KeyError):
    """Raised when a setting is requested that was never loaded."""

    def __init__(self, key: str) -> None:
        self.key = key
        ConfigError.__init__(self, None, f"Required setting '{key}' is not defined")

    def __str__(self) -> str:
        return self.args[0]


class FormatError(BeagleError):
    """Raised when a subject-list file is structurally unsound.

    Attributes:
        path: Offending file.
        message: Description without the location prefix.
        line: 1-based line number, when the problem is row-specific.
        expected: Expected number of comma-separated fields.
        actual: Number of fields found on *line*.
    """

    def __init__(
        self,
        path: str | Path | None,
        message: str,
        *,
        line: int | None = None,
        expected: int | None = None,
        actual: int | None = None,
    ) -> None:
        self.path = Path(path) if path is not None else None
        self.line = line
        self.message = message
        self.expected = expected
        self.actual = actual
        where = str(path) if path is not None else "<subject list>"
        if line is not None:
            where += f" line {line}"
        text = f"{where}: {message}"
        if expected is not None or actual is not None:
            text += f" (expected {expected} fields, found {actual})"
        super().__init__(text)


class MissingArtifactError(BeagleError):
    """Raised when a caller halts on an unresolved Civet artifact."""

    def __init__(self, kind: str, path: str | Path) -> None:
        self.kind = kind
        self.path = Path(path)
        super().__init__(f"Required {kind} does not exist: {path}")


class ExternalCommandError(BeagleError):
    """Raised when an external pipeline program exits with a non-zero status."""

    def __init__(self, command: str, returncode: int) -> None:
        self.command = command
        self.returncode = returncode
        super().__init__(f"Command exited with status {returncode}: {command}")


__all__ = [
    "BeagleError",
    "ConfigError",
    "MissingSettingError",
    "FormatError",
    "MissingArtifactError",
    "ExternalCommandError",
]
