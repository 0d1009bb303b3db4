"""Stages run once per subject, before and after every scan."""

from __future__ import annotations

from .base import CommandSpec, SubjectStage


class RunInitialization(SubjectStage):
    """Create the subject's Loris directory and start a fresh run log."""

    name = "run_initialization"
    program = "beagle_run_initialization"

    def build_spec(self) -> CommandSpec:
        return self._spec("--keyname", self.keyname, "--eraseLog", *self.settings_file_args)


class MakeSummaryReport(SubjectStage):
    name = "make_summary_report"
    program = "beagle_make_summary_report"

    def build_spec(self) -> CommandSpec:
        return self._spec("--keyname", self.keyname, *self.settings_file_args)


__all__ = ["RunInitialization", "MakeSummaryReport"]
