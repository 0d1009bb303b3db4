import pytest
from click.testing import CliRunner

from beagle.cli import main
from beagle.config.schema import Settings
from beagle.engines.local import LocalEngine

from ._helpers import make_anatomical_inputs, write_settings


@pytest.fixture
def env(tmp_path, settings_entries, monkeypatch):
    """Settings file plus a log directory inside *tmp_path*."""
    monkeypatch.setenv("BEAGLE_LOG_DIR", str(tmp_path / "logs"))
    path = write_settings(tmp_path / "beagle.settings", settings_entries)
    monkeypatch.setenv("BEAGLE_SETTINGS_FILE", str(path))
    return path


def test_missing_settings_file(tmp_path, monkeypatch):
    """Running without any settings file should fail with a hint."""
    monkeypatch.setenv("BEAGLE_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.delenv("BEAGLE_SETTINGS_FILE", raising=False)
    result = CliRunner().invoke(main, ["civet-paths", "s001", "20200101"])
    assert result.exit_code != 0
    assert "No settings file" in result.output


def test_invalid_settings_file(tmp_path, monkeypatch):
    """A settings file with a bad count is rejected before any command runs."""
    monkeypatch.setenv("BEAGLE_LOG_DIR", str(tmp_path / "logs"))
    bad = tmp_path / "bad.settings"
    bad.write_text("NBR_SETTINGS=5\nLORIS_ROOT_DIR=/x\n")
    result = CliRunner().invoke(main, ["--settings", str(bad), "civet-paths", "s001", "2020"])
    assert result.exit_code != 0
    assert "correct number of settings" in result.output


def test_civet_paths_lists_artifacts(env, tmp_path):
    """civet-paths prints every artifact without checking the disk."""
    result = CliRunner().invoke(main, ["civet-paths", "s001", "20200101", "--resampled"])
    assert result.exit_code == 0, result.output
    assert "ADNI_s001_pve_classify.mnc" in result.output
    assert "_native_rms_rsl_tlink_20mm_left.txt" in result.output
    assert "transforms/nonlinear" in result.output
    assert "missing" not in result.output


def test_civet_paths_check_flags_missing(env):
    """civet-paths --check flags absent files and directories."""
    result = CliRunner().invoke(main, ["civet-paths", "s001", "20200101", "--check"])
    assert result.exit_code == 0, result.output
    assert "[missing file]" in result.output
    assert "[missing directory]" in result.output


def test_show_command_subject_stage(env):
    """show-command prints the full initialization command line."""
    result = CliRunner().invoke(main, ["-v", "show-command", "run_initialization", "-k", "s001"])
    assert result.exit_code == 0, result.output
    assert result.output.strip().endswith(f"--eraseLog --settingsFile {env.resolve()}")
    assert "beagle_run_initialization -v --keyname s001" in result.output


def test_show_command_fdg_stage(env):
    """show-command builds the FDG conversion from the native field."""
    result = CliRunner().invoke(
        main,
        [
            "show-command", "fdg_convert_native2mnc", "-k", "s001",
            "--scan-id", "20200101", "--scan-date", "s001-2010", "--native", "dicom;Dicom_PET",
        ],
    )
    assert result.exit_code == 0, result.output
    assert "--dicom --inputTarget=/raw/fdg/s001-2010/Dicom_PET" in result.output


def test_show_command_missing_input(env):
    """show-command reports a missing Civet input instead of printing a command."""
    result = CliRunner().invoke(
        main, ["show-command", "masks_generate_from_labels", "-k", "s001", "--scan-id", "20200101"]
    )
    assert result.exit_code != 0
    assert "does not exist" in result.output


def test_show_command_requires_scan_fields(env):
    """Per-scan stages need their scan options."""
    result = CliRunner().invoke(main, ["show-command", "pib_initialization", "-k", "s001", "--scan-id", "2020"])
    assert result.exit_code != 0
    assert "--scan-date" in result.output


def test_run_fake(env, tmp_path, settings_entries):
    """A fake run prints the commands of the selected subject only."""
    civet = tmp_path / "civet.csv"
    civet.write_text("# keyname,civet scan\ns001,20200101\ns002,20200202\n")
    make_anatomical_inputs(Settings(entries=settings_entries), "s001", "20200101")
    result = CliRunner().invoke(main, ["run", "--civet", str(civet), "-k", "s001", "--fake"])
    assert result.exit_code == 0, result.output
    assert "beagle_thickness_surface_visualization" in result.output
    assert "s002" not in result.output
    assert not (tmp_path / "loris" / "s001" / "status").exists()


def test_run_bad_subject_list(env, tmp_path):
    """A malformed subject list is reported with its line number."""
    civet = tmp_path / "civet.csv"
    civet.write_text("s001\n")
    result = CliRunner().invoke(main, ["run", "--civet", str(civet), "--fake"])
    assert result.exit_code != 0
    assert "line 1" in result.output


def test_show_command_uses_merged_settings_with_run_config(env, tmp_path):
    """With --run-config, commands point at the merged settings file."""
    run_config = tmp_path / "run.config"
    run_config.write_text("NBR_SETTINGS=2\nLORIS_RUN_IDENTIFIER=r02\n")
    result = CliRunner().invoke(
        main, ["-c", str(run_config), "show-command", "run_initialization", "-k", "s001"]
    )
    assert result.exit_code == 0, result.output
    merged = tmp_path / "loris" / "beagle_run-r02.settings"
    assert result.output.strip().endswith(f"--settingsFile {merged}")
    assert not merged.exists()


def test_run_writes_merged_settings(env, tmp_path, monkeypatch):
    """A real run writes the merged settings and hands them to every program."""
    seen = []
    monkeypatch.setattr(LocalEngine, "run", lambda self, argv, *, logfile=None: seen.append(argv) or 0)
    civet = tmp_path / "civet.csv"
    civet.write_text("s001,20200101\n")
    pipeline = tmp_path / "pipeline.yaml"
    pipeline.write_text("version: t\nsubject_first: [run_initialization]\nmodalities:\n  anatomical: []\n")
    run_config = tmp_path / "run.config"
    run_config.write_text("NBR_SETTINGS=2\nLORIS_RUN_IDENTIFIER=r02\n")
    result = CliRunner().invoke(
        main, ["-c", str(run_config), "run", "--civet", str(civet), "--pipeline", str(pipeline)]
    )
    assert result.exit_code == 0, result.output
    merged = tmp_path / "loris" / "beagle_run-r02.settings"
    assert 'LORIS_RUN_IDENTIFIER="r02"' in merged.read_text()
    assert seen[0][-2:] == ["--settingsFile", str(merged)]
