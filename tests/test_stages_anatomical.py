from pathlib import Path

import pytest

from beagle.config.schema import Settings
from beagle.models import CivetScan, RunOptions
from beagle.stages import STAGES, build_command, make_stage
from beagle.stages.anatomical import MasksGenerateFromLabels
from beagle.utils.errors import BeagleError, MissingArtifactError

from ._helpers import make_anatomical_inputs

SCAN = CivetScan(keyname="s001", civet_scan_id="20200101", civet_scan_directory_name="s001")


@pytest.fixture
def ready(settings):
    make_anatomical_inputs(settings, "s001", "20200101")
    return settings


def _value(argv, flag):
    return argv[argv.index(flag) + 1]


def test_registry_holds_every_program():
    """The registry holds all 29 stages, each with its own program."""
    assert len(STAGES) == 29
    assert STAGES["labels_fit_aal"].program == "beagle_labels_fit_AAL"
    assert len({cls.program for cls in STAGES.values()}) == 29


def test_identity_only_stage(ready, opt):
    """Identity-only stages pass keyname, scan date and settings file."""
    spec = build_command("anatomical_initialization", SCAN, opt, ready)
    assert spec.argv == [
        "beagle_anatomical_initialization",
        "--keyname", "s001",
        "--scanDate", "20200101",
        "--settingsFile", str(opt.settings_file),
    ]


def test_verbose_and_debug_switches(ready, tmp_path):
    """-v and -d follow the program name."""
    opt = RunOptions(settings_file=tmp_path / "s", verbose=True, debug=True)
    spec = build_command("labels_fit_aal", SCAN, opt, ready)
    assert spec.argv[:3] == ["beagle_labels_fit_AAL", "-v", "-d"]
    assert spec.to_string().startswith("beagle_labels_fit_AAL -v -d --keyname s001")


def test_masks_generate_from_labels(ready, opt):
    """Mask generation gets the AAL labels and classify volume."""
    argv = build_command("masks_generate_from_labels", SCAN, opt, ready).argv
    loris = ready.loris_root_dir
    assert _value(argv, "--labelledAALvolume") == str(
        loris / "s001" / "AAL-20200101" / "s001_t1_final_v2Labels.mnc"
    )
    assert _value(argv, "--classifyVolume") == str(
        ready.civet_root_dir / "s001" / "classify" / "ADNI_s001_pve_classify.mnc"
    )
    assert argv[-2:] == ["--settingsFile", str(opt.settings_file)]


def test_vbm_zscore_volumes_are_positional(ready, opt):
    """VBM z-score volumes come last, GM before WM."""
    argv = build_command("vbm_quantification", SCAN, opt, ready).argv
    vbm = ready.loris_root_dir / "s001" / "VBM-20200101"
    assert argv[-2:] == [str(vbm / "s001_GM_zScores.mnc"), str(vbm / "s001_WM_zScores.mnc")]
    assert argv[0] == "beagle_vbm_quantification.Rscript"


def test_vbm_visualization_underlay(ready, opt):
    """VBM visualization passes the stereotaxic T1 as underlay."""
    argv = build_command("vbm_volumetric_visualization", SCAN, opt, ready).argv
    assert _value(argv, "--t1UnderlayVol").endswith("final/ADNI_s001_t1_final.mnc")
    assert argv[-1].endswith("s001_WM_zScores.mnc")


def test_thickness_zscores_use_resampled_vectors(ready, opt):
    """Thickness z-scores read the resampled thickness vectors."""
    argv = build_command("thickness_compute_zscores", SCAN, opt, ready).argv
    assert _value(argv, "--lhThicknessVectorFile").endswith("ADNI_s001_native_rms_rsl_tlink_20mm_left.txt")
    assert _value(argv, "--rhThicknessVectorFile").endswith("ADNI_s001_native_rms_rsl_tlink_20mm_right.txt")


def test_extract_surface_labels(ready, opt):
    """Surface label extraction reads the resampled mid surfaces."""
    argv = build_command("thickness_extract_surface_labels", SCAN, opt, ready).argv
    assert _value(argv, "--surfaceLh").endswith("ADNI_s001_mid_surface_rsl_left_81920.obj")
    assert _value(argv, "--aalLblVolume").endswith("AAL-20200101/s001_t1_final_v2Labels_gmMask.mnc")


def test_roi_statistics_inputs(ready, opt):
    """ROI statistics get the z-score vectors and labels."""
    argv = build_command("thickness_compute_roi_statistics", SCAN, opt, ready).argv
    cta = ready.loris_root_dir / "s001" / "THICKNESS-20200101"
    assert _value(argv, "--thicknessVectorFile") == str(cta / "s001_thickness_lhrh.txt")
    assert _value(argv, "--zscoresVectorFile") == str(cta / "s001_thickness_zscores.txt")
    assert _value(argv, "--surfaceLabelsVectorFile") == str(cta / "s001_extracted_aal_surface_labels.txt")


def test_thickness_surface_visualization(ready, opt):
    """Thickness visualization uses the ADNI average surfaces."""
    argv = build_command("thickness_surface_visualization", SCAN, opt, ready).argv
    assert _value(argv, "--colorMap") == "hot"
    assert _value(argv, "--avgLhSurface") == str(Path("/models/adni/lh_gray.obj"))
    assert _value(argv, "--avgRhSurface") == str(Path("/models/adni/rh_gray.obj"))
    assert _value(argv, "--indivRhSurface").endswith("ADNI_s001_gray_surface_rsl_right_81920.obj")


def test_build_is_deterministic(ready, opt):
    """Building the same stage twice gives the same command."""
    for name in ("masks_generate_from_labels", "thickness_surface_visualization"):
        assert build_command(name, SCAN, opt, ready) == build_command(name, SCAN, opt, ready)


def test_missing_civet_input_fails_fast(settings, opt):
    """A missing Civet input stops the build."""
    with pytest.raises(MissingArtifactError) as exc:
        MasksGenerateFromLabels(SCAN, opt, settings).build_spec()
    assert exc.value.path.name == "ADNI_s001_pve_classify.mnc"


def test_unchecked_inputs_build_without_files(settings, tmp_path):
    """With input checks off, commands build without Civet files."""
    opt = RunOptions(settings_file=tmp_path / "s", check_inputs=False)
    spec = build_command("thickness_compute_zscores", SCAN, opt, settings)
    assert "--lhThicknessVectorFile" in spec.argv


def test_missing_stage_setting_is_reported(settings_entries, opt):
    """A stage setting absent from the settings is reported by key."""
    entries = {k: v for k, v in settings_entries.items() if k != "AAL_LABELS_VERSION"}
    settings = Settings(entries=entries)
    make_anatomical_inputs(settings, "s001", "20200101")
    with pytest.raises(BeagleError, match="AAL_LABELS_VERSION"):
        build_command("masks_generate_from_labels", SCAN, opt, settings)


def test_stage_level_mismatch(settings, opt):
    """Level mismatches and unknown stage names raise BeagleError."""
    with pytest.raises(BeagleError, match="per scan"):
        make_stage("labels_fit_aal", "s001", opt, settings)
    with pytest.raises(BeagleError, match="keyname"):
        make_stage("run_initialization", SCAN, opt, settings)
    with pytest.raises(BeagleError, match="Unknown stage"):
        make_stage("no_such_stage", SCAN, opt, settings)


def test_subject_stages(settings, opt):
    """Initialization erases the log; the summary report does not."""
    init = build_command("run_initialization", "s001", opt, settings)
    assert init.argv == [
        "beagle_run_initialization", "--keyname", "s001", "--eraseLog",
        "--settingsFile", str(opt.settings_file),
    ]
    report = build_command("make_summary_report", "s001", opt, settings)
    assert report.to_string() == f"beagle_make_summary_report --keyname s001 --settingsFile {opt.settings_file}"
