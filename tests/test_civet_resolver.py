from pathlib import Path

import pytest
from structlog.testing import capture_logs

from beagle.civet import CivetResolver, CivetScanRef, Found, NotFound
from beagle.config.schema import Settings
from beagle.models import CivetScan
from beagle.utils.errors import MissingArtifactError

from ._helpers import civet_file

BASE = {
    "LORIS_ROOT_DIR": "/data/loris",
    "CIVET_ROOT_DIR": "/data/civet",
    "CIVET_PREFIX": "sub",
    "CIVET_VERSION": "1.1.11",
    "CIVET_SCANID_APPEND_SCANDATE_TO_KEYNAME": "OFF",
    "NBR_SETTINGS": "6",
}
REF = CivetScanRef(keyname="s001", scan_id="20200101")


def _resolver(**overrides) -> CivetResolver:
    return CivetResolver(Settings(entries={**BASE, **overrides}))


def test_classify_unchecked_path():
    """Unchecked lookups return the composed classify path."""
    rx = _resolver().classify(REF, check_existence=False)
    assert rx == Found(path=Path("/data/civet/s001/classify/sub_s001_pve_classify.mnc"))


def test_classify_legacy_version():
    """Civet 1.1.9 output resolves to the legacy classify name."""
    rx = _resolver(CIVET_VERSION="1.1.9").classify(REF, check_existence=False)
    assert rx.path.name.endswith("_classify.mnc")
    assert "_pve" not in rx.path.name


def test_thickness_resampled_pair():
    """Resampled thickness resolves to the rsl text files per hemisphere."""
    pair = _resolver().cortical_thickness(REF, resampled=True, check_existence=False)
    left, right = pair.unwrap()
    assert "_rsl_" in left.name and "_rsl_" in right.name
    assert left.name.endswith("_tlink_20mm_left.txt")
    assert right.name.endswith("_tlink_20mm_right.txt")


def test_native_thickness_pair():
    """Native thickness files carry no rsl marker."""
    left, _ = _resolver().cortical_thickness(REF, resampled=False, check_existence=False).unwrap()
    assert left.name == "sub_s001_native_rms_tlink_20mm_left.txt"


def test_appended_scan_directory():
    """Appended scan directories are used in every path."""
    resolver = _resolver(CIVET_SCANID_APPEND_SCANDATE_TO_KEYNAME="ON")
    rx = resolver.stx_t1(REF, check_existence=False)
    assert rx.path == Path("/data/civet/s001-20200101/final/sub_s001-20200101_t1_final.mnc")
    assert resolver.scan_directory(REF).path == Path("s001-20200101")


@pytest.mark.parametrize(
    "accessor, subdir, suffix",
    [
        ("gray_matter_pve", "classify", "_pve_gm.mnc"),
        ("white_matter_pve", "classify", "_pve_wm.mnc"),
        ("csf_pve", "classify", "_pve_csf.mnc"),
        ("cerebrum_mask", "mask", "_brain_mask.mnc"),
        ("skull_mask", "mask", "_skull_mask.mnc"),
        ("skull_mask_native", "mask", "_skull_mask_native.mnc"),
        ("native_t1", "native", "_t1.mnc"),
        ("native_t1_nuc", "native", "_t1_nuc.mnc"),
        ("linear_transform", "transforms/linear", "_t1_tal.xfm"),
    ],
)
def test_single_file_accessors(accessor, subdir, suffix):
    """Each single-file accessor lands in its Civet sub-directory."""
    rx = getattr(_resolver(), accessor)(REF, check_existence=False)
    assert rx.path == Path("/data/civet/s001") / subdir / f"sub_s001{suffix}"


def test_surfaces_and_curvature_names():
    """Surface and curvature pairs use the expected hemisphere names."""
    r = _resolver()
    assert r.gray_surfaces(REF, resampled=False, check_existence=False).left.path.name == (
        "sub_s001_gray_surface_left_81920.obj"
    )
    assert r.white_surfaces(REF, resampled=True, check_existence=False).right.path.name == (
        "sub_s001_white_surface_rsl_right_calibrated_81920.obj"
    )
    assert r.mid_surfaces(REF, resampled=True, check_existence=False).left.path.name == (
        "sub_s001_mid_surface_rsl_left_81920.obj"
    )
    assert r.mean_curvature(REF, resampled=True, check_existence=False).right.path.name == (
        "sub_s001_native_mc_rsl_20mm_right.txt"
    )


def test_nonlinear_transform_variants():
    """The nonlinear transform has plain and inverted forms, each with a grid."""
    r = _resolver()
    xfm, grid = r.nonlinear_transform(REF, check_existence=False).unwrap()
    assert xfm.name == "sub_s001_nlfit_It.xfm"
    assert grid.name == "sub_s001_nlfit_It_grid_0.mnc"
    inv = r.nonlinear_transform(REF, inverted=True, check_existence=False)
    assert inv.xfm.path.name == "sub_s001_nlfit_invert.xfm"
    assert inv.grid.path.parent == Path("/data/civet/s001/transforms/nonlinear")


def test_directory_accessors():
    """Directory accessors map onto the Civet layout."""
    r = _resolver()
    assert r.vbm_dir(REF, check_existence=False).path == Path("/data/civet/s001/VBM")
    assert r.transforms_linear_dir(REF, check_existence=False).path == Path(
        "/data/civet/s001/transforms/linear"
    )
    assert r.verify_dir(REF, check_existence=False).path.name == "verify"


def test_missing_file_is_not_found(tmp_path):
    """A missing file yields a falsy NotFound and a civet.missing event."""
    r = _resolver(CIVET_ROOT_DIR=str(tmp_path))
    with capture_logs() as logs:
        rx = r.stx_t1(REF)
    assert isinstance(rx, NotFound)
    assert not rx
    assert rx.kind == "file"
    assert rx.path == tmp_path / "s001" / "final" / "sub_s001_t1_final.mnc"
    assert any(e["event"] == "civet.missing" and e["path"] == str(rx.path) for e in logs)
    with pytest.raises(MissingArtifactError, match="does not exist"):
        rx.unwrap()


def test_existing_file_found_and_bare_name(tmp_path, settings_entries):
    """An existing file resolves to its full path or its bare name."""
    settings = Settings(entries=dict(settings_entries, CIVET_ROOT_DIR=str(tmp_path)))
    made = civet_file(settings, "s001", "20200101", "final", "_t1_final.mnc")
    r = CivetResolver(settings)
    assert r.stx_t1(REF).unwrap() == made
    assert r.stx_t1(REF, fullpath=False).unwrap() == Path("ADNI_s001_t1_final.mnc")


def test_directory_checks_use_is_dir(tmp_path):
    """Directory lookups only succeed once the directory exists."""
    r = _resolver(CIVET_ROOT_DIR=str(tmp_path))
    assert isinstance(r.final_dir(REF), NotFound)
    (tmp_path / "s001" / "final").mkdir(parents=True)
    assert isinstance(r.final_dir(REF), Found)
    assert isinstance(r.root(), Found)
    assert isinstance(r.scan_directory(REF, fullpath=True, check_existence=True), Found)


def test_directory_with_file_name_is_not_found(tmp_path):
    """A directory sitting where a Civet file belongs does not count as the file."""
    r = _resolver(CIVET_ROOT_DIR=str(tmp_path))
    (tmp_path / "s001" / "final" / "sub_s001_t1_final.mnc").mkdir(parents=True)
    rx = r.stx_t1(REF)
    assert isinstance(rx, NotFound)
    assert rx.kind == "file"


def test_pair_reports_missing_side(tmp_path, settings_entries):
    """A pair with one missing hemisphere fails to unwrap."""
    settings = Settings(entries=dict(settings_entries, CIVET_ROOT_DIR=str(tmp_path)))
    civet_file(settings, "s001", "20200101", "thickness", "_native_rms_rsl_tlink_20mm_left.txt")
    pair = CivetResolver(settings).cortical_thickness(REF, resampled=True)
    assert isinstance(pair.left, Found)
    assert isinstance(pair.right, NotFound)
    with pytest.raises(MissingArtifactError):
        pair.unwrap()


def test_ref_from_scan_context():
    """A scan reference can be built from a parsed scan."""
    scan = CivetScan(keyname="s001", civet_scan_id="20200101", civet_scan_directory_name="s001")
    assert CivetScanRef.for_scan(scan) == REF


def test_resolution_is_pure():
    """Repeated lookups return equal results."""
    r = _resolver()
    first = r.classify(REF, check_existence=False)
    assert r.classify(REF, check_existence=False) == first
