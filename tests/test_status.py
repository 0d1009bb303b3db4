import pytest

from beagle.utils.errors import ConfigError
from beagle.utils.status import FINISHED, RUNNING, get_job_status, set_job_status


def test_no_status_is_empty(tmp_path):
    """A job without a sentinel has an empty status."""
    assert get_job_status(tmp_path, "labels_fit_aal-20200101") == ""


def test_set_replaces_previous_sentinel(tmp_path):
    """Setting a status replaces the previous sentinel."""
    job = "labels_fit_aal-20200101"
    set_job_status(tmp_path, job, RUNNING)
    set_job_status(tmp_path, job, FINISHED)
    assert get_job_status(tmp_path, job) == FINISHED
    assert sorted(p.name for p in tmp_path.iterdir()) == [f"{job}.finished"]


def test_jobs_with_shared_prefix_are_independent(tmp_path):
    """Jobs sharing a name prefix keep separate sentinels."""
    set_job_status(tmp_path, "pib_preprocess", FINISHED)
    set_job_status(tmp_path, "pib_preprocess_verification", RUNNING)
    assert get_job_status(tmp_path, "pib_preprocess") == FINISHED
    assert get_job_status(tmp_path, "pib_preprocess_verification") == RUNNING


def test_missing_directory(tmp_path):
    """A missing status directory raises ConfigError."""
    with pytest.raises(ConfigError, match="status directory"):
        set_job_status(tmp_path / "absent", "job", RUNNING)
    with pytest.raises(ConfigError):
        get_job_status(tmp_path / "absent", "job")


def test_invalid_status_value(tmp_path):
    """Status values with a dot or slash are rejected."""
    with pytest.raises(ValueError):
        set_job_status(tmp_path, "job", "half.done")
