"""Pytest configuration for beagle tests."""

from __future__ import annotations

from pathlib import Path
from typing import Dict

import pytest

from beagle.config.schema import Settings
from beagle.models import RunOptions


@pytest.fixture
def settings_entries(tmp_path: Path) -> Dict[str, str]:
    """Complete settings for a run rooted in *tmp_path*."""
    entries = {
        "LORIS_ROOT_DIR": str(tmp_path / "loris"),
        "CIVET_ROOT_DIR": str(tmp_path / "civet"),
        "CIVET_PREFIX": "ADNI",
        "CIVET_VERSION": "1.1.11",
        "CIVET_SCANID_APPEND_SCANDATE_TO_KEYNAME": "OFF",
        "AAL_LABELS_VERSION": "v2",
        "VBM_GM_ZSCORE_VOLUME_SUFFIX": "_GM_zScores",
        "VBM_WM_ZSCORE_VOLUME_SUFFIX": "_WM_zScores",
        "ADNI_SURFACES_DIR": "/models/adni",
        "ADNI_LH_GM_SURFACE": "lh_gray.obj",
        "ADNI_RH_GM_SURFACE": "rh_gray.obj",
        "PIB_ECAT_DIR": "/raw/pib",
        "FDG_NATIVE_DIR": "/raw/fdg",
        "ELDERLY_MODEL_DIR": "/models/elderly",
        "ELDERLY_MODEL_PMAP_MEAN_CSF_VOLUME": "pmap_csf.mnc",
        "LORIS_LOGFILE_PREFIX": "beagle",
        "LORIS_RUN_IDENTIFIER": "r01",
        "LORIS_LOGFILE_EXTENSION": ".json",
    }
    entries["NBR_SETTINGS"] = str(len(entries) + 1)
    return entries


@pytest.fixture
def settings(settings_entries: Dict[str, str]) -> Settings:
    return Settings(entries=settings_entries)


@pytest.fixture
def opt(tmp_path: Path) -> RunOptions:
    return RunOptions(settings_file=tmp_path / "beagle.settings")
