import json
import re

from beagle.utils.runlog import RunLog, runlog_path


def test_runlog_path(settings):
    """The run log lives in the subject directory under the run identifier."""
    assert runlog_path(settings, "s001") == settings.loris_root_dir / "s001" / "beagle_run-r01.json"


def test_message_key_format(settings):
    """Message keys join the five fields with pipes."""
    rl = RunLog("s001", settings)
    key = rl.log_message("beagle_fdg_preprocess", "s001", "fdg", "s001-2010", "civet_version", "1.1.11")
    assert key == "beagle_fdg_preprocess|s001|fdg|s001-2010|civet_version"
    assert rl[key] == "1.1.11"


def test_start_stop_timestamps(settings):
    """Start and stop entries use the dotted timestamp format."""
    rl = RunLog("s001", settings)
    start = rl.log_start("beagle_labels_fit_AAL", "s001", "anatomical", "20200101")
    stop = rl.log_stop("beagle_labels_fit_AAL", "s001", "anatomical", "20200101")
    assert start.endswith("|start_timestamp") and stop.endswith("|stop_timestamp")
    assert re.fullmatch(r"\d{4}\.\d{2}\.\d{2} \d{2}:\d{2}:\d{2}", rl[start])


def test_save_and_reload(settings):
    """Saved entries are read back by a new RunLog."""
    rl = RunLog("s001", settings)
    rl.log_message("p", "s001", "NULL", "NULL", "init_message", "Log file initialized")
    path = rl.save()
    assert json.loads(path.read_text()) == {"p|s001|NULL|NULL|init_message": "Log file initialized"}
    assert len(RunLog("s001", settings)) == 1


def test_erase_starts_empty(settings):
    """erase=True discards an existing log."""
    rl = RunLog("s001", settings)
    rl.log_message("p", "s001", "NULL", "NULL", "k", "v")
    rl.save()
    fresh = RunLog("s001", settings, erase=True)
    assert len(fresh) == 0
    assert json.loads(fresh.path.read_text()) == {}
