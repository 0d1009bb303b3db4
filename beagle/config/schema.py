"""
Pydantic models that mirror the configuration consumed by *beagle*.

The settings file is a flat ``KEY=VALUE`` document, so :class:`Settings`
keeps the raw mapping and layers named, typed accessors on top of it. All
keys the Civet path resolver depends on are validated at construction time
rather than at first use.

:class:`PipelineDefinition` mirrors the packaged ``default_pipeline.yaml``
that lists the stage sequence of every modality.
"""

from __future__ import annotations

from pathlib import Path
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from beagle.utils.errors import MissingSettingError

# Reserved key holding the self-declared number of entries.
COUNT_KEY = "NBR_SETTINGS"

REQUIRED_KEYS: tuple[str, ...] = (
    COUNT_KEY,
    "LORIS_ROOT_DIR",
    "CIVET_ROOT_DIR",
    "CIVET_PREFIX",
    "CIVET_VERSION",
    "CIVET_SCANID_APPEND_SCANDATE_TO_KEYNAME",
)


# --------------------------------------------------------------------------- #
# 1.  Settings store                                                          #
# --------------------------------------------------------------------------- #
class Settings(BaseModel, frozen=True):
    """Immutable settings snapshot shared by every stage of a run.

    Attributes:
        entries: Read-only ``KEY -> VALUE`` mapping with quotes already stripped.
        source: File the entries were read from (``None`` for in-memory use).
    """

    entries: Mapping[str, str]
    source: Optional[Path] = None

    @field_validator("entries", mode="after")
    @classmethod
    def _read_only(cls, v: Mapping[str, str]) -> Mapping[str, str]:
        """Wrap the entries so the snapshot cannot be changed in place."""
        return MappingProxyType(dict(v))

    @model_validator(mode="after")
    def _required_keys_present(self):
        """Reject snapshots that lack a key needed for path resolution."""
        missing = [k for k in REQUIRED_KEYS if k not in self.entries]
        if missing:
            raise ValueError("missing required setting(s): " + ", ".join(missing))
        return self

    # --------------------------- mapping access -------------------------- #
    def get(self, key: str) -> str:
        """Return the value stored under *key*.

        Raises:
            MissingSettingError: If *key* was not loaded.
        """
        try:
            return self.entries[key]
        except KeyError:
            raise MissingSettingError(key) from None

    def keys(self) -> List[str]:
        return list(self.entries)

    def as_dict(self) -> Dict[str, str]:
        return dict(self.entries)

    def __contains__(self, key: object) -> bool:
        return key in self.entries

    def __len__(self) -> int:
        return len(self.entries)

    def merged_with(self, overrides: Mapping[str, str]) -> "Settings":
        """Return a new snapshot with *overrides* layered on top.

        The override's own ``NBR_SETTINGS`` describes the override file only
        and is not carried over.
        """
        layered = {k: v for k, v in overrides.items() if k != COUNT_KEY}
        return Settings(entries={**self.entries, **layered}, source=self.source)

    # --------------------------- typed accessors ------------------------- #
    @property
    def loris_root_dir(self) -> Path:
        return Path(self.get("LORIS_ROOT_DIR"))

    @property
    def civet_root_dir(self) -> Path:
        return Path(self.get("CIVET_ROOT_DIR"))

    @property
    def civet_prefix(self) -> str:
        return self.get("CIVET_PREFIX")

    @property
    def civet_version(self) -> str:
        return self.get("CIVET_VERSION")

    @property
    def append_scan_id_to_keyname(self) -> bool:
        """``True`` when Civet directories are named ``<keyname>-<scanid>``."""
        return self.get("CIVET_SCANID_APPEND_SCANDATE_TO_KEYNAME").strip().upper() == "ON"

    @property
    def aal_labels_version(self) -> str:
        return self.get("AAL_LABELS_VERSION")

    @property
    def adni_surfaces_dir(self) -> Path:
        return Path(self.get("ADNI_SURFACES_DIR"))


# --------------------------------------------------------------------------- #
# 2.  Pipeline stage sequences                                                #
# --------------------------------------------------------------------------- #
class PipelineDefinition(BaseModel):
    """Ordered stage names per modality.

    Attributes:
        version: Version string of the definition file.
        subject_first: Stages run once per subject before any scan.
        subject_last: Stages run once per subject after every scan.
        modalities: Mapping of modality name to its per-scan stage list.
    """

    version: str
    subject_first: List[str] = Field(default_factory=list)
    subject_last: List[str] = Field(default_factory=list)
    modalities: Dict[str, List[str]]

    @model_validator(mode="after")
    def _no_duplicate_stages(self):
        """A stage may appear at most once within a modality."""
        for name, stages in self.modalities.items():
            dupes = sorted({s for s in stages if stages.count(s) > 1})
            if dupes:
                raise ValueError(f"modality '{name}' lists stage(s) twice: {', '.join(dupes)}")
        return self
