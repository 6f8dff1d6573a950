"""
Flag catalog loader — reads the recognized command-line flags.

The catalog lives in ``pds4gen/core/data/flags.yml``. It is read once
per process, validated against Pydantic schemas and returned as a
frozen ``FlagCatalog`` that the CLI builder and the resolver receive
explicitly.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from functools import lru_cache
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, ConfigDict, model_validator

from pds4gen.core.data import DATA_DIR
from pds4gen.core.errors import FlagCatalogError

logger = logging.getLogger(__name__)

FLAG_CATALOG_FILE = DATA_DIR / "flags.yml"

FlagKind = Literal["help", "version", "label", "template", "config", "output", "file", "logging"]


class Flag(BaseModel):
    """One recognized command-line option.

    Attributes:
        short:       Single-letter name (``p`` for ``-p``).
        long:        Long name (``pds3`` for ``--pds3``).
        kind:        Identity the resolver dispatches on.
        description: Help text.
        required:    Whether a valid run needs this flag.
        takes_value: False for presence-only flags.
        file_type:   Human-readable label used in "does not exist" errors.
        metavar:     Placeholder shown in usage text.
    """

    model_config = ConfigDict(frozen=True)

    short: str
    long: str
    kind: FlagKind
    description: str = ""
    required: bool = False
    takes_value: bool = False
    file_type: str = ""
    metavar: str | None = None

    @property
    def opts(self) -> tuple[str, str]:
        """Option strings as typed on the command line."""
        return f"-{self.short}", f"--{self.long}"

    @property
    def display(self) -> str:
        return f"-{self.short}"


class FlagCatalog(BaseModel):
    """The immutable set of recognized flags, in dispatch order."""

    model_config = ConfigDict(frozen=True)

    flags: tuple[Flag, ...]

    @model_validator(mode="after")
    def _unique_names(self) -> FlagCatalog:
        shorts = [f.short for f in self.flags]
        longs = [f.long for f in self.flags]
        dupes = {n for n in shorts + longs if (shorts + longs).count(n) > 1}
        if dupes:
            raise ValueError(f"Duplicate flag names: {', '.join(sorted(dupes))}")
        return self

    def __iter__(self) -> Iterator[Flag]:  # type: ignore[override]
        return iter(self.flags)

    def __len__(self) -> int:
        return len(self.flags)

    def get(self, short: str) -> Flag | None:
        """Look up a flag by short name."""
        for flag in self.flags:
            if flag.short == short:
                return flag
        return None

    def by_kind(self, kind: str) -> Flag | None:
        """Look up the first flag of a given kind."""
        for flag in self.flags:
            if flag.kind == kind:
                return flag
        return None

    def required(self) -> list[Flag]:
        """All flags a valid run must supply."""
        return [f for f in self.flags if f.required]


def load_flag_catalog(path: Path | None = None) -> FlagCatalog:
    """Load and validate a flag catalog.

    Args:
        path: Explicit catalog file. If None, the packaged catalog is
            used and cached for the lifetime of the process.

    Returns:
        Validated, frozen FlagCatalog.

    Raises:
        FlagCatalogError: If the file is missing or invalid.
    """
    if path is None:
        return _default_catalog()
    return _read_catalog(path)


@lru_cache(maxsize=1)
def _default_catalog() -> FlagCatalog:
    return _read_catalog(FLAG_CATALOG_FILE)


def _read_catalog(path: Path) -> FlagCatalog:
    if not path.is_file():
        raise FlagCatalogError(f"Flag catalog not found: {path}")

    logger.debug("Loading flag catalog from %s", path)

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise FlagCatalogError(f"Cannot read {path}: {e}") from e
    except yaml.YAMLError as e:
        raise FlagCatalogError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict) or not isinstance(data.get("flags"), list):
        raise FlagCatalogError(f"Expected a 'flags' list in {path}")

    try:
        catalog = FlagCatalog.model_validate(data)
    except Exception as e:
        raise FlagCatalogError(f"Invalid flag catalog {path}: {e}") from e

    logger.debug("Loaded %d flags", len(catalog))
    return catalog
