"""
Label source base — the contract between label formats and templates.

A label source reads one label document and produces a field-mapping
context: a plain ``dict`` a template can walk. The resolver and the
orchestrator only talk to labels through this interface, never to a
concrete format.

To add a label format:
    1. Subclass LabelSource
    2. Set ``format_name`` and implement ``_build_mappings``
    3. Register it in the LabelFormatRegistry
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, ClassVar

from pds4gen.core.errors import LabelError

logger = logging.getLogger(__name__)


class LabelValue(str):
    """A label value as written, optionally carrying a unit.

    Behaves like the plain string in templates (``{{ value }}``) while
    keeping the unit reachable (``{{ value.unit }}``).
    """

    unit: str | None

    def __new__(cls, text: str, unit: str | None = None) -> LabelValue:
        obj = super().__new__(cls, text)
        obj.unit = unit
        return obj

    def __repr__(self) -> str:
        if self.unit:
            return f"LabelValue({str(self)!r}, unit={self.unit!r})"
        return f"LabelValue({str(self)!r})"


class LabelSource(ABC):
    """Abstract base class for all label formats.

    Construction is cheap and never touches the file; ``set_mappings``
    reads and parses it. ``mappings`` is only available afterwards.
    """

    format_name: ClassVar[str] = ""

    def __init__(self, path: str | Path):
        self._path = Path(path)
        self._mappings: dict[str, Any] | None = None

    @property
    def path(self) -> Path:
        return self._path

    @property
    def mapped(self) -> bool:
        return self._mappings is not None

    @property
    def mappings(self) -> dict[str, Any]:
        """The field-mapping context built by ``set_mappings``."""
        if self._mappings is None:
            raise LabelError(f"{self.format_name} label {self._path} has not been mapped yet")
        return self._mappings

    def set_mappings(self) -> dict[str, Any]:
        """Read the label and build its field mappings (idempotent)."""
        if self._mappings is None:
            self._mappings = self._build_mappings()
            logger.info(
                "Mapped %d top-level fields from %s label %s",
                len(self._mappings), self.format_name, self._path,
            )
        return self._mappings

    @abstractmethod
    def _build_mappings(self) -> dict[str, Any]:
        """Parse the label file into a field-mapping context.

        MUST raise LabelError (never a bare parsing exception) when the
        label cannot be read or is malformed.
        """

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} path={str(self._path)!r}>"
