"""
Label format registry — central lookup for label source classes.

The resolver never names a concrete label class: it asks the registry
for the format it was configured with and gets back a LabelSource.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pds4gen.adapters.base import LabelSource
from pds4gen.adapters.pds3 import PDS3Label
from pds4gen.core.errors import LabelError

logger = logging.getLogger(__name__)

DEFAULT_FORMAT = PDS3Label.format_name


class LabelFormatRegistry:
    """Registry of label formats keyed by (case-insensitive) format name."""

    def __init__(self) -> None:
        self._formats: dict[str, type[LabelSource]] = {}

    def register(self, source_cls: type[LabelSource]) -> None:
        """Register a label source class under its ``format_name``."""
        name = source_cls.format_name.upper()
        if not name:
            raise ValueError(f"{source_cls.__name__} has no format_name")
        if name in self._formats:
            logger.warning("Overwriting existing label format: %s", name)
        self._formats[name] = source_cls
        logger.debug("Registered label format: %s", name)

    def get(self, format_name: str) -> type[LabelSource] | None:
        return self._formats.get(format_name.upper())

    def list_formats(self) -> list[str]:
        """List all registered format names."""
        return list(self._formats.keys())

    def create(self, format_name: str, path: str | Path) -> LabelSource:
        """Construct an (unmapped) label source for ``path``.

        Raises:
            LabelError: If no format of that name is registered.
        """
        source_cls = self.get(format_name)
        if source_cls is None:
            raise LabelError(
                f"Unknown label format '{format_name}' "
                f"(known: {', '.join(self.list_formats()) or 'none'})"
            )
        return source_cls(path)


def default_registry() -> LabelFormatRegistry:
    """Registry with every built-in label format."""
    registry = LabelFormatRegistry()
    registry.register(PDS3Label)
    return registry
