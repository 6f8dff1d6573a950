"""
Label adapters — turn label documents into template contexts.
"""

from pds4gen.adapters.base import LabelSource, LabelValue
from pds4gen.adapters.pds3 import PDS3Label
from pds4gen.adapters.registry import LabelFormatRegistry, default_registry

__all__ = [
    "LabelFormatRegistry",
    "LabelSource",
    "LabelValue",
    "PDS3Label",
    "default_registry",
]
