"""
Domain models — Pydantic types for pds4gen.

    from pds4gen.core.models import GenerationRequest, STDOUT
"""

from pds4gen.core.models.request import STDOUT, GenerationRequest, StdOut

__all__ = [
    "STDOUT",
    "GenerationRequest",
    "StdOut",
]
