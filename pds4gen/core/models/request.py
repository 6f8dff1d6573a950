"""
Generation request — the validated description of one conversion job.

Built exactly once per invocation by the resolver and consumed exactly
once by the orchestrator. Immutable: a request that exists is a
request whose mandatory inputs existed when it was built.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, field_validator

from pds4gen.adapters.base import LabelSource


class StdOut(Enum):
    """Sentinel type for "write the rendered label to standard output"."""

    STDOUT = "-"

    def __str__(self) -> str:
        return "<stdout>"


STDOUT = StdOut.STDOUT


class GenerationRequest(BaseModel):
    """One PDS4 generation job.

    Attributes:
        label_source:        Label model, already mapped.
        template_path:       Absolute, existence-verified template file.
        auxiliary_file_path: Data file the label describes, as supplied.
        config_directory:    Absolute directory of supporting templates.
        output_target:       Output path as supplied, or ``STDOUT``.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    label_source: LabelSource
    template_path: Path
    auxiliary_file_path: str | None = None
    config_directory: Path
    output_target: StdOut | str = STDOUT

    @field_validator("template_path", "config_directory")
    @classmethod
    def _must_be_absolute(cls, v: Path) -> Path:
        if not v.is_absolute():
            raise ValueError(f"must be an absolute path, got {v}")
        return v

    @field_validator("output_target")
    @classmethod
    def _non_empty_output(cls, v: StdOut | str) -> StdOut | str:
        if isinstance(v, str) and not v:
            raise ValueError("output path must not be empty")
        return v

    @property
    def std_out(self) -> bool:
        """True when the rendered label goes to standard output."""
        return self.output_target is STDOUT

    def to_dict(self) -> dict:
        return {
            "label_format": self.label_source.format_name,
            "label_path": str(self.label_source.path),
            "template_path": str(self.template_path),
            "auxiliary_file_path": self.auxiliary_file_path,
            "config_directory": str(self.config_directory),
            "output_target": str(self.output_target),
        }
