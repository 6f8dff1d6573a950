"""
Error taxonomy — every failure the tool reports to the user.

Core code raises these; only ``pds4gen.main`` turns them into a
message on stderr and an exit code. Each error carries a single
human-readable message and nothing is aggregated.
"""

from __future__ import annotations


class GenerateError(Exception):
    """Base class for all pds4gen errors."""


# ── Resolver ────────────────────────────────────────────────────


class MissingRequiredOption(GenerateError):
    """A required flag (label source or template) was not supplied."""


class MissingInput(GenerateError):
    """A path-bearing flag does not resolve to an existing file or directory.

    Attributes:
        file_type: Human-readable label of the flag (e.g. ``PDS3 Label``).
        path:      The path string exactly as the user supplied it.
    """

    def __init__(self, file_type: str, path: str):
        self.file_type = file_type
        self.path = path
        super().__init__(f"{file_type} does not exist: {path}")


# ── Collaborators ───────────────────────────────────────────────


class FlagCatalogError(GenerateError):
    """The packaged flag catalog is missing or invalid."""


class LabelError(GenerateError):
    """A label could not be read or parsed."""


class RenderError(GenerateError):
    """The rendering engine failed to expand a template."""


# ── Orchestrator ────────────────────────────────────────────────


class GenerationFailure(GenerateError):
    """Rendering or writing the output failed.

    The message is the one raised by the label model or rendering
    engine; the original exception is chained as ``__cause__``.
    """


# ── Control flow ────────────────────────────────────────────────


class HelpRequested(GenerateError):
    """The help flag was supplied; usage should be shown, exit 0."""


class VersionRequested(GenerateError):
    """The version flag was supplied; the banner should be shown, exit 0."""
