"""
Generate use case — one rendering pass for a generation request.

Builds the render context from the label mappings, asks the renderer
for the text, and writes it to the output file or to stdout. Exactly
one attempt, no retry: any label, template or I/O failure surfaces as
a GenerationFailure with the original message.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TextIO

from pds4gen.core.errors import GenerationFailure, LabelError, RenderError
from pds4gen.core.models.request import GenerationRequest, StdOut
from pds4gen.core.services.renderer import TemplateRenderer

logger = logging.getLogger(__name__)


@dataclass
class GenerationResult:
    """Outcome of a successful generation."""

    output_target: StdOut | str
    std_out: bool
    chars_written: int = 0

    def to_dict(self) -> dict:
        return {
            "output_target": str(self.output_target),
            "std_out": self.std_out,
            "chars_written": self.chars_written,
        }


def build_context(request: GenerationRequest) -> dict[str, Any]:
    """Render context: label fields at top level, plus helpers.

    ``label`` always refers to the whole mapping, so templates can
    reach keywords that are not identifiers (``label['^IMAGE']``).
    """
    mappings = request.label_source.mappings
    context: dict[str, Any] = dict(mappings)
    context["label"] = mappings
    context["file_path"] = request.auxiliary_file_path
    context["config_dir"] = str(request.config_directory)
    return context


def run_generation(
    request: GenerationRequest,
    *,
    std_out: bool | None = None,
    stream: TextIO | None = None,
    renderer: TemplateRenderer | None = None,
) -> GenerationResult:
    """Render the request's template and write the result.

    Args:
        request: The resolved generation request.
        std_out: Write to ``stream`` instead of a file. Defaults to
            whether the request's output target is the STDOUT sentinel.
        stream: Destination for stdout mode (default: ``sys.stdout``).
        renderer: Rendering engine (default: one bound to the request's
            config directory).

    Returns:
        GenerationResult describing where the output went.

    Raises:
        GenerationFailure: Wrapping any label, render or I/O error.
    """
    if std_out is None:
        std_out = request.std_out
    if not std_out and request.std_out:
        raise GenerationFailure("No output file given and standard output disabled")

    renderer = renderer or TemplateRenderer(request.config_directory)

    try:
        text = renderer.render(request.template_path, build_context(request))
    except (LabelError, RenderError) as e:
        raise GenerationFailure(str(e)) from e

    if std_out:
        out = stream or sys.stdout
        out.write(text)
        out.flush()
        logger.info("Wrote %d characters to standard output", len(text))
        return GenerationResult(output_target=request.output_target, std_out=True, chars_written=len(text))

    output_path = Path(str(request.output_target))
    try:
        output_path.write_text(text, encoding="utf-8")
    except OSError as e:
        raise GenerationFailure(f"Cannot write output file {output_path}: {e}") from e

    logger.info("Wrote PDS4 label to %s", output_path)
    return GenerationResult(output_target=request.output_target, std_out=False, chars_written=len(text))
