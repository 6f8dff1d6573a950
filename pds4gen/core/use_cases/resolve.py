"""
Resolve use case — turn parsed command-line options into a request.

Input is the Parsed Option Set: a mapping of short flag name to its
raw value (``True`` for presence-only flags). Each supplied flag is
dispatched by its catalog ``kind`` to a handler that returns an
updated, immutable builder. After the scan the required fields are
checked and defaults applied, producing a ``GenerationRequest``.

The first failure stops resolution; nothing is aggregated.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, replace
from pathlib import Path

import pds4gen
from pds4gen.adapters.base import LabelSource
from pds4gen.adapters.registry import DEFAULT_FORMAT, LabelFormatRegistry, default_registry
from pds4gen.core.config.flags import Flag, FlagCatalog
from pds4gen.core.errors import (
    HelpRequested,
    MissingInput,
    MissingRequiredOption,
    VersionRequested,
)
from pds4gen.core.models.request import STDOUT, GenerationRequest

logger = logging.getLogger(__name__)

OptionValue = str | bool
ParsedOptions = Mapping[str, OptionValue]

# A request cannot exist without these, whatever the catalog says.
_ALWAYS_REQUIRED = ("label", "template")

# Messages for required flags, keyed by flag kind.
_MISSING_MESSAGES = {
    "label": "Missing -{short} flag.  PDS3 label must be specified.",
    "template": "Missing -{short} flag.  Template file must be specified.",
}


def default_config_dir(tool_location: Path | None = None) -> Path:
    """The ``conf`` directory of the tool installation.

    A launcher installed as ``<install>/lib/<tool>`` finds ``conf`` at
    ``<install>/conf``; pass its file as ``tool_location``. Without one
    the package directory is the installation and ``conf`` ships inside
    it as package data. The result is never checked for existence.
    """
    if tool_location is None:
        return Path(pds4gen.__file__).resolve().parent / "conf"
    return tool_location.parent.parent / "conf"


@dataclass(frozen=True)
class ResolveEnv:
    """Everything a handler may consult besides the flag itself."""

    cwd: Path
    registry: LabelFormatRegistry
    label_format: str = DEFAULT_FORMAT


@dataclass(frozen=True)
class RequestBuilder:
    """Partially resolved request; every handler returns a new one."""

    label_source: LabelSource | None = None
    template_path: Path | None = None
    auxiliary_file_path: str | None = None
    config_directory: Path | None = None
    output_target: str | None = None

    def is_set(self, kind: str) -> bool:
        field_name = _KIND_FIELDS.get(kind)
        return field_name is None or getattr(self, field_name) is not None


# ── Path resolution ─────────────────────────────────────────────


def resolve_path(file_type: str, value: str, cwd: Path) -> Path:
    """Make ``value`` absolute against ``cwd`` and require it to exist.

    Raises:
        MissingInput: Naming ``file_type`` and ``value`` as supplied.
    """
    path = Path(value)
    if not path.is_absolute():
        path = cwd / path
    if not path.exists():
        raise MissingInput(file_type, value)
    return path


# ── Handlers ────────────────────────────────────────────────────

Handler = Callable[[RequestBuilder, Flag, OptionValue, ResolveEnv], RequestBuilder]


def _handle_help(builder: RequestBuilder, flag: Flag, value: OptionValue, env: ResolveEnv) -> RequestBuilder:
    raise HelpRequested()


def _handle_version(builder: RequestBuilder, flag: Flag, value: OptionValue, env: ResolveEnv) -> RequestBuilder:
    raise VersionRequested()


def _handle_label(builder: RequestBuilder, flag: Flag, value: OptionValue, env: ResolveEnv) -> RequestBuilder:
    path = resolve_path(flag.file_type, str(value), env.cwd)
    label = env.registry.create(env.label_format, path)
    label.set_mappings()
    return replace(builder, label_source=label)


def _handle_template(builder: RequestBuilder, flag: Flag, value: OptionValue, env: ResolveEnv) -> RequestBuilder:
    return replace(builder, template_path=resolve_path(flag.file_type, str(value), env.cwd))


def _handle_config(builder: RequestBuilder, flag: Flag, value: OptionValue, env: ResolveEnv) -> RequestBuilder:
    return replace(builder, config_directory=resolve_path(flag.file_type, str(value), env.cwd))


def _handle_output(builder: RequestBuilder, flag: Flag, value: OptionValue, env: ResolveEnv) -> RequestBuilder:
    if not str(value):
        raise MissingRequiredOption(f"Missing value for -{flag.short} flag.  Output file name must not be empty.")
    return replace(builder, output_target=str(value))


def _handle_file(builder: RequestBuilder, flag: Flag, value: OptionValue, env: ResolveEnv) -> RequestBuilder:
    return replace(builder, auxiliary_file_path=str(value))


HANDLERS: Mapping[str, Handler] = {
    "help": _handle_help,
    "version": _handle_version,
    "label": _handle_label,
    "template": _handle_template,
    "config": _handle_config,
    "output": _handle_output,
    "file": _handle_file,
}

# Builder field set by each value-carrying kind.
_KIND_FIELDS = {
    "label": "label_source",
    "template": "template_path",
    "config": "config_directory",
    "output": "output_target",
    "file": "auxiliary_file_path",
}


# ── Entry point ─────────────────────────────────────────────────


def resolve_request(
    options: ParsedOptions,
    *,
    catalog: FlagCatalog,
    cwd: Path | None = None,
    tool_location: Path | None = None,
    registry: LabelFormatRegistry | None = None,
    label_format: str = DEFAULT_FORMAT,
) -> GenerationRequest:
    """Validate parsed options and build the generation request.

    Args:
        options: Short flag name → raw value (``True`` for bare flags).
        catalog: The recognized flags, in dispatch order.
        cwd: Base for relative paths (default: process cwd).
        tool_location: Tool file used to derive the default config dir.
        registry: Label formats (default: built-in formats).
        label_format: Format used to build the label source.

    Returns:
        A fully populated GenerationRequest.

    Raises:
        HelpRequested / VersionRequested: Short-circuit signals.
        MissingInput: A path-bearing flag names a nonexistent path.
        MissingRequiredOption: The label or template flag is absent.
    """
    env = ResolveEnv(
        cwd=cwd or Path.cwd(),
        registry=registry or default_registry(),
        label_format=label_format,
    )

    unknown = sorted(set(options) - {f.short for f in catalog})
    if unknown:
        logger.debug("Ignoring options not in the flag catalog: %s", ", ".join(unknown))

    builder = RequestBuilder()
    for flag in catalog:
        if flag.short not in options:
            continue
        handler = HANDLERS.get(flag.kind)
        if handler is None:
            continue
        value = options[flag.short]
        if isinstance(value, str):
            value = value.strip()
        logger.debug("Resolving %s = %r", flag.display, value)
        builder = handler(builder, flag, value, env)

    for flag in catalog:
        if not (flag.required or flag.kind in _ALWAYS_REQUIRED):
            continue
        if not builder.is_set(flag.kind):
            template = _MISSING_MESSAGES.get(
                flag.kind, "Missing -{short} flag.  {long} must be specified."
            )
            raise MissingRequiredOption(template.format(short=flag.short, long=flag.long))

    for kind in _ALWAYS_REQUIRED:
        if not builder.is_set(kind):
            raise MissingRequiredOption(f"The flag catalog has no {kind} flag; a {kind} must be specified.")

    config_directory = builder.config_directory
    if config_directory is None:
        config_directory = default_config_dir(tool_location)
        logger.debug("No config directory given, using %s", config_directory)

    output_target = builder.output_target if builder.output_target is not None else STDOUT

    request = GenerationRequest(
        label_source=builder.label_source,
        template_path=builder.template_path,
        auxiliary_file_path=builder.auxiliary_file_path,
        config_directory=config_directory,
        output_target=output_target,
    )
    logger.info(
        "Resolved request: label=%s template=%s output=%s",
        request.label_source.path, request.template_path, request.output_target,
    )
    return request
