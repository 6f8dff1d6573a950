"""
pds4gen — CLI entrypoint.

Usage:
    pds4gen -p label.lbl -t template.xml.j2 [-o out.xml] [-c conf/]
    python -m pds4gen.main -h

The command is built from the flag catalog: click does the option
syntax, the resolver does everything else.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any

import click

from pds4gen import COPYRIGHT, RELEASE_DATE, TOOL_NAME, __version__
from pds4gen.core.config.flags import FlagCatalog, load_flag_catalog
from pds4gen.core.errors import GenerateError, HelpRequested, VersionRequested
from pds4gen.core.observability.logging_config import (
    ENV_LOG_FILE,
    ENV_LOG_FILE_LEVEL,
    resolve_level,
    setup_logging,
)

logger = logging.getLogger(__name__)

PROG_NAME = "pds4gen"


class OptionSyntaxError(click.UsageError):
    """Raw arguments could not be parsed into options."""

    exit_code = 1


class GenerateCommand(click.Command):
    """Single command with the launcher's argument conventions.

    No arguments at all prints a usage hint and exits 0; syntax
    errors exit 1 instead of click's default 2.
    """

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        if not args:
            click.echo(f"\nType '{PROG_NAME} -h' for usage")
            ctx.exit(0)
        try:
            return super().parse_args(ctx, args)
        except click.UsageError as e:
            raise OptionSyntaxError(f"Command-line parse failure: {e.format_message()}", ctx) from e


def version_banner() -> str:
    return f"\n{TOOL_NAME}\n{__version__}\nRelease Date: {RELEASE_DATE}\n{COPYRIGHT}\n"


def parsed_options(catalog: FlagCatalog, params: dict[str, Any]) -> dict[str, str | bool]:
    """Keep only the flags that were actually supplied."""
    options: dict[str, str | bool] = {}
    for flag in catalog:
        value = params.get(flag.short)
        if value is None or value is False:
            continue
        options[flag.short] = value
    return options


def _supplied(catalog: FlagCatalog, options: dict[str, str | bool], long_name: str) -> bool:
    for flag in catalog:
        if flag.long == long_name:
            return flag.short in options
    return False


def build_command(catalog: FlagCatalog) -> click.Command:
    """Create the click command for a flag catalog."""
    params: list[click.Parameter] = []
    for flag in catalog:
        help_text = flag.description + (" [required]" if flag.required else "")
        if flag.takes_value:
            params.append(click.Option(
                [*flag.opts, flag.short],
                type=str,
                default=None,
                metavar=flag.metavar,
                help=help_text,
            ))
        else:
            params.append(click.Option(
                [*flag.opts, flag.short],
                is_flag=True,
                default=False,
                help=help_text,
            ))

    @click.pass_context
    def callback(ctx: click.Context, **kwargs: Any) -> None:
        """Generate a PDS4 label from a PDS3 label and a template."""
        from pds4gen.core.use_cases.generate import run_generation
        from pds4gen.core.use_cases.resolve import resolve_request

        options = parsed_options(catalog, kwargs)

        # ── Logging setup (once, at process start) ──────────────────
        debug = _supplied(catalog, options, "debug")
        setup_logging(
            level=resolve_level(verbose=_supplied(catalog, options, "verbose"), debug=debug),
            log_file=os.environ.get(ENV_LOG_FILE),
            log_file_level=os.environ.get(ENV_LOG_FILE_LEVEL),
            quiet_third_party=not debug,
        )

        try:
            request = resolve_request(options, catalog=catalog)
            run_generation(request)
        except HelpRequested:
            click.echo(ctx.get_help())
            ctx.exit(0)
        except VersionRequested:
            click.echo(version_banner(), err=True)
            ctx.exit(0)
        except GenerateError as e:
            click.secho(str(e), fg="red", err=True)
            sys.exit(1)
        except Exception as e:
            logger.debug("Unexpected failure", exc_info=True)
            click.secho(str(e) or e.__class__.__name__, fg="red", err=True)
            sys.exit(1)

    return GenerateCommand(
        name=PROG_NAME,
        params=params,
        callback=callback,
        help=callback.__doc__,
        options_metavar="<options>",
        add_help_option=False,
        context_settings={"max_content_width": 80},
    )


cli = build_command(load_flag_catalog())


def main() -> None:
    cli(prog_name=PROG_NAME)


if __name__ == "__main__":
    main()
