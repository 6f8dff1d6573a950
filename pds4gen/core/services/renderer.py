"""
Template renderer — expand a template against a label context.

Built on Jinja2. Templates are looked up in the template's own
directory first, then in the config directory, so a template can
``{% import "pds4_macros.j2" as pds4 %}`` from ``conf/``.

Undefined variables are errors: a PDS4 label with silently empty
fields is worse than no label.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import jinja2

from pds4gen.core.errors import RenderError

logger = logging.getLogger(__name__)

# PDS3 dates: 2004-01-01, 2004-001 (day of year), optional Thh:mm:ss[.fff][Z]
_PDS3_TIME_RE = re.compile(
    r"""^(?P<year>\d{4})-(?:(?P<month>\d{2})-(?P<day>\d{2})|(?P<doy>\d{3}))
        (?:T(?P<time>\d{2}:\d{2}(?::\d{2}(?:\.\d+)?)?))?Z?$""",
    re.VERBOSE,
)


def pds_date(value: Any, with_time: bool | None = None) -> str:
    """Normalize a PDS3 date/time to the PDS4 form.

    ``2004-032T12:00:00`` → ``2004-02-01T12:00:00.000Z``;
    a date without a time stays a ``YYYY-MM-DD`` date unless
    ``with_time`` is true. Values that are not dates (``N/A``,
    ``UNK``) pass through unchanged.
    """
    text = str(value).strip()
    m = _PDS3_TIME_RE.match(text)
    if m is None:
        return text

    year = int(m["year"])
    if m["doy"]:
        date = datetime.strptime(f"{year}-{m['doy']}", "%Y-%j")
    else:
        date = datetime(year, int(m["month"]), int(m["day"]))

    clock = m["time"]
    if clock is None and not with_time:
        return date.strftime("%Y-%m-%d")

    hms, _, frac = (clock or "00:00:00").partition(".")
    parts = [int(p) for p in hms.split(":")]
    parts += [0] * (3 - len(parts))
    millis = (frac + "000")[:3]
    stamp = date.replace(hour=parts[0], minute=parts[1], second=parts[2])
    return f"{stamp.strftime('%Y-%m-%dT%H:%M:%S')}.{millis}Z"


class TemplateRenderer:
    """Jinja2 environment bound to one config directory."""

    def __init__(self, config_directory: Path):
        self._config_directory = Path(config_directory)
        if not self._config_directory.is_dir():
            logger.warning(
                "Config directory %s does not exist; templates it provides will not be found",
                self._config_directory,
            )

    @property
    def config_directory(self) -> Path:
        return self._config_directory

    def _environment(self, template_dir: Path) -> jinja2.Environment:
        search_path = [str(template_dir)]
        if self._config_directory != template_dir:
            search_path.append(str(self._config_directory))

        env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(search_path, encoding="utf-8"),
            undefined=jinja2.StrictUndefined,
            keep_trailing_newline=True,
            autoescape=False,
        )
        env.filters["pds_date"] = pds_date
        env.globals["generation_time"] = datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"
        return env

    def render(self, template_path: Path, context: Mapping[str, Any]) -> str:
        """Render ``template_path`` against ``context``.

        Raises:
            RenderError: For a missing template or include, a syntax
                error, an undefined variable, or a failing expression.
        """
        template_path = Path(template_path)
        env = self._environment(template_path.parent)
        logger.debug("Rendering %s (search path: %s)", template_path, env.loader.searchpath)  # type: ignore[union-attr]

        try:
            template = env.get_template(template_path.name)
            return template.render(dict(context))
        except jinja2.TemplateNotFound as e:
            raise RenderError(
                f"Template not found: {e.name} "
                f"(searched {template_path.parent} and {self._config_directory})"
            ) from e
        except jinja2.TemplateSyntaxError as e:
            raise RenderError(f"Template syntax error in {e.filename or e.name}, line {e.lineno}: {e.message}") from e
        except jinja2.UndefinedError as e:
            raise RenderError(f"Unresolved template variable in {template_path.name}: {e.message}") from e
        except jinja2.TemplateError as e:
            raise RenderError(f"Cannot render {template_path.name}: {e}") from e
        except (TypeError, ValueError, AttributeError, KeyError, ArithmeticError) as e:
            raise RenderError(f"Error evaluating {template_path.name}: {e}") from e
