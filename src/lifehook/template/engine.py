"""
Jinja2 template engine with strict undefined handling and utility filters.

SPDX-License-Identifier: Apache-2.0
Copyright 2025 Sebastian Daberdaku
"""

import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Any
from urllib.parse import quote

from jinja2 import Environment, StrictUndefined

from lifehook.exception import TemplateParseError, handle_template_exception

logger = logging.getLogger(__name__)


def _regex_search(value: str, pattern: str, group: int = 1) -> str:
    """Extract a regex capture group from text, or an empty string if nothing matches.

    Usage in templates:
        {{ error | regex_search('exit status (\\d+)') }}
    """
    match = re.search(pattern, str(value))
    if match:
        try:
            return match.group(group)
        except IndexError:
            return match.group(0)
    return ""


def _quote_url(value: Any, safe: str = "") -> str:
    """Percent-encode a value for use inside a URL path segment or query value."""
    return quote(str(value), safe=safe)


def _strftime(value: datetime | str, fmt: str) -> str:
    """Format a datetime (or ISO-8601 string) with strftime."""
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    return value.strftime(fmt)


class TemplateEngine:
    """Engine for rendering hook templates.

    Undefined references fail at render time instead of rendering as empty
    strings. Parse and execution failures are reported as
    :class:`TemplateParseError` and :class:`TemplateExecError` respectively.
    """

    def __init__(self) -> None:
        self.env = Environment(  # nosec B701 - URLs and plain-text bodies, not HTML
            autoescape=False,
            undefined=StrictUndefined,
            keep_trailing_newline=True,
        )
        self.env.filters["regex_search"] = _regex_search
        self.env.filters["quote_url"] = _quote_url
        self.env.filters["strftime"] = _strftime
        self.env.globals["now"] = datetime.now

    @handle_template_exception
    def render(self, source: str, params: dict[str, Any]) -> str:
        """Render a template source against the given parameters.

        :param source: Template source
        :param params: Parameter mapping available to the template
        :return: Rendered text
        """
        template = self.env.from_string(source)
        return str(template.render(**params))

    def render_file(self, path: str, params: dict[str, Any]) -> str:
        """Render a template file against the given parameters.

        :param path: Path to the template file
        :param params: Parameter mapping available to the template
        :return: Rendered text
        """
        return self.render(self.read(path), params)

    @staticmethod
    def read(path: str) -> str:
        """Read a template source from disk."""
        try:
            return Path(path).read_text(encoding="utf-8")
        except OSError as e:
            logger.debug(f"Failed to read template file {path}: {e}")
            raise TemplateParseError(f"failed to read template file {path}: {e}") from e
