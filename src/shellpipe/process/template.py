"""
Command templates for running one command per input line.

Templates are Jinja2; the current line is available as ``line``:

    echo {{ line }}
    {% if line %}echo {{ line }}{% else %}true{% endif %}
"""

from __future__ import annotations

import jinja2

from shellpipe.errors import TemplateError

_ENV = jinja2.Environment(
    undefined=jinja2.StrictUndefined,
    keep_trailing_newline=True,
    autoescape=False,
)


class CommandTemplate:
    """A compiled command-line template.

    Raises:
        TemplateError: If the template source does not compile
    """

    def __init__(self, source: str) -> None:
        self.source = source
        try:
            self._template = _ENV.from_string(source)
        except jinja2.TemplateSyntaxError as e:
            raise TemplateError(f"template: {e.message} (line {e.lineno})", template=source) from e

    def render(self, line: str) -> str:
        """Render the command line for one input line.

        Raises:
            TemplateError: If rendering fails
        """
        try:
            return self._template.render(line=line)
        except jinja2.TemplateError as e:
            raise TemplateError(f"template: {e}", template=self.source) from e
