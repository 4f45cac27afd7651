"""Template loading and rendering for project scaffolding.

Two renderers live here:

* ``TemplateRenderer`` works on the starter kit's ``*.tpl`` files.  These
  are plain text with ``${TOKEN}`` placeholders replaced literally by
  ``substitute``; there is no escaping, nesting or conditional logic.
* ``SnippetRenderer`` renders the Jinja2 snippets shipped inside this
  package (``snippets/*.j2``) that synthesize framework code blocks such as
  the NestJS ``@Module`` decorator or the ``ThemeProvider`` wrapper.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

from outerspace.errors import MissingTemplateError
from outerspace.utils import read_file, write_file

_SNIPPET_DIR = Path(__file__).parent / "snippets"


def substitute(text: str, tokens: Mapping[str, str]) -> str:
    """Replace every ``${NAME}`` in *text* for each ``NAME`` in *tokens*.

    Tokens absent from the mapping are left untouched.  Values must already
    be formatted strings.
    """
    for name, value in tokens.items():
        text = text.replace("${" + name + "}", value)
    return text


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Loads ``*.tpl`` files from a template tree and substitutes tokens.

    Template paths are relative to ``templates_dir``, e.g.
    ``"backend/.env.tpl"``.
    """

    def __init__(self, templates_dir: str | Path) -> None:
        self.templates_dir = Path(templates_dir)

    def path(self, template_path: str) -> Path:
        return self.templates_dir / template_path

    def require(self, template_paths: Iterable[str]) -> None:
        """Raise ``MissingTemplateError`` for the first template that is absent."""
        for template_path in template_paths:
            full = self.path(template_path)
            if not full.is_file():
                raise MissingTemplateError(full)

    def load(self, template_path: str) -> str:
        full = self.path(template_path)
        if not full.is_file():
            raise MissingTemplateError(full)
        return read_file(full)

    def render(self, template_path: str, tokens: Mapping[str, str]) -> str:
        """Load a template and substitute *tokens* into it."""
        return substitute(self.load(template_path), tokens)

    async def render_to_file(
        self,
        template_path: str,
        output_path: str | Path,
        tokens: Mapping[str, str],
    ) -> Path:
        """Render a template and write the result to *output_path*.

        Parent directories are created automatically.
        """
        content = await asyncio.to_thread(self.render, template_path, tokens)
        out = Path(output_path)
        await asyncio.to_thread(write_file, out, content)
        return out


# ---------------------------------------------------------------------------
# SnippetRenderer
# ---------------------------------------------------------------------------


class SnippetRenderer:
    """Renders the package's own Jinja2 code snippets."""

    def __init__(self, snippet_dir: str | Path | None = None) -> None:
        self.snippet_dir = Path(snippet_dir) if snippet_dir is not None else _SNIPPET_DIR
        self.env = Environment(
            loader=FileSystemLoader(str(self.snippet_dir)),
            autoescape=select_autoescape([]),
            undefined=StrictUndefined,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def render(self, snippet_name: str, **context: Any) -> str:
        """Render ``<snippet_name>.j2`` with *context*."""
        template = self.env.get_template(f"{snippet_name}.j2")
        return template.render(**context)


snippets = SnippetRenderer()
