"""Named textual patches for generated framework files.

There is no structural parser for the TypeScript and CSS files the
generators touch, so each edit is a ``TextPatch``: a name, a precondition
on the current content and a transform.  ``apply`` returns the content
unchanged when the precondition does not hold, and every precondition
below is false once its patch has been applied, so re-running a patch is
a no-op.
"""

from __future__ import annotations

import asyncio
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path

from outerspace.scaffolder.templates import snippets
from outerspace.utils import read_file, write_file

TAILWIND_DIRECTIVES = "@tailwind base;\n@tailwind components;\n@tailwind utilities;\n"
THEME_LAYER_MARKER = "@layer base {"
COLORS_IMPORT = 'import { colors } from "./theme/colors";'
THEME_PROVIDER_IMPORT = 'import { ThemeProvider } from "@/theme/theme-provider";'

_NEXT_CONFIG_RE = re.compile(r"const nextConfig: NextConfig = \{")
_CONFIG_OPENER_RE = re.compile(r"(export default\s*\{|const config(?:\s*:\s*[\w.]+)?\s*=\s*\{)")
_THEME_KEY_RE = re.compile(r"\btheme\s*:\s*\{")
_IMPORT_RE = re.compile(r"""^import\b[^'"]*['"][^'"\n]*['"];?""", re.MULTILINE)


@dataclass(frozen=True)
class TextPatch:
    """A precondition-guarded text transformation."""

    name: str
    precondition: Callable[[str], bool]
    transform: Callable[[str], str]

    def apply(self, content: str) -> str:
        if not self.precondition(content):
            return content
        return self.transform(content)


def apply_patches(content: str, patches: Iterable[TextPatch]) -> tuple[str, list[str]]:
    """Apply *patches* in order.

    Returns:
        The final content and the names of the patches that changed it.
    """
    applied: list[str] = []
    for patch in patches:
        updated = patch.apply(content)
        if updated != content:
            applied.append(patch.name)
            content = updated
    return content, applied


async def patch_file(path: Path, patches: Iterable[TextPatch]) -> list[str] | None:
    """Apply *patches* to the file at *path*.

    Returns ``None`` when the file does not exist, otherwise the names of
    the patches that changed it.  The file is only rewritten when at least
    one patch applied.
    """
    if not await asyncio.to_thread(path.is_file):
        return None
    content = await asyncio.to_thread(read_file, path)
    updated, applied = apply_patches(content, patches)
    if applied:
        await asyncio.to_thread(write_file, path, updated)
    return applied


def match_brace(content: str, open_index: int) -> int | None:
    """Return the index of the ``}`` closing the ``{`` at *open_index*.

    Quoted strings and ``//`` / ``/* */`` comments are skipped, so braces
    or apostrophes inside them do not count.  Returns ``None`` when the
    braces never balance.
    """
    depth = 0
    quote: str | None = None
    index = open_index
    while index < len(content):
        char = content[index]
        if quote:
            if char == "\\":
                index += 1
            elif char == quote:
                quote = None
        elif content.startswith("//", index):
            newline = content.find("\n", index)
            if newline == -1:
                return None
            index = newline
        elif content.startswith("/*", index):
            close = content.find("*/", index + 2)
            if close == -1:
                return None
            index = close + 1
        elif char in "\"'`":
            quote = char
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return index
        index += 1
    return None


# ---------------------------------------------------------------------------
# next.config.ts
# ---------------------------------------------------------------------------


def _with_trailing_comma(body: str) -> str:
    stripped = body.rstrip()
    if not stripped.strip():
        return ""
    last_line = stripped.splitlines()[-1].strip()
    if last_line.endswith((",", "{")) or last_line.startswith("//") or last_line.endswith("*/"):
        return stripped
    return stripped + ","


def next_config_i18n(default_locale: str, locales: list[str]) -> TextPatch:
    """Inject an ``i18n`` block into ``const nextConfig: NextConfig = {...}``.

    The block goes before the brace that closes the config object, so
    nested objects such as ``images: {...}`` are kept intact.  A config
    whose braces never balance is left untouched.
    """
    block = snippets.render(
        "next_config_i18n",
        default_locale=default_locale,
        locales_list=", ".join(f"'{locale}'" for locale in locales),
    ).rstrip("\n")

    def config_span(content: str) -> tuple[int, int] | None:
        match = _NEXT_CONFIG_RE.search(content)
        if match is None:
            return None
        close = match_brace(content, match.end() - 1)
        if close is None:
            return None
        return match.end(), close

    def transform(content: str) -> str:
        span = config_span(content)
        assert span is not None
        body_start, close = span
        body = _with_trailing_comma(content[body_start:close])
        return f"{content[:body_start]}{body}\n{block}\n{content[close:]}"

    return TextPatch(
        name="next-config-i18n",
        precondition=lambda content: "i18n:" not in content and config_span(content) is not None,
        transform=transform,
    )


# ---------------------------------------------------------------------------
# globals.css
# ---------------------------------------------------------------------------


def extract_theme_variables(theme_css: str) -> str:
    """Return the ``@layer base { ... }`` part of the theme stylesheet.

    The whole template is used when the marker is missing.
    """
    _, marker, rest = theme_css.partition(THEME_LAYER_MARKER)
    return marker + rest if marker else theme_css


def globals_tailwind_directives() -> TextPatch:
    return TextPatch(
        name="globals-tailwind-directives",
        precondition=lambda content: "@tailwind" not in content,
        transform=lambda content: TAILWIND_DIRECTIVES + content,
    )


def globals_theme_variables(theme_css: str) -> TextPatch:
    variables = extract_theme_variables(theme_css)
    return TextPatch(
        name="globals-theme-variables",
        precondition=lambda content: ":root" not in content and variables.strip() not in content,
        transform=lambda content: content + "\n" + variables,
    )


def merge_globals_css(existing: str, theme_css: str) -> str:
    """Merge the theme stylesheet into an existing ``globals.css``."""
    merged, _ = apply_patches(
        existing,
        [globals_tailwind_directives(), globals_theme_variables(theme_css)],
    )
    return merged


# ---------------------------------------------------------------------------
# tailwind.config.ts
# ---------------------------------------------------------------------------


def find_object_block(content: str, key: str = "theme") -> tuple[int, int] | None:
    """Locate ``<key>: { ... }`` and return its ``(start, end)`` span.

    Braces are matched by ``match_brace``, so nested objects such as
    ``extend: {...}`` stay inside the span.  Returns ``None`` when the key
    is absent or its braces never balance.
    """
    match = _object_key_re(key).search(content)
    if match is None:
        return None
    close = match_brace(content, match.end() - 1)
    if close is None:
        return None
    return match.start(), close + 1


def has_unbalanced_block(content: str, key: str = "theme") -> bool:
    """True when ``<key>: {`` is present but its closing brace is not."""
    return bool(_object_key_re(key).search(content)) and find_object_block(content, key) is None


def _object_key_re(key: str) -> re.Pattern[str]:
    if key == "theme":
        return _THEME_KEY_RE
    return re.compile(rf"\b{re.escape(key)}\s*:\s*\{{")


def tailwind_colors_import() -> TextPatch:
    return TextPatch(
        name="tailwind-colors-import",
        precondition=lambda content: "./theme/colors" not in content,
        transform=lambda content: f"{COLORS_IMPORT}\n{content}",
    )


def tailwind_dark_mode() -> TextPatch:
    return TextPatch(
        name="tailwind-dark-mode",
        precondition=lambda content: "darkMode:" not in content and bool(_CONFIG_OPENER_RE.search(content)),
        transform=lambda content: _CONFIG_OPENER_RE.sub(r'\1\n  darkMode: "class",', content, count=1),
    )


def tailwind_theme_block() -> TextPatch:
    block = snippets.render("tailwind_theme").rstrip("\n")

    def precondition(content: str) -> bool:
        span = find_object_block(content)
        return span is not None and "...colors" not in content[span[0]:span[1]]

    def transform(content: str) -> str:
        span = find_object_block(content)
        assert span is not None
        start, end = span
        return content[:start] + block + content[end:]

    return TextPatch(name="tailwind-theme-block", precondition=precondition, transform=transform)


def tailwind_config_patches() -> list[TextPatch]:
    return [tailwind_colors_import(), tailwind_dark_mode(), tailwind_theme_block()]


# ---------------------------------------------------------------------------
# app/layout.tsx
# ---------------------------------------------------------------------------


def layout_theme_import() -> TextPatch:
    """Add the ThemeProvider import after the last import statement."""

    def transform(content: str) -> str:
        imports = list(_IMPORT_RE.finditer(content))
        if not imports:
            return f"{THEME_PROVIDER_IMPORT}\n{content}"
        end = imports[-1].end()
        return content[:end] + "\n" + THEME_PROVIDER_IMPORT + content[end:]

    return TextPatch(
        name="layout-theme-import",
        precondition=lambda content: "theme-provider" not in content,
        transform=transform,
    )


def layout_theme_provider(default_theme: str, enable_system: bool) -> TextPatch:
    """Wrap the first ``{children}`` in a ``<ThemeProvider>`` element."""
    wrapper = snippets.render(
        "theme_provider",
        default_theme=default_theme,
        enable_system_expr="{" + str(enable_system).lower() + "}",
    ).rstrip("\n")
    return TextPatch(
        name="layout-theme-provider",
        precondition=lambda content: "<ThemeProvider" not in content and "{children}" in content,
        transform=lambda content: content.replace("{children}", wrapper, 1),
    )


def layout_patches(default_theme: str, enable_system: bool) -> list[TextPatch]:
    return [layout_theme_import(), layout_theme_provider(default_theme, enable_system)]
