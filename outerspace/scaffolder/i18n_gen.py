"""Internationalization generator.

Adds next-intl locale routing to the frontend package: the ``[locale]``
route group, request/routing config, middleware, a language selector, one
message file per locale and the ``next-intl`` dependency.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

from outerspace.config import I18nConfig, ProjectConfig, ProjectInfo, ProjectPaths, Settings
from outerspace.scaffolder.base import BaseGenerator, Step, StepSkipped
from outerspace.scaffolder.patches import next_config_i18n, patch_file
from outerspace.scaffolder.templates import TemplateRenderer
from outerspace.utils import ensure_dir, merge_dependencies, print_detail

I18N_DEPENDENCIES: dict[str, str] = {"next-intl": "^3.0.0"}

# (template under frontend/, destination under packages/frontend/)
I18N_TEMPLATES: list[tuple[str, str]] = [
    ("frontend/i18n/[locale]/layout.tsx.tpl", "app/[locale]/layout.tsx"),
    ("frontend/i18n/[locale]/page.tsx.tpl", "app/[locale]/page.tsx"),
    ("frontend/i18n/config/request.ts.tpl", "i18n/request.ts"),
    ("frontend/i18n/config/routing.ts.tpl", "i18n/routing.ts"),
    ("frontend/i18n/middleware.ts.tpl", "middleware.ts"),
    ("frontend/i18n/next-config.i18n.tpl", "next.config.ts"),
    ("frontend/i18n/components/language-selector.tsx.tpl", "components/ui/language-selector.tsx"),
]

MESSAGES_TEMPLATE = "frontend/i18n/messages/default.json.tpl"

I18N_DIRECTORIES: tuple[str, ...] = ("i18n/locales", "app/[locale]", "components/ui")


def language_mapping(locales: list[str]) -> str:
    """``'en-US': 'EN'`` entries, one per locale."""
    return ",\n  ".join(f"'{lang}': '{lang.split('-')[0].upper()}'" for lang in locales)


def i18n_tokens(i18n: I18nConfig, info: ProjectInfo) -> dict[str, str]:
    """Token values shared by every i18n template."""
    if not i18n.is_configured:
        raise ValueError("Default language and additional languages must be defined when i18n is enabled")

    locales = i18n.locales
    return {
        "LANGUAGE_MAPPING": language_mapping(locales),
        "LOCALES_LIST": ", ".join(f"'{locale}'" for locale in locales),
        "LOCALES_ARRAY": ",\n    ".join(f"{{ locale: '{locale}' }}" for locale in locales),
        "DEFAULT_LOCALE": i18n.default_language or "en",
        "PROJECT_NAME": info.name,
        "PROJECT_DESCRIPTION": info.description,
    }


class I18nGenerator(BaseGenerator):
    """Generates next-intl scaffolding when i18n is enabled."""

    name = "i18n"
    title = "Configuring internationalization..."
    success_message = "Internationalization configuration completed successfully!"

    def __init__(
        self,
        i18n: I18nConfig,
        info: ProjectInfo,
        paths: ProjectPaths,
        templates_dir: str | Path,
    ) -> None:
        super().__init__()
        self.i18n = i18n
        self.info = info
        self.paths = paths
        self.templates = TemplateRenderer(templates_dir)

    @classmethod
    def from_config(cls, config: ProjectConfig, settings: Settings) -> "I18nGenerator":
        assert settings.templates_dir is not None
        return cls(
            config.i18n,
            config.info,
            settings.project_paths(config.info.name),
            settings.templates_dir,
        )

    @property
    def frontend_dir(self) -> Path:
        return self.paths.frontend_dir

    def skip_reason(self) -> str | None:
        if not self.i18n.is_configured:
            return "Internationalization is disabled or not fully configured, skipping..."
        return None

    def required_templates(self) -> list[str]:
        return [src for src, _ in I18N_TEMPLATES] + [MESSAGES_TEMPLATE]

    def check_preconditions(self) -> None:
        self.templates.require(self.required_templates())

    def steps(self) -> list[Step]:
        return [
            Step("create-directories", self._create_directories),
            Step("render-templates", self._render_templates),
            Step("patch-next-config", self._patch_next_config),
            Step("write-messages", self._write_messages),
            Step("update-frontend-dependencies", self._update_dependencies),
        ]

    # -- Steps -------------------------------------------------------------

    async def _create_directories(self) -> str:
        for directory in I18N_DIRECTORIES:
            await asyncio.to_thread(ensure_dir, self.frontend_dir / directory)
        return ", ".join(I18N_DIRECTORIES)

    async def _render_templates(self) -> str:
        tokens = i18n_tokens(self.i18n, self.info)
        for src, dest in I18N_TEMPLATES:
            print_detail(f"Writing {dest}")
            await self.templates.render_to_file(src, self.frontend_dir / dest, tokens)
        return f"{len(I18N_TEMPLATES)} files"

    async def _patch_next_config(self) -> str:
        patch = next_config_i18n(self.i18n.default_language or "en", self.i18n.locales)
        applied = await patch_file(self.frontend_dir / "next.config.ts", [patch])
        if applied is None:
            raise StepSkipped("next.config.ts not found")
        return ", ".join(applied) or "already patched"

    async def _write_messages(self) -> str:
        if not (self.i18n.default_language and self.i18n.additional_languages):
            raise StepSkipped("no locales configured")

        tokens = i18n_tokens(self.i18n, self.info)
        for locale in self.i18n.locales:
            target = self.frontend_dir / "i18n" / "locales" / f"{locale}.json"
            await self.templates.render_to_file(MESSAGES_TEMPLATE, target, {**tokens, "LOCALE": locale})
        return ", ".join(self.i18n.locales)

    async def _update_dependencies(self) -> str:
        await merge_dependencies(self.frontend_dir / "package.json", I18N_DEPENDENCIES)
        return ", ".join(I18N_DEPENDENCIES)
