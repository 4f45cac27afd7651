"""Theme (light/dark mode) generator.

Installs the shadcn/ui building blocks into the frontend package, renders
the theme provider, toggle and palette, merges the theme variables into
``app/globals.css`` and patches ``tailwind.config.ts`` and
``app/layout.tsx`` to use them.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from pathlib import Path

import httpx

from outerspace.config import ProjectConfig, ProjectInfo, ProjectPaths, Settings, ThemeConfig
from outerspace.errors import ExternalCommandError
from outerspace.scaffolder.base import BaseGenerator, Step, StepSkipped
from outerspace.scaffolder.patches import (
    has_unbalanced_block,
    layout_patches,
    merge_globals_css,
    patch_file,
    tailwind_config_patches,
)
from outerspace.scaffolder.templates import TemplateRenderer
from outerspace.utils import (
    ensure_dir,
    merge_dependencies,
    print_detail,
    print_success,
    read_file,
    run_command,
    write_file,
)

UI_PACKAGES: list[str] = [
    "@radix-ui/react-dropdown-menu",
    "@radix-ui/react-slot",
    "class-variance-authority",
    "clsx",
    "tailwind-merge",
    "lucide-react",
]

_SHADCN_RAW = "https://raw.githubusercontent.com/shadcn-ui/ui/main/apps/www"

# (remote URL, destination under packages/frontend/)
UI_COMPONENTS: list[tuple[str, str]] = [
    (f"{_SHADCN_RAW}/registry/default/ui/button.tsx", "components/ui/button.tsx"),
    (f"{_SHADCN_RAW}/registry/default/ui/dropdown-menu.tsx", "components/ui/dropdown-menu.tsx"),
    (f"{_SHADCN_RAW}/lib/utils.ts", "lib/utils.ts"),
]

THEME_TEMPLATES: list[tuple[str, str]] = [
    ("frontend/theme/theme-provider.tsx.tpl", "theme/theme-provider.tsx"),
    ("frontend/theme/theme-toggle.tsx.tpl", "components/ui/theme-toggle.tsx"),
    ("frontend/theme/tailwind.theme.tpl", "theme/colors.ts"),
]

GLOBALS_TEMPLATE = "frontend/theme/globals.css.tpl"

THEME_DEPENDENCIES: dict[str, str] = {"next-themes": "^0.4.4"}

THEME_DIRECTORIES: tuple[str, ...] = ("theme", "components/ui", "lib")

Installer = Callable[[list[str], Path], Awaitable[None]]


def theme_tokens(theme: ThemeConfig, info: ProjectInfo) -> dict[str, str]:
    """Token values for the theme templates; booleans render as JS literals."""
    return {
        "DEFAULT_THEME": theme.default_theme or "light",
        "ENABLE_SYSTEM_THEME": str(theme.enable_system_theme).lower(),
        "ALLOW_USER_PREFERENCE": str(theme.allow_user_preference).lower(),
        "PROJECT_NAME": info.name,
        "PROJECT_DESCRIPTION": info.description or "",
    }


def npm_installer(timeout: float | None = 600) -> Installer:
    """Return an installer running ``npm install <packages>`` in a directory."""

    async def install(packages: list[str], cwd: Path) -> None:
        cmd = ["npm", "install", *packages]
        returncode, _, stderr = await run_command(cmd, cwd=cwd, timeout=timeout)
        if returncode != 0:
            raise ExternalCommandError(cmd, returncode, stderr)

    return install


class ThemeGenerator(BaseGenerator):
    """Generates light/dark theming when it is enabled."""

    name = "theme"
    title = "Configuring theme support..."
    success_message = "Theme configuration completed successfully!"

    def __init__(
        self,
        theme: ThemeConfig,
        info: ProjectInfo,
        paths: ProjectPaths,
        templates_dir: str | Path,
        *,
        installer: Installer | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        download_timeout: float = 30.0,
    ) -> None:
        super().__init__()
        self.theme = theme
        self.info = info
        self.paths = paths
        self.templates = TemplateRenderer(templates_dir)
        self.installer = installer or npm_installer()
        self.transport = transport
        self.download_timeout = download_timeout

    @classmethod
    def from_config(cls, config: ProjectConfig, settings: Settings) -> "ThemeGenerator":
        assert settings.templates_dir is not None
        return cls(
            config.theme,
            config.info,
            settings.project_paths(config.info.name),
            settings.templates_dir,
            installer=npm_installer(settings.install_timeout),
            download_timeout=settings.download_timeout,
        )

    @property
    def frontend_dir(self) -> Path:
        return self.paths.frontend_dir

    def skip_reason(self) -> str | None:
        if not self.theme.enable_theming:
            return "Theme support is disabled, skipping..."
        return None

    def required_templates(self) -> list[str]:
        return [src for src, _ in THEME_TEMPLATES] + [GLOBALS_TEMPLATE]

    def check_preconditions(self) -> None:
        self.templates.require(self.required_templates())

    def steps(self) -> list[Step]:
        # Each step reads files written by the ones before it.
        return [
            Step("create-directories", self._create_directories),
            Step("install-ui-components", self._install_ui_components, wrap_errors=False),
            Step("render-templates", self._render_templates),
            Step("merge-globals-css", self._merge_globals_css),
            Step("update-frontend-dependencies", self._update_dependencies),
            Step("patch-tailwind-config", self._patch_tailwind_config),
            Step("patch-layout", self._patch_layout),
        ]

    # -- Steps -------------------------------------------------------------

    async def _create_directories(self) -> str:
        for directory in THEME_DIRECTORIES:
            await asyncio.to_thread(ensure_dir, self.frontend_dir / directory)
        return ", ".join(THEME_DIRECTORIES)

    async def _install_ui_components(self) -> str:
        print_detail("Installing shadcn/ui dependencies...")
        await self.installer(UI_PACKAGES, self.frontend_dir)

        async with httpx.AsyncClient(
            transport=self.transport,
            timeout=httpx.Timeout(self.download_timeout),
            follow_redirects=True,
        ) as client:
            for url, dest in UI_COMPONENTS:
                target = self.frontend_dir / dest
                print_detail(f"Downloading: {target.name}")
                response = await client.get(url)
                response.raise_for_status()
                await asyncio.to_thread(write_file, target, response.text)

        print_success("Installed UI components")
        return f"{len(UI_PACKAGES)} packages, {len(UI_COMPONENTS)} files"

    async def _render_templates(self) -> str:
        tokens = theme_tokens(self.theme, self.info)
        for src, dest in THEME_TEMPLATES:
            await self.templates.render_to_file(src, self.frontend_dir / dest, tokens)
        return f"{len(THEME_TEMPLATES)} files"

    async def _merge_globals_css(self) -> str:
        globals_path = self.frontend_dir / "app" / "globals.css"
        existing = ""
        if await asyncio.to_thread(globals_path.is_file):
            existing = await asyncio.to_thread(read_file, globals_path)
        theme_css = await asyncio.to_thread(self.templates.load, GLOBALS_TEMPLATE)

        merged = merge_globals_css(existing, theme_css)
        await asyncio.to_thread(write_file, globals_path, merged)
        return "merged" if merged != existing else "unchanged"

    async def _update_dependencies(self) -> str:
        await merge_dependencies(self.frontend_dir / "package.json", THEME_DEPENDENCIES)
        return ", ".join(THEME_DEPENDENCIES)

    async def _patch_tailwind_config(self) -> str:
        config_path = self.frontend_dir / "tailwind.config.ts"
        applied = await patch_file(config_path, tailwind_config_patches())
        if applied is None:
            raise StepSkipped("tailwind.config.ts not found")
        if "tailwind-theme-block" not in applied:
            content = await asyncio.to_thread(read_file, config_path)
            if has_unbalanced_block(content):
                raise StepSkipped("theme block in tailwind.config.ts has unbalanced braces; palette not merged")
        return ", ".join(applied) or "already patched"

    async def _patch_layout(self) -> str:
        applied = await patch_file(
            self.frontend_dir / "app" / "layout.tsx",
            layout_patches(self.theme.default_theme, self.theme.enable_system_theme),
        )
        if applied is None:
            raise StepSkipped("app/layout.tsx not found")
        return ", ".join(applied) or "already patched"
