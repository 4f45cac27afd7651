"""Shared pytest fixtures for the Outerspace test suite.

Provides reusable fixtures for:
- A complete ``*.tpl`` template tree
- Source ``backend``/``frontend`` package skeletons
- Resolved ``Settings`` pointing at both
- Sample project configurations
- A project already copied into the target directory
"""

from __future__ import annotations

import json
import shutil
import textwrap
from pathlib import Path

import pytest

from outerspace.config import (
    DatabaseConfig,
    I18nConfig,
    ProjectConfig,
    ProjectInfo,
    ProjectPaths,
    Settings,
    ThemeConfig,
)


def _write(root: Path, relative: str, content: str) -> Path:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Environment
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _clean_outerspace_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep OUTERSPACE_* variables from the host out of every test."""
    for name in (
        "OUTERSPACE_WORKING_DIR",
        "OUTERSPACE_SOURCE_DIR",
        "OUTERSPACE_TEMPLATES_DIR",
        "OUTERSPACE_TARGET_DIR",
        "OUTERSPACE_INSTALL_TIMEOUT",
        "OUTERSPACE_DOWNLOAD_TIMEOUT",
    ):
        monkeypatch.delenv(name, raising=False)


# ---------------------------------------------------------------------------
# Template tree
# ---------------------------------------------------------------------------

BACKEND_ENV_TPL = textwrap.dedent("""\
    DATABASE_TYPE=${DATABASE_TYPE}
    DATABASE_HOST=${DATABASE_HOST}
    DATABASE_PORT=${DATABASE_PORT}
    DATABASE_USER=${DATABASE_USER}
    DATABASE_PASSWORD=${DATABASE_PASSWORD}
    DATABASE_NAME=${DATABASE_NAME}
""")

FRONTEND_ENV_TPL = textwrap.dedent("""\
    NEXT_PUBLIC_API_URL=http://localhost:3001
    NEXT_PUBLIC_DATABASE_TYPE=${DATABASE_TYPE}
""")

TYPEORM_ENTRY = textwrap.dedent("""\
    TypeOrmModule.forRoot({
      type: '${DATABASE_TYPE}',
      host: '${DATABASE_HOST}',
      port: ${DATABASE_PORT},
      username: '${DATABASE_USER}',
      password: '${DATABASE_PASSWORD}',
      database: '${DATABASE_NAME}',
      autoLoadEntities: true,
      synchronize: true,
    })""")

MONGOOSE_ENTRY = "MongooseModule.forRoot('mongodb://${DATABASE_HOST}:${DATABASE_PORT}/${DATABASE_NAME}')"

CONFIG_MODULE_ENTRY = "ConfigModule.forRoot({\n  isGlobal: true,\n})"

NEXT_CONFIG_TPL = textwrap.dedent("""\
    import type { NextConfig } from "next";
    import createNextIntlPlugin from "next-intl/plugin";

    const withNextIntl = createNextIntlPlugin();

    const nextConfig: NextConfig = {
      reactStrictMode: true,
    };

    export default withNextIntl(nextConfig);
""")

GLOBALS_CSS_TPL = textwrap.dedent("""\
    @tailwind base;
    @tailwind components;
    @tailwind utilities;

    @layer base {
      :root {
        --background: 0 0% 100%;
        --foreground: 240 10% 3.9%;
      }

      .dark {
        --background: 240 10% 3.9%;
        --foreground: 0 0% 98%;
      }
    }
""")


def _module_template(*entries: str) -> str:
    return json.dumps({"moduleConfig": {"imports": list(entries)}}, indent=2)


@pytest.fixture
def templates_dir(tmp_path: Path) -> Path:
    """A complete template tree for every generator."""
    root = tmp_path / "templates"

    # database
    _write(root, "backend/.env.tpl", BACKEND_ENV_TPL)
    _write(root, "frontend/.env.tpl", FRONTEND_ENV_TPL)
    _write(root, "backend/app.module.postgres.tpl", _module_template(CONFIG_MODULE_ENTRY, TYPEORM_ENTRY))
    _write(root, "backend/app.module.mysql.tpl", _module_template(CONFIG_MODULE_ENTRY, TYPEORM_ENTRY))
    _write(root, "backend/app.module.mongodb.tpl", _module_template(CONFIG_MODULE_ENTRY, MONGOOSE_ENTRY))

    # i18n
    _write(
        root,
        "frontend/i18n/[locale]/layout.tsx.tpl",
        "export const metadata = { title: '${PROJECT_NAME}', description: '${PROJECT_DESCRIPTION}' };\n",
    )
    _write(root, "frontend/i18n/[locale]/page.tsx.tpl", "export default function Page() { return null; }\n")
    _write(
        root,
        "frontend/i18n/config/request.ts.tpl",
        "export const defaultLocale = '${DEFAULT_LOCALE}';\n",
    )
    _write(
        root,
        "frontend/i18n/config/routing.ts.tpl",
        "export const locales = [${LOCALES_LIST}] as const;\n",
    )
    _write(
        root,
        "frontend/i18n/middleware.ts.tpl",
        "export const config = { matcher: ['/', '/(${LOCALES_LIST})/:path*'] };\n",
    )
    _write(root, "frontend/i18n/next-config.i18n.tpl", NEXT_CONFIG_TPL)
    _write(
        root,
        "frontend/i18n/components/language-selector.tsx.tpl",
        "const languages = {\n  ${LANGUAGE_MAPPING}\n};\nconst options = [\n    ${LOCALES_ARRAY}\n];\n",
    )
    _write(
        root,
        "frontend/i18n/messages/default.json.tpl",
        '{\n  "app": {\n    "title": "${PROJECT_NAME}",\n    "locale": "${LOCALE}"\n  }\n}\n',
    )

    # theme
    _write(
        root,
        "frontend/theme/theme-provider.tsx.tpl",
        '"use client";\nexport const defaultTheme = "${DEFAULT_THEME}";\n'
        "export const enableSystem = ${ENABLE_SYSTEM_THEME};\n",
    )
    _write(
        root,
        "frontend/theme/theme-toggle.tsx.tpl",
        "export const allowUserPreference = ${ALLOW_USER_PREFERENCE};\n",
    )
    _write(
        root,
        "frontend/theme/tailwind.theme.tpl",
        "export const colors = {\n  primary: 'hsl(var(--primary))',\n};\n",
    )
    _write(root, "frontend/theme/globals.css.tpl", GLOBALS_CSS_TPL)

    return root


# ---------------------------------------------------------------------------
# Source packages
# ---------------------------------------------------------------------------

LAYOUT_TSX = textwrap.dedent("""\
    import type { Metadata } from "next";
    import "./globals.css";

    export const metadata: Metadata = { title: "App" };

    export default function RootLayout({
      children,
    }: Readonly<{
      children: React.ReactNode;
    }>) {
      return (
        <html lang="en">
          <body>{children}</body>
        </html>
      );
    }
""")

TAILWIND_CONFIG_TS = textwrap.dedent("""\
    import type { Config } from "tailwindcss";

    const config: Config = {
      content: ["./app/**/*.{js,ts,jsx,tsx,mdx}"],
      theme: {
        extend: {
          colors: {
            background: "var(--background)",
            foreground: "var(--foreground)",
          },
        },
      },
      plugins: [],
    };
    export default config;
""")

GLOBALS_CSS = "body {\n  margin: 0;\n}\n"


@pytest.fixture
def source_dir(tmp_path: Path) -> Path:
    """Starter-kit ``packages/`` directory with backend and frontend skeletons."""
    root = tmp_path / "packages"

    _write(
        root,
        "backend/package.json",
        json.dumps({"name": "backend", "dependencies": {"@nestjs/common": "^10.0.0"}}, indent=2),
    )
    _write(root, "backend/src/app.module.ts", "// placeholder module\n")
    _write(root, "backend/src/main.ts", "// bootstrap\n")

    _write(
        root,
        "frontend/package.json",
        json.dumps({"name": "frontend", "dependencies": {"next": "15.0.0"}}, indent=2),
    )
    _write(root, "frontend/app/layout.tsx", LAYOUT_TSX)
    _write(root, "frontend/app/globals.css", GLOBALS_CSS)
    _write(root, "frontend/tailwind.config.ts", TAILWIND_CONFIG_TS)
    _write(root, "frontend/next.config.ts", 'const nextConfig = {};\nexport default nextConfig;\n')

    return root


# ---------------------------------------------------------------------------
# Settings & configuration
# ---------------------------------------------------------------------------


@pytest.fixture
def settings(tmp_path: Path, source_dir: Path, templates_dir: Path) -> Settings:
    return Settings(
        working_dir=tmp_path / "cli",
        source_dir=source_dir,
        templates_dir=templates_dir,
        target_dir=tmp_path / "target",
    )


@pytest.fixture
def project_info() -> ProjectInfo:
    return ProjectInfo(name="test-app", description="A test application")


@pytest.fixture
def postgres_db() -> DatabaseConfig:
    return DatabaseConfig(
        type="postgres",
        host="localhost",
        port=5432,
        username="admin",
        password="secret",
        database="my_app",
    )


@pytest.fixture
def project_config(project_info: ProjectInfo, postgres_db: DatabaseConfig) -> ProjectConfig:
    """Postgres, no i18n, no theming."""
    return ProjectConfig(
        info=project_info,
        database=postgres_db,
        i18n=I18nConfig(enable_i18n=False),
        theme=ThemeConfig(enable_theming=False),
    )


@pytest.fixture
def full_config(project_info: ProjectInfo, postgres_db: DatabaseConfig) -> ProjectConfig:
    """Every generator enabled."""
    return ProjectConfig(
        info=project_info,
        database=postgres_db,
        i18n=I18nConfig(enable_i18n=True, default_language="en-US", additional_languages=["fr-FR"]),
        theme=ThemeConfig(
            enable_theming=True,
            default_theme="dark",
            allow_user_preference=True,
            enable_system_theme=True,
        ),
    )


@pytest.fixture
def project_paths(settings: Settings, source_dir: Path, project_info: ProjectInfo) -> ProjectPaths:
    """A project whose packages have already been copied into the target."""
    paths = settings.project_paths(project_info.name)
    for package in ("backend", "frontend"):
        shutil.copytree(source_dir / package, paths.packages_dir / package)
    return paths


@pytest.fixture
def snapshot():
    """Return a function mapping every file under a directory to its content."""

    def take(root: Path) -> dict[str, str]:
        return {
            str(path.relative_to(root)): path.read_text(encoding="utf-8")
            for path in sorted(root.rglob("*"))
            if path.is_file()
        }

    return take
