"""Database configuration generator.

Writes the backend and frontend ``.env`` files, regenerates the NestJS
``app.module.ts`` for the selected database and merges the matching driver
packages into the backend ``package.json``.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from outerspace.config import DatabaseConfig, ProjectConfig, ProjectPaths, Settings
from outerspace.scaffolder.base import BaseGenerator, Step
from outerspace.scaffolder.templates import TemplateRenderer, snippets
from outerspace.utils import merge_dependencies, print_detail, write_file

# ---------------------------------------------------------------------------
# Per-database constants
# ---------------------------------------------------------------------------

DATABASE_DEPENDENCIES: dict[str, dict[str, str]] = {
    "postgres": {
        "@nestjs/typeorm": "^10.0.0",
        "typeorm": "^0.3.0",
        "pg": "^8.11.0",
    },
    "mysql": {
        "@nestjs/typeorm": "^10.0.0",
        "typeorm": "^0.3.0",
        "mysql2": "^3.0.0",
    },
    "mongodb": {
        "@nestjs/mongoose": "^10.0.0",
        "mongoose": "^7.0.0",
    },
}

_TYPEORM_IMPORT = "import { TypeOrmModule } from '@nestjs/typeorm';"
_MONGOOSE_IMPORT = "import { MongooseModule } from '@nestjs/mongoose';"

ORM_IMPORTS: dict[str, str] = {
    "postgres": _TYPEORM_IMPORT,
    "mysql": _TYPEORM_IMPORT,
    "mongodb": _MONGOOSE_IMPORT,
}

APP_MODULE_PATH = Path("src") / "app.module.ts"


class ModuleConfig(BaseModel):
    imports: list[str] = Field(default_factory=list)


class ModuleModifications(BaseModel):
    """Shape of a rendered ``app.module.<type>.tpl`` template."""

    model_config = ConfigDict(populate_by_name=True)

    module_config: ModuleConfig = Field(alias="moduleConfig")


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------


def database_tokens(db: DatabaseConfig) -> dict[str, str]:
    """Token values for the ``.env`` and ``app.module`` templates."""
    return {
        "DATABASE_TYPE": db.type,
        "DATABASE_HOST": db.host or "",
        "DATABASE_PORT": str(db.port) if db.port is not None else "",
        "DATABASE_USER": db.username or "",
        "DATABASE_PASSWORD": db.password or "",
        "DATABASE_NAME": db.database or "",
    }


def module_import_lines(db_type: str) -> list[str]:
    """The fixed, de-duplicated import block of ``app.module.ts``."""
    lines = [
        "import { Module } from '@nestjs/common';",
        "import { ConfigModule, ConfigService } from '@nestjs/config';",
        ORM_IMPORTS.get(db_type, _TYPEORM_IMPORT),
        "import { AppController } from './app.controller';",
        "import { AppService } from './app.service';",
    ]
    return list(dict.fromkeys(lines))


def render_app_module(db_type: str, module_imports: list[str]) -> str:
    """Build the full ``app.module.ts``: import block then ``@Module`` decorator."""
    entries = ",\n".join(
        "\n".join(f"    {line}" for line in entry.splitlines()) for entry in module_imports
    )
    return snippets.render(
        "app_module",
        import_lines=module_import_lines(db_type),
        entries=entries,
    )


# ---------------------------------------------------------------------------
# Generator
# ---------------------------------------------------------------------------


class DatabaseGenerator(BaseGenerator):
    """Configures the generated project for the selected database."""

    name = "database"
    title = "Configuring database environment..."
    success_message = "Database configuration completed successfully!"

    def __init__(self, db: DatabaseConfig, paths: ProjectPaths, templates_dir: str | Path) -> None:
        super().__init__()
        self.db = db
        self.paths = paths
        self.templates = TemplateRenderer(templates_dir)

    @classmethod
    def from_config(cls, config: ProjectConfig, settings: Settings) -> "DatabaseGenerator":
        assert settings.templates_dir is not None
        return cls(config.database, settings.project_paths(config.info.name), settings.templates_dir)

    @property
    def module_template(self) -> str:
        return f"backend/app.module.{self.db.type}.tpl"

    def required_templates(self) -> list[str]:
        return ["backend/.env.tpl", "frontend/.env.tpl", self.module_template]

    def check_preconditions(self) -> None:
        self.templates.require(self.required_templates())

    def steps(self) -> list[Step]:
        return [
            Step("configure-backend-env", lambda: self._configure_environment("backend")),
            Step("configure-frontend-env", lambda: self._configure_environment("frontend")),
            Step("configure-app-module", self._configure_app_module),
            Step("update-backend-dependencies", self._update_backend_dependencies),
        ]

    # -- Steps -------------------------------------------------------------

    async def _configure_environment(self, package: str) -> str:
        target = self.paths.packages_dir / package / ".env"
        print_detail(f"Configuring {package} environment at: {target}")
        await self.templates.render_to_file(
            f"{package}/.env.tpl", target, database_tokens(self.db)
        )
        return str(target)

    async def _configure_app_module(self) -> str:
        # Existing module content is replaced, not merged.
        target = self.paths.backend_dir / APP_MODULE_PATH
        rendered = await asyncio.to_thread(
            self.templates.render, self.module_template, database_tokens(self.db)
        )
        modifications = ModuleModifications.model_validate_json(rendered)
        content = render_app_module(self.db.type, modifications.module_config.imports)
        await asyncio.to_thread(write_file, target, content)
        return str(target)

    async def _update_backend_dependencies(self) -> str:
        print_detail("Updating backend dependencies...")
        dependencies = DATABASE_DEPENDENCIES.get(self.db.type, {})
        await merge_dependencies(self.paths.backend_dir / "package.json", dependencies)
        return ", ".join(dependencies)
