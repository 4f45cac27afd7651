"""Base project structure generator.

Copies the starter kit's ``backend`` and ``frontend`` packages into
``<target>/<project-name>/packages/`` and writes a root ``package.json``
declaring an npm workspace over ``packages/*``.  Files are copied verbatim;
no template substitution happens here.
"""

from __future__ import annotations

import asyncio
import shutil
from pathlib import Path
from typing import Any

from outerspace.config import ProjectConfig, ProjectInfo, ProjectPaths, Settings
from outerspace.errors import MissingSourceError
from outerspace.scaffolder.base import BaseGenerator, Step
from outerspace.utils import ensure_dir, print_detail, save_json

PACKAGES: tuple[str, ...] = ("backend", "frontend")


def root_manifest(project_name: str) -> dict[str, Any]:
    """The workspace ``package.json`` written at the project root."""
    return {
        "name": project_name,
        "private": True,
        "workspaces": ["packages/*"],
    }


class ProjectGenerator(BaseGenerator):
    """Creates the project directory and copies the package skeletons."""

    name = "project"
    title = "Generating project structure..."
    success_message = "Base project structure generated successfully!"

    def __init__(self, info: ProjectInfo, paths: ProjectPaths, source_dir: str | Path) -> None:
        super().__init__()
        self.info = info
        self.paths = paths
        self.source_dir = Path(source_dir)

    @classmethod
    def from_config(cls, config: ProjectConfig, settings: Settings) -> "ProjectGenerator":
        assert settings.source_dir is not None
        return cls(config.info, settings.project_paths(config.info.name), settings.source_dir)

    def check_preconditions(self) -> None:
        for package in PACKAGES:
            source = self.source_dir / package
            if not source.is_dir():
                raise MissingSourceError(source, package)

    def steps(self) -> list[Step]:
        return [
            Step("create-project-dir", self._create_project_dir),
            Step("copy-packages", self._copy_packages),
            Step("write-root-manifest", self._write_root_manifest),
        ]

    # -- Steps -------------------------------------------------------------

    async def _create_project_dir(self) -> str:
        print_detail(f"Creating project directory: {self.paths.root}")
        await asyncio.to_thread(ensure_dir, self.paths.root)
        return str(self.paths.root)

    async def _copy_packages(self) -> str:
        print_detail("Copying packages...")
        await asyncio.to_thread(ensure_dir, self.paths.packages_dir)
        for package in PACKAGES:
            await asyncio.to_thread(
                shutil.copytree,
                self.source_dir / package,
                self.paths.packages_dir / package,
                dirs_exist_ok=True,
            )
        return ", ".join(PACKAGES)

    async def _write_root_manifest(self) -> str:
        print_detail("Creating root package.json...")
        await save_json(root_manifest(self.info.name), self.paths.manifest_path)
        return str(self.paths.manifest_path)
