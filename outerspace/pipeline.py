"""Outerspace CLI orchestrator.

Wires the configuration store and the four generators together:

    init               -- Prompt for options, save them, generate everything.
    generate-project   -- Copy the package skeletons into a new project.
    generate-database  -- Configure .env files, app.module.ts and drivers.
    generate-i18n      -- Add next-intl locale routing (when enabled).
    generate-theme     -- Add light/dark theming (when enabled).

Usage::

    outerspace init
    outerspace --target-dir ./out generate-database
    python -m outerspace generate-theme
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from outerspace import prompts
from outerspace.config import ConfigStore, ProjectConfig, Settings, load_config_or_exit
from outerspace.scaffolder.base import BaseGenerator, GenerationReport, StepStatus
from outerspace.scaffolder.database_gen import DatabaseGenerator
from outerspace.scaffolder.i18n_gen import I18nGenerator
from outerspace.scaffolder.project_gen import ProjectGenerator
from outerspace.scaffolder.theme_gen import ThemeGenerator
from outerspace.utils import (
    console,
    print_banner,
    print_error,
    print_info,
    print_success,
    print_summary_table,
)

GENERATORS: dict[str, type[BaseGenerator]] = {
    "project": ProjectGenerator,
    "database": DatabaseGenerator,
    "i18n": I18nGenerator,
    "theme": ThemeGenerator,
}

GENERATION_ORDER: tuple[str, ...] = ("project", "database", "i18n", "theme")

_STATUS_STYLES: dict[StepStatus, str] = {
    StepStatus.SUCCESS: "[green]success[/green]",
    StepStatus.SKIPPED: "[yellow]skipped[/yellow]",
    StepStatus.FAILED: "[red]failed[/red]",
}


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------


class Pipeline:
    """Runs generators against one ``Settings`` instance.

    Attributes:
        settings: Resolved paths and timeouts for this invocation.
        store: Where the project document is read from and written to.
        reports: Reports of every generator run so far, in order.
    """

    def __init__(self, settings: Settings, store: ConfigStore | None = None) -> None:
        self.settings = settings
        self.store = store or ConfigStore.for_settings(settings)
        self.reports: list[GenerationReport] = []

    def build_generator(self, kind: str, config: ProjectConfig) -> BaseGenerator:
        try:
            generator_cls = GENERATORS[kind]
        except KeyError:
            raise ValueError(f"Unknown generator: {kind}") from None
        return generator_cls.from_config(config, self.settings)

    async def run_generator(self, kind: str, config: ProjectConfig) -> GenerationReport:
        """Run one generator; its report is kept even when it raises."""
        generator = self.build_generator(kind, config)
        try:
            return await generator.generate()
        finally:
            self.reports.append(generator.report)

    async def run_all(self, config: ProjectConfig) -> list[GenerationReport]:
        """Run every generator in order, stopping at the first failure."""
        return [await self.run_generator(kind, config) for kind in GENERATION_ORDER]

    def summary_rows(self) -> list[tuple[str, str, str]]:
        return [
            (report.generator, step.name, _STATUS_STYLES[step.status])
            for report in self.reports
            for step in report.steps
        ]

    async def init(self, config: ProjectConfig) -> list[GenerationReport]:
        """Persist *config*, then generate the whole project from it."""
        self.store.validate(config)
        await asyncio.to_thread(self.store.write, config)
        print_success("Configuration saved successfully.")

        reports = await self.run_all(config)
        print_summary_table(self.summary_rows(), title="Generation Summary")

        project_root = self.settings.project_paths(config.info.name).root
        print_success("\nProject generated successfully!")
        print_info("Next steps:")
        console.print(f"  cd {project_root}")
        console.print("  npm install")
        console.print("  npm run dev")
        return reports


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="outerspace",
        description="Outerspace -- fullstack starter kit scaffolding CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  outerspace init\n"
            "  outerspace generate-database\n"
            "  outerspace --target-dir ./out generate-theme\n"
        ),
    )
    parser.add_argument(
        "--working-dir",
        type=Path,
        default=None,
        help="Directory holding outerspace.config.json (default: current directory)",
    )
    parser.add_argument(
        "--source-dir",
        type=Path,
        default=None,
        help="Directory with the backend/ and frontend/ packages (default: ../packages)",
    )
    parser.add_argument(
        "--templates-dir",
        type=Path,
        default=None,
        help="Root of the template tree (default: ../templates)",
    )
    parser.add_argument(
        "--target-dir",
        type=Path,
        default=None,
        help="Where generated projects are written (default: ./target)",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="<command>")
    subparsers.required = True
    subparsers.add_parser("init", help="Initialize a new fullstack project")
    for kind in GENERATION_ORDER:
        subparsers.add_parser(f"generate-{kind}", help=f"Run the {kind} generator")
    return parser


def _run_init(pipeline: Pipeline) -> None:
    print_banner("OUTERSPACE", "Fullstack Starter Kit")
    config = prompts.collect_project_config()
    asyncio.run(pipeline.init(config))


def _run_single(pipeline: Pipeline, kind: str) -> None:
    config = load_config_or_exit(pipeline.store)
    asyncio.run(pipeline.run_generator(kind, config))


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``outerspace`` and ``python -m outerspace``."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        settings = Settings.from_env(
            working_dir=args.working_dir,
            source_dir=args.source_dir,
            templates_dir=args.templates_dir,
            target_dir=args.target_dir,
        )
        pipeline = Pipeline(settings)

        if args.command == "init":
            _run_init(pipeline)
        else:
            _run_single(pipeline, args.command.removeprefix("generate-"))
    except KeyboardInterrupt:
        print_error("Aborted.")
        sys.exit(1)
    except Exception as exc:
        print_error(f"Error: {exc}")
        sys.exit(1)


if __name__ == "__main__":
    main()
