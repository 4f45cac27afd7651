"""Outerspace scaffolder -- materializes a project from the starter kit.

Each generator turns one slice of the persisted ``ProjectConfig`` plus the
template tree into files under ``<target>/<project-name>/``.

Quick usage::

    from outerspace.config import ConfigStore, Settings
    from outerspace.scaffolder import DatabaseGenerator

    settings = Settings.from_env()
    config = ConfigStore.for_settings(settings).read()
    report = await DatabaseGenerator.from_config(config, settings).generate()
"""

from outerspace.scaffolder.base import BaseGenerator, GenerationReport, StepResult, StepStatus
from outerspace.scaffolder.database_gen import DatabaseGenerator
from outerspace.scaffolder.i18n_gen import I18nGenerator
from outerspace.scaffolder.project_gen import ProjectGenerator
from outerspace.scaffolder.templates import TemplateRenderer, substitute
from outerspace.scaffolder.theme_gen import ThemeGenerator

__all__ = [
    "BaseGenerator",
    "DatabaseGenerator",
    "GenerationReport",
    "I18nGenerator",
    "ProjectGenerator",
    "StepResult",
    "StepStatus",
    "TemplateRenderer",
    "ThemeGenerator",
    "substitute",
]
