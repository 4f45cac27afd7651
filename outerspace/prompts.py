"""Interactive prompts for ``outerspace init``.

Each ``ask_*`` function collects one section of the project document with
``rich.prompt`` and re-asks until the answer is acceptable, so the
returned models always validate.
"""

from __future__ import annotations

import re

from rich.prompt import Confirm, IntPrompt, Prompt

from outerspace.config import (
    DEFAULT_DB_PORTS,
    DatabaseConfig,
    I18nConfig,
    ProjectConfig,
    ProjectInfo,
    ThemeConfig,
    default_port_for,
)
from outerspace.utils import console, print_error, print_info, print_success

AVAILABLE_LANGUAGES: list[str] = [
    "en-US",
    "fr-FR",
    "es-ES",
    "de-DE",
    "it-IT",
    "pt-PT",
    "nl-NL",
    "pl-PL",
    "ja-JP",
    "zh-CN",
    "ko-KR",
]

DEFAULT_PROJECT_NAME = "my-fullstack-app"
DEFAULT_DESCRIPTION = "A fullstack application built with Outerspace CLI"

_PROJECT_NAME_RE = re.compile(r"^[a-z0-9-]+$")


def ask_project_info() -> ProjectInfo:
    print_info("\nProject Configuration")

    while True:
        name = Prompt.ask("Project name", default=DEFAULT_PROJECT_NAME, console=console)
        if _PROJECT_NAME_RE.match(name):
            break
        print_error("Project name must contain only lowercase letters, numbers, and hyphens")

    while True:
        description = Prompt.ask("Project description", default=DEFAULT_DESCRIPTION, console=console)
        if not description:
            print_error("Description cannot be empty")
        elif len(description) > 100:
            print_error("Description should be less than 100 characters")
        else:
            break

    print_success("Project configuration completed!")
    return ProjectInfo(name=name, description=description)


def ask_database() -> DatabaseConfig:
    print_info("\nDatabase Configuration")

    db_type = Prompt.ask(
        "Which database would you like to use?",
        choices=list(DEFAULT_DB_PORTS),
        default="postgres",
        console=console,
    )
    host = Prompt.ask("Database host", default="localhost", console=console)
    while True:
        port = IntPrompt.ask("Database port", default=default_port_for(db_type), console=console)
        if 1 <= port <= 65535:
            break
        print_error("Port must be between 1 and 65535")
    username = Prompt.ask("Username", default="", console=console)
    password = Prompt.ask("Password", default="", password=True, console=console)
    database = Prompt.ask("Database name", default="my_app", console=console)

    print_success("Database configuration completed!")
    return DatabaseConfig(
        type=db_type,
        host=host,
        port=port,
        username=username,
        password=password,
        database=database,
    )


def parse_language_list(raw: str) -> list[str]:
    """Split a comma-separated answer, dropping blanks and duplicates."""
    return list(dict.fromkeys(part.strip() for part in raw.split(",") if part.strip()))


def ask_i18n() -> I18nConfig:
    print_info("\nInternationalization Configuration")

    if not Confirm.ask("Enable internationalization (i18n)?", default=True, console=console):
        print_success("Internationalization configuration completed!")
        return I18nConfig(enable_i18n=False)

    default_language = Prompt.ask(
        "Choose default language",
        choices=AVAILABLE_LANGUAGES,
        default="en-US",
        console=console,
    )
    options = [lang for lang in AVAILABLE_LANGUAGES if lang != default_language]

    while True:
        raw = Prompt.ask(
            f"Select additional languages to support (comma-separated: {', '.join(options)})",
            console=console,
        )
        languages = parse_language_list(raw or "")
        unknown = [lang for lang in languages if lang not in options]
        if not languages:
            print_error("Please select at least one additional language")
        elif unknown:
            print_error(f"Unsupported or duplicate default language: {', '.join(unknown)}")
        else:
            break

    print_success("Internationalization configuration completed!")
    return I18nConfig(
        enable_i18n=True,
        default_language=default_language,
        additional_languages=languages,
    )


def ask_theme() -> ThemeConfig:
    print_info("\nTheme Configuration")

    if not Confirm.ask("Enable theme support (light/dark mode)?", default=True, console=console):
        print_success("Theme configuration completed!")
        return ThemeConfig(enable_theming=False)

    default_theme = Prompt.ask(
        "Choose default theme", choices=["light", "dark"], default="light", console=console
    )
    allow_user_preference = Confirm.ask(
        "Allow users to override theme preference?", default=True, console=console
    )
    enable_system_theme = False
    if allow_user_preference:
        enable_system_theme = Confirm.ask(
            "Enable system theme detection?", default=True, console=console
        )

    print_success("Theme configuration completed!")
    return ThemeConfig(
        enable_theming=True,
        default_theme=default_theme,
        allow_user_preference=allow_user_preference,
        enable_system_theme=enable_system_theme,
    )


def collect_project_config() -> ProjectConfig:
    """Run the four prompt groups in order and assemble the document."""
    return ProjectConfig(
        info=ask_project_info(),
        database=ask_database(),
        i18n=ask_i18n(),
        theme=ask_theme(),
    )
