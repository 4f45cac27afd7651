"""Outerspace configuration.

Two kinds of configuration live here:

* The persisted *project* document (``outerspace.config.json``) describing
  the options chosen during ``init``: ``ProjectConfig`` and its four
  sections, plus the ``ConfigStore`` that reads and writes it.
* The runtime ``Settings`` carrying every resolved path the generators work
  with, so that no generator depends on the process working directory.

All models use Pydantic v2 so the whole document is validated at load time
and every violation is reported at once.
"""

from __future__ import annotations

import json
import os
import sys
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic import ValidationError as PydanticValidationError

from outerspace.errors import (
    ConfigNotFoundError,
    ConfigParseError,
    ConfigValidationError,
    OuterspaceError,
)
from outerspace.utils import print_error

CONFIG_FILENAME = "outerspace.config.json"

REQUIRED_SECTIONS: tuple[str, ...] = ("info", "database", "i18n", "theme")

DatabaseType = Literal["postgres", "mysql", "mongodb"]
ThemeName = Literal["light", "dark"]

DEFAULT_DB_PORTS: dict[str, int] = {
    "postgres": 5432,
    "mysql": 3306,
    "mongodb": 27017,
}


def default_port_for(db_type: str) -> int:
    """Return the conventional port for *db_type* (5432 when unknown)."""
    return DEFAULT_DB_PORTS.get(db_type, 5432)


# ---------------------------------------------------------------------------
# Project document
# ---------------------------------------------------------------------------


class _Section(BaseModel):
    """Common settings: camelCase aliases on disk, immutable once built."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class ProjectInfo(_Section):
    """Project metadata collected first during ``init``."""

    name: str = Field(..., pattern=r"^[a-z0-9-]+$", description="Package-safe project name")
    description: str = Field(..., min_length=1, max_length=100)


class DatabaseConfig(_Section):
    """Database backend selection.

    Everything but ``type`` is optional at the type level; generators
    substitute an empty string for absent values.
    """

    type: DatabaseType
    host: str | None = None
    port: int | None = Field(default=None, ge=1, le=65535)
    username: str | None = None
    password: str | None = None
    database: str | None = None

    @property
    def default_port(self) -> int:
        return default_port_for(self.type)


class I18nConfig(_Section):
    """Internationalization options."""

    enable_i18n: bool = Field(default=False, alias="enableI18n")
    default_language: str | None = Field(default=None, alias="defaultLanguage")
    additional_languages: list[str] | None = Field(default=None, alias="additionalLanguages")

    @model_validator(mode="after")
    def _check_languages(self) -> "I18nConfig":
        if self.enable_i18n and self.additional_languages is not None:
            if not self.additional_languages:
                raise ValueError("additionalLanguages must not be empty when i18n is enabled")
            if self.default_language in self.additional_languages:
                raise ValueError(
                    f"additionalLanguages must not include the default language "
                    f"{self.default_language!r}"
                )
        return self

    @property
    def is_configured(self) -> bool:
        """True when i18n is enabled and both language fields are set."""
        return (
            self.enable_i18n
            and bool(self.default_language)
            and self.additional_languages is not None
        )

    @property
    def locales(self) -> list[str]:
        """Default locale first, then the additional ones."""
        languages = [self.default_language, *(self.additional_languages or [])]
        return [lang for lang in languages if lang]


class ThemeConfig(_Section):
    """Light/dark theming options."""

    enable_theming: bool = Field(default=False, alias="enableTheming")
    default_theme: ThemeName = Field(default="light", alias="defaultTheme")
    allow_user_preference: bool = Field(default=False, alias="allowUserPreference")
    enable_system_theme: bool = Field(default=False, alias="enableSystemTheme")

    @model_validator(mode="before")
    @classmethod
    def _system_theme_requires_preference(cls, data: Any) -> Any:
        # System theme detection only makes sense when users may override.
        if isinstance(data, dict):
            allow = data.get("allowUserPreference", data.get("allow_user_preference", False))
            if not allow:
                data = {
                    k: v
                    for k, v in data.items()
                    if k not in ("enableSystemTheme", "enable_system_theme")
                }
                data["enableSystemTheme"] = False
        return data


class ProjectConfig(_Section):
    """Aggregate root of the persisted document."""

    info: ProjectInfo
    database: DatabaseConfig
    i18n: I18nConfig
    theme: ThemeConfig

    def to_document(self) -> dict[str, Any]:
        """Return the JSON-ready document (camelCase keys, unset fields omitted)."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> "ProjectConfig":
        """Validate *document* exhaustively and build the model from it."""
        validate_document(document)
        return cls.model_validate(dict(document))


def validate_document(document: Any) -> None:
    """Raise ``ConfigValidationError`` listing every problem in *document*."""
    if not isinstance(document, Mapping):
        raise ConfigValidationError(["configuration must be a JSON object"], list(REQUIRED_SECTIONS))

    missing = [section for section in REQUIRED_SECTIONS if document.get(section) is None]
    violations = [f"{section}: section is missing" for section in missing]

    try:
        ProjectConfig.model_validate(dict(document))
    except PydanticValidationError as exc:
        for error in exc.errors():
            loc = tuple(str(part) for part in error["loc"])
            if len(loc) == 1 and loc[0] in missing:
                continue
            where = ".".join(loc)
            violations.append(f"{where}: {error['msg']}" if where else error["msg"])

    if violations:
        raise ConfigValidationError(violations, missing)


# ---------------------------------------------------------------------------
# Configuration store
# ---------------------------------------------------------------------------


class ConfigStore:
    """Reads and writes ``outerspace.config.json``.

    Writes are plain overwrites: not atomic, no backup.
    """

    def __init__(self, path: str | Path | None = None) -> None:
        self.path = Path(path) if path is not None else Path.cwd() / CONFIG_FILENAME

    @classmethod
    def for_settings(cls, settings: "Settings") -> "ConfigStore":
        return cls(settings.config_path)

    def exists(self) -> bool:
        return self.path.is_file()

    def load_document(self) -> dict[str, Any]:
        """Read and parse the raw JSON document.

        Raises:
            ConfigNotFoundError: If the file does not exist.
            ConfigParseError: If the file is not a JSON object.
        """
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise ConfigNotFoundError(self.path) from exc

        try:
            document = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ConfigParseError(f"Error reading configuration: {exc}") from exc

        if not isinstance(document, dict):
            raise ConfigParseError(
                f"Error reading configuration: expected a JSON object in {self.path}"
            )
        return document

    def read(self) -> ProjectConfig:
        return ProjectConfig.from_document(self.load_document())

    def validate(self, config: ProjectConfig | Mapping[str, Any]) -> bool:
        """Return ``True`` or raise ``ConfigValidationError``."""
        document = config.to_document() if isinstance(config, ProjectConfig) else config
        validate_document(document)
        return True

    def read_and_validate(self) -> ProjectConfig:
        document = self.load_document()
        self.validate(document)
        return ProjectConfig.model_validate(document)

    def write(self, config: ProjectConfig) -> Path:
        """Persist *config* as pretty-printed JSON and return the path written."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps(config.to_document(), indent=2, ensure_ascii=False) + "\n",
            encoding="utf-8",
        )
        return self.path


def load_config_or_exit(store: ConfigStore) -> ProjectConfig:
    """Load the persisted configuration or terminate with exit status 1.

    Callers that need recoverable errors use ``ConfigStore`` directly.
    """
    if not store.exists():
        print_error("No configuration file found. Run init first.")
        sys.exit(1)

    try:
        return store.read_and_validate()
    except OuterspaceError as exc:
        print_error(str(exc))
        sys.exit(1)


# ---------------------------------------------------------------------------
# Runtime settings
# ---------------------------------------------------------------------------


class ProjectPaths(BaseModel):
    """Resolved output locations for one generated project."""

    root: Path

    @property
    def packages_dir(self) -> Path:
        return self.root / "packages"

    @property
    def backend_dir(self) -> Path:
        return self.packages_dir / "backend"

    @property
    def frontend_dir(self) -> Path:
        return self.packages_dir / "frontend"

    @property
    def manifest_path(self) -> Path:
        """Root ``package.json`` declaring the workspace."""
        return self.root / "package.json"


class Settings(BaseModel):
    """Runtime settings for a CLI invocation.

    Relative paths are resolved against ``working_dir``. The defaults follow
    the starter-kit layout where the CLI runs from a ``cli/`` folder next to
    ``packages/`` and ``templates/``.
    """

    working_dir: Path = Field(default_factory=Path.cwd)
    source_dir: Path | None = Field(default=None, description="Directory holding backend/ and frontend/")
    templates_dir: Path | None = Field(default=None, description="Root of the *.tpl template tree")
    target_dir: Path | None = Field(default=None, description="Where generated projects are written")
    install_timeout: int = Field(default=600, ge=1, description="Package install timeout in seconds")
    download_timeout: float = Field(default=30.0, gt=0, description="Per-download timeout in seconds")

    @model_validator(mode="after")
    def _resolve_paths(self) -> "Settings":
        self.working_dir = self.working_dir.resolve()
        self.source_dir = (self.working_dir / (self.source_dir or Path("../packages"))).resolve()
        self.templates_dir = (self.working_dir / (self.templates_dir or Path("../templates"))).resolve()
        self.target_dir = (self.working_dir / (self.target_dir or Path("target"))).resolve()
        return self

    @property
    def config_path(self) -> Path:
        """Path to the persisted project document."""
        return self.working_dir / CONFIG_FILENAME

    def project_paths(self, project_name: str) -> ProjectPaths:
        assert self.target_dir is not None  # set by _resolve_paths
        return ProjectPaths(root=self.target_dir / project_name)

    @classmethod
    def from_env(cls, **overrides: Any) -> "Settings":
        """Build ``Settings`` from environment variables.

        Recognised variables (all optional):
            OUTERSPACE_WORKING_DIR, OUTERSPACE_SOURCE_DIR,
            OUTERSPACE_TEMPLATES_DIR, OUTERSPACE_TARGET_DIR,
            OUTERSPACE_INSTALL_TIMEOUT, OUTERSPACE_DOWNLOAD_TIMEOUT.

        Keyword overrides that are not ``None`` win over the environment.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("OUTERSPACE_WORKING_DIR"):
            kwargs["working_dir"] = Path(os.environ["OUTERSPACE_WORKING_DIR"])
        if os.environ.get("OUTERSPACE_SOURCE_DIR"):
            kwargs["source_dir"] = Path(os.environ["OUTERSPACE_SOURCE_DIR"])
        if os.environ.get("OUTERSPACE_TEMPLATES_DIR"):
            kwargs["templates_dir"] = Path(os.environ["OUTERSPACE_TEMPLATES_DIR"])
        if os.environ.get("OUTERSPACE_TARGET_DIR"):
            kwargs["target_dir"] = Path(os.environ["OUTERSPACE_TARGET_DIR"])
        if os.environ.get("OUTERSPACE_INSTALL_TIMEOUT"):
            kwargs["install_timeout"] = int(os.environ["OUTERSPACE_INSTALL_TIMEOUT"])
        if os.environ.get("OUTERSPACE_DOWNLOAD_TIMEOUT"):
            kwargs["download_timeout"] = float(os.environ["OUTERSPACE_DOWNLOAD_TIMEOUT"])

        kwargs.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**kwargs)
