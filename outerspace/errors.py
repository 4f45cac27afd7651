"""Error taxonomy for the Outerspace CLI.

Readers and generators raise these; only the CLI layer in
``outerspace.pipeline`` catches them, prints a message and exits with
status 1.
"""

from __future__ import annotations

from pathlib import Path


class OuterspaceError(Exception):
    """Base class for every error reported by the CLI."""


class NotFoundError(OuterspaceError):
    """A required file or directory does not exist."""

    def __init__(self, path: str | Path, message: str) -> None:
        self.path = Path(path)
        super().__init__(message)


class ConfigNotFoundError(NotFoundError):
    """The persisted configuration document is missing."""

    def __init__(self, path: str | Path) -> None:
        super().__init__(path, f"Configuration file not found at {path}")


class MissingTemplateError(NotFoundError):
    """A template file required by a generator is missing."""

    def __init__(self, path: str | Path) -> None:
        super().__init__(path, f"Required template file not found: {path}")


class MissingSourceError(NotFoundError):
    """A source package directory to copy is missing."""

    def __init__(self, path: str | Path, package: str) -> None:
        self.package = package
        super().__init__(path, f"{package.capitalize()} package not found at: {path}")


class ConfigParseError(OuterspaceError):
    """The configuration document is not valid JSON."""


class ConfigValidationError(OuterspaceError):
    """The configuration document does not satisfy the schema.

    ``missing_sections`` names exactly the absent top-level sections;
    ``violations`` enumerates every problem found, missing sections included.
    """

    def __init__(self, violations: list[str], missing_sections: list[str] | None = None) -> None:
        self.violations = list(violations)
        self.missing_sections = list(missing_sections or [])
        if self.missing_sections and len(self.violations) == len(self.missing_sections):
            message = f"Invalid configuration: Missing sections: {', '.join(self.missing_sections)}"
        else:
            message = "Invalid configuration:\n" + "\n".join(f"  - {v}" for v in self.violations)
        super().__init__(message)


class GenerationError(OuterspaceError):
    """Wraps any failure raised while a generator runs one of its steps."""

    def __init__(self, generator: str, stage: str, message: str) -> None:
        self.generator = generator
        self.stage = stage
        super().__init__(f"{generator} generator failed at '{stage}': {message}")


class ExternalCommandError(OuterspaceError):
    """An external command exited with a non-zero status."""

    def __init__(self, command: list[str], returncode: int, stderr: str = "") -> None:
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        detail = f": {stderr}" if stderr else ""
        super().__init__(f"Command `{' '.join(command)}` exited with {returncode}{detail}")
