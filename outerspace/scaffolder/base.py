"""Step model shared by every generator.

A generator is an ordered list of named steps.  ``BaseGenerator.generate``
runs them one after another and records a ``StepResult`` for each, so the
state left behind by a failed run can be inspected through
``generator.report``.  Nothing is rolled back.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, Field

from outerspace.config import ProjectConfig, Settings
from outerspace.errors import GenerationError
from outerspace.utils import print_detail, print_info, print_success, print_warning


class StepStatus(str, Enum):
    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"


class StepResult(BaseModel):
    """Outcome of one generator step."""

    name: str
    status: StepStatus
    detail: str = ""


class GenerationReport(BaseModel):
    """Ordered step outcomes for one generator run."""

    generator: str
    steps: list[StepResult] = Field(default_factory=list)

    def record(self, name: str, status: StepStatus, detail: str = "") -> StepResult:
        result = StepResult(name=name, status=status, detail=detail)
        self.steps.append(result)
        return result

    @property
    def skipped(self) -> bool:
        """True when the whole generator was skipped."""
        return bool(self.steps) and all(s.status is StepStatus.SKIPPED for s in self.steps)

    @property
    def failed_step(self) -> StepResult | None:
        return next((s for s in self.steps if s.status is StepStatus.FAILED), None)

    @property
    def succeeded(self) -> bool:
        return self.failed_step is None

    def step(self, name: str) -> StepResult | None:
        return next((s for s in self.steps if s.name == name), None)


class StepSkipped(Exception):
    """Raised by a step whose target does not apply (e.g. a file to patch is absent)."""


@dataclass(frozen=True)
class Step:
    """One named unit of work.

    ``wrap_errors=False`` lets failures propagate as-is instead of being
    wrapped in ``GenerationError``.
    """

    name: str
    run: Callable[[], Awaitable[str | None]]
    wrap_errors: bool = True


class BaseGenerator:
    """Base class for the four project generators.

    Subclasses set ``name``, ``title`` and ``success_message`` and implement
    ``steps()``.  ``skip_reason()`` disables the generator; a non-``None``
    reason means zero steps run.  ``check_preconditions()`` raises before any
    step touches the filesystem.
    """

    name = "base"
    title = "Generating..."
    success_message = "Done."

    def __init__(self) -> None:
        self.report = GenerationReport(generator=self.name)

    @classmethod
    def from_config(cls, config: ProjectConfig, settings: Settings) -> "BaseGenerator":
        raise NotImplementedError

    def skip_reason(self) -> str | None:
        return None

    def check_preconditions(self) -> None:
        pass

    def steps(self) -> list[Step]:
        raise NotImplementedError

    async def generate(self) -> GenerationReport:
        self.report = GenerationReport(generator=self.name)

        reason = self.skip_reason()
        if reason is not None:
            print_warning(reason)
            self.report.record("generate", StepStatus.SKIPPED, reason)
            return self.report

        print_info(f"\n{self.title}")
        try:
            self.check_preconditions()
        except Exception as exc:
            self.report.record("check-preconditions", StepStatus.FAILED, str(exc))
            raise

        for step in self.steps():
            try:
                detail = await step.run()
            except StepSkipped as skip:
                self.report.record(step.name, StepStatus.SKIPPED, str(skip))
                print_detail(f"Skipped {step.name}: {skip}")
                continue
            except Exception as exc:
                self.report.record(step.name, StepStatus.FAILED, str(exc))
                if not step.wrap_errors:
                    raise
                raise GenerationError(self.name, step.name, str(exc)) from exc
            self.report.record(step.name, StepStatus.SUCCESS, detail or "")

        print_success(self.success_message)
        return self.report
