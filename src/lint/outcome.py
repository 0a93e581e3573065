"""
Terminal status of one lint run.

| exit code | violations | tree dirty | outcome      | conclusion                         |
|-----------|------------|------------|--------------|------------------------------------|
| 0         | none       | no         | CLEAN        | success                            |
| 0         | none       | yes        | FIXED        | action_required                    |
| 1 or any  | some       | -          | VIOLATIONS   | action_required if any error, else neutral |
| 2         | none       | -          | CONFIG_ERROR | action_required                    |
| other     | none       | -          | UNKNOWN_EXIT | action_required                    |
"""

from dataclasses import dataclass, field
from enum import Enum

from src.core.models import Severity, Violation

EXIT_CLEAN = 0
EXIT_FINDINGS = 1
EXIT_CONFIG_ERROR = 2


class LintOutcome(str, Enum):
    CLEAN = "clean"
    FIXED = "fixed"
    VIOLATIONS = "violations"
    CONFIG_ERROR = "config_error"
    UNKNOWN_EXIT = "unknown_exit"


@dataclass(frozen=True)
class LintExecution:
    """Everything the reporter needs to know about one tool invocation."""

    exit_code: int
    command: str
    violations: list[Violation] = field(default_factory=list)
    output: list[str] = field(default_factory=list)
    dirty: bool = False

    @property
    def outcome(self) -> LintOutcome:
        return classify_outcome(self.exit_code, self.violations, self.dirty)

    @property
    def has_errors(self) -> bool:
        return any(v.severity == Severity.ERROR for v in self.violations)


def classify_outcome(exit_code: int, violations: list[Violation], dirty: bool) -> LintOutcome:
    if exit_code == EXIT_CLEAN and not violations:
        return LintOutcome.FIXED if dirty else LintOutcome.CLEAN
    if exit_code == EXIT_FINDINGS or violations:
        return LintOutcome.VIOLATIONS
    if exit_code == EXIT_CONFIG_ERROR:
        return LintOutcome.CONFIG_ERROR
    return LintOutcome.UNKNOWN_EXIT


def conclusion_for(execution: LintExecution) -> str:
    match execution.outcome:
        case LintOutcome.CLEAN:
            return "success"
        case LintOutcome.VIOLATIONS:
            return "action_required" if execution.has_errors else "neutral"
        case LintOutcome.FIXED | LintOutcome.CONFIG_ERROR | LintOutcome.UNKNOWN_EXIT:
            return "action_required"
    raise ValueError(f"Unhandled lint outcome: {execution.outcome}")
