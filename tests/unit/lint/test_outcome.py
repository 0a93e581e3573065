import pytest

from src.core.models import Severity, Violation
from src.lint.outcome import LintExecution, LintOutcome, classify_outcome, conclusion_for


def make_violation(severity: Severity) -> Violation:
    return Violation(
        file_path="a.js",
        message="m",
        rule_id="semi",
        start_line=1,
        start_column=1,
        end_line=1,
        end_column=2,
        severity=severity,
    )


@pytest.mark.parametrize(
    ("exit_code", "violations", "dirty", "expected"),
    [
        (0, [], False, LintOutcome.CLEAN),
        (0, [], True, LintOutcome.FIXED),
        (1, [make_violation(Severity.ERROR)], False, LintOutcome.VIOLATIONS),
        (0, [make_violation(Severity.WARNING)], False, LintOutcome.VIOLATIONS),
        (1, [], False, LintOutcome.VIOLATIONS),
        (2, [], False, LintOutcome.CONFIG_ERROR),
        (5, [], False, LintOutcome.UNKNOWN_EXIT),
        (-1, [], True, LintOutcome.UNKNOWN_EXIT),
    ],
)
def test_classify_outcome(exit_code, violations, dirty, expected) -> None:
    assert classify_outcome(exit_code, violations, dirty) == expected


@pytest.mark.parametrize(
    ("execution", "conclusion"),
    [
        (LintExecution(exit_code=0, command="$ eslint ."), "success"),
        (LintExecution(exit_code=0, command="$ eslint .", dirty=True), "action_required"),
        (
            LintExecution(
                exit_code=1,
                command="$ eslint .",
                violations=[make_violation(Severity.WARNING), make_violation(Severity.ERROR)],
            ),
            "action_required",
        ),
        (LintExecution(exit_code=0, command="$ eslint .", violations=[make_violation(Severity.WARNING)]), "neutral"),
        (LintExecution(exit_code=2, command="$ eslint ."), "action_required"),
        (LintExecution(exit_code=5, command="$ eslint ."), "action_required"),
    ],
)
def test_conclusion_for(execution, conclusion) -> None:
    assert conclusion_for(execution) == conclusion


def test_has_errors() -> None:
    assert not LintExecution(exit_code=0, command="", violations=[make_violation(Severity.WARNING)]).has_errors
    assert LintExecution(exit_code=1, command="", violations=[make_violation(Severity.ERROR)]).has_errors
