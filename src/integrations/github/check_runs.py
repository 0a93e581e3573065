from typing import Any

import structlog

from src.core.models import Severity, Violation
from src.integrations.github.api import GitHubClient
from src.lint.outcome import LintExecution, LintOutcome, conclusion_for
from src.presentation import github_formatter

logger = structlog.get_logger(__name__)

# GitHub rejects check run updates carrying more than 50 annotations
ANNOTATION_BATCH_SIZE = 50

ANNOTATION_LEVELS = {
    Severity.WARNING: "warning",
    Severity.ERROR: "failure",
}


def to_annotation(violation: Violation) -> dict[str, Any]:
    """Map a violation onto a check run annotation."""
    annotation: dict[str, Any] = {
        "path": violation.file_path,
        "start_line": violation.start_line,
        "end_line": violation.end_line,
        "annotation_level": ANNOTATION_LEVELS[violation.severity],
        "message": violation.message,
    }
    # Columns are only accepted by GitHub for single-line annotations
    if violation.start_line == violation.end_line:
        annotation["start_column"] = violation.start_column
        annotation["end_column"] = violation.end_column
    if violation.rule_id:
        annotation["title"] = violation.rule_id
    return annotation


def batched(items: list[Any], size: int = ANNOTATION_BATCH_SIZE) -> list[list[Any]]:
    return [items[i : i + size] for i in range(0, len(items), size)]


class CheckRunManager:
    """
    Manager for handling GitHub Check Runs.
    Encapsulates creating the in-progress check run of a lint run and
    completing it with a conclusion and annotations.
    """

    def __init__(self, github_client: GitHubClient, name: str):
        self.github_client = github_client
        self.name = name

    async def create_check_run(self, repo: str, sha: str, installation_id: int) -> dict[str, Any]:
        """Create the in-progress check run for a commit."""
        return await self.github_client.create_check_run(
            repo=repo,
            sha=sha,
            name=self.name,
            title=github_formatter.CHECK_TITLE,
            summary=github_formatter.format_running_summary(),
            installation_id=installation_id,
        )

    async def report(
        self,
        repo: str,
        sha: str,
        installation_id: int,
        execution: LintExecution,
        check_run: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Complete the check run for a lint execution.

        Creates the check run first when no handle is given. The first update
        carries the conclusion and the first batch of annotations; every
        further batch of at most 50 annotations is sent in its own update, in
        violation order.

        Args:
            repo: Repository full name (owner/repo)
            sha: Commit SHA the check run belongs to
            installation_id: GitHub App installation ID
            execution: Result of the lint tool invocation
            check_run: Check run created earlier in the same run, if any

        Returns:
            The check run as last returned by GitHub.
        """
        if check_run is None:
            check_run = await self.create_check_run(repo, sha, installation_id)

        conclusion = conclusion_for(execution)
        summary = self._summary(execution)
        title = github_formatter.CHECK_TITLE

        annotations = [to_annotation(v) for v in execution.violations] if self._annotates(execution) else []
        batches = batched(annotations) or [[]]

        result = check_run
        for index, batch in enumerate(batches):
            output: dict[str, Any] = {"title": title, "summary": summary}
            if batch:
                output["annotations"] = batch
            result = await self.github_client.update_check_run(
                repo=repo,
                check_run_id=check_run["id"],
                output=output,
                installation_id=installation_id,
                status="completed" if index == 0 else None,
                conclusion=conclusion if index == 0 else None,
            )

        logger.info(
            "check_run_reported",
            repo=repo,
            sha=sha[:7],
            conclusion=conclusion,
            annotations=len(annotations),
            updates=len(batches),
        )
        return {**check_run, **(result or {})}

    @staticmethod
    def _annotates(execution: LintExecution) -> bool:
        return execution.outcome == LintOutcome.VIOLATIONS

    @staticmethod
    def _summary(execution: LintExecution) -> str:
        match execution.outcome:
            case LintOutcome.CLEAN:
                return github_formatter.format_clean_summary(execution.command)
            case LintOutcome.FIXED:
                return github_formatter.format_fixed_summary(execution.command)
            case LintOutcome.VIOLATIONS:
                return github_formatter.format_violations_summary(execution.command, execution.violations)
            case LintOutcome.CONFIG_ERROR:
                return github_formatter.format_configuration_error_summary(
                    execution.command, "\n".join(execution.output)
                )
            case LintOutcome.UNKNOWN_EXIT:
                return github_formatter.format_unknown_exit_summary(execution.exit_code)
        raise ValueError(f"Unhandled lint outcome: {execution.outcome}")
