"""
The lint-on-push pipeline.

Setup -> install dependencies -> validate tool -> run lint -> close stale
remediation -> push remediation.
"""

import structlog

from src.integrations.git.workspace import CommitAuthor, GitWorkspace
from src.integrations.github.check_runs import CheckRunManager
from src.lint.configuration import PushStrategy, load_configuration
from src.lint.context import LintContext
from src.lint.install import install_dependencies
from src.lint.outcome import LintOutcome
from src.lint.runner import run_lint, tool_path
from src.pipeline.steps import Step, StepResult
from src.presentation import github_formatter
from src.remediation.models import RemediationOutcome, RemediationRequest, RemediationResult
from src.remediation.reconciler import RemediationReconciler

logger = structlog.get_logger(__name__)

ALWAYS_IGNORED = [".git", "node_modules"]


def _check_runs(ctx: LintContext) -> CheckRunManager:
    return CheckRunManager(ctx.github_client, ctx.settings.check_name)


def _reconciler(ctx: LintContext) -> RemediationReconciler:
    return RemediationReconciler(ctx.github_client, ctx.workspace, ctx.event, ctx.installation_id)


async def setup(ctx: LintContext) -> StepResult:
    event = ctx.event

    if event.branch.startswith(ctx.settings.branch_namespace):
        return StepResult.success("Ignore generated branch").hidden().abort()

    logger.info("lint_on_push_started", repo=event.full_name, branch=event.branch, sha=event.short_sha)
    ctx.mark("started")

    ctx.token = await ctx.github_client.get_installation_access_token(ctx.installation_id)
    ctx.workspace = await GitWorkspace.clone(
        clone_url=event.clone_url,
        token=ctx.token,
        branch=event.branch,
        sha=event.sha,
        directory=ctx.directory / event.name,
        committer=CommitAuthor(name=ctx.git_settings.author_name, email=ctx.git_settings.author_email),
        depth=ctx.git_settings.clone_depth,
    )
    ctx.mark("cloned")

    if not ctx.workspace.exists("package.json"):
        return StepResult.success("Project not an npm project").hidden().abort()

    try:
        ctx.configuration = load_configuration(ctx.workspace.root, ctx.settings)
    except ValueError as e:
        return StepResult.failure(f"Invalid `{ctx.settings.repo_config_path}` in {event.markdown_link}: {e}")

    ctx.remediation = RemediationRequest.for_push(ctx.configuration, event, ctx.settings.branch_prefix)

    ignores = [*ALWAYS_IGNORED, *ctx.configuration.ignores]
    if not await ctx.workspace.has_matching_files(ctx.configuration.ext, ignores):
        return StepResult.success("Project does not contain any matching files").hidden().abort()

    ctx.check_run = await _check_runs(ctx).create_check_run(event.full_name, event.sha, ctx.installation_id)
    return StepResult.success()


async def install(ctx: LintContext) -> StepResult:
    failure = await install_dependencies(ctx.workspace, ctx.configuration.modules)
    ctx.mark("installed")
    if failure:
        return StepResult.failure(failure)
    return StepResult.success()


async def validate(ctx: LintContext) -> StepResult:
    if not tool_path(ctx.workspace).exists():
        return StepResult.failure(github_formatter.status_tool_missing(ctx.event))
    return StepResult.success()


async def lint(ctx: LintContext) -> StepResult:
    event = ctx.event
    execution = await run_lint(ctx.workspace, ctx.configuration, event)
    ctx.execution = execution
    ctx.mark("linted")

    ctx.check_run = await _check_runs(ctx).report(
        repo=event.full_name,
        sha=event.sha,
        installation_id=ctx.installation_id,
        execution=execution,
        check_run=ctx.check_run,
    )

    return lint_result(ctx)


def lint_result(ctx: LintContext) -> StepResult:
    """Status line for the lint outcome recorded in the context."""
    event = ctx.event
    execution = ctx.execution
    match execution.outcome:
        case LintOutcome.CLEAN:
            return StepResult.success(github_formatter.status_clean(event))
        case LintOutcome.FIXED:
            return StepResult.success(github_formatter.status_fixed(event))
        case LintOutcome.VIOLATIONS:
            return StepResult.success(github_formatter.status_violations(event, ctx.check_run.get("html_url")))
        case LintOutcome.CONFIG_ERROR:
            return StepResult.failure(github_formatter.status_configuration_error())
        case LintOutcome.UNKNOWN_EXIT:
            return StepResult.failure(github_formatter.status_unknown_exit()).hidden()
    raise ValueError(f"Unhandled lint outcome: {execution.outcome}")


def _with_lint_status(ctx: LintContext, line: str | None) -> StepResult:
    """Keep the lint status line as the headline and append what remediation did."""
    lint_line = lint_result(ctx).reason
    lines = [part for part in (lint_line, line) if part]
    return StepResult.success("\n".join(lines) if lines else None)


def _remediation_line(ctx: LintContext, result: RemediationResult) -> str | None:
    event = ctx.event
    match result.outcome:
        case RemediationOutcome.NOOP:
            return None
        case RemediationOutcome.COMMITTED:
            return github_formatter.status_committed(event, result.branch)
        case RemediationOutcome.PULL_REQUEST_CREATED:
            return github_formatter.status_pull_request(event, result.pull_request_url, updated=False)
        case RemediationOutcome.PULL_REQUEST_UPDATED:
            return github_formatter.status_pull_request(event, result.pull_request_url, updated=True)
        case RemediationOutcome.PULL_REQUEST_PENDING:
            return github_formatter.status_branch_pushed(event, result.branch)
        case RemediationOutcome.CLOSED:
            return github_formatter.status_closed(event, result.closed_pull_requests)
    raise ValueError(f"Unhandled remediation outcome: {result.outcome}")


async def tree_is_clean(ctx: LintContext) -> bool:
    return await ctx.workspace.is_clean()


async def close_stale(ctx: LintContext) -> StepResult:
    result = await _reconciler(ctx).close_stale(ctx.remediation)
    ctx.remediation_result = result
    return _with_lint_status(ctx, _remediation_line(ctx, result))


async def has_fixes_to_push(ctx: LintContext) -> bool:
    return ctx.remediation.strategy != PushStrategy.NONE and not await ctx.workspace.is_clean()


async def push(ctx: LintContext) -> StepResult:
    result = await _reconciler(ctx).persist(ctx.remediation)
    ctx.remediation_result = result
    ctx.mark("pushed")
    return _with_lint_status(ctx, _remediation_line(ctx, result))


SetupStep = Step[LintContext](name="clone repository", run=setup)
InstallStep = Step[LintContext](name="npm install", run=install)
ValidateStep = Step[LintContext](name="validate", run=validate)
LintStep = Step[LintContext](name="run eslint", run=lint)
ClosePullRequestStep = Step[LintContext](name="close pr", run=close_stale, run_when=tree_is_clean)
PushStep = Step[LintContext](name="push", run=push, run_when=has_fixes_to_push)

LINT_STEPS = [SetupStep, InstallStep, ValidateStep, LintStep, ClosePullRequestStep, PushStep]
