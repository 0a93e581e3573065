"""
Runs the lint tool inside a working copy.

Every file the runner generates (formatter, report, ignore file, inline
configuration) lives only for the duration of `run_lint` and is removed on
every exit path.
"""

import json
import shutil
from collections.abc import Iterator
from contextlib import ExitStack, contextmanager
from pathlib import Path

import structlog

from src.core.models import PushEvent
from src.integrations.git.workspace import GitWorkspace
from src.lint.configuration import LintConfiguration
from src.lint.normalizer import read_report
from src.lint.outcome import EXIT_CONFIG_ERROR, LintExecution
from src.presentation.github_formatter import format_command

logger = structlog.get_logger(__name__)

FORMATTER_SOURCE = Path(__file__).with_name("formatter.js")
REPORT_FILE_ENV = "ESLINT_REPORT_FILE"


def tool_path(workspace: GitWorkspace) -> Path:
    return workspace.path("node_modules", ".bin", "eslint")


@contextmanager
def transient_file(path: Path, content: str | None = None, source: Path | None = None) -> Iterator[Path]:
    """Yield `path`, written from `content` or copied from `source`, and always remove it afterwards."""
    try:
        if source is not None:
            shutil.copyfile(source, path)
        elif content is not None:
            path.write_text(content, encoding="utf-8")
        yield path
    finally:
        path.unlink(missing_ok=True)


def has_own_ignore_file(workspace: GitWorkspace) -> bool:
    return workspace.exists(".eslintignore")


def has_own_config(workspace: GitWorkspace) -> bool:
    if any(workspace.root.glob(".eslintrc.*")) or workspace.exists(".eslintrc"):
        return True
    package_json = workspace.path("package.json")
    if package_json.is_file():
        return "eslintConfig" in json.loads(package_json.read_text(encoding="utf-8"))
    return False


def build_arguments(
    configuration: LintConfiguration, ignore_file: Path | None, config_file: Path | None
) -> list[str]:
    """Arguments in tool order: extensions, extra args, ignore file, config file, fix flag, target."""
    args: list[str] = []
    for ext in configuration.ext:
        args.extend(["--ext", ext])
    args.extend(configuration.args)
    if ignore_file is not None:
        args.extend(["--ignore-path", str(ignore_file)])
    if config_file is not None:
        args.extend(["--config", str(config_file)])
    if configuration.fix:
        args.append("--fix")
    args.append(".")
    return args


async def run_lint(workspace: GitWorkspace, configuration: LintConfiguration, event: PushEvent) -> LintExecution:
    """
    Invoke the tool, collect its report and remove all generated files.

    The returned execution already reflects whether the tool left the
    working tree dirty, measured after the generated files are gone.
    """
    suffix = event.short_sha

    with ExitStack() as stack:
        formatter_file = stack.enter_context(
            transient_file(workspace.path(f".eslintformatter-{suffix}.js"), source=FORMATTER_SOURCE)
        )
        report_file = stack.enter_context(transient_file(workspace.path(f"eslintreport-{suffix}.json")))

        ignore_file = None
        if not has_own_ignore_file(workspace) and configuration.ignores:
            ignore_file = stack.enter_context(
                transient_file(workspace.path(f".eslintignore-{suffix}"), content="\n".join(configuration.ignores))
            )

        config_file = None
        if not has_own_config(workspace) and configuration.config:
            config_file = stack.enter_context(
                transient_file(workspace.path(f".eslintrc-{suffix}.json"), content=configuration.config)
            )

        args = build_arguments(configuration, ignore_file, config_file)
        command = format_command(args, str(workspace.root))
        logger.info("lint_started", command=command, repo=event.full_name)

        result = await workspace.spawn(
            str(tool_path(workspace)),
            [*args, "--format", str(formatter_file), "--no-color"],
            env={REPORT_FILE_ENV: str(report_file)},
        )

        if result.exit_code == EXIT_CONFIG_ERROR:
            logger.error("lint_configuration_error", exit_code=result.exit_code, output=result.output)
        else:
            logger.info("lint_finished", exit_code=result.exit_code, output=result.output)

        violations = read_report(report_file, workspace.root)

    dirty = not await workspace.is_clean()
    return LintExecution(
        exit_code=result.exit_code,
        command=command,
        violations=violations,
        output=result.lines,
        dirty=dirty,
    )
