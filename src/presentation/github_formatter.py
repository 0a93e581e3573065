"""
Markdown for check runs, pull requests and status lines.
"""

from collections import Counter

from src.core.models import PushEvent, Severity, Violation

TOOL = "eslint"
CHECK_TITLE = "ESLint"
PULL_REQUEST_TITLE = "ESLint fixes"
# Check run summaries are capped at 65535 characters
MAX_OUTPUT_CHARS = 60000
STALE_PULL_REQUEST_COMMENT = (
    "Closing pull request because all fixable warnings and/or errors have been fixed in base branch"
)


def format_command(args: list[str], root: str) -> str:
    """Render the tool command line with the working-copy root stripped."""
    return f"$ {TOOL} {' '.join(args)}".replace(f"{root.rstrip('/')}/", "")


def format_running_summary() -> str:
    return f"Running `{TOOL}`"


def format_clean_summary(command: str) -> str:
    return f"Running `{TOOL}` resulted in no warnings or errors.\n\n`{command}`"


def format_fixed_summary(command: str) -> str:
    return f"Running `{TOOL}` fixed some errors and warnings.\n\n`{command}`"


def format_violations_summary(command: str, violations: list[Violation]) -> str:
    counts = Counter(v.severity for v in violations)
    return (
        f"Running `{TOOL}` resulted in warnings and/or errors.\n\n"
        f"`{command}`\n\n"
        f"| Severity | Count |\n|---|---|\n"
        f"| 🔴 Error | {counts.get(Severity.ERROR, 0)} |\n"
        f"| 🟡 Warning | {counts.get(Severity.WARNING, 0)} |"
    )


def format_configuration_error_summary(command: str, output: str) -> str:
    if len(output) > MAX_OUTPUT_CHARS:
        output = "…\n" + output[-MAX_OUTPUT_CHARS:]
    return (
        f"Running `{TOOL}` failed with a configuration error.\n\n"
        f"`{command}`\n\n"
        f"```\n{output}\n```"
    )


def format_unknown_exit_summary(exit_code: int) -> str:
    return f"Unknown `{TOOL}` exit code: `{exit_code}`"


def format_pull_request_body(changed_files: list[str]) -> str:
    """Body for the remediation pull request, listing every changed file."""
    lines = [f"`{TOOL}` fixed warnings and/or errors.", "", "Changed files:", ""]
    lines.extend(f"- `{path}`" for path in changed_files)
    lines.extend(["", "---", "*This pull request is updated automatically on every push to the base branch.*"])
    return "\n".join(lines)


# --- Status lines ---


def status_clean(event: PushEvent) -> str:
    return f"`{TOOL}` returned no errors or warnings on {event.markdown_link}"


def status_fixed(event: PushEvent) -> str:
    return f"`{TOOL}` fixed some errors or warnings on {event.markdown_link}"


def status_violations(event: PushEvent, check_url: str | None) -> str:
    if check_url:
        return f"`{TOOL}` raised [errors or warnings]({check_url}) on {event.markdown_link}"
    return f"`{TOOL}` raised errors or warnings on {event.markdown_link}"


def status_configuration_error() -> str:
    return f"Running `{TOOL}` failed with a configuration error"


def status_unknown_exit() -> str:
    return f"Unknown `{TOOL}` exit code"


def status_tool_missing(event: PushEvent) -> str:
    return f"No `{TOOL}` installed in {event.markdown_link}"


def status_committed(event: PushEvent, branch: str) -> str:
    return f"Pushed `{TOOL}` fixes to `{branch}` of {event.markdown_link}"


def status_pull_request(event: PushEvent, url: str | None, updated: bool) -> str:
    verb = "Updated" if updated else "Raised"
    link = f"[pull request]({url})" if url else "pull request"
    return f"{verb} {link} with `{TOOL}` fixes on {event.markdown_link}"


def status_branch_pushed(event: PushEvent, branch: str) -> str:
    return f"Pushed `{TOOL}` fixes to branch `{branch}` of {event.markdown_link}"


def status_closed(event: PushEvent, numbers: list[int]) -> str:
    refs = ", ".join(f"#{n}" for n in numbers)
    return f"Closed stale `{TOOL}` pull request {refs} on {event.markdown_link}"
