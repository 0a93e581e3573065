from src.core.models import PushEvent
from src.presentation import github_formatter

EVENT = PushEvent(
    owner="octocat",
    name="hello",
    full_name="octocat/hello",
    clone_url="https://github.com/octocat/hello.git",
    html_url="https://github.com/octocat/hello",
    branch="main",
    sha="abc1234def5678",
)


def test_format_command_strips_root() -> None:
    args = ["--ext", ".js", "--ignore-path", "/tmp/w/repo/.eslintignore-x", "."]

    command = github_formatter.format_command(args, "/tmp/w/repo")

    assert command == "$ eslint --ext .js --ignore-path .eslintignore-x ."


def test_configuration_error_output_is_truncated() -> None:
    output = "x" * (github_formatter.MAX_OUTPUT_CHARS + 500)

    summary = github_formatter.format_configuration_error_summary("$ eslint .", output)

    assert len(summary) < github_formatter.MAX_OUTPUT_CHARS + 200


def test_pull_request_body_lists_changed_files() -> None:
    body = github_formatter.format_pull_request_body(["src/a.js", "b.js"])

    assert "- `src/a.js`" in body
    assert "- `b.js`" in body


def test_status_lines_link_repository_and_check() -> None:
    line = github_formatter.status_violations(EVENT, "https://github.com/octocat/hello/runs/7")

    assert "[octocat/hello](https://github.com/octocat/hello)" in line
    assert "(https://github.com/octocat/hello/runs/7)" in line
    assert github_formatter.status_closed(EVENT, [3, 4]).startswith("Closed stale `eslint` pull request #3, #4")
