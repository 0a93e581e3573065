"""
Core error classes for the Lintflow application.
"""

from typing import Any


class GitHubApiError(Exception):
    """Raised when the GitHub REST API answers with a non-success status."""

    def __init__(self, status_code: int, message: str, body: Any = None) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(f"GitHub API error {status_code}: {message}")


class GitHubResourceNotFoundError(GitHubApiError):
    """Raised when a specific GitHub resource is not found."""

    pass


class GitHubRateLimitError(GitHubApiError):
    """Raised when GitHub API rate limit is exceeded."""

    pass


class PullRequestAlreadyExistsError(GitHubApiError):
    """Raised when GitHub refuses to open a second pull request for the same head and base."""

    pass


class GitCommandError(Exception):
    """Raised when a git subprocess exits with a non-zero status."""

    def __init__(self, args: list[str], exit_code: int, output: str) -> None:
        self.command = args
        self.exit_code = exit_code
        self.output = output
        super().__init__(f"`git {' '.join(args)}` failed with exit code {exit_code}: {output.strip()}")
