from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from src.core.config.git_config import GitConfig
from src.core.config.lint_config import LintConfig
from src.core.models import PushEvent
from src.integrations.git.workspace import GitWorkspace
from src.integrations.github.api import GitHubClient
from src.lint.configuration import LintConfiguration
from src.lint.outcome import LintExecution
from src.remediation.models import RemediationRequest, RemediationResult


@dataclass
class LintContext:
    """
    State shared by the steps of one lint-on-push run.

    Created per event and owned by exactly one pipeline run. Steps fill in
    the optional fields for the steps after them.
    """

    event: PushEvent
    installation_id: int
    github_client: GitHubClient
    directory: Path
    settings: LintConfig
    git_settings: GitConfig
    token: str | None = None
    workspace: GitWorkspace | None = None
    configuration: LintConfiguration | None = None
    remediation: RemediationRequest | None = None
    check_run: dict[str, Any] | None = None
    execution: LintExecution | None = None
    remediation_result: RemediationResult | None = None
    timestamps: dict[str, datetime] = field(default_factory=dict)

    def mark(self, name: str) -> None:
        self.timestamps[name] = datetime.now()
