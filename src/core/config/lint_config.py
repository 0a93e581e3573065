"""
Lint workflow configuration.

Service-wide defaults for the lint-on-push workflow. Per-repository values
from `.lintflow/config.yaml` are merged over these at run time.
"""

from dataclasses import dataclass, field

PUSH_STRATEGIES = ("none", "commit", "commit_default", "pr", "pr_default", "pr_default_commit")


@dataclass
class LintConfig:
    """Lint workflow defaults."""

    ext: list[str] = field(default_factory=lambda: [".js"])
    ignores: list[str] = field(default_factory=lambda: ["node_modules"])
    push: str = "none"
    commit_msg: str = "ESLint fixes\n\n[lintflow:generated]"
    labels: list[str] = field(default_factory=list)
    check_name: str = "lintflow/eslint"
    branch_namespace: str = "lintflow/"
    branch_prefix: str = "lintflow/eslint"
    repo_config_path: str = ".lintflow/config.yaml"
