"""
Main configuration class that composes all configs.
"""

import json
import os

from dotenv import load_dotenv

from src.core.config.git_config import GitConfig
from src.core.config.github_config import GitHubConfig
from src.core.config.lint_config import PUSH_STRATEGIES, LintConfig
from src.core.config.logging_config import LoggingConfig

# Load environment variables from a .env file
load_dotenv()


def _env_list(name: str, default: list[str]) -> list[str]:
    """Read a list from a JSON array or a comma separated environment variable."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        return [item.strip() for item in raw.split(",") if item.strip()]
    if isinstance(value, list):
        return [str(item) for item in value]
    return [str(value)]


class Config:
    """Main configuration class."""

    def __init__(self) -> None:
        self.github = GitHubConfig(
            app_name=os.getenv("APP_NAME_GITHUB", ""),
            app_id=os.getenv("APP_CLIENT_ID_GITHUB", ""),
            private_key=os.getenv("PRIVATE_KEY_BASE64_GITHUB", ""),
            webhook_secret=os.getenv("WEBHOOK_SECRET_GITHUB", ""),
            api_base_url=os.getenv("API_BASE_URL_GITHUB", "https://api.github.com"),
        )

        self.lint = LintConfig(
            ext=_env_list("LINT_EXT", [".js"]),
            ignores=_env_list("LINT_IGNORES", ["node_modules"]),
            push=os.getenv("LINT_PUSH", "none"),
            commit_msg=os.getenv("LINT_COMMIT_MSG", "ESLint fixes\n\n[lintflow:generated]"),
            labels=_env_list("LINT_LABELS", []),
            check_name=os.getenv("LINT_CHECK_NAME", "lintflow/eslint"),
            branch_namespace=os.getenv("LINT_BRANCH_NAMESPACE", "lintflow/"),
            branch_prefix=os.getenv("LINT_BRANCH_PREFIX", "lintflow/eslint"),
            repo_config_path=os.getenv("LINT_REPO_CONFIG_PATH", ".lintflow/config.yaml"),
        )

        self.git = GitConfig(
            author_name=os.getenv("GIT_AUTHOR_NAME", "Lintflow Bot"),
            author_email=os.getenv("GIT_AUTHOR_EMAIL", "bot@lintflow.dev"),
            clone_depth=int(os.getenv("GIT_CLONE_DEPTH", "1")),
        )

        self.logging = LoggingConfig(
            level=os.getenv("LOG_LEVEL", "INFO"),
            format=os.getenv("LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"),
            file_path=os.getenv("LOG_FILE_PATH"),
        )

        # Development settings
        self.debug = os.getenv("DEBUG", "false").lower() == "true"
        self.environment = os.getenv("ENVIRONMENT", "development")
        self.task_workers = int(os.getenv("TASK_WORKERS", "2"))

    def validate(self) -> bool:
        """Validate configuration."""
        errors = []

        if not self.github.app_name:
            errors.append("APP_NAME_GITHUB is required")

        if not self.github.app_id:
            errors.append("APP_CLIENT_ID_GITHUB is required")

        if not self.github.private_key:
            errors.append("PRIVATE_KEY_BASE64_GITHUB is required")

        if not self.github.webhook_secret:
            errors.append("WEBHOOK_SECRET_GITHUB is required")

        if not self.lint.branch_prefix.startswith(self.lint.branch_namespace):
            errors.append("LINT_BRANCH_PREFIX must start with LINT_BRANCH_NAMESPACE")

        if self.lint.push not in PUSH_STRATEGIES:
            errors.append(f"LINT_PUSH must be one of {', '.join(PUSH_STRATEGIES)}")

        if errors:
            raise ValueError(f"Configuration errors: {', '.join(errors)}")

        return True


# Global config instance
config = Config()
